from docportal.core import ErrorCode, ErrorReason, internal_error
from docportal.core.config import settings
from docportal.services.storage.base import DocumentStorage, StoredObject


def get_storage() -> DocumentStorage:
    backend = (settings.STORAGE_BACKEND or "local").strip().lower()
    if backend == "local":
        from docportal.services.storage.local_storage import LocalStorage

        return LocalStorage()
    if backend == "supabase":
        from docportal.services.storage.supabase_storage import SupabaseStorage

        return SupabaseStorage()
    raise internal_error(
        ErrorReason.STORAGE_UNAVAILABLE,
        code=ErrorCode.CONFIG_ERROR,
        message=f"Unknown STORAGE_BACKEND: {backend}",
    )


def stored_object_for(storage: DocumentStorage, storage_key: str) -> StoredObject:
    return StoredObject(bucket=storage.bucket, path=storage_key)
