"""
local_storage.py
- Purpose: Filesystem storage adapter for local development and tests.
- Design: Same contract as SupabaseStorage; "bucket" is a directory under
  LOCAL_STORAGE_DIR. No signed URLs, the download route streams bytes instead.
"""

from pathlib import Path

from docportal.core import AppError, ErrorCode, ErrorReason
from docportal.core.config import settings
from docportal.services.storage.base import StoredObject, build_document_path


class LocalStorage:
    def __init__(self, root: str | Path | None = None, bucket: str = "documents"):
        self.root = Path(root or settings.LOCAL_STORAGE_DIR)
        self.bucket = bucket

    def _resolve(self, obj: StoredObject) -> Path:
        base = (self.root / obj.bucket).resolve()
        target = (base / obj.path).resolve()
        # Keys come from the DB, but never let one escape the bucket dir.
        if base not in target.parents:
            raise AppError(
                code=ErrorCode.STORAGE_ERROR,
                reason=ErrorReason.INVALID_INPUT,
                message="Storage key resolves outside the bucket",
                status_code=400,
            )
        return target

    def upload_document(self, tenant_id, filename: str, content: bytes, content_type: str) -> StoredObject:
        obj = StoredObject(bucket=self.bucket, path=build_document_path(tenant_id, filename))
        target = self._resolve(obj)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as e:
            raise AppError(
                code=ErrorCode.STORAGE_UPLOAD_FAILED,
                reason=ErrorReason.UPLOAD_FAILED,
                message=f"Failed to write document to local storage: {e}",
                status_code=500,
            ) from e
        return obj

    def download_bytes(self, obj: StoredObject) -> bytes:
        try:
            return self._resolve(obj).read_bytes()
        except OSError as e:
            raise AppError(
                code=ErrorCode.STORAGE_ERROR,
                reason=ErrorReason.DOWNLOAD_FAILED,
                message=f"Failed to read document from local storage: {e}",
                status_code=500,
            ) from e

    def create_signed_download_url(self, obj: StoredObject, expires_in_seconds: int = 600) -> str | None:
        return None

    def delete(self, obj: StoredObject) -> None:
        self._resolve(obj).unlink(missing_ok=True)
