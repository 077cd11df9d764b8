"""
supabase_storage.py
- Purpose: Storage adapter for Supabase Storage (private bucket).
- Owns: document upload/download, signed URL generation.
- Design: Treat as an infrastructure adapter; no business logic.
"""

import httpx

from docportal.core import AppError, ErrorCode, ErrorReason
from docportal.core.config import settings
from docportal.services.storage.base import StoredObject, build_document_path


class SupabaseStorage:
    """
    Minimal adapter around Supabase Storage.

    Assumptions:
    - Bucket is private
    - Downloads go through short-lived signed URLs
    """

    def __init__(self, bucket: str | None = None, client=None):
        self.bucket = bucket or settings.SUPABASE_STORAGE_BUCKET

        if client is not None:
            self._client = client
            return

        if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
            raise AppError(
                code=ErrorCode.CONFIG_ERROR,
                reason=ErrorReason.STORAGE_UNAVAILABLE,
                message="SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set for supabase storage",
                status_code=500,
            )

        # Import lazily so missing dependency errors are localized.
        try:
            from supabase import create_client  # type: ignore
        except ImportError as e:
            raise AppError(
                code=ErrorCode.CONFIG_ERROR,
                reason=ErrorReason.MISSING_DEPENDENCY,
                message="Supabase client library is not installed or failed to import",
                status_code=500,
            ) from e

        self._client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)

    def upload_document(self, tenant_id, filename: str, content: bytes, content_type: str) -> StoredObject:
        path = build_document_path(tenant_id, filename)
        try:
            self._client.storage.from_(self.bucket).upload(
                path=path,
                file=content,
                file_options={"content-type": content_type or "application/octet-stream"},
            )
        except Exception as e:
            raise AppError(
                code=ErrorCode.STORAGE_UPLOAD_FAILED,
                reason=ErrorReason.UPLOAD_FAILED,
                message=f"Failed to upload document to storage: {e}",
                status_code=502,
            ) from e

        # Some versions return dict-like, some return object; no exception == success.
        return StoredObject(bucket=self.bucket, path=path)

    def create_signed_download_url(self, obj: StoredObject, expires_in_seconds: int = 600) -> str:
        """
        Generate a signed download URL for a private object.
        """
        try:
            res = self._client.storage.from_(obj.bucket).create_signed_url(obj.path, expires_in_seconds)
        except Exception as e:
            raise AppError(
                code=ErrorCode.STORAGE_ERROR,
                reason=ErrorReason.SIGNED_URL_FAILED,
                message="Failed to create signed download URL",
                status_code=502,
            ) from e

        # Supabase returns a dict with signedURL in many client versions
        if isinstance(res, dict):
            url = res.get("signedURL") or res.get("signedUrl") or res.get("signed_url")
            if url:
                return url

        if isinstance(res, str):
            return res

        raise AppError(
            code=ErrorCode.STORAGE_ERROR,
            reason=ErrorReason.SIGNED_URL_FAILED,
            message="Signed URL response was not in the expected format",
            status_code=502,
        )

    def download_bytes(self, obj: StoredObject) -> bytes:
        """Download a private object as bytes using a signed URL."""
        url = self.create_signed_download_url(obj)

        try:
            with httpx.Client(timeout=30.0, follow_redirects=True) as client:
                resp = client.get(url)
                resp.raise_for_status()
                return resp.content
        except httpx.HTTPError as e:
            raise AppError(
                code=ErrorCode.STORAGE_ERROR,
                reason=ErrorReason.DOWNLOAD_FAILED,
                message=f"Failed to download object from storage: {e}",
                status_code=502,
            ) from e

    def delete(self, obj: StoredObject) -> None:
        try:
            self._client.storage.from_(obj.bucket).remove([obj.path])
        except Exception as e:
            raise AppError(
                code=ErrorCode.STORAGE_ERROR,
                reason=ErrorReason.STORAGE_UNAVAILABLE,
                message=f"Failed to delete object from storage: {e}",
                status_code=502,
            ) from e
