"""
file_validators.py
- Purpose: Centralized validation for document uploads (type + size constraints).
- Design: Raise AppError with stable error codes for UI + logs.
"""

import os
import re

from fastapi import UploadFile

from docportal.core import AppError, ErrorCode, ErrorReason
from docportal.core.config import settings

# Accepted at upload. Not every type here can be analysed; the processor
# marks unsupported content FAILED instead of rejecting the upload.
ALLOWED_UPLOAD_MIME_TYPES = frozenset({
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "text/plain",
    "text/csv",
    "text/markdown",
    "application/json",
    "application/xml",
    "text/xml",
    "image/jpeg",
    "image/png",
})


def normalize_content_type(content_type: str | None) -> str:
    # "text/plain; charset=utf-8" -> "text/plain"
    return (content_type or "").split(";", 1)[0].strip().lower()


def validate_document_upload(file: UploadFile | None) -> str:
    """Returns the normalized content type."""
    if file is None or not file.filename:
        raise AppError(code=ErrorCode.FILE_MISSING, reason=ErrorReason.INVALID_INPUT, status_code=422)

    content_type = normalize_content_type(file.content_type)
    if content_type not in ALLOWED_UPLOAD_MIME_TYPES:
        raise AppError(
            code=ErrorCode.INVALID_FILE_TYPE,
            reason=ErrorReason.INVALID_INPUT,
            message=f"File type not allowed: {content_type or 'unknown'}",
            status_code=422,
            details={"content_type": content_type},
        )
    return content_type


def validate_file_size(size: int, *, max_bytes: int | None = None) -> None:
    limit = max_bytes if max_bytes is not None else settings.MAX_UPLOAD_BYTES
    if size <= 0:
        raise AppError(
            code=ErrorCode.FILE_EMPTY,
            reason=ErrorReason.EMPTY_CONTENT,
            message="Uploaded file is empty",
            status_code=422,
        )
    if size > limit:
        raise AppError(
            code=ErrorCode.FILE_TOO_LARGE,
            reason=ErrorReason.INVALID_INPUT,
            message=f"File exceeds the {limit} byte limit",
            status_code=413,
            details={"size": size, "max_bytes": limit},
        )


def sanitize_filename(name: str | None, default: str = "upload.bin") -> str:
    """
    Keep basename, replace anything outside [A-Za-z0-9._-], lowercase the stem.
    """
    if not name:
        return default
    base = os.path.basename(name.replace("\\", "/"))
    stem, ext = os.path.splitext(base)
    stem = re.sub(r"[^a-zA-Z0-9._-]", "_", stem)
    stem = re.sub(r"_{2,}", "_", stem).strip("._").lower()
    ext = re.sub(r"[^a-zA-Z0-9.]", "", ext).lower()
    if not stem:
        return default
    return f"{stem}{ext}"
