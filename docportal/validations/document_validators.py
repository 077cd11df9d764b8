"""
document_validators.py
- Purpose: Validations specific to document metadata inputs.
- Design: Normalize + validate at the boundary, keep services clean.
"""

import json

from docportal.constants.statuses import DocumentType, ProcessingStatus
from docportal.core import AppError, ErrorCode, ErrorReason

MAX_TAGS = 20
MAX_TAG_LENGTH = 50


def normalize_document_type(value: str | None) -> str:
    if not value:
        return DocumentType.OTHER.value
    v = value.strip().upper()
    try:
        return DocumentType(v).value
    except ValueError:
        raise AppError(
            code=ErrorCode.INVALID_DOCUMENT_TYPE,
            reason=ErrorReason.INVALID_INPUT,
            message=f"Unknown document type: {value}",
            status_code=422,
            details={"allowed": [t.value for t in DocumentType]},
        )


def parse_tags(raw: str | None) -> list[str]:
    """
    Multipart forms send tags either as a JSON array or comma separated.
    Tags are trimmed, lowercased and de-duplicated (order kept).
    """
    if raw is None or not raw.strip():
        return []

    text = raw.strip()
    if text.startswith("["):
        try:
            items = json.loads(text)
        except json.JSONDecodeError:
            raise AppError(code=ErrorCode.INVALID_TAGS, reason=ErrorReason.INVALID_INPUT, status_code=422)
        if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
            raise AppError(code=ErrorCode.INVALID_TAGS, reason=ErrorReason.INVALID_INPUT, status_code=422)
    else:
        items = text.split(",")

    tags: list[str] = []
    for item in items:
        tag = item.strip().lower()
        if not tag or tag in tags:
            continue
        if len(tag) > MAX_TAG_LENGTH:
            raise AppError(
                code=ErrorCode.INVALID_TAGS,
                reason=ErrorReason.INVALID_INPUT,
                message=f"Tag longer than {MAX_TAG_LENGTH} characters",
                status_code=422,
            )
        tags.append(tag)

    if len(tags) > MAX_TAGS:
        raise AppError(
            code=ErrorCode.INVALID_TAGS,
            reason=ErrorReason.INVALID_INPUT,
            message=f"At most {MAX_TAGS} tags allowed",
            status_code=422,
        )
    return tags


def normalize_status_filter(value: str | None) -> str | None:
    if not value:
        return None
    try:
        return ProcessingStatus(value.strip().upper()).value
    except ValueError:
        raise AppError(
            code=ErrorCode.VALIDATION_ERROR,
            reason=ErrorReason.INVALID_INPUT,
            message=f"Unknown status: {value}",
            status_code=422,
        )
