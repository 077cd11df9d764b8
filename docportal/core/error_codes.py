# docportal/core/error_codes.py
from enum import Enum

class ErrorCode(str, Enum):
    UNKNOWN = "UNKNOWN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    DB_ERROR = "DB_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"

    # Auth / tenancy
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    TENANT_INVALID = "TENANT_INVALID"
    TENANT_INACTIVE = "TENANT_INACTIVE"

    # Upload
    FILE_MISSING = "FILE_MISSING"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    FILE_EMPTY = "FILE_EMPTY"
    INVALID_DOCUMENT_TYPE = "INVALID_DOCUMENT_TYPE"
    INVALID_TAGS = "INVALID_TAGS"

    # Lifecycle
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    DOCUMENT_NOT_CLAIMABLE = "DOCUMENT_NOT_CLAIMABLE"

    # Storage
    STORAGE_ERROR = "STORAGE_ERROR"
    STORAGE_UPLOAD_FAILED = "STORAGE_UPLOAD_FAILED"

    # AI provider
    LLM_ERROR = "LLM_ERROR"
