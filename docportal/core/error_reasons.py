"""
Human-readable `reason` strings returned in every error body.

Clients may show these verbatim; the machine-readable part is ErrorCode.
Keep the values stable once published.
"""

from enum import Enum


class ErrorReason(str, Enum):
    UNKNOWN = "Unknown error"
    INTERNAL_ERROR = "Internal server error"
    MISSING_DEPENDENCY = "Missing dependency"

    # request validation / lookup
    INVALID_INPUT = "Invalid input"
    RESOURCE_NOT_FOUND = "Resource not found"
    ALREADY_EXISTS = "Resource already exists"
    STATUS_CONFLICT = "Document is not in a state that allows this operation"

    # auth / tenancy
    AUTH_REQUIRED = "Authentication required"
    AUTH_INVALID = "Invalid authentication"
    AUTH_FORBIDDEN = "Operator access required"
    NOT_AUTHORIZED = "Not authorized"
    TENANT_INVALID = "Invalid or unauthorized tenant access"
    TENANT_INACTIVE = "Tenant account is inactive"

    # document content
    UNSUPPORTED_CONTENT = "Unsupported document content"
    EMPTY_CONTENT = "Empty document content"

    # backing services
    DATABASE_UNAVAILABLE = "Database unavailable"
    STORAGE_UNAVAILABLE = "Storage unavailable"
    UPLOAD_FAILED = "Upload failed"
    DOWNLOAD_FAILED = "Download failed"
    SIGNED_URL_FAILED = "Signed URL failed"
    LLM_FAILED = "LLM request failed"
