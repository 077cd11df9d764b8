# docportal/core/__init__.py
from docportal.core.error_codes import ErrorCode
from docportal.core.error_reasons import ErrorReason
from docportal.core.errors import AppError, bad_request, conflict, forbidden, internal_error, not_found

__all__ = ["AppError", "ErrorCode", "ErrorReason", "bad_request", "conflict", "forbidden", "internal_error", "not_found"]
