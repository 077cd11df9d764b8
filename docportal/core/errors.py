"""
errors.py
- Purpose: AppError used across services/repos for consistent errors.
- Pattern: raise AppError(...) in service/repo, handler converts to JSON response.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from fastapi import status as http_status
from docportal.core.error_codes import ErrorCode
from docportal.core.error_reasons import ErrorReason


@dataclass
class AppError(Exception):
    code: ErrorCode
    reason: str = ErrorReason.UNKNOWN
    status_code: int = http_status.HTTP_400_BAD_REQUEST
    details: dict[str, Any] | None = None
    message: str | None = None  # Optional human-readable message

    def __str__(self) -> str:
        if self.message:
            return self.message
        return self.reason.value if isinstance(self.reason, Enum) else str(self.reason)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": {
                "code": self.code,
                "reason": self.reason,
                "message": self.message if self.message else self.reason,
            }
        }
        if self.details:
            payload["error"]["details"] = self.details
        return payload


# Convenience constructors
def bad_request(reason: str = ErrorReason.INVALID_INPUT, *, code: ErrorCode = ErrorCode.VALIDATION_ERROR, message: str | None = None, details: dict | None = None) -> AppError:
    return AppError(code=code, reason=reason, status_code=http_status.HTTP_400_BAD_REQUEST, details=details, message=message)


def not_found(reason: str = ErrorReason.RESOURCE_NOT_FOUND, *, message: str | None = None, details: dict | None = None) -> AppError:
    return AppError(code=ErrorCode.NOT_FOUND, reason=reason, status_code=http_status.HTTP_404_NOT_FOUND, details=details, message=message)


def conflict(reason: str = ErrorReason.ALREADY_EXISTS, *, code: ErrorCode = ErrorCode.CONFLICT, message: str | None = None, details: dict | None = None) -> AppError:
    return AppError(code=code, reason=reason, status_code=http_status.HTTP_409_CONFLICT, details=details, message=message)


def forbidden(reason: str = ErrorReason.NOT_AUTHORIZED, *, code: ErrorCode = ErrorCode.FORBIDDEN, message: str | None = None) -> AppError:
    return AppError(code=code, reason=reason, status_code=http_status.HTTP_403_FORBIDDEN, message=message)


def internal_error(reason: str = ErrorReason.UNKNOWN, *, code: ErrorCode = ErrorCode.INTERNAL_ERROR, message: str | None = None, details: dict | None = None) -> AppError:
    return AppError(code=code, reason=reason, status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR, details=details, message=message)
