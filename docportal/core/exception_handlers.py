"""
exception_handlers.py
- Purpose: Convert AppError, request validation errors and unexpected
  exceptions into the single `{"error": {...}}` response shape.

Also logs errors with request context so failures are diagnosable.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from docportal.core import AppError, ErrorCode, ErrorReason

logger = logging.getLogger("docportal.exceptions")


def _request_fields(request: Request) -> dict:
    return {"path": str(getattr(request.url, "path", "")), "method": request.method}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "app_error",
        extra={
            **_request_fields(request),
            "status_code": exc.status_code,
            "code": getattr(exc, "code", None),
            "reason": getattr(exc, "reason", None),
        },
    )
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request_validation_error", extra=_request_fields(request))
    err = AppError(
        code=ErrorCode.VALIDATION_ERROR,
        reason=ErrorReason.INVALID_INPUT,
        status_code=422,
        details={"errors": jsonable_encoder(exc.errors())},
    )
    return JSONResponse(status_code=422, content=jsonable_encoder(err.to_dict()))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", extra=_request_fields(request))
    return JSONResponse(
        status_code=500,
        content={"error": {"code": ErrorCode.INTERNAL_ERROR.value, "reason": ErrorReason.INTERNAL_ERROR.value}},
    )
