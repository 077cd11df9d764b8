# docportal/middleware/request_logging.py
from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from docportal.core.request_context import clear_context, set_context

logger = logging.getLogger("docportal.http")

REQUEST_ID_HEADER = "x-request-id"
QUIET_PATHS = frozenset({"/api/health"})


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Binds request_id (and the raw X-Tenant-ID, if sent) to every log line of
    the request and logs one http.response line per request. The id is
    echoed back so a client polling a document can quote it.
    """

    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        set_context(request_id=rid, tenant_id=request.headers.get("x-tenant-id"))
        path = request.url.path
        started = time.perf_counter()

        try:
            try:
                response: Response = await call_next(request)
            except Exception:
                logger.exception(
                    "http.unhandled",
                    extra={"method": request.method, "path": path, "duration_ms": _elapsed_ms(started)},
                )
                raise

            duration_ms = _elapsed_ms(started)
            # liveness probes only show up when they fail
            if path not in QUIET_PATHS or response.status_code >= 400:
                log = logger.warning if response.status_code >= 500 else logger.info
                log(
                    "http.response",
                    extra={
                        "method": request.method,
                        "path": path,
                        "query": request.url.query or None,
                        "status_code": response.status_code,
                        "duration_ms": duration_ms,
                    },
                )

            response.headers[REQUEST_ID_HEADER] = rid
            response.headers["x-response-time-ms"] = str(duration_ms)
            return response
        finally:
            clear_context()
