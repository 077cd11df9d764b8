# docportal/main.py
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from docportal.core import AppError
from docportal.core.config import settings
from docportal.core.exception_handlers import (
    app_error_handler,
    unhandled_exception_handler,
    validation_error_handler,
)
from docportal.core.logging_config import configure_logging
from docportal.middleware.request_logging import RequestLoggingMiddleware
from docportal.modules.registry import initialize_modules

configure_logging()


def cors_options() -> dict:
    """
    CORSMiddleware kwargs from settings.

    CORS_ALLOW_ORIGINS is a comma-separated list; CORS_ALLOW_ORIGIN_REGEX
    admits preview deployments. Credentials are allowed, so the origin list
    never falls back to "*".
    """
    origins = [o.strip() for o in (settings.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]
    opts: dict = {
        "allow_credentials": True,
        "allow_methods": ["*"],
        "allow_headers": ["*"],
        "expose_headers": ["x-request-id"],
        "allow_origins": origins or ["http://localhost:3000"],
    }
    if settings.CORS_ALLOW_ORIGIN_REGEX:
        opts["allow_origin_regex"] = settings.CORS_ALLOW_ORIGIN_REGEX
    return opts


def create_app(registry=None) -> FastAPI:
    app = FastAPI(title=settings.app_name)

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CORSMiddleware, **cors_options())

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # routers are mounted by the module registry so a failing module degrades /api/health
    initialize_modules(app, registry)
    return app


app = create_app()
