"""
Central logging configuration.

Goals:
- One shared logging setup for the API process and the Celery worker.
- JSON logs to stdout for aggregation; LOG_FORMAT=text for local reading.
- Correlate logs with request_id / task_id / document_id / tenant_id.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.config import dictConfig

from docportal.core.request_context import get_context

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
    }
)

_configured = False


def _extra_fields(record: logging.LogRecord) -> dict:
    out = {}
    for k, v in record.__dict__.items():
        if k in _RESERVED_ATTRS or k.startswith("_"):
            continue
        try:
            json.dumps(v)
            out[k] = v
        except (TypeError, ValueError):
            out[k] = str(v)
    return out


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        base.update(get_context())
        for k, v in _extra_fields(record).items():
            base.setdefault(k, v)

        if record.exc_info:
            base["exc"] = self.formatException(record.exc_info)

        return json.dumps(base, ensure_ascii=False)


class ContextTextFormatter(logging.Formatter):
    """Human-readable variant: `<ts> LEVEL logger msg key=value ...`."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = {**get_context(), **_extra_fields(record)}
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        return line


def configure_logging(level: str | None = None, *, force: bool = False) -> None:
    """
    Call once at process startup (API + Celery). Repeated calls are no-ops
    unless force=True.
    """
    global _configured
    if _configured and not force:
        return

    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    fmt = os.getenv("LOG_FORMAT", "json").lower()

    formatters = {
        "json": {"()": "docportal.core.logging_config.JsonFormatter"},
        "text": {
            "()": "docportal.core.logging_config.ContextTextFormatter",
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    }

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "text" if fmt == "text" else "json",
                "stream": sys.stdout,
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            "uvicorn": {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": level, "handlers": ["console"], "propagate": False},
            "celery": {"level": level, "handlers": ["console"], "propagate": False},
            # SDK chatter (request lines) is noisy at INFO
            "httpx": {"level": "WARNING"},
            "openai": {"level": "WARNING"},
        },
    }

    dictConfig(logging_config)
    _configured = True
