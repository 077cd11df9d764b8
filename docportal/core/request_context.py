"""
Request/Task context helpers.

We keep a small context (request_id, task_id, document_id, tenant_id) in
ContextVars. Both FastAPI middleware and Celery tasks set these values so
logs become correlatable across upload, processing and polling.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional


_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_task_id: ContextVar[Optional[str]] = ContextVar("task_id", default=None)
_document_id: ContextVar[Optional[str]] = ContextVar("document_id", default=None)
_tenant_id: ContextVar[Optional[str]] = ContextVar("tenant_id", default=None)


def set_context(
    *,
    request_id: Optional[str] = None,
    task_id: Optional[str] = None,
    document_id: Optional[str] = None,
    tenant_id: Optional[str] = None,
) -> None:
    if request_id is not None:
        _request_id.set(request_id)
    if task_id is not None:
        _task_id.set(task_id)
    if document_id is not None:
        _document_id.set(document_id)
    if tenant_id is not None:
        _tenant_id.set(tenant_id)


def clear_context() -> None:
    _request_id.set(None)
    _task_id.set(None)
    _document_id.set(None)
    _tenant_id.set(None)


def get_context() -> Dict[str, Any]:
    ctx: Dict[str, Any] = {}
    rid = _request_id.get()
    tid = _task_id.get()
    did = _document_id.get()
    ten = _tenant_id.get()

    if rid:
        ctx["request_id"] = rid
    if tid:
        ctx["task_id"] = tid
    if did:
        ctx["document_id"] = did
    if ten:
        ctx["tenant_id"] = ten
    return ctx


@contextmanager
def document_scope(document_id) -> Iterator[None]:
    """Bind document_id for the duration of one document's processing."""
    token = _document_id.set(str(document_id) if document_id is not None else None)
    try:
        yield
    finally:
        _document_id.reset(token)
