from __future__ import annotations

import logging

from docportal.celery_app import celery_app
from docportal.core import AppError
from docportal.core.request_context import clear_context, set_context
from docportal.db.session import SessionLocal

logger = logging.getLogger("docportal.tasks.document_pipeline")


# No autoretry: a failed document is terminal until it is re-submitted.
@celery_app.task(
    name="docportal.tasks.document_pipeline.process_document_task",
    bind=True,
)
def process_document_task(self, document_id: str):
    """
    QUEUED -> PROCESSING -> COMPLETED | FAILED | ERROR
    A redelivered message for a document already claimed returns not-claimed.
    """
    set_context(task_id=getattr(self.request, "id", None), document_id=document_id)
    from docportal.workers.process_document import run_process_document

    db = SessionLocal()
    try:
        logger.info("task.start", extra={"task": "process_document_task"})
        outcome = run_process_document(db, document_id)
        logger.info(
            "task.done",
            extra={
                "task": "process_document_task",
                "status": outcome.status.value,
                "error_type": outcome.error_type.value if outcome.error_type else None,
            },
        )
        return {
            "ok": outcome.succeeded,
            "document_id": document_id,
            "status": outcome.status.value,
            "error_type": outcome.error_type.value if outcome.error_type else None,
        }
    except AppError as e:
        # 404 / 409: nothing to do for this message
        logger.warning("task.app_error", extra={"task": "process_document_task", "error": str(e)})
        return {"ok": False, "document_id": document_id, "error": str(e)}
    finally:
        db.close()
        clear_context()


@celery_app.task(
    name="docportal.tasks.document_pipeline.process_pending_task",
    bind=True,
)
def process_pending_task(self, limit: int | None = None, tenant_id: str | None = None):
    """Batch sweep over PENDING/QUEUED documents (e.g. from celery beat)."""
    set_context(task_id=getattr(self.request, "id", None), tenant_id=tenant_id)
    from docportal.core.ids import as_uuid
    from docportal.workers.process_document import run_process_pending

    db = SessionLocal()
    try:
        logger.info("task.start", extra={"task": "process_pending_task", "limit": limit})
        summary = run_process_pending(
            db,
            limit=limit,
            tenant_id=as_uuid(tenant_id) if tenant_id else None,
        )
        return {
            "processed": summary.processed,
            "succeeded": summary.succeeded,
            "failed": summary.failed,
            "skipped": summary.skipped,
        }
    finally:
        db.close()
        clear_context()
