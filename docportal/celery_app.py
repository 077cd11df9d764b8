# docportal/celery_app.py
from celery import Celery
from dotenv import load_dotenv

load_dotenv()

from docportal.core.config import settings  # noqa: E402  (.env must be loaded first)
from docportal.core.logging_config import configure_logging  # noqa: E402

configure_logging()

PIPELINE = "docportal.tasks.document_pipeline"


def beat_schedule() -> dict:
    """Periodic sweep that picks up documents uploaded without a dispatch."""
    if settings.PENDING_SWEEP_INTERVAL_SECONDS <= 0:
        return {}
    return {
        "sweep-pending-documents": {
            "task": f"{PIPELINE}.process_pending_task",
            "schedule": float(settings.PENDING_SWEEP_INTERVAL_SECONDS),
            "kwargs": {"limit": settings.BATCH_PROCESS_LIMIT},
        },
    }


celery_app = Celery(
    "docportal",
    broker=settings.REDIS_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND or settings.REDIS_BROKER_URL,
    include=[PIPELINE],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # at-least-once delivery; the status-guarded claim turns a redelivery into a no-op
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    task_time_limit=settings.CELERY_TASK_TIME_LIMIT_SECONDS,
    task_soft_time_limit=max(settings.CELERY_TASK_TIME_LIMIT_SECONDS - 30, 1),
    result_expires=86400,
    # our JSON logging owns the root logger
    worker_hijack_root_logger=False,
    task_routes={
        f"{PIPELINE}.process_document_task": {"queue": "process_q"},
        f"{PIPELINE}.process_pending_task": {"queue": "batch_q"},
    },
    beat_schedule=beat_schedule(),
)
