from docportal.celery_app import beat_schedule, celery_app
from docportal.core.config import settings


def test_pipeline_tasks_are_routed():
    routes = celery_app.conf.task_routes
    assert routes["docportal.tasks.document_pipeline.process_document_task"] == {"queue": "process_q"}
    assert routes["docportal.tasks.document_pipeline.process_pending_task"] == {"queue": "batch_q"}
    assert celery_app.conf.task_acks_late is True


def test_sweep_schedule(monkeypatch):
    monkeypatch.setattr(settings, "PENDING_SWEEP_INTERVAL_SECONDS", 120)
    monkeypatch.setattr(settings, "BATCH_PROCESS_LIMIT", 25)

    entry = beat_schedule()["sweep-pending-documents"]
    assert entry["task"] == "docportal.tasks.document_pipeline.process_pending_task"
    assert entry["schedule"] == 120.0
    assert entry["kwargs"] == {"limit": 25}


def test_sweep_can_be_disabled(monkeypatch):
    monkeypatch.setattr(settings, "PENDING_SWEEP_INTERVAL_SECONDS", 0)
    assert beat_schedule() == {}
