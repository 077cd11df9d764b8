# docportal/routers/health.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from docportal.api.deps import get_db
from docportal.constants.statuses import ProcessingStatus
from docportal.core.config import settings
from docportal.repos.document.read import DocumentReadRepo

router = APIRouter(prefix="/api", tags=["health"])

_IN_FLIGHT = (ProcessingStatus.PENDING, ProcessingStatus.QUEUED, ProcessingStatus.PROCESSING)


@router.get("/")
def root():
    return {"service": settings.app_name, "docs": "/docs", "health": "/api/health"}


@router.get("/health")
def health(request: Request):
    """Liveness plus the init result of every registered module."""
    modules = getattr(request.app.state, "modules", [])
    return {
        "status": "ok" if all(m.ok for m in modules) else "degraded",
        "modules": {m.name: ("ok" if m.ok else m.error) for m in modules},
    }


@router.get("/db/health")
def db_health(db: Session = Depends(get_db)):
    db.execute(text("select 1"))
    counts = DocumentReadRepo(db).count_by_status()
    return {
        "status": "ok",
        "db": "connected",
        "documents": counts,
        "in_flight": sum(counts.get(s.value, 0) for s in _IN_FLIGHT),
    }
