"""docportal/workers/process_document.py

Worker entrypoints shared by the Celery tasks and CLI-style callers.
"""

from sqlalchemy.orm import Session

from docportal.llm.embeddings import build_embedder
from docportal.services.processing_config import ProcessingConfig
from docportal.services.processing_service import BatchSummary, DocumentProcessor, ProcessOutcome
from docportal.services.storage.factory import get_storage

_UNSET = object()


def build_processor(
    db: Session,
    *,
    config: ProcessingConfig | None = None,
    storage=None,
    llm=None,
    embedder=_UNSET,
) -> DocumentProcessor:
    config = config or ProcessingConfig.from_settings()
    return DocumentProcessor(
        db=db,
        storage=storage or get_storage(),
        config=config,
        llm=llm,
        # pass embedder=None to skip embeddings
        embedder=build_embedder(config) if embedder is _UNSET else embedder,
    )


def run_process_document(db: Session, document_id: str, **kwargs) -> ProcessOutcome:
    return build_processor(db, **kwargs).process_document(document_id)


def run_process_pending(db: Session, *, limit: int | None = None, tenant_id=None, **kwargs) -> BatchSummary:
    return build_processor(db, **kwargs).process_pending(limit=limit, tenant_id=tenant_id)
