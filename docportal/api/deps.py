from typing import Generator

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from docportal.core.request_context import set_context
from docportal.db.session import SessionLocal
from docportal.llm.client import LLMClient
from docportal.llm.embeddings import TextEmbedder, build_embedder
from docportal.models.tenant import Tenant
from docportal.services.document_service import DocumentService, Enqueue, enqueue_with_celery
from docportal.services.processing_config import ProcessingConfig
from docportal.services.processing_service import DocumentProcessor
from docportal.services.storage.base import DocumentStorage
from docportal.services.storage.factory import get_storage as build_storage
from docportal.services.tenant_service import TenantService


def get_db() -> Generator[Session, None, None]:
    """
    Yields a DB session per request.
    Ensures the session is closed even on exceptions.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_storage() -> DocumentStorage:
    """
    Provides the storage backend selected by STORAGE_BACKEND.
    Using Depends(get_storage) allows for easy swapping in tests.
    """
    return build_storage()


def get_processing_config() -> ProcessingConfig:
    return ProcessingConfig.from_settings()


def get_llm_client(config: ProcessingConfig = Depends(get_processing_config)) -> LLMClient:
    return LLMClient.from_config(config)


def get_embedder(config: ProcessingConfig = Depends(get_processing_config)) -> TextEmbedder | None:
    return build_embedder(config)


def get_enqueue() -> Enqueue | None:
    """How uploads are handed to the background queue (Celery by default)."""
    return enqueue_with_celery


def get_tenant_service(db: Session = Depends(get_db)) -> TenantService:
    return TenantService(db)


def get_tenant(
    x_tenant_id: str | None = Header(default=None, alias="X-Tenant-ID"),
    tenants: TenantService = Depends(get_tenant_service),
) -> Tenant:
    """
    Resolves the calling tenant from the X-Tenant-ID header (slug).
    Missing header -> default tenant; unknown/inactive -> 403.
    """
    tenant = tenants.resolve(x_tenant_id)
    set_context(tenant_id=str(tenant.id))
    return tenant


def get_document_service(
    db: Session = Depends(get_db),
    storage: DocumentStorage = Depends(get_storage),
    enqueue: Enqueue | None = Depends(get_enqueue),
) -> DocumentService:
    """
    Service dependency for document flows.
    Injects the DB session, the storage provider and the queue hand-off.
    """
    return DocumentService(db=db, storage=storage, enqueue=enqueue)


def get_processor(
    db: Session = Depends(get_db),
    storage: DocumentStorage = Depends(get_storage),
    config: ProcessingConfig = Depends(get_processing_config),
    llm: LLMClient = Depends(get_llm_client),
    embedder: TextEmbedder | None = Depends(get_embedder),
) -> DocumentProcessor:
    return DocumentProcessor(db=db, storage=storage, config=config, llm=llm, embedder=embedder)
