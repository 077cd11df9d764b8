"""
Pytest configuration and fixtures.
"""
import os

# Settings are read at import time; point them at throwaway backends first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("AUTO_PROCESS_ON_UPLOAD", "true")
os.environ.setdefault("LLM_PROVIDER", "openai")
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("EMBEDDINGS_ENABLED", "false")

import json
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from docportal.api.deps import get_db, get_embedder, get_enqueue, get_llm_client, get_storage
from docportal.auth.jwt import create_access_token
from docportal.constants.statuses import ProcessingStatus
from docportal.core.config import settings
from docportal.llm.client import LLMClient
from docportal.llm.types import LLMResponse
from docportal.main import app
from docportal.models import Base
from docportal.repos.document.write import DocumentWriteRepo
from docportal.repos.tenant.write import TenantWriteRepo
from docportal.services.processing_config import ProcessingConfig
from docportal.services.storage.local_storage import LocalStorage


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


GOOD_ANALYSIS = {
    "summary": "Master services agreement between Acme and Globex.",
    "entities": [{"name": "Acme Corp", "type": "organization", "mentions": ["Acme"]}],
    "timeline": [{"date": "2024-01-15", "event": "Agreement signed"}],
    "keyInsights": ["Auto-renews annually", "Net-30 payment terms"],
    "categories": ["legal", "contract"],
    "confidence": 0.9,
}


class FakeBackend:
    """
    Stands in for a provider. Each queued item is either the output text to
    return or an exception to raise; the last item repeats.
    """

    def __init__(self, *outputs):
        self.outputs = list(outputs) or [json.dumps(GOOD_ANALYSIS)]
        self.calls = []

    def generate(self, req, prompt):
        self.calls.append((req, prompt))
        item = self.outputs.pop(0) if len(self.outputs) > 1 else self.outputs[0]
        if isinstance(item, Exception):
            raise item
        return LLMResponse(
            trace_id=req.trace_id,
            provider=req.provider,
            model=req.model,
            output_text=item,
            latency_ms=5,
            retries=0,
        )


def make_llm(backend, **kwargs) -> LLMClient:
    opts = dict(provider="openai", model="gpt-4o", api_key="test-key", max_retries=2)
    opts.update(kwargs)
    return LLMClient(backend=backend, sleep=lambda s: None, **opts)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    return LocalStorage(root=tmp_path)


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def llm(fake_backend) -> LLMClient:
    return make_llm(fake_backend)


@pytest.fixture
def processing_config() -> ProcessingConfig:
    return ProcessingConfig(api_key="test-key", provider="openai", model="gpt-4o")


@pytest.fixture
def tenant(db_session):
    return TenantWriteRepo(db_session).create("acme", name="Acme")


@pytest.fixture
def make_document(db_session, storage, tenant):
    """Store `content` and insert a document row pointing at it."""

    def _make(
        content: bytes = b"This agreement is made between Acme and Globex.",
        *,
        mime_type: str = "text/plain",
        filename: str = "contract.txt",
        status: ProcessingStatus = ProcessingStatus.PENDING,
        owner=None,
    ):
        owner = owner or tenant
        stored = storage.upload_document(owner.id, filename, content, mime_type)
        doc, _ = DocumentWriteRepo(db_session).create_document(
            tenant_id=owner.id,
            status=status,
            filename=filename,
            original_filename=filename,
            mime_type=mime_type,
            file_size=len(content),
            storage_key=stored.path,
            checksum="0" * 64,
            title="Services agreement",
        )
        return doc

    return _make


@pytest.fixture
def enqueued() -> list:
    return []


@pytest.fixture(scope="function")
def client(db_session, storage, llm, enqueued) -> Generator[TestClient, None, None]:
    """Test client with DB, storage, LLM and queue overridden."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_llm_client] = lambda: llm
    app.dependency_overrides[get_embedder] = lambda: None
    app.dependency_overrides[get_enqueue] = lambda: enqueued.append

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    token = create_access_token(subject=settings.ADMIN_USERNAME)
    return {"Authorization": f"Bearer {token}"}
