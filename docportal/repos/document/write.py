"""
document/write.py
- Purpose: Write-side DB operations for Document, AnalysisVersion and the
  status event log.
- Design: No business logic beyond the lifecycle guard. Every status write
  goes through `_apply_status`, which checks the transition, appends a
  DocumentStatusEvent and mirrors the status onto the current
  AnalysisVersion. Except for `create_document`, nothing here commits; the
  service controls the transaction.
"""

from sqlalchemy.orm import Session

from docportal.constants.statuses import (
    CLAIMABLE_STATUSES,
    FAILURE_STATUSES,
    ProcessingStatus,
)
from docportal.models.analysis_version import AnalysisVersion
from docportal.models.base import utcnow
from docportal.models.document import Document
from docportal.models.embedding import DocumentEmbedding
from docportal.models.status_event import DocumentStatusEvent
from docportal.services.lifecycle import assert_transition, coerce_status


class DocumentWriteRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_document(
        self,
        *,
        tenant_id,
        status: ProcessingStatus,
        filename: str,
        original_filename: str,
        mime_type: str,
        file_size: int,
        storage_key: str,
        checksum: str,
        title: str | None = None,
        description: str | None = None,
        document_type: str = "OTHER",
        tags: list[str] | None = None,
        is_confidential: bool = False,
        uploaded_by: str | None = None,
    ) -> tuple[Document, AnalysisVersion]:
        status = coerce_status(status)
        if status not in CLAIMABLE_STATUSES:
            raise ValueError(f"Documents start PENDING or QUEUED, not {status.value}")

        doc = Document(
            tenant_id=tenant_id,
            title=title,
            description=description,
            filename=filename,
            original_filename=original_filename,
            mime_type=mime_type,
            file_size=file_size,
            storage_key=storage_key,
            checksum=checksum,
            document_type=document_type,
            tags=tags or None,
            is_confidential=is_confidential,
            uploaded_by=uploaded_by,
            status=status.value,
            attempt=1,
        )
        self.db.add(doc)
        self.db.flush()

        version = self._open_attempt(doc)
        self._log_event(doc, None, status)
        self.db.commit()
        self.db.refresh(doc)
        return doc, version

    def mark_queued(self, doc: Document) -> Document:
        return self._apply_status(doc, ProcessingStatus.QUEUED)

    def claim_for_processing(self, document_id, *, from_status: str) -> Document | None:
        """
        Atomic PENDING|QUEUED -> PROCESSING for distributed workers / idempotency.
        Returns the refreshed document if claimed, None if the row was not in
        the expected from_status (someone else got it, or it is not ready).
        """
        assert_transition(from_status, ProcessingStatus.PROCESSING)
        now = utcnow()
        updated = (
            self.db.query(Document)
            .filter(Document.id == document_id, Document.status == coerce_status(from_status).value)
            .update(
                {
                    "status": ProcessingStatus.PROCESSING.value,
                    "processing_started_at": now,
                    "processing_completed_at": None,
                    "updated_at": now,
                },
                synchronize_session=False,
            )
        )
        if updated != 1:
            return None

        doc = self.db.get(Document, document_id)
        self.db.refresh(doc)
        self._log_event(doc, from_status, ProcessingStatus.PROCESSING)
        self._sync_version(doc)
        self.db.flush()
        return doc

    def mark_warning(self, doc: Document) -> Document:
        return self._apply_status(doc, ProcessingStatus.WARNING)

    def mark_completed(
        self,
        doc: Document,
        *,
        ai_metadata: dict,
        provider: str | None = None,
        model: str | None = None,
        prompt_version: str | None = None,
        trace_id: str | None = None,
        latency_ms: int | None = None,
        raw_response: str | None = None,
    ) -> Document:
        doc.ai_metadata = ai_metadata
        doc.ai_processed = True
        doc.error_detail = None
        doc.processing_completed_at = utcnow()
        self._apply_status(doc, ProcessingStatus.COMPLETED)

        version = self._current_version(doc)
        if version is not None:
            version.provider = provider
            version.model = model
            version.prompt_version = prompt_version
            version.trace_id = trace_id
            version.latency_ms = latency_ms
            version.summary = ai_metadata.get("summary")
            version.key_insights = ai_metadata.get("key_insights")
            version.raw_response = raw_response
            version.error_type = None
            version.error_message = None
        self.db.flush()
        return doc

    def mark_failed(
        self,
        doc: Document,
        status: ProcessingStatus,
        *,
        error_detail: dict,
        provider: str | None = None,
        model: str | None = None,
        prompt_version: str | None = None,
        trace_id: str | None = None,
    ) -> Document:
        status = coerce_status(status)
        if status not in FAILURE_STATUSES:
            raise ValueError(f"{status.value} is not a failure status")

        doc.ai_metadata = None
        doc.ai_processed = False
        doc.error_detail = error_detail
        doc.processing_completed_at = utcnow()
        self._apply_status(doc, status)

        version = self._current_version(doc)
        if version is not None:
            version.provider = provider
            version.model = model
            version.prompt_version = prompt_version
            version.trace_id = trace_id
            version.error_type = error_detail.get("type")
            version.error_message = error_detail.get("message")
            version.raw_response = error_detail.get("raw_response")
        self.db.flush()
        return doc

    def start_new_attempt(self, doc: Document) -> AnalysisVersion:
        """Re-submission: terminal -> PENDING with a fresh AnalysisVersion."""
        previous = coerce_status(doc.status)
        assert_transition(previous, ProcessingStatus.PENDING, resubmission=True)

        doc.attempt = (doc.attempt or 0) + 1
        doc.status = ProcessingStatus.PENDING.value
        doc.ai_metadata = None
        doc.ai_processed = False
        doc.error_detail = None
        doc.processing_started_at = None
        doc.processing_completed_at = None
        self.db.flush()

        version = self._open_attempt(doc)
        self._log_event(doc, previous, ProcessingStatus.PENDING)
        self.db.flush()
        return version

    def replace_embeddings(self, doc: Document, chunks, vectors: list[list[float]], *, model: str) -> int:
        """Swap the document's embedding rows for `chunks` / `vectors` (same order)."""
        if len(chunks) != len(vectors):
            raise ValueError(f"{len(chunks)} chunks but {len(vectors)} vectors")

        self.db.query(DocumentEmbedding).filter(DocumentEmbedding.document_id == doc.id).delete(
            synchronize_session=False
        )
        self.db.flush()

        version = self._current_version(doc)
        for chunk, vector in zip(chunks, vectors):
            self.db.add(
                DocumentEmbedding(
                    document_id=doc.id,
                    tenant_id=doc.tenant_id,
                    analysis_id=version.id if version is not None else None,
                    chunk_index=chunk.index,
                    text_chunk=chunk.text,
                    embedding=list(vector),
                    dimensions=len(vector),
                    embedding_model=model,
                )
            )

        doc.ai_metadata = {
            **(doc.ai_metadata or {}),
            "embeddings": {"generated": bool(chunks), "chunks": len(chunks), "model": model},
        }
        self.db.flush()
        self.db.expire(doc, ["embeddings"])
        return len(chunks)

    # ---- internals ----

    def _apply_status(self, doc: Document, to_status: ProcessingStatus) -> Document:
        previous = coerce_status(doc.status)
        assert_transition(previous, to_status)
        doc.status = to_status.value
        self._log_event(doc, previous, to_status)
        self._sync_version(doc)
        self.db.flush()
        return doc

    def _open_attempt(self, doc: Document) -> AnalysisVersion:
        version = AnalysisVersion(
            document_id=doc.id,
            tenant_id=doc.tenant_id,
            attempt=doc.attempt,
            status=doc.status,
        )
        self.db.add(version)
        self.db.flush()
        return version

    def _current_version(self, doc: Document) -> AnalysisVersion | None:
        return (
            self.db.query(AnalysisVersion)
            .filter(AnalysisVersion.document_id == doc.id, AnalysisVersion.attempt == doc.attempt)
            .first()
        )

    def _sync_version(self, doc: Document) -> None:
        version = self._current_version(doc)
        if version is not None:
            version.status = doc.status

    def _log_event(self, doc: Document, from_status, to_status) -> None:
        self.db.add(
            DocumentStatusEvent(
                document_id=doc.id,
                attempt=doc.attempt,
                from_status=coerce_status(from_status).value if from_status is not None else None,
                to_status=coerce_status(to_status).value,
            )
        )
