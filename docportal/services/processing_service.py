# docportal/services/processing_service.py
"""
processing_service.py
- Purpose: The processing worker. Claims a PENDING/QUEUED document, runs
  download -> text extraction -> AI analysis, and persists exactly one
  terminal outcome on the document and its current AnalysisVersion.
- Design: Every failure after the claim becomes a stored status
  (FAILED for bad input, ERROR for everything else). Nothing raised by
  storage, extraction or the AI provider escapes `process_document`.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from docportal.constants.statuses import CLAIMABLE_STATUSES, ErrorType, ProcessingStatus
from docportal.core import AppError, ErrorCode, ErrorReason, conflict, not_found
from docportal.core.ids import as_uuid
from docportal.core.request_context import document_scope
from docportal.extract.chunking import split_into_chunks
from docportal.extract.text import INPUT_ERROR_REASONS, extract_text
from docportal.extract.types import ExtractedText
from docportal.llm.client import LLMClient
from docportal.llm.embeddings import TextEmbedder
from docportal.llm.errors import LLMError, LLMResponseParseError
from docportal.llm.types import LLMResponse
from docportal.models.document import Document
from docportal.repos.document.read import DocumentReadRepo
from docportal.repos.document.write import DocumentWriteRepo
from docportal.schemas.analysis_schema import DocumentAnalysis
from docportal.services.lifecycle import coerce_status, status_for_error
from docportal.services.processing_config import ProcessingConfig
from docportal.services.storage.base import DocumentStorage
from docportal.services.storage.factory import stored_object_for

logger = logging.getLogger("docportal.processing")

ANALYSIS_PROMPT = "analyze_document"

WARNING_INPUT_TRUNCATED = "input_truncated"
WARNING_NO_KEY_INSIGHTS = "no_key_insights"
WARNING_LOW_CONFIDENCE = "low_confidence"


@dataclass(frozen=True)
class ProcessOutcome:
    document_id: uuid.UUID
    status: ProcessingStatus
    error_type: ErrorType | None = None
    error_message: str | None = None
    warnings: tuple[str, ...] = ()
    embedded_chunks: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status == ProcessingStatus.COMPLETED


@dataclass(frozen=True)
class BatchItem:
    document_id: uuid.UUID
    outcome: str  # "succeeded" | "failed" | "skipped"
    status: ProcessingStatus | None = None
    error_type: ErrorType | None = None


@dataclass
class BatchSummary:
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    results: list[BatchItem] = field(default_factory=list)


class StepFailure(Exception):
    """A classified failure of one processing step."""

    def __init__(
        self,
        error_type: ErrorType,
        message: str,
        *,
        provider_status: int | None = None,
        raw_response: str | None = None,
        trace_id: str | None = None,
    ):
        super().__init__(message)
        self.error_type = error_type
        self.message = message
        self.provider_status = provider_status
        self.raw_response = raw_response
        self.trace_id = trace_id

    def to_detail(self) -> dict:
        detail = {"type": self.error_type.value, "message": self.message}
        if self.provider_status is not None:
            detail["provider_status"] = self.provider_status
        if self.raw_response is not None:
            detail["raw_response"] = self.raw_response
        return detail


@dataclass
class _Analysis:
    analysis: DocumentAnalysis
    response: LLMResponse
    extracted: ExtractedText
    truncated: bool
    warnings: list[str]


class DocumentProcessor:
    def __init__(
        self,
        db: Session,
        storage: DocumentStorage,
        config: ProcessingConfig,
        llm: LLMClient | None = None,
        embedder: TextEmbedder | None = None,
    ):
        self.db = db
        self.storage = storage
        self.config = config
        self.llm = llm or LLMClient.from_config(config)
        self.embedder = embedder

        self.read = DocumentReadRepo(db)
        self.write = DocumentWriteRepo(db)

    # ---- public API ----

    def process_document(self, document_id, *, tenant_id=None) -> ProcessOutcome:
        """
        PENDING|QUEUED -> PROCESSING -> terminal.
        Raises AppError only before the claim (404 unknown, 409 not claimable).
        """
        doc = self.read.get_by_id(as_uuid(document_id), tenant_id)
        if doc is None:
            raise not_found(message="Document not found")

        claimed = self._claim(doc)
        if claimed is None:
            raise conflict(
                ErrorReason.STATUS_CONFLICT,
                code=ErrorCode.DOCUMENT_NOT_CLAIMABLE,
                message=f"Document is {doc.status}; only PENDING or QUEUED documents can be processed",
                details={"status": str(doc.status)},
            )
        return self._run(claimed)

    def process_pending(self, *, limit: int | None = None, tenant_id=None) -> BatchSummary:
        """
        Oldest PENDING/QUEUED first, one at a time. A document lost to
        another worker between scan and claim is reported as skipped.
        """
        summary = BatchSummary()
        ids = self.read.list_claimable_ids(tenant_id=tenant_id, limit=limit)
        logger.info("batch.start", extra={"candidates": len(ids), "limit": limit})

        for document_id in ids:
            doc = self.read.get_by_id(document_id)
            claimed = self._claim(doc) if doc is not None else None
            if claimed is None:
                summary.skipped += 1
                summary.results.append(BatchItem(document_id=document_id, outcome="skipped"))
                continue

            outcome = self._run(claimed)
            summary.processed += 1
            if outcome.succeeded:
                summary.succeeded += 1
            else:
                summary.failed += 1
            summary.results.append(
                BatchItem(
                    document_id=document_id,
                    outcome="succeeded" if outcome.succeeded else "failed",
                    status=outcome.status,
                    error_type=outcome.error_type,
                )
            )

        logger.info(
            "batch.done",
            extra={
                "processed": summary.processed,
                "succeeded": summary.succeeded,
                "failed": summary.failed,
                "skipped": summary.skipped,
            },
        )
        return summary

    # ---- claim ----

    def _claim(self, doc: Document) -> Document | None:
        # Re-read so the guard compares against the row, not a cached object.
        self.db.refresh(doc)
        observed = coerce_status(doc.status)
        if observed not in CLAIMABLE_STATUSES:
            return None

        claimed = self.write.claim_for_processing(doc.id, from_status=observed)
        if claimed is None:
            self.db.rollback()
            logger.info("document.claim_lost", extra={"document_id": str(doc.id), "observed": observed.value})
            return None

        self.db.commit()
        logger.info(
            "document.claimed",
            extra={"document_id": str(doc.id), "attempt": claimed.attempt, "from_status": observed.value},
        )
        return claimed

    # ---- run ----

    def _run(self, doc: Document) -> ProcessOutcome:
        with document_scope(doc.id):
            try:
                result = self._analyze(doc)
                return self._complete(doc, result)
            except StepFailure as f:
                self.db.rollback()
                return self._fail(doc, f)
            except Exception as e:
                logger.exception("document.internal_error", extra={"document_id": str(doc.id)})
                self.db.rollback()
                return self._fail(doc, StepFailure(ErrorType.INTERNAL_ERROR, f"Unexpected error: {e}"))

    def _analyze(self, doc: Document) -> _Analysis:
        # 1) download
        try:
            content = self.storage.download_bytes(stored_object_for(self.storage, doc.storage_key))
        except AppError as e:
            raise StepFailure(ErrorType.STORAGE_ERROR, str(e)) from e

        # 2) extract
        try:
            extracted = extract_text(content, doc.mime_type)
        except AppError as e:
            if e.reason in INPUT_ERROR_REASONS:
                raise StepFailure(ErrorType.INPUT_ERROR, str(e)) from e
            raise StepFailure(ErrorType.INTERNAL_ERROR, str(e)) from e

        logger.info(
            "document.text_extracted",
            extra={"strategy": extracted.strategy, "chars": extracted.char_count, "pages": extracted.page_count},
        )

        # 3) truncate
        text = extracted.text
        truncated = len(text) > self.config.max_input_chars
        if truncated:
            text = text[: self.config.max_input_chars] + "..."

        # 4) analyze
        try:
            analysis, resp = self.llm.generate_structured(
                purpose="analyze_document",
                prompt_name=ANALYSIS_PROMPT,
                prompt_version=self.config.prompt_version,
                variables={
                    "title": doc.title or doc.original_filename,
                    "document_type": doc.document_type,
                    "text": text,
                },
                schema=DocumentAnalysis,
            )
        except LLMResponseParseError as e:
            raise StepFailure(
                ErrorType.PARSE_ERROR,
                e.message,
                raw_response=e.raw_text,
                trace_id=getattr(e.response, "trace_id", None),
            ) from e
        except LLMError as e:
            raise StepFailure(ErrorType.UPSTREAM_ERROR, e.message, provider_status=e.status_code) from e

        # 5) partial usability
        warnings: list[str] = []
        if truncated:
            warnings.append(WARNING_INPUT_TRUNCATED)
        if not analysis.key_insights:
            warnings.append(WARNING_NO_KEY_INSIGHTS)
        if analysis.confidence is not None and analysis.confidence < self.config.min_confidence:
            warnings.append(WARNING_LOW_CONFIDENCE)

        return _Analysis(
            analysis=analysis,
            response=resp,
            extracted=extracted,
            truncated=truncated,
            warnings=warnings,
        )

    # ---- persist ----

    def _complete(self, doc: Document, result: _Analysis) -> ProcessOutcome:
        resp = result.response
        ai_metadata = result.analysis.model_dump(mode="json")
        ai_metadata.update(
            {
                "warnings": list(result.warnings),
                "provider": resp.provider,
                "model": resp.model,
                "prompt_version": self.config.prompt_version,
                "usage": resp.usage(),
                "analyzed_at": datetime.now(timezone.utc).isoformat(),
                "embeddings": {"generated": False, "chunks": 0},
                "source": {
                    "strategy": result.extracted.strategy,
                    "page_count": result.extracted.page_count,
                    "chars": result.extracted.char_count,
                    "truncated": result.truncated,
                },
            }
        )

        if result.warnings:
            self.write.mark_warning(doc)
        self.write.mark_completed(
            doc,
            ai_metadata=ai_metadata,
            provider=resp.provider,
            model=resp.model,
            prompt_version=self.config.prompt_version,
            trace_id=resp.trace_id,
            latency_ms=resp.latency_ms,
            raw_response=resp.output_text,
        )
        self.db.commit()

        logger.info(
            "document.completed",
            extra={
                "document_id": str(doc.id),
                "attempt": doc.attempt,
                "warnings": result.warnings,
                "latency_ms": resp.latency_ms,
                "trace_id": resp.trace_id,
            },
        )
        embedded = self._embed(doc, result.extracted.text)
        return ProcessOutcome(
            document_id=doc.id,
            status=ProcessingStatus.COMPLETED,
            warnings=tuple(result.warnings),
            embedded_chunks=embedded,
        )

    def _embed(self, doc: Document, text: str) -> int:
        """
        Best effort, after COMPLETED is committed. A failure is logged and
        rolled back; the document status never changes here.
        """
        if self.embedder is None:
            return 0

        chunks = split_into_chunks(
            text,
            chunk_chars=self.config.embedding_chunk_chars,
            overlap_chars=self.config.embedding_overlap_chars,
        )[: self.config.max_embedding_chunks]
        if not chunks:
            return 0

        try:
            vectors = self.embedder.embed([c.text for c in chunks])
            stored = self.write.replace_embeddings(doc, chunks, vectors, model=self.embedder.model)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.warning(
                "document.embeddings_failed",
                extra={"document_id": str(doc.id), "chunks": len(chunks), "error": str(e)},
                exc_info=True,
            )
            return 0

        logger.info(
            "document.embedded",
            extra={"document_id": str(doc.id), "chunks": stored, "embedding_model": self.embedder.model},
        )
        return stored

    def _fail(self, doc: Document, failure: StepFailure) -> ProcessOutcome:
        status = status_for_error(failure.error_type)
        self.write.mark_failed(
            doc,
            status,
            error_detail=failure.to_detail(),
            provider=self.llm.provider,
            model=self.llm.model,
            prompt_version=self.config.prompt_version,
            trace_id=failure.trace_id,
        )
        self.db.commit()

        logger.warning(
            "document.failed",
            extra={
                "document_id": str(doc.id),
                "attempt": doc.attempt,
                "status": status.value,
                "error_type": failure.error_type.value,
                "error": failure.message,
                "provider_status": failure.provider_status,
            },
        )
        return ProcessOutcome(
            document_id=doc.id,
            status=status,
            error_type=failure.error_type,
            error_message=failure.message,
        )
