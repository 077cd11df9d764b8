# docportal/services/document_service.py
"""
document_service.py
- Purpose: Orchestrates the "upload document" workflow end-to-end, plus
  re-submission and the read side the routers need.
- Owns: validation, storage upload, DB writes via repos, handing work to the queue.
- Design: Thick service; routers remain thin and easy to reason about.
"""

import hashlib
import logging
from typing import Callable

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from docportal.constants.statuses import ProcessingStatus
from docportal.core import AppError, ErrorCode, ErrorReason, not_found
from docportal.core.config import settings
from docportal.models.analysis_version import AnalysisVersion
from docportal.models.document import Document
from docportal.models.tenant import Tenant
from docportal.repos.document.read import DocumentReadRepo
from docportal.repos.document.write import DocumentWriteRepo
from docportal.services.storage.base import DocumentStorage, StoredObject
from docportal.services.storage.factory import stored_object_for
from docportal.validations.document_validators import normalize_document_type, normalize_status_filter, parse_tags
from docportal.validations.file_validators import sanitize_filename, validate_document_upload, validate_file_size

logger = logging.getLogger("docportal.document_service")

READ_CHUNK_BYTES = 1024 * 1024

Enqueue = Callable[[str], None]


def enqueue_with_celery(document_id: str) -> None:
    from docportal.tasks.document_pipeline import process_document_task

    process_document_task.delay(document_id)


class DocumentService:
    def __init__(
        self,
        db: Session,
        storage: DocumentStorage,
        *,
        enqueue: Enqueue | None = enqueue_with_celery,
        auto_process: bool | None = None,
    ):
        self.db = db
        self.storage = storage
        self.enqueue = enqueue
        self.auto_process = settings.AUTO_PROCESS_ON_UPLOAD if auto_process is None else auto_process

        self.read = DocumentReadRepo(db)
        self.write = DocumentWriteRepo(db)

    # ---- upload ----

    def _read_upload(self, file: UploadFile) -> bytes:
        """Stream the upload, stopping one chunk past the limit."""
        limit = settings.MAX_UPLOAD_BYTES
        buf = bytearray()
        try:
            while True:
                chunk = file.file.read(READ_CHUNK_BYTES)
                if not chunk:
                    break
                buf.extend(chunk)
                if len(buf) > limit:
                    break
        except OSError as e:
            raise AppError(
                code=ErrorCode.VALIDATION_ERROR,
                reason=ErrorReason.INVALID_INPUT,
                message="Failed to read uploaded file",
                status_code=400,
            ) from e
        validate_file_size(len(buf), max_bytes=limit)
        return bytes(buf)

    def upload_document(
        self,
        tenant: Tenant,
        file: UploadFile,
        *,
        title: str | None = None,
        description: str | None = None,
        document_type: str | None = None,
        tags: str | None = None,
        is_confidential: bool = False,
        uploaded_by: str | None = None,
    ) -> tuple[Document, AnalysisVersion]:
        content_type = validate_document_upload(file)
        doc_type = normalize_document_type(document_type)
        tag_list = parse_tags(tags)
        content = self._read_upload(file)

        checksum = hashlib.sha256(content).hexdigest()
        safe_name = sanitize_filename(file.filename)

        stored = self.storage.upload_document(tenant.id, safe_name, content, content_type)

        try:
            doc, version = self.write.create_document(
                tenant_id=tenant.id,
                status=ProcessingStatus.PENDING,
                filename=safe_name,
                original_filename=file.filename,
                mime_type=content_type,
                file_size=len(content),
                storage_key=stored.path,
                checksum=checksum,
                title=(title or "").strip() or None,
                description=(description or "").strip() or None,
                document_type=doc_type,
                tags=tag_list,
                is_confidential=is_confidential,
                uploaded_by=uploaded_by,
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            self._discard_object(stored)
            raise AppError(
                code=ErrorCode.DB_ERROR,
                reason=ErrorReason.DATABASE_UNAVAILABLE,
                message="Failed to save document",
                status_code=500,
            ) from e

        logger.info(
            "document.uploaded",
            extra={
                "document_id": str(doc.id),
                "tenant_id": str(tenant.id),
                "mime_type": content_type,
                "size": len(content),
                "checksum": checksum,
            },
        )

        if self.auto_process:
            self._hand_to_queue(doc)
        return doc, version

    def _discard_object(self, stored: StoredObject) -> None:
        try:
            self.storage.delete(stored)
        except AppError:
            logger.warning("storage.orphaned_object", extra={"path": stored.path})

    # ---- queue ----

    def _hand_to_queue(self, doc: Document) -> None:
        """
        PENDING -> QUEUED is committed before dispatch so a fast worker
        always observes QUEUED. If dispatch fails the record stays QUEUED
        and the batch endpoint picks it up.
        """
        if self.enqueue is None:
            return
        self.write.mark_queued(doc)
        self.db.commit()
        try:
            self.enqueue(str(doc.id))
            logger.info("document.enqueued", extra={"document_id": str(doc.id), "attempt": doc.attempt})
        except Exception:
            logger.exception("document.enqueue_failed", extra={"document_id": str(doc.id)})

    # ---- re-submission ----

    def resubmit(self, document_id, *, tenant_id) -> tuple[Document, AnalysisVersion]:
        """Terminal -> PENDING with a new attempt; queued again when auto-processing is on."""
        doc = self.get_document(document_id, tenant_id=tenant_id)
        version = self.write.start_new_attempt(doc)
        self.db.commit()

        logger.info("document.resubmitted", extra={"document_id": str(doc.id), "attempt": doc.attempt})

        if self.auto_process:
            self._hand_to_queue(doc)
        return doc, version

    # ---- reads ----

    def get_document(self, document_id, *, tenant_id) -> Document:
        doc = self.read.get_by_id(document_id, tenant_id)
        if not doc:
            raise not_found(message="Document not found")
        return doc

    def list_documents(self, *, tenant_id, status: str | None = None, limit: int = 50, offset: int = 0) -> list[Document]:
        return self.read.list_by_tenant(
            tenant_id,
            status=normalize_status_filter(status),
            limit=limit,
            offset=offset,
        )

    def get_status(self, document_id, *, tenant_id) -> tuple[Document, AnalysisVersion | None]:
        doc = self.get_document(document_id, tenant_id=tenant_id)
        return doc, self.read.get_current_analysis(doc)

    def get_analysis(self, analysis_id, *, tenant_id) -> tuple[AnalysisVersion, Document]:
        version = self.read.get_analysis_version(analysis_id, tenant_id)
        if not version:
            raise not_found(message="Analysis not found")
        return version, version.document

    def list_versions(self, document_id, *, tenant_id) -> list[AnalysisVersion]:
        doc = self.get_document(document_id, tenant_id=tenant_id)
        return self.read.list_analysis_versions(doc.id)

    def list_status_events(self, document_id, *, tenant_id):
        doc = self.get_document(document_id, tenant_id=tenant_id)
        return self.read.list_status_events(doc.id)

    def get_download(self, document_id, *, tenant_id) -> tuple[Document, str | None, bytes | None]:
        """Signed URL when the backend supports it, otherwise the bytes."""
        doc = self.get_document(document_id, tenant_id=tenant_id)
        obj = stored_object_for(self.storage, doc.storage_key)
        url = self.storage.create_signed_download_url(obj, settings.SUPABASE_STORAGE_SIGNED_URL_TTL_SECONDS)
        if url:
            return doc, url, None
        return doc, None, self.storage.download_bytes(obj)
