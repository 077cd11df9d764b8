"""
document/read.py
- Purpose: Read-side DB operations for Document and its analysis history.
- Design: Keeps query access patterns centralized.
"""

from sqlalchemy import func
from sqlalchemy.orm import Session

from docportal.constants.statuses import CLAIMABLE_STATUSES
from docportal.models.analysis_version import AnalysisVersion
from docportal.models.document import Document
from docportal.models.embedding import DocumentEmbedding
from docportal.models.status_event import DocumentStatusEvent


class DocumentReadRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, document_id, tenant_id=None) -> Document | None:
        q = self.db.query(Document).filter(Document.id == document_id)
        if tenant_id is not None:
            q = q.filter(Document.tenant_id == tenant_id)
        return q.first()

    def list_by_tenant(self, tenant_id, *, status: str | None = None, limit: int = 50, offset: int = 0):
        q = self.db.query(Document).filter(Document.tenant_id == tenant_id)
        if status:
            q = q.filter(Document.status == status)
        return q.order_by(Document.created_at.desc()).offset(offset).limit(limit).all()

    def list_claimable_ids(self, *, tenant_id=None, limit: int | None = None) -> list:
        """Oldest PENDING/QUEUED first."""
        q = self.db.query(Document.id).filter(
            Document.status.in_([s.value for s in CLAIMABLE_STATUSES])
        )
        if tenant_id is not None:
            q = q.filter(Document.tenant_id == tenant_id)
        q = q.order_by(Document.created_at.asc(), Document.id.asc())
        if limit is not None:
            q = q.limit(limit)
        return [row[0] for row in q.all()]

    def count_by_status(self) -> dict[str, int]:
        rows = self.db.query(Document.status, func.count(Document.id)).group_by(Document.status).all()
        return {str(status): count for status, count in rows}

    def get_analysis_version(self, analysis_id, tenant_id=None) -> AnalysisVersion | None:
        q = self.db.query(AnalysisVersion).filter(AnalysisVersion.id == analysis_id)
        if tenant_id is not None:
            q = q.filter(AnalysisVersion.tenant_id == tenant_id)
        return q.first()

    def get_current_analysis(self, document: Document) -> AnalysisVersion | None:
        return (
            self.db.query(AnalysisVersion)
            .filter(
                AnalysisVersion.document_id == document.id,
                AnalysisVersion.attempt == document.attempt,
            )
            .first()
        )

    def list_analysis_versions(self, document_id) -> list[AnalysisVersion]:
        return (
            self.db.query(AnalysisVersion)
            .filter(AnalysisVersion.document_id == document_id)
            .order_by(AnalysisVersion.attempt.desc())
            .all()
        )

    def list_embeddings(self, document_id) -> list[DocumentEmbedding]:
        return (
            self.db.query(DocumentEmbedding)
            .filter(DocumentEmbedding.document_id == document_id)
            .order_by(DocumentEmbedding.chunk_index.asc())
            .all()
        )

    def list_status_events(self, document_id) -> list[DocumentStatusEvent]:
        return (
            self.db.query(DocumentStatusEvent)
            .filter(DocumentStatusEvent.document_id == document_id)
            .order_by(DocumentStatusEvent.id.asc())
            .all()
        )
