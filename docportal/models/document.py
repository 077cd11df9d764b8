"""
document.py
- Purpose: Uploaded document metadata + processing lifecycle state.
- Invariants (maintained by DocumentWriteRepo):
  ai_metadata is set only while status == COMPLETED,
  error_detail is set only while status in {FAILED, ERROR}.
"""

import uuid
from datetime import datetime
from sqlalchemy import Boolean, Integer, String, Text, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship, Mapped, mapped_column

from docportal.models.base import Base, JsonType, utcnow


class Document(Base):
    __tablename__ = "documents"

    __table_args__ = (
        Index("ix_documents_tenant_id", "tenant_id"),
        # Batch scan: oldest PENDING/QUEUED first
        Index("ix_documents_status_created_at", "status", "created_at"),
        Index("ix_documents_document_type", "document_type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("tenants.id"), nullable=False)

    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # File details
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    original_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    storage_key: Mapped[str] = mapped_column(Text, nullable=False)
    checksum: Mapped[str] = mapped_column(String(64), nullable=False)

    # Classification
    document_type: Mapped[str] = mapped_column(String(32), nullable=False, default="OTHER")
    tags: Mapped[list | None] = mapped_column(JsonType, nullable=True)
    is_confidential: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    uploaded_by: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Processing
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="PENDING")
    attempt: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    ai_processed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    ai_metadata: Mapped[dict | None] = mapped_column(JsonType, nullable=True)
    error_detail: Mapped[dict | None] = mapped_column(JsonType, nullable=True)
    processing_started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    processing_completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    tenant: Mapped["Tenant"] = relationship(back_populates="documents")

    analysis_versions: Mapped[list["AnalysisVersion"]] = relationship(
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="AnalysisVersion.attempt",
    )
    status_events: Mapped[list["DocumentStatusEvent"]] = relationship(
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="DocumentStatusEvent.id",
    )
    embeddings: Mapped[list["DocumentEmbedding"]] = relationship(
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="DocumentEmbedding.chunk_index",
    )
