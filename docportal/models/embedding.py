"""
embedding.py
- Purpose: Embedding vectors for the text chunks of a document; `analysis_id`
  names the attempt that produced them.
- Vectors are stored as JSON arrays. A successful run replaces all rows
  of the document; a failed run leaves the previous rows in place.
"""

import uuid
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship, Mapped, mapped_column

from docportal.models.base import Base, JsonType, utcnow


class DocumentEmbedding(Base):
    __tablename__ = "document_embeddings"

    __table_args__ = (
        UniqueConstraint("document_id", "chunk_index", name="uq_document_embeddings_document_chunk"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("tenants.id"), nullable=False)
    analysis_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("analysis_versions.id"), nullable=True)

    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    text_chunk: Mapped[str] = mapped_column(Text, nullable=False)
    embedding: Mapped[list] = mapped_column(JsonType, nullable=False)
    dimensions: Mapped[int] = mapped_column(Integer, nullable=False)
    embedding_model: Mapped[str] = mapped_column(String(64), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow, nullable=False)

    document: Mapped["Document"] = relationship(back_populates="embeddings")
