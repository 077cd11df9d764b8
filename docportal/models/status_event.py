"""
status_event.py
- Purpose: Append-only log of every status transition a document goes through.
"""

import uuid
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship, Mapped, mapped_column

from docportal.models.base import Base, utcnow


class DocumentStatusEvent(Base):
    __tablename__ = "document_status_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("documents.id"), nullable=False, index=True)
    attempt: Mapped[int] = mapped_column(Integer, nullable=False)

    from_status: Mapped[str | None] = mapped_column(String(32), nullable=True)  # None on creation
    to_status: Mapped[str] = mapped_column(String(32), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow, nullable=False)

    document: Mapped["Document"] = relationship(back_populates="status_events")
