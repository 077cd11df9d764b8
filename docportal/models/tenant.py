"""
tenant.py
- Purpose: Tenant (organisation) owning documents. Every read/write is scoped by tenant.
"""

import uuid
from datetime import datetime
from sqlalchemy import Boolean, String, Text, DateTime, Uuid
from sqlalchemy.orm import relationship, Mapped, mapped_column

from docportal.models.base import Base, utcnow


class Tenant(Base):
    __tablename__ = "tenants"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    slug: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow, nullable=False)

    documents: Mapped[list["Document"]] = relationship(
        back_populates="tenant",
        cascade="all, delete-orphan",
    )
