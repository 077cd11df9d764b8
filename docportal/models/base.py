"""
base.py
- Purpose: Declarative base + shared column helpers for all ORM models.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    # naive UTC; columns are DateTime(timezone=False)
    return datetime.now(timezone.utc).replace(tzinfo=None)


# JSONB on Postgres, plain JSON elsewhere (tests run on SQLite)
JsonType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    pass
