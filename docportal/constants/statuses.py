"""
statuses.py
- Purpose: Central source of truth for document lifecycle statuses.
- Design: Keep FE-facing statuses stable and explicit.
"""

from enum import Enum


class ProcessingStatus(str, Enum):
    PENDING = "PENDING"
    QUEUED = "QUEUED"
    PROCESSING = "PROCESSING"
    WARNING = "WARNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    ERROR = "ERROR"


# Worker may only claim from these
CLAIMABLE_STATUSES = frozenset({ProcessingStatus.PENDING, ProcessingStatus.QUEUED})

TERMINAL_STATUSES = frozenset(
    {ProcessingStatus.COMPLETED, ProcessingStatus.FAILED, ProcessingStatus.ERROR}
)

FAILURE_STATUSES = frozenset({ProcessingStatus.FAILED, ProcessingStatus.ERROR})


class ErrorType(str, Enum):
    """Stored in error_detail.type; FAILED for input problems, ERROR for the rest."""

    INPUT_ERROR = "INPUT_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    STORAGE_ERROR = "STORAGE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class DocumentType(str, Enum):
    CONTRACT = "CONTRACT"
    AGREEMENT = "AGREEMENT"
    POLICY = "POLICY"
    REPORT = "REPORT"
    PRESENTATION = "PRESENTATION"
    CORRESPONDENCE = "CORRESPONDENCE"
    INVOICE = "INVOICE"
    OTHER = "OTHER"
