"""
lifecycle.py
- Purpose: The document processing state machine (allowed edges + guards).
- Design: Pure functions; repos call `assert_transition` before every status
  write so no code path can skip PROCESSING or leave a terminal state
  without opening a new attempt.
"""

from __future__ import annotations

from docportal.constants.statuses import ErrorType, ProcessingStatus, TERMINAL_STATUSES
from docportal.core import AppError, ErrorCode, ErrorReason

S = ProcessingStatus

TRANSITIONS: dict[ProcessingStatus, frozenset[ProcessingStatus]] = {
    S.PENDING: frozenset({S.QUEUED, S.PROCESSING}),
    S.QUEUED: frozenset({S.PROCESSING}),
    S.PROCESSING: frozenset({S.WARNING, S.COMPLETED, S.FAILED, S.ERROR}),
    S.WARNING: frozenset({S.COMPLETED}),
    S.COMPLETED: frozenset(),
    S.FAILED: frozenset(),
    S.ERROR: frozenset(),
}

# Only reachable through an explicit re-submission (new attempt)
RESUBMIT_TARGET = S.PENDING

# Which failure status each error type ends in
ERROR_TYPE_STATUS: dict[ErrorType, ProcessingStatus] = {
    ErrorType.INPUT_ERROR: S.FAILED,
    ErrorType.UPSTREAM_ERROR: S.ERROR,
    ErrorType.PARSE_ERROR: S.ERROR,
    ErrorType.STORAGE_ERROR: S.ERROR,
    ErrorType.INTERNAL_ERROR: S.ERROR,
}


def coerce_status(value) -> ProcessingStatus:
    if isinstance(value, ProcessingStatus):
        return value
    return ProcessingStatus(str(value))


def is_terminal(status) -> bool:
    return coerce_status(status) in TERMINAL_STATUSES


def can_transition(from_status, to_status, *, resubmission: bool = False) -> bool:
    src = coerce_status(from_status)
    dst = coerce_status(to_status)
    if resubmission:
        return src in TERMINAL_STATUSES and dst == RESUBMIT_TARGET
    return dst in TRANSITIONS[src]


def assert_transition(from_status, to_status, *, resubmission: bool = False) -> None:
    if not can_transition(from_status, to_status, resubmission=resubmission):
        src = coerce_status(from_status).value
        dst = coerce_status(to_status).value
        raise AppError(
            code=ErrorCode.INVALID_STATUS_TRANSITION,
            reason=ErrorReason.STATUS_CONFLICT,
            message=f"Illegal status transition {src} -> {dst}",
            status_code=409,
            details={"from": src, "to": dst},
        )


def status_for_error(error_type: ErrorType) -> ProcessingStatus:
    return ERROR_TYPE_STATUS[error_type]
