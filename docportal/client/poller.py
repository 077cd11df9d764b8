"""
poller.py
- Purpose: Cancellable fixed-interval status polling with a typed result.
- Design: Sleeps on a threading.Event so `cancel()` from another thread
  interrupts the wait immediately. Reaching the attempt ceiling is
  TIMED_OUT, never FAILED: the document may still finish later. Fetch
  errors the caller marks transient are spent as ordinary attempts.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from docportal.constants.statuses import FAILURE_STATUSES, ProcessingStatus
from docportal.services.lifecycle import coerce_status

logger = logging.getLogger("docportal.poller")


class PollOutcome(str, Enum):
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class PollResult:
    outcome: PollOutcome
    attempts: int
    last_status: ProcessingStatus | None = None
    payload: Any = None  # last value returned by fetch_status
    transient_errors: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.outcome in (PollOutcome.SUCCEEDED, PollOutcome.FAILED)


def _status_of(payload: Any) -> ProcessingStatus:
    if isinstance(payload, dict):
        return coerce_status(payload["status"])
    return coerce_status(getattr(payload, "status", payload))


class StatusPoller:
    def __init__(self, max_attempts: int = 12, interval_ms: int = 5000):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if interval_ms < 0:
            raise ValueError("interval_ms must be >= 0")
        self.max_attempts = max_attempts
        self.interval_ms = interval_ms
        self._cancelled = threading.Event()

    @classmethod
    def from_config(cls, config) -> "StatusPoller":
        return cls(max_attempts=config.max_poll_attempts, interval_ms=config.poll_interval_ms)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def poll(
        self,
        fetch_status: Callable[[], Any],
        *,
        status_of: Callable[[Any], ProcessingStatus] = _status_of,
        is_transient: Callable[[Exception], bool] | None = None,
    ) -> PollResult:
        """
        Calls fetch_status() up to max_attempts times, interval_ms apart.

        An error for which is_transient(err) is true uses up the attempt like
        a non-terminal status and polling continues. Any other error raised
        by fetch_status propagates to the caller.
        """
        last_status: ProcessingStatus | None = None
        payload: Any = None
        errors = 0

        for attempt in range(1, self.max_attempts + 1):
            if self._cancelled.is_set():
                return PollResult(PollOutcome.CANCELLED, attempt - 1, last_status, payload, errors)

            try:
                payload = fetch_status()
            except Exception as e:
                if is_transient is None or not is_transient(e):
                    raise
                errors += 1
                logger.warning("poll.transient_error", extra={"attempt": attempt, "error": str(e)})
            else:
                last_status = status_of(payload)
                logger.debug("poll.attempt", extra={"attempt": attempt, "status": last_status.value})

                if last_status == ProcessingStatus.COMPLETED:
                    return PollResult(PollOutcome.SUCCEEDED, attempt, last_status, payload, errors)
                if last_status in FAILURE_STATUSES:
                    return PollResult(PollOutcome.FAILED, attempt, last_status, payload, errors)

            if attempt < self.max_attempts and self._cancelled.wait(self.interval_ms / 1000.0):
                return PollResult(PollOutcome.CANCELLED, attempt, last_status, payload, errors)

        logger.info(
            "poll.timed_out",
            extra={
                "attempts": self.max_attempts,
                "status": last_status.value if last_status else None,
                "transient_errors": errors,
            },
        )
        return PollResult(PollOutcome.TIMED_OUT, self.max_attempts, last_status, payload, errors)
