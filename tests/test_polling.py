import threading

import pytest

from docportal.client.poller import PollOutcome, StatusPoller
from docportal.constants.statuses import ProcessingStatus
from docportal.services.processing_config import ProcessingConfig


def _feed(*statuses):
    """fetch_status stub; the last status repeats."""
    seen = []
    items = list(statuses)

    def fetch():
        status = items.pop(0) if len(items) > 1 else items[0]
        seen.append(status)
        return {"status": status}

    return fetch, seen


def test_times_out_after_max_attempts():
    fetch, seen = _feed("PROCESSING")
    result = StatusPoller(max_attempts=12, interval_ms=0).poll(fetch)

    assert result.outcome == PollOutcome.TIMED_OUT
    assert result.attempts == 12
    assert len(seen) == 12
    assert result.last_status == ProcessingStatus.PROCESSING
    assert not result.is_terminal


def test_succeeds_on_completed():
    fetch, seen = _feed("QUEUED", "PROCESSING", "WARNING", "COMPLETED")
    result = StatusPoller(max_attempts=12, interval_ms=0).poll(fetch)

    assert result.outcome == PollOutcome.SUCCEEDED
    assert result.attempts == 4
    assert result.payload == {"status": "COMPLETED"}


@pytest.mark.parametrize("terminal", ["FAILED", "ERROR"])
def test_failure_statuses_stop_polling(terminal):
    fetch, seen = _feed("PROCESSING", terminal)
    result = StatusPoller(max_attempts=12, interval_ms=0).poll(fetch)

    assert result.outcome == PollOutcome.FAILED
    assert result.last_status == ProcessingStatus(terminal)
    assert result.attempts == 2


def test_cancel_before_start():
    fetch, seen = _feed("PROCESSING")
    poller = StatusPoller(max_attempts=12, interval_ms=0)
    poller.cancel()

    result = poller.poll(fetch)

    assert result.outcome == PollOutcome.CANCELLED
    assert result.attempts == 0
    assert seen == []


def test_cancel_interrupts_wait():
    poller = StatusPoller(max_attempts=12, interval_ms=60_000)

    def fetch():
        # cancel from another thread while the poller waits
        threading.Timer(0.05, poller.cancel).start()
        return {"status": "PROCESSING"}

    result = poller.poll(fetch)

    assert result.outcome == PollOutcome.CANCELLED
    assert result.attempts == 1
    assert poller.cancelled


def test_fetch_errors_propagate_without_transient_hook():
    def fetch():
        raise ConnectionError("down")

    with pytest.raises(ConnectionError):
        StatusPoller(max_attempts=3, interval_ms=0).poll(fetch)


def test_transient_errors_count_as_attempts():
    calls = []

    def fetch():
        calls.append(1)
        if len(calls) < 3:
            raise ConnectionError("down")
        return {"status": "COMPLETED"}

    result = StatusPoller(max_attempts=5, interval_ms=0).poll(
        fetch, is_transient=lambda e: isinstance(e, ConnectionError)
    )

    assert result.outcome == PollOutcome.SUCCEEDED
    assert result.attempts == 3
    assert result.transient_errors == 2


def test_non_transient_error_still_propagates():
    def fetch():
        raise KeyError("status")

    with pytest.raises(KeyError):
        StatusPoller(max_attempts=3, interval_ms=0).poll(fetch, is_transient=lambda e: isinstance(e, ConnectionError))


def test_defaults_from_config():
    poller = StatusPoller.from_config(ProcessingConfig(api_key=None))
    assert poller.max_attempts == 12
    assert poller.interval_ms == 5000


def test_rejects_bad_bounds():
    with pytest.raises(ValueError):
        StatusPoller(max_attempts=0)
    with pytest.raises(ValueError):
        StatusPoller(interval_ms=-1)
