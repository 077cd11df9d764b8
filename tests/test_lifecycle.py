import pytest

from docportal.constants.statuses import ErrorType, ProcessingStatus as S
from docportal.core import AppError, ErrorCode
from docportal.services.lifecycle import (
    assert_transition,
    can_transition,
    is_terminal,
    status_for_error,
)


@pytest.mark.parametrize(
    "src,dst",
    [
        (S.PENDING, S.QUEUED),
        (S.PENDING, S.PROCESSING),
        (S.QUEUED, S.PROCESSING),
        (S.PROCESSING, S.WARNING),
        (S.PROCESSING, S.COMPLETED),
        (S.PROCESSING, S.FAILED),
        (S.PROCESSING, S.ERROR),
        (S.WARNING, S.COMPLETED),
    ],
)
def test_allowed_edges(src, dst):
    assert can_transition(src, dst)


@pytest.mark.parametrize(
    "src,dst",
    [
        (S.PENDING, S.COMPLETED),
        (S.QUEUED, S.FAILED),
        (S.QUEUED, S.PENDING),
        (S.WARNING, S.FAILED),
        (S.COMPLETED, S.PROCESSING),
        (S.FAILED, S.PROCESSING),
        (S.ERROR, S.QUEUED),
    ],
)
def test_rejected_edges(src, dst):
    assert not can_transition(src, dst)
    with pytest.raises(AppError) as exc:
        assert_transition(src, dst)
    assert exc.value.code == ErrorCode.INVALID_STATUS_TRANSITION
    assert exc.value.status_code == 409


def test_resubmission_only_from_terminal():
    for terminal in (S.COMPLETED, S.FAILED, S.ERROR):
        assert can_transition(terminal, S.PENDING, resubmission=True)
    for active in (S.PENDING, S.QUEUED, S.PROCESSING, S.WARNING):
        assert not can_transition(active, S.PENDING, resubmission=True)


def test_statuses_accept_plain_strings():
    assert can_transition("QUEUED", "PROCESSING")
    assert is_terminal("ERROR")
    assert not is_terminal("WARNING")


def test_input_errors_fail_everything_else_errors():
    assert status_for_error(ErrorType.INPUT_ERROR) == S.FAILED
    for et in (ErrorType.UPSTREAM_ERROR, ErrorType.PARSE_ERROR, ErrorType.STORAGE_ERROR, ErrorType.INTERNAL_ERROR):
        assert status_for_error(et) == S.ERROR
