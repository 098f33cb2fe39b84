"""Test transaction status state machine."""
from datetime import datetime, timezone

import pytest

from core.errors import InvalidRequestError
from patterns.workflow_states import (
    InvalidTransitionError,
    TransactionStatus,
    allowed_next,
    can_transition,
    is_terminal,
    plan_transition,
)


def test_forward_edges():
    assert can_transition(TransactionStatus.NEGOTIATING, TransactionStatus.CONFIRMED)
    assert can_transition(TransactionStatus.CONFIRMED, TransactionStatus.COMPLETED)


def test_no_skipping_or_regressing():
    assert not can_transition(TransactionStatus.NEGOTIATING, TransactionStatus.COMPLETED)
    assert not can_transition(TransactionStatus.CONFIRMED, TransactionStatus.NEGOTIATING)
    assert not can_transition(TransactionStatus.COMPLETED, TransactionStatus.CONFIRMED)


def test_completed_is_terminal():
    assert is_terminal(TransactionStatus.COMPLETED)
    assert not is_terminal(TransactionStatus.NEGOTIATING)
    assert allowed_next(TransactionStatus.NEGOTIATING) == [TransactionStatus.CONFIRMED]


def test_plan_skip_rejected():
    with pytest.raises(InvalidTransitionError) as exc_info:
        plan_transition("negotiating", "completed")
    assert exc_info.value.status_code == 400
    assert "negotiating to completed" in exc_info.value.message


def test_plan_same_state_is_noop():
    change = plan_transition("completed", "completed")
    assert change.is_noop
    assert not change.completes


def test_plan_completion_carries_timestamp():
    now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    change = plan_transition(TransactionStatus.CONFIRMED, TransactionStatus.COMPLETED, now=now)
    assert change.completes
    assert change.timestamp == now


def test_plan_unknown_status():
    with pytest.raises(InvalidRequestError):
        plan_transition("negotiating", "cancelled")
