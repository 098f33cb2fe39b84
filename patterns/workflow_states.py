"""Enum-based workflow state machine for transaction negotiation.

Defines the transaction lifecycle as a closed enum plus a static table of
allowed ``(from, to)`` edges. Anything not in the table is rejected; asking
for the state a record already holds is a no-op.

    negotiating -> confirmed -> completed
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from core.errors import InvalidRequestError


# ---------------------------------------------------------------------------
# State definitions
# ---------------------------------------------------------------------------

class TransactionStatus(str, Enum):
    """Transaction negotiation states, in lifecycle order."""

    NEGOTIATING = "negotiating"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"


# ---------------------------------------------------------------------------
# Transition rules
# ---------------------------------------------------------------------------

# Allowed forward edges, keyed by (current, requested)
_TRANSACTION_TRANSITIONS: frozenset[tuple[TransactionStatus, TransactionStatus]] = frozenset({
    (TransactionStatus.NEGOTIATING, TransactionStatus.CONFIRMED),
    (TransactionStatus.CONFIRMED, TransactionStatus.COMPLETED),
})


class InvalidTransitionError(InvalidRequestError):
    """Requested status is neither the current one nor an allowed next one."""

    def __init__(self, current: TransactionStatus, requested: TransactionStatus):
        super().__init__(
            f"Invalid status transition from {current.value} to {requested.value}"
        )
        self.current = current
        self.requested = requested


def can_transition(current: TransactionStatus, requested: TransactionStatus) -> bool:
    """True if ``requested`` is reachable from ``current`` in one step."""
    return (current, requested) in _TRANSACTION_TRANSITIONS


def allowed_next(current: TransactionStatus) -> list[TransactionStatus]:
    """States reachable from ``current`` in one step."""
    return [to for (frm, to) in _TRANSACTION_TRANSITIONS if frm == current]


def is_terminal(status: TransactionStatus) -> bool:
    return not allowed_next(status)


# ---------------------------------------------------------------------------
# Transition evaluation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StatusChange:
    """Outcome of a validated status request."""

    from_state: TransactionStatus
    to_state: TransactionStatus
    timestamp: datetime

    @property
    def is_noop(self) -> bool:
        return self.from_state == self.to_state

    @property
    def completes(self) -> bool:
        """True when this change enters the terminal completed state."""
        return not self.is_noop and self.to_state == TransactionStatus.COMPLETED


def _coerce(value: TransactionStatus | str) -> TransactionStatus:
    try:
        return TransactionStatus(value)
    except ValueError:
        raise InvalidRequestError(f"Unknown transaction status: {value}") from None


def plan_transition(
    current: TransactionStatus | str,
    requested: TransactionStatus | str,
    now: datetime | None = None,
) -> StatusChange:
    """Validate a status request against the transition table.

    Raises InvalidTransitionError if the move is not allowed::

        change = plan_transition("confirmed", "completed")
        if change.completes:
            fields["completed_at"] = change.timestamp
    """
    current = _coerce(current)
    requested = _coerce(requested)

    if current != requested and not can_transition(current, requested):
        raise InvalidTransitionError(current, requested)

    return StatusChange(
        from_state=current,
        to_state=requested,
        timestamp=now or datetime.now(timezone.utc),
    )
