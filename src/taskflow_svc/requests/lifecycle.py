"""Lifecycle state machine for work request status.

    OPEN         -> IN_PROGRESS | BLOCKED
    IN_PROGRESS  -> DONE | BLOCKED
    BLOCKED      -> IN_PROGRESS

DONE is terminal. Role does not change which transitions exist; it only
decides who may invoke them (see ``permissions``).
"""

from __future__ import annotations

from .errors import InvalidTransitionError
from .types import Status

INITIAL_STATUS = Status.OPEN

TRANSITIONS: dict[Status, frozenset[Status]] = {
    Status.OPEN: frozenset({Status.IN_PROGRESS, Status.BLOCKED}),
    Status.IN_PROGRESS: frozenset({Status.DONE, Status.BLOCKED}),
    Status.BLOCKED: frozenset({Status.IN_PROGRESS}),
    Status.DONE: frozenset(),
}

# Display order for status pickers
_ORDER = [Status.OPEN, Status.IN_PROGRESS, Status.BLOCKED, Status.DONE]


def next_statuses(current: Status) -> frozenset[Status]:
    """Statuses reachable in one step from ``current``."""
    return TRANSITIONS[current]


def status_options(current: Status) -> list[Status]:
    """Current status followed by its legal next statuses, in display order."""
    reachable = TRANSITIONS[current]
    return [current] + [s for s in _ORDER if s in reachable]


def is_terminal(status: Status) -> bool:
    return not TRANSITIONS[status]


def is_valid_transition(current: Status, target: Status) -> bool:
    return target in TRANSITIONS[current]


def validate_transition(current: Status, target: Status, request_id: str = "") -> None:
    """Raise ``InvalidTransitionError`` unless ``current -> target`` is legal.

    Re-submitting the current status is not a transition and is accepted.
    """
    if target == current:
        return
    if not is_valid_transition(current, target):
        raise InvalidTransitionError(current, target, request_id)
