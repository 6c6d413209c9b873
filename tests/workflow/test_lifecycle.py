"""Tests for the status lifecycle state machine."""

import pytest

from taskflow_svc.requests import lifecycle
from taskflow_svc.requests.errors import InvalidTransitionError
from taskflow_svc.requests.types import Status


LEGAL = [
    (Status.OPEN, Status.IN_PROGRESS),
    (Status.OPEN, Status.BLOCKED),
    (Status.IN_PROGRESS, Status.DONE),
    (Status.IN_PROGRESS, Status.BLOCKED),
    (Status.BLOCKED, Status.IN_PROGRESS),
]

ILLEGAL = [
    (Status.OPEN, Status.DONE),
    (Status.BLOCKED, Status.OPEN),
    (Status.BLOCKED, Status.DONE),
    (Status.IN_PROGRESS, Status.OPEN),
    (Status.DONE, Status.OPEN),
    (Status.DONE, Status.IN_PROGRESS),
    (Status.DONE, Status.BLOCKED),
]


class TestTransitions:
    """Tests for the transition table."""

    @pytest.mark.parametrize("current,target", LEGAL)
    def test_legal_transitions(self, current, target):
        assert lifecycle.is_valid_transition(current, target)
        lifecycle.validate_transition(current, target)

    @pytest.mark.parametrize("current,target", ILLEGAL)
    def test_illegal_transitions_raise(self, current, target):
        assert not lifecycle.is_valid_transition(current, target)
        with pytest.raises(InvalidTransitionError) as exc_info:
            lifecycle.validate_transition(current, target, "TR-0001")

        error = exc_info.value
        assert error.kind == "InvalidTransition"
        assert error.from_status == current
        assert error.to_status == target
        assert "TR-0001" in error.message

    @pytest.mark.parametrize("status", list(Status))
    def test_same_status_is_accepted(self, status):
        lifecycle.validate_transition(status, status)

    def test_done_is_terminal(self):
        assert lifecycle.is_terminal(Status.DONE)
        assert lifecycle.next_statuses(Status.DONE) == frozenset()
        for status in (Status.OPEN, Status.IN_PROGRESS, Status.BLOCKED):
            assert not lifecycle.is_terminal(status)

    def test_initial_status_is_open(self):
        assert lifecycle.INITIAL_STATUS == Status.OPEN


class TestStatusOptions:
    """Tests for picker options."""

    def test_open_options(self):
        assert lifecycle.status_options(Status.OPEN) == [
            Status.OPEN,
            Status.IN_PROGRESS,
            Status.BLOCKED,
        ]

    def test_in_progress_options(self):
        assert lifecycle.status_options(Status.IN_PROGRESS) == [
            Status.IN_PROGRESS,
            Status.BLOCKED,
            Status.DONE,
        ]

    def test_blocked_options(self):
        assert lifecycle.status_options(Status.BLOCKED) == [Status.BLOCKED, Status.IN_PROGRESS]

    def test_done_options(self):
        assert lifecycle.status_options(Status.DONE) == [Status.DONE]
