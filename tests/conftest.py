"""Shared test fixtures for the taskflow service.

Time is always injected: the service clock and every ``now`` argument use
a fixed instant, so no test depends on wall-clock time.
"""

from datetime import datetime, timedelta, timezone

import pytest

from taskflow_svc.requests.service import RequestService
from taskflow_svc.requests.store import InMemoryRecordStore
from taskflow_svc.requests.types import Priority, Role, Status, User, WorkRequest


NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# =============================================================================
# Users
# =============================================================================

@pytest.fixture
def admin() -> User:
    return User(id="admin", name="Administrator", role=Role.ADMIN)


@pytest.fixture
def agent() -> User:
    """Agent A1, owner of most seeded requests."""
    return User(id="A1", name="A1", role=Role.AGENT)


@pytest.fixture
def other_agent() -> User:
    return User(id="A2", name="A2", role=Role.AGENT)


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock(now) -> FakeClock:
    return FakeClock(now)


@pytest.fixture
def store() -> InMemoryRecordStore:
    """Empty in-memory record store."""
    return InMemoryRecordStore()


@pytest.fixture
def service(store, clock) -> RequestService:
    return RequestService(store, clock=clock)


def build_request(request_id: str = "TR-0001", now: datetime = NOW, **overrides) -> WorkRequest:
    """A request owned by A1, due in two days, created five days ago."""
    fields = dict(
        title="Cloud Security Audit",
        description="Quarterly review of IAM permissions.",
        priority=Priority.MEDIUM,
        status=Status.OPEN,
        due_date=now + timedelta(days=2),
        created_date=now - timedelta(days=5),
        last_updated=now - timedelta(days=5),
        assigned_agent="A1",
        created_by="SYS_ADMIN",
        tags=["IT", "Security"],
    )
    fields.update(overrides)
    return WorkRequest(id=request_id, **fields)


@pytest.fixture
def seed_request(store, now):
    """Factory that adds a request to the store and returns it."""
    def _seed(request_id: str = "TR-0001", **overrides) -> WorkRequest:
        request = build_request(request_id, now, **overrides)
        store.save([*store.load(), request])
        return request
    return _seed
