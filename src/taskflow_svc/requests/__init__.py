"""
Work Request Lifecycle & Governance

Administrators and agents create, assign and resolve work requests.
The request service enforces role-based field permissions and the status
state machine, escalates overdue requests, and records every accepted
state change as an append-only comment log.
"""

from .types import (
    SYSTEM_AUTHOR,
    Comment,
    CommentType,
    Priority,
    Role,
    Status,
    User,
    WorkRequest,
)
from .errors import (
    AccessDeniedError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    PreconditionFailedError,
    RequestError,
    ValidationError,
)
from .escalation import EscalationPolicy
from .store import FileRecordStore, InMemoryRecordStore, RecordStore
from .service import RequestService

__all__ = [
    "SYSTEM_AUTHOR",
    "Comment",
    "CommentType",
    "Priority",
    "Role",
    "Status",
    "User",
    "WorkRequest",
    "AccessDeniedError",
    "InvalidTransitionError",
    "NotFoundError",
    "PersistenceError",
    "PreconditionFailedError",
    "RequestError",
    "ValidationError",
    "EscalationPolicy",
    "FileRecordStore",
    "InMemoryRecordStore",
    "RecordStore",
    "RequestService",
]
