"""Work request types - domain types for the request lifecycle."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


# Author recorded on comments the service generates itself
SYSTEM_AUTHOR = "System"


class _LabelEnum(str, Enum):
    """String enum whose values are display labels.

    ``parse`` accepts either the label ("In Progress") or the member
    name ("IN_PROGRESS"), case-insensitively.
    """

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip()
            for member in cls:
                if text.lower() in (member.value.lower(), member.name.lower()):
                    return member
        raise ValueError(f"Invalid {cls.__name__.lower()}: {value!r}")


class Priority(_LabelEnum):
    """Request priority."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.LOW: 0,
    Priority.MEDIUM: 1,
    Priority.HIGH: 2,
    Priority.CRITICAL: 3,
}


class Status(_LabelEnum):
    """Lifecycle status of a work request."""
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    BLOCKED = "Blocked"
    DONE = "Done"


class Role(_LabelEnum):
    """Role of the acting user."""
    ADMIN = "Admin"
    AGENT = "Agent"


class CommentType(_LabelEnum):
    """Kind of entry in a request's comment log."""
    GENERAL = "General"
    STATUS_UPDATE = "Status Update"
    SYSTEM_GENERATED = "System-Generated"


@dataclass(frozen=True, slots=True)
class Comment:
    """An immutable entry in a request's comment log."""
    id: str
    author: str             # User name, or SYSTEM_AUTHOR
    content: str
    timestamp: datetime
    type: CommentType = CommentType.GENERAL


@dataclass(frozen=True, slots=True)
class User:
    """The acting principal. Not persisted."""
    id: str                 # Stable identifier, e.g. AGT-101
    name: str               # Display name
    role: Role = Role.AGENT

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def identity(self) -> str:
        """Identifier compared against ``WorkRequest.assigned_agent``."""
        return self.id


@dataclass(slots=True)
class WorkRequest:
    """
    A unit of trackable work.

    ``is_overdue`` is derived state. It is stored for display but always
    recomputed by the escalation engine on read.
    """
    id: str
    title: str
    description: str
    due_date: datetime
    created_date: datetime
    last_updated: datetime

    priority: Priority = Priority.LOW
    status: Status = Status.OPEN

    # Ownership
    assigned_agent: str | None = None
    created_by: str = ""

    tags: list[str] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)

    is_overdue: bool = False
