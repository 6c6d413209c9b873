"""Request serialization - dict round-trip for work requests.

Stored documents use the camelCase keys of existing data files
(``assignedAgent``, ``isOverdue``, ...), so existing data loads unchanged.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from .types import Comment, CommentType, Priority, Status, WorkRequest


def truncate_timestamp(value: datetime) -> datetime:
    """Drop sub-millisecond precision, matching what ``format_timestamp`` stores."""
    return value.replace(microsecond=value.microsecond - value.microsecond % 1000)


def format_timestamp(value: datetime) -> str:
    """Format a datetime as an ISO-8601 UTC string with a ``Z`` suffix."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string (or datetime) into an aware UTC datetime.

    Naive values are taken to be UTC. Precision is cut to milliseconds.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")

    if parsed.tzinfo is None:
        return truncate_timestamp(parsed.replace(tzinfo=timezone.utc))
    return truncate_timestamp(parsed.astimezone(timezone.utc))


def request_to_dict(req: WorkRequest) -> dict[str, Any]:
    """Serialize a request to a dictionary."""
    return {
        "id": req.id,
        "title": req.title,
        "description": req.description,
        "priority": req.priority.value,
        "status": req.status.value,
        "createdDate": format_timestamp(req.created_date),
        "dueDate": format_timestamp(req.due_date),
        "lastUpdated": format_timestamp(req.last_updated),
        "assignedAgent": req.assigned_agent,
        "createdBy": req.created_by,
        "tags": list(req.tags),
        "comments": [comment_to_dict(c) for c in req.comments],
        "isOverdue": req.is_overdue,
    }


def comment_to_dict(comment: Comment) -> dict[str, Any]:
    return {
        "id": comment.id,
        "author": comment.author,
        "content": comment.content,
        "timestamp": format_timestamp(comment.timestamp),
        "type": comment.type.value,
    }


def request_from_dict(data: dict[str, Any]) -> WorkRequest:
    """Parse a single request from a dictionary.

    Raises:
        KeyError: If a required key is missing.
        ValueError: If an enum or timestamp value cannot be parsed.
    """
    created = parse_timestamp(data["createdDate"])
    return WorkRequest(
        id=data["id"],
        title=data.get("title", ""),
        description=data.get("description", ""),
        priority=Priority.parse(data.get("priority", Priority.LOW.value)),
        status=Status.parse(data.get("status", Status.OPEN.value)),
        created_date=created,
        due_date=parse_timestamp(data["dueDate"]),
        last_updated=parse_timestamp(data.get("lastUpdated") or created),
        assigned_agent=data.get("assignedAgent") or None,
        created_by=data.get("createdBy", ""),
        tags=list(data.get("tags") or []),
        comments=[comment_from_dict(c) for c in data.get("comments") or []],
        is_overdue=bool(data.get("isOverdue", False)),
    )


def comment_from_dict(data: dict[str, Any]) -> Comment:
    return Comment(
        id=data.get("id", ""),
        author=data.get("author", ""),
        content=data.get("content", ""),
        timestamp=parse_timestamp(data["timestamp"]),
        type=CommentType.parse(data.get("type", CommentType.GENERAL.value)),
    )
