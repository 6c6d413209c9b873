"""Audit log appender - comments recording accepted state changes."""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime

from .types import SYSTEM_AUTHOR, Comment, CommentType, Priority, User, WorkRequest


def new_comment_id() -> str:
    return f"cmt-{uuid.uuid4().hex[:12]}"


def system_comment(content: str, now: datetime) -> Comment:
    """A SYSTEM_GENERATED comment authored by the system identity."""
    return Comment(
        id=new_comment_id(),
        author=SYSTEM_AUTHOR,
        content=content,
        timestamp=now,
        type=CommentType.SYSTEM_GENERATED,
    )


def escalation_comment(threshold_days: int, target: Priority, now: datetime) -> Comment:
    return system_comment(
        "Priority escalated automatically: deadline exceeded by more than "
        f"{threshold_days} days. Request marked as {target.value}.",
        now,
    )


def record_changes(
    before: WorkRequest,
    after: WorkRequest,
    actor: User,
    now: datetime,
) -> WorkRequest:
    """Append audit comments for the differences between two request states.

    - A due date change that flips the overdue flag gets a system comment.
    - A status change gets a STATUS_UPDATE comment from the actor.
    """
    added: list[Comment] = []

    if after.due_date != before.due_date and after.is_overdue != before.is_overdue:
        if after.is_overdue:
            text = "Deadline updated → status changed: now overdue"
        else:
            text = "Deadline updated → status changed: no longer overdue (deadline extended)"
        added.append(system_comment(text, now))

    if after.status != before.status:
        added.append(Comment(
            id=new_comment_id(),
            author=actor.name,
            content=f"Lifecycle update: {before.status.value} → {after.status.value}",
            timestamp=now,
            type=CommentType.STATUS_UPDATE,
        ))

    if not added:
        return after
    return replace(after, comments=[*after.comments, *added])
