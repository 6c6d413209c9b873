"""Permission guard - role-based, field-level authorization of mutations.

Update checks run in a fixed order and stop at the first violation:

1. Existence
2. Ownership: non-admins may only touch requests assigned to them
3. Resolution: DONE requires an assignee
4. Field restriction: assignment, authorship and deadline are admin-only
5. Normalization: an admin's empty assignee means "unassign"
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any

from .errors import AccessDeniedError, NotFoundError, PreconditionFailedError
from .types import Status, User, WorkRequest

logger = logging.getLogger(__name__)

# Fields only an administrator may change
ADMIN_ONLY_FIELDS = {
    "assigned_agent": "Personnel assignment changes restricted to Admin level.",
    "created_by": "Authorship changes restricted to Admin level.",
    "due_date": "Deadline modifications restricted to Admin level.",
}


def _deny(actor: User, message: str) -> AccessDeniedError:
    logger.warning(f"Access denied for {actor.identity} ({actor.role.value}): {message}")
    return AccessDeniedError(f"Access Denied: {message}")


def is_owner(request: WorkRequest, actor: User) -> bool:
    return request.assigned_agent is not None and request.assigned_agent == actor.identity


def authorize(
    existing: WorkRequest | None,
    changes: dict[str, Any],
    actor: User,
    now: datetime,
    request_id: str = "",
) -> WorkRequest:
    """Authorize ``changes`` against ``existing`` and return the merged request.

    ``changes`` maps WorkRequest field names to already-parsed values. The
    input request is not mutated.

    Raises:
        NotFoundError: The request does not exist.
        AccessDeniedError: The actor may not make this change.
        PreconditionFailedError: Resolving a request with no assignee.
    """
    if existing is None:
        raise NotFoundError(f"Request not found: {request_id}")

    if not actor.is_admin and not is_owner(existing, actor):
        raise _deny(actor, "You can only modify requests assigned to your agent ID.")

    if "assigned_agent" in changes:
        target_agent = changes["assigned_agent"] or None
    else:
        target_agent = existing.assigned_agent
    if changes.get("status") == Status.DONE and target_agent is None:
        raise PreconditionFailedError("Cannot resolve an unassigned request: assign an agent before marking it Done.")

    if not actor.is_admin:
        for field_name, message in ADMIN_ONLY_FIELDS.items():
            if field_name not in changes:
                continue
            value = changes[field_name]
            if field_name == "assigned_agent":
                value = value or None
            if value != getattr(existing, field_name):
                raise _deny(actor, message)

    merged = dict(changes)
    if actor.is_admin and merged.get("assigned_agent") == "":
        merged["assigned_agent"] = None
    merged["last_updated"] = now

    return replace(existing, **merged)


def can_comment(request: WorkRequest, actor: User) -> bool:
    """Admins, the assigned agent, or anyone on unassigned work."""
    return actor.is_admin or is_owner(request, actor) or request.assigned_agent is None


def check_comment(request: WorkRequest, actor: User) -> None:
    if not can_comment(request, actor):
        raise _deny(actor, "Thread restricted to assigned personnel.")


def can_delete(actor: User) -> bool:
    return actor.is_admin


def check_delete(actor: User) -> None:
    if not can_delete(actor):
        raise _deny(actor, "Only administrators can delete requests.")
