"""Request service - the orchestrator for the work request lifecycle.

This is the only component outer layers (HTTP routes, CLI, UI) call.
Every operation loads the full collection from the record store, works
on it in memory and saves it back. Nothing is written unless every
check passes.

Reads are not side-effect free: ``list`` and ``get`` run the escalation
engine and write the result back when any record changed.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable

from . import lifecycle
from .audit import new_comment_id, record_changes
from .errors import AccessDeniedError, NotFoundError, ValidationError
from .escalation import DEFAULT_POLICY, EscalationPolicy, evaluate, evaluate_all, is_overdue
from .permissions import ADMIN_ONLY_FIELDS, authorize, check_comment, check_delete
from .serializer import parse_timestamp
from .store import RecordStore
from .types import Comment, CommentType, Priority, Status, User, WorkRequest

logger = logging.getLogger(__name__)

# Fields callers may set through update()
UPDATABLE_FIELDS = frozenset({
    "title",
    "description",
    "priority",
    "status",
    "assigned_agent",
    "created_by",
    "due_date",
    "tags",
})

# Fields callers may send but that are owned by the service; ignored
READ_ONLY_FIELDS = frozenset({
    "id",
    "created_date",
    "last_updated",
    "comments",
    "is_overdue",
})

# Fields accepted by create(); status is always forced to OPEN
CREATE_FIELDS = UPDATABLE_FIELDS - {"status"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RequestService:
    """
    Orchestrates create/read/update/delete/comment on work requests.

    Each write runs: permission guard -> lifecycle check -> field merge ->
    overdue bookkeeping -> audit comments -> store save.
    """

    def __init__(
        self,
        store: RecordStore,
        policy: EscalationPolicy | None = None,
        clock: Callable[[], datetime] | None = None,
        authorized_agents: Iterable[str] = (),
        default_due_days: int = 7,
    ) -> None:
        self._store = store
        self._policy = policy or DEFAULT_POLICY
        self._clock = clock or _utcnow
        self._authorized_agents = list(authorized_agents)
        self._default_due_days = default_due_days
        self._lock = threading.RLock()

    @property
    def policy(self) -> EscalationPolicy:
        return self._policy

    @property
    def authorized_agents(self) -> list[str]:
        return list(self._authorized_agents)

    def _now(self, now: datetime | None = None) -> datetime:
        # Millisecond precision, same as the stored form
        return parse_timestamp(self._clock() if now is None else now)

    # ------------------------------------------------------------------
    # Reads (with write-back)
    # ------------------------------------------------------------------

    def list(self, now: datetime | None = None) -> list[WorkRequest]:
        """Return all requests with overdue/escalation state recomputed.

        If evaluation changed any record, the collection is saved before
        returning.
        """
        with self._lock:
            now = self._now(now)
            requests = self._store.load()
            evaluated, changed = evaluate_all(requests, now, self._policy)
            if changed:
                self._store.save(evaluated)
                logger.info("Escalation pass updated stored requests")
            return evaluated

    def get(self, request_id: str, now: datetime | None = None) -> WorkRequest:
        """Return one request, evaluated the same way as ``list``."""
        with self._lock:
            for request in self.list(now):
                if request.id == request_id:
                    return request
            raise NotFoundError(f"Request not found: {request_id}")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, data: dict[str, Any], actor: User) -> WorkRequest:
        """Create a new OPEN request.

        Raises:
            ValidationError: Missing title/description or malformed values.
            AccessDeniedError: A non-admin tried to assign the request.
        """
        fields = self._coerce(data, allowed=CREATE_FIELDS, ignored=READ_ONLY_FIELDS | {"status"})

        for required in ("title", "description"):
            if required not in fields:
                raise ValidationError(f"Field '{required}' is required")

        if not actor.is_admin and fields.get("assigned_agent"):
            logger.warning(f"Access denied for {actor.identity}: assignment on create")
            raise AccessDeniedError(f"Access Denied: {ADMIN_ONLY_FIELDS['assigned_agent']}")

        assigned_agent = fields.get("assigned_agent") or None
        self._check_roster(assigned_agent)

        with self._lock:
            now = self._now()
            requests = self._store.load()
            request = WorkRequest(
                id=self._store.next_id(r.id for r in requests),
                title=fields["title"],
                description=fields["description"],
                priority=fields.get("priority", Priority.LOW),
                status=lifecycle.INITIAL_STATUS,
                created_date=now,
                due_date=fields.get("due_date") or now + timedelta(days=self._default_due_days),
                last_updated=now,
                assigned_agent=assigned_agent,
                created_by=fields.get("created_by") or actor.name,
                tags=fields.get("tags", []),
                comments=[],
                is_overdue=False,
            )
            requests.append(request)
            self._store.save(requests)

        logger.info(f"Request {request.id} created by {actor.identity}")
        return request

    def update(self, request_id: str, changes: dict[str, Any], actor: User) -> WorkRequest:
        """Apply ``changes`` to a request on behalf of ``actor``.

        The whole operation fails, with nothing written, if any check fails.

        Raises:
            ValidationError: Unknown field or malformed value.
            NotFoundError: No request with this id.
            AccessDeniedError: Ownership or field-level restriction.
            PreconditionFailedError: Resolving an unassigned request.
            InvalidTransitionError: Status not reachable from the current one.
        """
        fields = self._coerce(changes, allowed=UPDATABLE_FIELDS, ignored=READ_ONLY_FIELDS)

        with self._lock:
            now = self._now()
            requests = self._store.load()
            index = _find(requests, request_id)
            existing = requests[index] if index is not None else None
            if existing is not None:
                # Stored overdue state may be stale
                existing = evaluate(existing, now, self._policy)

            merged = authorize(existing, fields, actor, now, request_id)
            if "status" in fields:
                lifecycle.validate_transition(existing.status, fields["status"], request_id)
            if "assigned_agent" in fields:
                self._check_roster(merged.assigned_agent)

            merged = replace(merged, is_overdue=is_overdue(merged, now))
            merged = record_changes(existing, merged, actor, now)

            requests[index] = merged
            self._store.save(requests)

        logger.info(f"Request {request_id} updated by {actor.identity}: {sorted(fields)}")
        return merged

    def remove(self, request_id: str, actor: User) -> None:
        """Delete a request. Administrators only.

        Raises:
            AccessDeniedError: Actor is not an administrator.
            NotFoundError: No request with this id.
        """
        check_delete(actor)

        with self._lock:
            requests = self._store.load()
            index = _find(requests, request_id)
            if index is None:
                raise NotFoundError(f"Request not found: {request_id}")
            del requests[index]
            self._store.save(requests)

        logger.info(f"Request {request_id} deleted by {actor.identity}")

    def add_comment(
        self,
        request_id: str,
        content: str,
        comment_type: CommentType | str,
        actor: User,
    ) -> WorkRequest:
        """Append a user comment to a request's log.

        Raises:
            NotFoundError: No request with this id.
            AccessDeniedError: Actor is not admin, the assignee, or
                commenting on unassigned work.
            ValidationError: Blank content, or a system comment type.
        """
        with self._lock:
            now = self._now()
            requests = self._store.load()
            index = _find(requests, request_id)
            if index is None:
                raise NotFoundError(f"Request not found: {request_id}")
            request = requests[index]

            check_comment(request, actor)

            try:
                comment_type = CommentType.parse(comment_type)
            except ValueError as e:
                raise ValidationError(str(e)) from e
            if comment_type == CommentType.SYSTEM_GENERATED:
                raise ValidationError("System-generated comments cannot be posted manually")
            if not isinstance(content, str) or not content.strip():
                raise ValidationError("Comment content cannot be empty")

            comment = Comment(
                id=new_comment_id(),
                author=actor.name,
                content=content.strip(),
                timestamp=now,
                type=comment_type,
            )
            updated = replace(request, comments=[*request.comments, comment], last_updated=now)
            requests[index] = updated
            self._store.save(requests)

        logger.info(f"Comment added to {request_id} by {actor.identity}")
        return updated

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_roster(self, agent: str | None) -> None:
        if agent and self._authorized_agents and agent not in self._authorized_agents:
            raise ValidationError(f"Unknown agent: {agent}")

    def _coerce(
        self,
        data: dict[str, Any],
        allowed: frozenset[str],
        ignored: frozenset[str],
    ) -> dict[str, Any]:
        """Parse raw field values into their domain types."""
        fields: dict[str, Any] = {}
        for key, value in data.items():
            if key in ignored:
                logger.debug(f"Ignoring read-only field '{key}'")
                continue
            if key not in allowed:
                raise ValidationError(f"Unknown or immutable field: '{key}'")
            try:
                fields[key] = _coerce_value(key, value)
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Invalid value for '{key}': {e}") from e
        return fields


def _coerce_value(key: str, value: Any) -> Any:
    if key in ("title", "description"):
        if not isinstance(value, str) or not value.strip():
            raise ValueError("must be a non-empty string")
        return value.strip()
    if key == "priority":
        return Priority.parse(value)
    if key == "status":
        return Status.parse(value)
    if key == "due_date":
        return parse_timestamp(value)
    if key == "assigned_agent":
        if value is None:
            return None
        if not isinstance(value, str):
            raise TypeError("must be a string or null")
        # Empty string is kept; the guard decides what it means
        return value.strip()
    if key == "created_by":
        if not isinstance(value, str):
            raise TypeError("must be a string")
        return value.strip()
    if key == "tags":
        if value is None:
            return []
        if isinstance(value, str) or not all(isinstance(t, str) for t in value):
            raise TypeError("must be a list of strings")
        tags: list[str] = []
        for tag in value:
            tag = tag.strip()
            if tag and tag not in tags:
                tags.append(tag)
        return tags
    return value


def _find(requests: list[WorkRequest], request_id: str) -> int | None:
    for i, request in enumerate(requests):
        if request.id == request_id:
            return i
    return None
