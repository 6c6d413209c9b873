"""Escalation engine - derived overdue state and automatic priority escalation.

Evaluation is pure: the input request is never mutated. When nothing
changes the same object is returned, so callers can detect changes by
identity.

Rules, applied on every evaluation:

1. A request is overdue when ``now > due_date`` and it is not DONE.
2. Once overdue by more than ``threshold_days`` (rounded up to whole
   days), priority is raised to ``target_priority`` and one system
   comment is appended. Escalation never lowers priority, so it fires at
   most once per overdue episode.
3. When the deadline is no longer in the past the overdue flag clears.
   Priority is not reverted.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Iterable

from .audit import escalation_comment
from .types import Priority, Status, WorkRequest

logger = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class EscalationPolicy:
    """Escalation policy constants."""
    enabled: bool = True
    threshold_days: int = 3
    target_priority: Priority = Priority.CRITICAL


DEFAULT_POLICY = EscalationPolicy()


def is_overdue(request: WorkRequest, now: datetime) -> bool:
    """True when the due date has passed and the request is not resolved."""
    return now > request.due_date and request.status != Status.DONE


def days_overdue(request: WorkRequest, now: datetime) -> int:
    """Whole days past the due date, rounded up. Zero or negative if not past."""
    return math.ceil((now - request.due_date) / _ONE_DAY)


def evaluate(
    request: WorkRequest,
    now: datetime,
    policy: EscalationPolicy = DEFAULT_POLICY,
) -> WorkRequest:
    """Recompute overdue state and escalate priority if the policy says so."""
    overdue = is_overdue(request, now)
    updates: dict = {}

    if overdue != request.is_overdue:
        updates["is_overdue"] = overdue

    if (
        overdue
        and policy.enabled
        and days_overdue(request, now) > policy.threshold_days
        and request.priority.rank < policy.target_priority.rank
    ):
        updates["priority"] = policy.target_priority
        updates["comments"] = [
            *request.comments,
            escalation_comment(policy.threshold_days, policy.target_priority, now),
        ]
        logger.info(
            f"Request {request.id} escalated {request.priority.value} -> "
            f"{policy.target_priority.value} ({days_overdue(request, now)} days overdue)"
        )

    if not updates:
        return request
    return replace(request, **updates)


def evaluate_all(
    requests: Iterable[WorkRequest],
    now: datetime,
    policy: EscalationPolicy = DEFAULT_POLICY,
) -> tuple[list[WorkRequest], bool]:
    """Evaluate a whole collection.

    Returns:
        The evaluated requests, and whether any of them changed.
    """
    evaluated = []
    changed = False
    for request in requests:
        result = evaluate(request, now, policy)
        if result is not request:
            changed = True
        evaluated.append(result)
    return evaluated, changed
