"""Filtering, sorting and summary statistics over request collections."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from .types import Priority, Status, User, WorkRequest


class SortKey(str, Enum):
    LAST_UPDATED = "last_updated"   # newest first
    PRIORITY = "priority"           # CRITICAL first
    DUE_DATE = "due_date"           # soonest first


@dataclass
class RequestQuery:
    """Filters for listing requests. Empty filters match everything."""
    search: str = ""
    statuses: list[Status] = field(default_factory=list)
    priorities: list[Priority] = field(default_factory=list)
    agents: list[str] = field(default_factory=list)
    overdue_only: bool = False
    mine: bool = False
    sort_by: SortKey = SortKey.LAST_UPDATED


@dataclass
class RequestStats:
    """Dashboard summary."""
    total: int
    done: int
    overdue: int
    completion_rate: int            # Percent, rounded
    by_status: dict[str, int] = field(default_factory=dict)


def _matches_search(req: WorkRequest, term: str) -> bool:
    haystack = [req.id, req.title, req.description, req.assigned_agent or "", *req.tags]
    return any(term in value.lower() for value in haystack)


def apply_query(
    requests: Iterable[WorkRequest],
    query: RequestQuery,
    actor: User | None = None,
) -> list[WorkRequest]:
    """Filter and sort requests. Sorting is stable."""
    result = list(requests)

    if query.mine and actor is not None:
        result = [r for r in result if r.assigned_agent == actor.identity]

    term = query.search.strip().lower()
    if term:
        result = [r for r in result if _matches_search(r, term)]

    if query.statuses:
        result = [r for r in result if r.status in query.statuses]

    if query.priorities:
        result = [r for r in result if r.priority in query.priorities]

    if query.agents:
        result = [r for r in result if r.assigned_agent and r.assigned_agent in query.agents]

    if query.overdue_only:
        result = [r for r in result if r.is_overdue]

    if query.sort_by == SortKey.PRIORITY:
        result.sort(key=lambda r: r.priority.rank, reverse=True)
    elif query.sort_by == SortKey.DUE_DATE:
        result.sort(key=lambda r: r.due_date)
    else:
        result.sort(key=lambda r: r.last_updated, reverse=True)
    return result


def summarize(requests: Iterable[WorkRequest], actor: User) -> RequestStats:
    """Summary counts. Admins see everything, agents only their assignments."""
    relevant = list(requests)
    if not actor.is_admin:
        relevant = [r for r in relevant if r.assigned_agent == actor.identity]

    total = len(relevant)
    done = sum(1 for r in relevant if r.status == Status.DONE)
    overdue = sum(1 for r in relevant if r.is_overdue)

    by_status = {s.value: 0 for s in Status}
    for req in relevant:
        by_status[req.status.value] += 1

    return RequestStats(
        total=total,
        done=done,
        overdue=overdue,
        completion_rate=round(done / total * 100) if total else 0,
        by_status=by_status,
    )
