"""FastAPI routes for the work request lifecycle."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, Request, Response

from ..identity.extractor import extract_identity
from . import lifecycle
from .errors import RequestError
from .models import (
    AgentListResponse,
    CommentBody,
    CommentModel,
    CreateRequestBody,
    RequestListResponse,
    StatsResponse,
    StatusOptionsResponse,
    UpdateRequestBody,
    WorkRequestModel,
)
from .query import RequestQuery, SortKey, apply_query, summarize
from .service import RequestService
from .types import Priority, Status, User, WorkRequest

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/requests", tags=["Requests"])

# Configuration - set during app startup
_service: RequestService | None = None

# Error kind -> HTTP status
_STATUS_CODES = {
    "ValidationError": 400,
    "AccessDenied": 403,
    "NotFound": 404,
    "InvalidTransition": 409,
    "PreconditionFailed": 422,
    "PersistenceFault": 503,
}


def configure(service: RequestService) -> None:
    """Configure the request routes with the request service."""
    global _service
    _service = service


def _get_service() -> RequestService:
    """Get the service, raising if not configured."""
    if _service is None:
        raise HTTPException(status_code=503, detail="Request module not initialized")
    return _service


def _current_user(request: Request) -> User:
    user = extract_identity(request)
    if user is None:
        raise HTTPException(status_code=401, detail="Missing or invalid user identity")
    return user


def _http_error(e: RequestError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_CODES.get(e.kind, 500),
        detail={"error": e.kind, "message": e.message},
    )


def _request_to_model(req: WorkRequest) -> WorkRequestModel:
    """Convert a WorkRequest to Pydantic response model."""
    return WorkRequestModel(
        id=req.id,
        title=req.title,
        description=req.description,
        priority=req.priority.value,
        status=req.status.value,
        assigned_agent=req.assigned_agent,
        created_by=req.created_by,
        due_date=req.due_date,
        created_date=req.created_date,
        last_updated=req.last_updated,
        tags=list(req.tags),
        comments=[
            CommentModel(
                id=c.id,
                author=c.author,
                content=c.content,
                timestamp=c.timestamp,
                type=c.type.value,
            )
            for c in req.comments
        ],
        is_overdue=req.is_overdue,
    )


def _parse_all(parser, values: list[str] | None) -> list:
    try:
        return [parser(v) for v in values or []]
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# =============================================================================
# List / Stats
# =============================================================================

@router.get("", response_model=RequestListResponse)
async def list_requests(
    request: Request,
    search: str = "",
    status: list[str] | None = Query(default=None),
    priority: list[str] | None = Query(default=None),
    agent: list[str] | None = Query(default=None),
    overdue_only: bool = False,
    mine: bool = False,
    sort_by: str = SortKey.LAST_UPDATED.value,
):
    """List requests, running the escalation pass first."""
    service = _get_service()
    user = _current_user(request)

    try:
        sort_key = SortKey(sort_by)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid sort_by: {sort_by}")

    query = RequestQuery(
        search=search,
        statuses=_parse_all(Status.parse, status),
        priorities=_parse_all(Priority.parse, priority),
        agents=list(agent or []),
        overdue_only=overdue_only,
        mine=mine,
        sort_by=sort_key,
    )

    try:
        requests = apply_query(service.list(), query, user)
    except RequestError as e:
        raise _http_error(e)

    return RequestListResponse(
        requests=[_request_to_model(r) for r in requests],
        total=len(requests),
    )


@router.get("/stats", response_model=StatsResponse)
async def request_stats(request: Request):
    """Summary counts for the acting user's dashboard."""
    service = _get_service()
    user = _current_user(request)

    try:
        stats = summarize(service.list(), user)
    except RequestError as e:
        raise _http_error(e)

    return StatsResponse(
        total=stats.total,
        done=stats.done,
        overdue=stats.overdue,
        completion_rate=stats.completion_rate,
        by_status=stats.by_status,
    )


@router.get("/agents", response_model=AgentListResponse)
async def list_agents(request: Request):
    """Agent identities an administrator may assign."""
    service = _get_service()
    _current_user(request)
    return AgentListResponse(agents=service.authorized_agents)


# =============================================================================
# Create / Get / Update / Delete
# =============================================================================

@router.post("", response_model=WorkRequestModel, status_code=201)
async def create_request(request: Request, body: CreateRequestBody):
    """Create a new work request. Status always starts at Open."""
    service = _get_service()
    user = _current_user(request)

    try:
        created = service.create(body.model_dump(exclude_none=True), user)
    except RequestError as e:
        raise _http_error(e)

    return _request_to_model(created)


@router.get("/{request_id}", response_model=WorkRequestModel)
async def get_request(request: Request, request_id: str):
    """Get a single request by ID."""
    service = _get_service()
    _current_user(request)

    try:
        return _request_to_model(service.get(request_id))
    except RequestError as e:
        raise _http_error(e)


@router.get("/{request_id}/status-options", response_model=StatusOptionsResponse)
async def get_status_options(request: Request, request_id: str):
    """Statuses a picker should offer for this request."""
    service = _get_service()
    _current_user(request)

    try:
        current = service.get(request_id).status
    except RequestError as e:
        raise _http_error(e)

    return StatusOptionsResponse(
        request_id=request_id,
        current=current.value,
        options=[s.value for s in lifecycle.status_options(current)],
    )


@router.patch("/{request_id}", response_model=WorkRequestModel)
async def update_request(request: Request, request_id: str, body: UpdateRequestBody):
    """Apply the fields set in the body to a request."""
    service = _get_service()
    user = _current_user(request)

    try:
        updated = service.update(request_id, body.model_dump(exclude_unset=True), user)
    except RequestError as e:
        raise _http_error(e)

    return _request_to_model(updated)


@router.delete("/{request_id}", status_code=204)
async def delete_request(request: Request, request_id: str):
    """Delete a request. Administrators only."""
    service = _get_service()
    user = _current_user(request)

    try:
        service.remove(request_id, user)
    except RequestError as e:
        raise _http_error(e)

    return Response(status_code=204)


# =============================================================================
# Comments
# =============================================================================

@router.post("/{request_id}/comments", response_model=WorkRequestModel)
async def add_comment(request: Request, request_id: str, body: CommentBody):
    """Add a comment to a request's log."""
    service = _get_service()
    user = _current_user(request)

    try:
        updated = service.add_comment(request_id, body.content, body.type, user)
    except RequestError as e:
        raise _http_error(e)

    return _request_to_model(updated)
