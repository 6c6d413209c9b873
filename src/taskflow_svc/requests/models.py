"""Pydantic models for Request API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Request Body Models
# =============================================================================

class CreateRequestBody(BaseModel):
    """Body for creating a new work request."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "VPN Infrastructure Upgrade",
                "description": "Patch legacy gateway vulnerabilities across all nodes.",
                "priority": "High",
                "due_date": "2026-11-01T17:00:00Z",
                "assigned_agent": "AGT-109",
                "tags": ["IT", "Security"],
            }
        }
    )

    title: str
    description: str
    priority: str | None = None
    due_date: datetime | None = None
    assigned_agent: str | None = None
    created_by: str | None = None
    tags: list[str] = Field(default_factory=list)


class UpdateRequestBody(BaseModel):
    """Body for updating a work request. Only fields that are set are applied."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    description: str | None = None
    priority: str | None = None
    status: str | None = None
    assigned_agent: str | None = Field(default=None, description="Empty string or null unassigns (admin only)")
    created_by: str | None = None
    due_date: datetime | None = None
    tags: list[str] | None = None


class CommentBody(BaseModel):
    """Body for adding a comment."""
    content: str
    type: str = "General"


# =============================================================================
# Response Models
# =============================================================================

class CommentModel(BaseModel):
    """A comment log entry."""
    id: str
    author: str
    content: str
    timestamp: datetime
    type: str


class WorkRequestModel(BaseModel):
    """Full representation of a work request."""
    id: str
    title: str
    description: str
    priority: str
    status: str
    assigned_agent: str | None = None
    created_by: str = ""
    due_date: datetime
    created_date: datetime
    last_updated: datetime
    tags: list[str] = Field(default_factory=list)
    comments: list[CommentModel] = Field(default_factory=list)
    is_overdue: bool = False


class RequestListResponse(BaseModel):
    """Response for listing requests."""
    requests: list[WorkRequestModel]
    total: int


class StatsResponse(BaseModel):
    """Dashboard summary for the acting user."""
    total: int
    done: int
    overdue: int
    completion_rate: int
    by_status: dict[str, int] = Field(default_factory=dict)


class StatusOptionsResponse(BaseModel):
    """Statuses a status picker should offer for a request."""
    request_id: str
    current: str
    options: list[str]


class AgentListResponse(BaseModel):
    agents: list[str]
