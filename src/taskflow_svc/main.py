"""FastAPI application - TaskFlow work request service.

Start with:
    PYTHONPATH=src uvicorn taskflow_svc.main:app --host 0.0.0.0 --port 8060

Endpoints:
- /requests/*  - work request lifecycle (list, create, update, comment, delete)
- GET /health  - health check
- GET /        - service info
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from pydantic import BaseModel

from . import _bootstrap as bs
from . import __version__
from .requests import routes as request_routes

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str
    requests_enabled: bool


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load config and wire the request service."""
    logger.info("Starting taskflow service...")

    config, config_path = bs.load_config()
    app.state.config = config

    if config.requests.enabled:
        service = bs.build_request_service(config, config_path)
        request_routes.configure(service)
        logger.info("Request workflow enabled")

    logger.info("Taskflow service started")
    yield

    logger.info("Taskflow service stopped")


app = FastAPI(
    title="TaskFlow",
    description="Work request tracking with role-based governance and automatic escalation.",
    version=__version__,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Requests", "description": "Work request lifecycle"},
        {"name": "Health", "description": "Health check"},
    ],
)

app.include_router(request_routes.router)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health():
    config = getattr(app.state, "config", None)
    return HealthResponse(
        status="ok",
        requests_enabled=bool(config and config.requests.enabled),
    )


@app.get("/", tags=["Health"])
async def root():
    """Service info."""
    return {
        "service": "taskflow",
        "version": __version__,
        "endpoints": {
            "/requests": "GET list (filters: search, status, priority, agent, overdue_only, mine, sort_by) / POST create",
            "/requests/stats": "Dashboard summary for the acting user",
            "/requests/agents": "Assignable agent identities",
            "/requests/{id}": "GET / PATCH / DELETE a request",
            "/requests/{id}/status-options": "Statuses a picker should offer",
            "/requests/{id}/comments": "POST - add a comment",
            "/health": "Health check",
        },
        "identity_headers": ["X-User-Id", "X-User-Name", "X-User-Role"],
    }


def run():
    """Run the service with uvicorn."""
    import uvicorn

    config, _ = bs.load_config()
    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper(), logging.INFO),
        format=config.logging.format,
    )

    uvicorn.run(
        "taskflow_svc.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.reload,
    )


if __name__ == "__main__":
    run()
