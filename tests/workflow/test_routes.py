"""HTTP tests for the request routes."""

from datetime import timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from conftest import NOW
from taskflow_svc.requests import routes
from taskflow_svc.requests.errors import PersistenceError
from taskflow_svc.requests.service import RequestService
from taskflow_svc.requests.store import InMemoryRecordStore
from taskflow_svc.requests.types import Status


ADMIN = {"X-User-Id": "admin", "X-User-Name": "Administrator", "X-User-Role": "Admin"}
AGENT = {"X-User-Id": "A1", "X-User-Name": "Agent One", "X-User-Role": "Agent"}
OTHER = {"X-User-Id": "A2", "X-User-Role": "Agent"}


@pytest.fixture
def service(clock):
    return RequestService(InMemoryRecordStore(), clock=clock, authorized_agents=["A1", "A2"])


@pytest.fixture
def client(service):
    app = FastAPI()
    app.include_router(routes.router)
    routes.configure(service)
    yield TestClient(app)
    routes.configure(None)


def _create(client, headers=ADMIN, **fields):
    body = {"title": "Cloud Security Audit", "description": "IAM review", "assigned_agent": "A1"}
    body.update(fields)
    response = client.post("/requests", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestIdentity:
    """Tests for actor resolution."""

    def test_missing_identity_is_401(self, client):
        assert client.get("/requests").status_code == 401

    def test_invalid_role_is_401(self, client):
        response = client.get("/requests", headers={"X-User-Id": "A1", "X-User-Role": "Root"})
        assert response.status_code == 401

    def test_not_configured_is_503(self):
        app = FastAPI()
        app.include_router(routes.router)
        routes.configure(None)
        response = TestClient(app).get("/requests", headers=ADMIN)
        assert response.status_code == 503


class TestCreateAndRead:
    """Tests for create, list and get."""

    def test_create(self, client):
        created = _create(client, priority="High", tags=["IT"])

        assert created["id"] == "TR-0001"
        assert created["status"] == "Open"
        assert created["priority"] == "High"
        assert created["assigned_agent"] == "A1"
        assert created["created_by"] == "Administrator"
        assert created["is_overdue"] is False

    def test_create_missing_title_is_422(self, client):
        response = client.post("/requests", json={"description": "d"}, headers=ADMIN)
        assert response.status_code == 422

    def test_create_invalid_priority_is_400(self, client):
        response = client.post(
            "/requests",
            json={"title": "t", "description": "d", "priority": "Urgent"},
            headers=ADMIN,
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "ValidationError"

    def test_create_unknown_agent_is_400(self, client):
        response = client.post(
            "/requests",
            json={"title": "t", "description": "d", "assigned_agent": "A9"},
            headers=ADMIN,
        )
        assert response.status_code == 400

    def test_agent_cannot_assign_on_create(self, client):
        response = client.post(
            "/requests",
            json={"title": "t", "description": "d", "assigned_agent": "A1"},
            headers=AGENT,
        )
        assert response.status_code == 403
        assert response.json()["detail"]["error"] == "AccessDenied"

    def test_get(self, client):
        _create(client)
        response = client.get("/requests/TR-0001", headers=AGENT)
        assert response.status_code == 200
        assert response.json()["title"] == "Cloud Security Audit"

    def test_get_missing_is_404(self, client):
        response = client.get("/requests/TR-9999", headers=AGENT)
        assert response.status_code == 404
        assert response.json()["detail"] == {
            "error": "NotFound",
            "message": "Request not found: TR-9999",
        }

    def test_list_escalates_overdue(self, client):
        _create(client, priority="Medium", due_date=(NOW - timedelta(days=5)).isoformat())

        response = client.get("/requests", headers=AGENT)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        request = data["requests"][0]
        assert request["is_overdue"] is True
        assert request["priority"] == "Critical"
        assert request["comments"][0]["type"] == "System-Generated"

    def test_list_filters(self, client):
        _create(client, title="Alpha")
        _create(client, title="Beta", assigned_agent="A2", priority="Critical")

        mine = client.get("/requests", params={"mine": "true"}, headers=AGENT).json()
        critical = client.get("/requests", params={"priority": "Critical"}, headers=AGENT).json()
        by_search = client.get("/requests", params={"search": "alpha"}, headers=AGENT).json()

        assert [r["title"] for r in mine["requests"]] == ["Alpha"]
        assert [r["title"] for r in critical["requests"]] == ["Beta"]
        assert [r["title"] for r in by_search["requests"]] == ["Alpha"]

    def test_list_bad_filters_are_400(self, client):
        assert client.get("/requests", params={"sort_by": "colour"}, headers=AGENT).status_code == 400
        assert client.get("/requests", params={"status": "Paused"}, headers=AGENT).status_code == 400

    def test_stats(self, client):
        _create(client)
        _create(client, assigned_agent="A2")

        admin_stats = client.get("/requests/stats", headers=ADMIN).json()
        agent_stats = client.get("/requests/stats", headers=AGENT).json()

        assert admin_stats["total"] == 2
        assert agent_stats["total"] == 1
        assert agent_stats["by_status"]["Open"] == 1

    def test_agents(self, client):
        assert client.get("/requests/agents", headers=AGENT).json() == {"agents": ["A1", "A2"]}

    def test_status_options(self, client):
        _create(client)
        response = client.get("/requests/TR-0001/status-options", headers=AGENT)
        assert response.json() == {
            "request_id": "TR-0001",
            "current": "Open",
            "options": ["Open", "In Progress", "Blocked"],
        }


class TestUpdate:
    """Tests for PATCH and its error mapping."""

    def test_owner_moves_status(self, client):
        _create(client)

        response = client.patch("/requests/TR-0001", json={"status": "In Progress"}, headers=AGENT)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "In Progress"
        assert body["comments"][-1]["content"] == "Lifecycle update: Open → In Progress"
        assert body["comments"][-1]["author"] == "Agent One"

    def test_other_agent_is_403(self, client):
        _create(client)
        response = client.patch("/requests/TR-0001", json={"title": "x"}, headers=OTHER)
        assert response.status_code == 403

    def test_invalid_transition_is_409(self, client):
        _create(client)
        response = client.patch("/requests/TR-0001", json={"status": "Done"}, headers=ADMIN)
        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "InvalidTransition"

    def test_resolve_unassigned_is_422(self, client, service):
        _create(client, assigned_agent=None)
        client.patch("/requests/TR-0001", json={"status": "In Progress"}, headers=ADMIN)

        response = client.patch("/requests/TR-0001", json={"status": "Done"}, headers=ADMIN)

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "PreconditionFailed"
        assert service.get("TR-0001").status == Status.IN_PROGRESS

    def test_admin_unassigns_with_null(self, client):
        _create(client)
        response = client.patch("/requests/TR-0001", json={"assigned_agent": None}, headers=ADMIN)
        assert response.json()["assigned_agent"] is None

    def test_unknown_body_field_is_422(self, client):
        _create(client)
        response = client.patch("/requests/TR-0001", json={"colour": "red"}, headers=ADMIN)
        assert response.status_code == 422

    def test_persistence_fault_is_503(self, client, service, monkeypatch):
        _create(client)

        def fail(requests):
            raise PersistenceError("disk full")

        monkeypatch.setattr(service._store, "save", fail)
        response = client.patch("/requests/TR-0001", json={"title": "x"}, headers=ADMIN)

        assert response.status_code == 503
        assert response.json()["detail"]["error"] == "PersistenceFault"


class TestDeleteAndComment:
    """Tests for DELETE and comments."""

    def test_agent_delete_is_403(self, client):
        _create(client)
        assert client.delete("/requests/TR-0001", headers=AGENT).status_code == 403

    def test_admin_delete(self, client):
        _create(client)

        response = client.delete("/requests/TR-0001", headers=ADMIN)

        assert response.status_code == 204
        assert client.get("/requests/TR-0001", headers=ADMIN).status_code == 404

    def test_comment(self, client):
        _create(client)

        response = client.post(
            "/requests/TR-0001/comments",
            json={"content": "On it"},
            headers=AGENT,
        )

        assert response.status_code == 200
        [comment] = response.json()["comments"]
        assert comment["content"] == "On it"
        assert comment["type"] == "General"

    def test_comment_on_others_request_is_403(self, client):
        _create(client)
        response = client.post(
            "/requests/TR-0001/comments",
            json={"content": "hi"},
            headers=OTHER,
        )
        assert response.status_code == 403

    def test_blank_comment_is_400(self, client):
        _create(client)
        response = client.post(
            "/requests/TR-0001/comments",
            json={"content": " "},
            headers=AGENT,
        )
        assert response.status_code == 400
