"""
API route tests

Services are swapped in through dependency_overrides; the admin key check
is exercised separately with patched settings.
"""
from functools import partial
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from supportdesk.config import Settings
from supportdesk.main import create_app
from supportdesk.middleware import admin_auth
from supportdesk.middleware.admin_auth import verify_admin_key
from supportdesk.models.schemas import AdminProfile, TicketComment
from supportdesk.repositories import NotFoundError, RejectedError
from supportdesk.routes.dependencies import get_admin_service, get_dashboard, get_ticket_service
from supportdesk.services.admin_service import (
    AdminExistsError,
    EmailDomainNotAllowedError,
    InvalidCredentialsError,
)
from supportdesk.services.dashboard import DashboardSession
from supportdesk.services.ticket_service import AttachmentTooLargeError, TicketService
from supportdesk.tests.conftest import make_ticket


@pytest.fixture
def ticket_service():
    service = MagicMock()
    service.max_attachment_bytes = 1024
    service.check_attachment_size = partial(TicketService.check_attachment_size, service)
    service.submit = AsyncMock(return_value=make_ticket("42"))
    service.lookup_by_email = AsyncMock(return_value=[make_ticket("42")])
    service.get_ticket = AsyncMock(return_value=make_ticket("42"))
    service.list_comments = AsyncMock(return_value=[])
    comment = TicketComment(id="c1", ticket_id="42", content="Any update?")
    service.add_customer_comment = AsyncMock(return_value=comment)
    service.add_admin_comment = AsyncMock(return_value=comment)
    return service


@pytest.fixture
def admin_service():
    service = MagicMock()
    profile = AdminProfile(id="admin-1", email="help@spybee.com.co", name="Support Team")
    service.login = AsyncMock(return_value=profile)
    service.signup = AsyncMock(return_value=profile)
    return service


@pytest.fixture
def dashboard(fake_remote):
    return DashboardSession(fake_remote, timeout=1.0, grace_seconds=0, background_refresh=False)


@pytest.fixture
def app(ticket_service, admin_service, dashboard):
    app = create_app()
    app.dependency_overrides[get_ticket_service] = lambda: ticket_service
    app.dependency_overrides[get_admin_service] = lambda: admin_service
    app.dependency_overrides[get_dashboard] = lambda: dashboard
    app.dependency_overrides[verify_admin_key] = lambda: True
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


class TestRoot:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["version"] == "1.0.0"

    def test_services_missing_returns_503(self):
        client = TestClient(create_app())
        response = client.get("/api/v1/tickets/status", params={"email": "ana@example.com"})
        assert response.status_code == 503


class TestTicketRoutes:

    def test_submit_ticket(self, client, ticket_service):
        response = client.post(
            "/api/v1/tickets",
            data={
                "name": "Ana Gomez",
                "email": "ana@example.com",
                "project": "Website",
                "category": "Bug",
                "description": "The login button does nothing",
            },
            files=[("files", ("log.txt", b"trace", "text/plain"))]
        )

        assert response.status_code == 201
        assert response.json()["id"] == "42"
        form, uploads = ticket_service.submit.call_args[0]
        assert form.email == "ana@example.com"
        assert uploads[0].file_name == "log.txt"
        assert uploads[0].content == b"trace"

    def test_submit_invalid_form(self, client, ticket_service):
        response = client.post(
            "/api/v1/tickets",
            data={"name": "Ana", "email": "not-an-email", "project": "Website", "description": "short"}
        )

        assert response.status_code == 422
        ticket_service.submit.assert_not_awaited()

    def test_submit_attachment_too_large(self, client, ticket_service):
        ticket_service.submit.side_effect = AttachmentTooLargeError("big.bin exceeds 10 bytes")

        response = client.post(
            "/api/v1/tickets",
            data={
                "name": "Ana Gomez",
                "email": "ana@example.com",
                "project": "Website",
                "description": "The login button does nothing",
            }
        )

        assert response.status_code == 413

    def test_oversized_upload_refused_before_submit(self, client, ticket_service):
        response = client.post(
            "/api/v1/tickets",
            data={
                "name": "Ana Gomez",
                "email": "ana@example.com",
                "project": "Website",
                "description": "The login button does nothing",
            },
            files=[("files", ("dump.bin", b"x" * 2000, "application/octet-stream"))]
        )

        assert response.status_code == 413
        assert "dump.bin" in response.json()["detail"]
        ticket_service.submit.assert_not_awaited()

    def test_upload_at_limit_read_whole(self, client, ticket_service):
        response = client.post(
            "/api/v1/tickets",
            data={
                "name": "Ana Gomez",
                "email": "ana@example.com",
                "project": "Website",
                "description": "The login button does nothing",
            },
            files=[("files", ("dump.bin", b"x" * 1024, "application/octet-stream"))]
        )

        assert response.status_code == 201
        _, uploads = ticket_service.submit.call_args[0]
        assert len(uploads[0].content) == 1024

    def test_status_lookup(self, client, ticket_service):
        response = client.get("/api/v1/tickets/status", params={"email": "ana@example.com"})

        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == ["42"]
        ticket_service.lookup_by_email.assert_awaited_once_with("ana@example.com")

    def test_get_ticket_not_found(self, client, ticket_service):
        ticket_service.get_ticket.side_effect = NotFoundError("Ticket 9 not found")

        response = client.get("/api/v1/tickets/9")

        assert response.status_code == 404
        assert response.json()["error_kind"] == "NotFound"

    def test_public_comments_exclude_internal(self, client, ticket_service):
        client.get("/api/v1/tickets/42/comments")
        ticket_service.list_comments.assert_awaited_once_with("42", include_internal=False)

    def test_customer_comment(self, client, ticket_service):
        response = client.post("/api/v1/tickets/42/comments", json={"content": "Any update?", "is_internal": True})

        assert response.status_code == 201
        ticket_service.add_customer_comment.assert_awaited_once_with("42", "Any update?")

    def test_blank_comment_rejected(self, client):
        response = client.post("/api/v1/tickets/42/comments", json={"content": "   "})
        assert response.status_code == 422


class TestAdminAuthRoutes:

    def test_login(self, client):
        response = client.post("/api/v1/admin/login", json={"email": "help@spybee.com.co", "password": "secret"})

        assert response.status_code == 200
        assert response.json()["is_admin"] is True

    def test_login_invalid(self, client, admin_service):
        admin_service.login.side_effect = InvalidCredentialsError("Invalid credentials")

        response = client.post("/api/v1/admin/login", json={"email": "help@spybee.com.co", "password": "nope"})

        assert response.status_code == 401

    def test_signup(self, client):
        response = client.post(
            "/api/v1/admin/signup",
            json={"name": "New Admin", "email": "new@spybee.com.co", "password": "secret1"}
        )
        assert response.status_code == 201

    @pytest.mark.parametrize("error,code", [
        (EmailDomainNotAllowedError("Only @spybee.com.co"), 403),
        (AdminExistsError("exists"), 409),
    ])
    def test_signup_errors(self, client, admin_service, error, code):
        admin_service.signup.side_effect = error

        response = client.post(
            "/api/v1/admin/signup",
            json={"name": "New Admin", "email": "new@spybee.com.co", "password": "secret1"}
        )

        assert response.status_code == code


class TestAdminDashboardRoutes:

    def test_table_view(self, client):
        response = client.get("/api/v1/admin/tickets", params={"status": "Open"})

        assert response.status_code == 200
        data = response.json()
        assert [t["id"] for t in data["tickets"]] == ["1"]
        assert data["stats"]["total"] == 3

    def test_kanban_view(self, client):
        response = client.get("/api/v1/admin/tickets", params={"view": "kanban"})

        columns = response.json()["columns"]
        assert [t["id"] for t in columns["in-progress-column"]] == ["2"]

    def test_invalid_status_filter(self, client):
        response = client.get("/api/v1/admin/tickets", params={"status": "Archived"})
        assert response.status_code == 422

    def test_refresh(self, client, fake_remote):
        client.get("/api/v1/admin/tickets")
        response = client.post("/api/v1/admin/tickets/refresh")

        assert response.status_code == 200
        assert fake_remote.list_calls == 2

    def test_change_status(self, client, dashboard):
        response = client.post("/api/v1/admin/tickets/1/status", json={"status": "Closed"})

        assert response.status_code == 200
        body = response.json()
        assert body["outcome"] == "updated"
        assert body["ticket"]["status"] == "Closed"
        assert dashboard.store.get("1").status.value == "Closed"

    def test_change_status_rejected(self, client, fake_remote, dashboard):
        fake_remote.errors["1"] = RejectedError("permission denied")

        response = client.post("/api/v1/admin/tickets/1/status", json={"status": "Closed"})

        assert response.status_code == 403
        body = response.json()
        assert body["outcome"] == "failed"
        assert body["error_kind"] == "Rejected"
        assert body["ticket"]["status"] == "Open"

    def test_change_status_invalid_value(self, client):
        response = client.post("/api/v1/admin/tickets/1/status", json={"status": "Archived"})
        assert response.status_code == 422

    def test_drop(self, client):
        response = client.post(
            "/api/v1/admin/board/drop",
            json={"ticket_id": "2", "source_column": "in-progress-column", "destination_column": "closed-column"}
        )

        assert response.status_code == 200
        assert response.json()["outcome"] == "updated"

    def test_drop_outside_board(self, client, fake_remote):
        response = client.post(
            "/api/v1/admin/board/drop",
            json={"ticket_id": "2", "source_column": "in-progress-column"}
        )

        assert response.json()["outcome"] == "ignored"
        assert fake_remote.calls == []

    def test_drop_while_pending_is_busy(self, client, dashboard):
        client.get("/api/v1/admin/tickets")
        dashboard.adapter._hold("1")

        response = client.post(
            "/api/v1/admin/board/drop",
            json={"ticket_id": "1", "source_column": "open-column", "destination_column": "closed-column"}
        )

        assert response.status_code == 409
        assert response.json()["outcome"] == "busy"

    def test_admin_comment_uses_admin_header(self, client, ticket_service):
        response = client.post(
            "/api/v1/admin/tickets/42/comments",
            json={"content": "Escalated", "is_internal": True},
            headers={"X-Admin-Id": "admin-1"}
        )

        assert response.status_code == 201
        ticket_service.add_admin_comment.assert_awaited_once_with(
            "42", "Escalated", "admin-1", is_internal=True
        )

    def test_admin_comments_include_internal(self, client, ticket_service):
        client.get("/api/v1/admin/tickets/42/comments")
        ticket_service.list_comments.assert_awaited_once_with("42", include_internal=True)

    def test_notifications(self, client):
        client.post("/api/v1/admin/tickets/1/status", json={"status": "Closed"})

        response = client.get("/api/v1/admin/notifications", params={"ticket_id": "1"})

        messages = [n["message"] for n in response.json()]
        assert messages[0] == "Ticket 1 status updated to Closed"


class TestAdminKey:
    """verify_admin_key against configured settings"""

    @pytest.fixture
    def keyed_client(self, app, monkeypatch):
        monkeypatch.setattr(admin_auth, "get_settings", lambda: Settings(admin_api_key="admin-secret"))
        del app.dependency_overrides[verify_admin_key]
        return TestClient(app)

    def test_missing_key(self, keyed_client):
        assert keyed_client.get("/api/v1/admin/tickets").status_code == 401

    def test_wrong_key(self, keyed_client):
        response = keyed_client.get("/api/v1/admin/tickets", headers={"X-Admin-API-Key": "nope"})
        assert response.status_code == 403

    def test_non_ascii_key_rejected(self, keyed_client):
        response = keyed_client.get(
            "/api/v1/admin/tickets",
            headers={"X-Admin-API-Key": "clé-secrète".encode("utf-8")}
        )
        assert response.status_code == 403

    def test_non_ascii_key_direct_call(self, monkeypatch):
        monkeypatch.setattr(admin_auth, "get_settings", lambda: Settings(admin_api_key="admin-secret"))

        with pytest.raises(HTTPException) as exc_info:
            verify_admin_key("clé-secrète")

        assert exc_info.value.status_code == 403

    def test_valid_key(self, keyed_client):
        response = keyed_client.get("/api/v1/admin/tickets", headers={"X-Admin-API-Key": "admin-secret"})
        assert response.status_code == 200

    def test_login_needs_no_key(self, keyed_client):
        response = keyed_client.post(
            "/api/v1/admin/login",
            json={"email": "help@spybee.com.co", "password": "secret"}
        )
        assert response.status_code == 200

    def test_key_not_configured(self, app, monkeypatch):
        monkeypatch.setattr(admin_auth, "get_settings", lambda: Settings(admin_api_key=""))
        del app.dependency_overrides[verify_admin_key]

        response = TestClient(app).get("/api/v1/admin/tickets", headers={"X-Admin-API-Key": "x"})

        assert response.status_code == 500
