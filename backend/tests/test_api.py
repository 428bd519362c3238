"""
PIM Backend — API Integration Tests
====================================

What:  Drives the real application (routes, services, repository, SQLite)
       through HTTPX, with real signed tokens.

What we test:
    ✅ Records are visible only to their owner; foreign ids answer 404
    ✅ Partial updates merge and always advance updatedAt
    ✅ 400 / 401 / 404 / 409 use the shared error envelope
    ✅ Contact channel, email format and duplicate rules
    ✅ Task completedAt bookkeeping and list filters
    ✅ /health and X-Request-ID
"""

from datetime import datetime
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from pim.main import create_app


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


# ══════════════════════════════════════════════════════════════════════════
# Notes
# ══════════════════════════════════════════════════════════════════════════

class TestNotesAPI:

    @pytest.mark.asyncio
    async def test_create_and_list_scoped_to_owner(self, test_client, auth_headers):
        response = await test_client.post(
            "/notes",
            json={"title": "Groceries", "content": "milk, eggs"},
            headers=auth_headers("u1"),
        )

        assert response.status_code == 201
        note = response.json()
        assert note["userId"] == "u1"
        assert note["title"] == "Groceries"
        assert note["createdAt"] == note["updatedAt"]

        mine = await test_client.get("/notes", headers=auth_headers("u1"))
        assert mine.status_code == 200
        assert [n["id"] for n in mine.json()] == [note["id"]]
        assert mine.headers["X-Total-Count"] == "1"

        theirs = await test_client.get("/notes", headers=auth_headers("u2"))
        assert theirs.status_code == 200
        assert theirs.json() == []
        assert theirs.headers["X-Total-Count"] == "0"

    @pytest.mark.asyncio
    async def test_foreign_note_is_not_found(self, test_client, auth_headers):
        created = await test_client.post(
            "/notes", json={"title": "Private", "content": "diary"}, headers=auth_headers("u1")
        )
        note_id = created.json()["id"]
        other = auth_headers("u2")

        assert (await test_client.get(f"/notes/{note_id}", headers=other)).status_code == 404
        assert (await test_client.put(
            f"/notes/{note_id}", json={"title": "Hijacked"}, headers=other
        )).status_code == 404
        assert (await test_client.delete(f"/notes/{note_id}", headers=other)).status_code == 404

        still_there = await test_client.get(f"/notes/{note_id}", headers=auth_headers("u1"))
        assert still_there.status_code == 200
        assert still_there.json()["title"] == "Private"

    @pytest.mark.asyncio
    async def test_partial_update(self, test_client, auth_headers):
        headers = auth_headers("u1")
        note = (await test_client.post(
            "/notes", json={"title": "Draft", "content": "body"}, headers=headers
        )).json()

        response = await test_client.put(
            f"/notes/{note['id']}", json={"title": "Final"}, headers=headers
        )

        assert response.status_code == 200
        updated = response.json()
        assert updated["title"] == "Final"
        assert updated["content"] == "body"
        assert updated["createdAt"] == note["createdAt"]
        assert _ts(updated["updatedAt"]) > _ts(note["updatedAt"])

    @pytest.mark.asyncio
    async def test_identical_update_still_advances_timestamp(self, test_client, auth_headers):
        headers = auth_headers("u1")
        note = (await test_client.post(
            "/notes", json={"title": "Same", "content": "same"}, headers=headers
        )).json()

        first = (await test_client.put(
            f"/notes/{note['id']}", json={"title": "Same"}, headers=headers
        )).json()
        second = (await test_client.put(
            f"/notes/{note['id']}", json={"title": "Same"}, headers=headers
        )).json()

        assert _ts(first["updatedAt"]) > _ts(note["updatedAt"])
        assert _ts(second["updatedAt"]) > _ts(first["updatedAt"])

    @pytest.mark.asyncio
    async def test_empty_update_body(self, test_client, auth_headers):
        headers = auth_headers("u1")
        note = (await test_client.post(
            "/notes", json={"title": "T", "content": "C"}, headers=headers
        )).json()

        response = await test_client.put(f"/notes/{note['id']}", json={}, headers=headers)

        assert response.status_code == 400
        assert response.json()["message"] == "No valid fields to update"

    @pytest.mark.asyncio
    async def test_failed_commit_is_a_server_error(self, test_client, auth_headers, monkeypatch):
        async def failing_commit(session):
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(AsyncSession, "commit", failing_commit)
        response = await test_client.post(
            "/notes", json={"title": "A", "content": "B"}, headers=auth_headers("u1")
        )
        monkeypatch.undo()

        assert response.status_code == 500
        assert response.json()["error"] == "server_error"
        listed = await test_client.get("/notes", headers=auth_headers("u1"))
        assert listed.json() == []

    @pytest.mark.asyncio
    async def test_delete_twice(self, test_client, auth_headers):
        headers = auth_headers("u1")
        note = (await test_client.post(
            "/notes", json={"title": "T", "content": "C"}, headers=headers
        )).json()

        first = await test_client.delete(f"/notes/{note['id']}", headers=headers)
        second = await test_client.delete(f"/notes/{note['id']}", headers=headers)

        assert first.status_code == 204
        assert first.content == b""
        assert second.status_code == 404
        assert (await test_client.get(f"/notes/{note['id']}", headers=headers)).status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("note_id", ["not-a-uuid", "12345", str(uuid4())])
    async def test_unknown_ids(self, test_client, auth_headers, note_id):
        headers = auth_headers("u1")

        assert (await test_client.get(f"/notes/{note_id}", headers=headers)).status_code == 404
        assert (await test_client.delete(f"/notes/{note_id}", headers=headers)).status_code == 404

    @pytest.mark.asyncio
    async def test_empty_title_rejected(self, test_client, auth_headers):
        response = await test_client.post(
            "/notes", json={"title": "   ", "content": "body"}, headers=auth_headers("u1")
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["errors"][0]["field"] == "title"
        assert "request_id" in body

    @pytest.mark.asyncio
    async def test_malformed_json(self, test_client, auth_headers):
        headers = {**auth_headers("u1"), "Content-Type": "application/json"}
        response = await test_client.post("/notes", content=b"{not json", headers=headers)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_search(self, test_client, auth_headers):
        headers = auth_headers("u1")
        await test_client.post("/notes", json={"title": "Groceries", "content": "milk"}, headers=headers)
        await test_client.post("/notes", json={"title": "Ideas", "content": "100% coverage"}, headers=headers)

        milk = await test_client.get("/notes", params={"search": "MILK"}, headers=headers)
        percent = await test_client.get("/notes", params={"search": "%"}, headers=headers)

        assert [n["title"] for n in milk.json()] == ["Groceries"]
        assert [n["title"] for n in percent.json()] == ["Ideas"]

    @pytest.mark.asyncio
    async def test_newest_first(self, test_client, auth_headers):
        headers = auth_headers("u1")
        for title in ("first", "second", "third"):
            await test_client.post("/notes", json={"title": title, "content": "x"}, headers=headers)

        titles = [n["title"] for n in (await test_client.get("/notes", headers=headers)).json()]

        assert titles == ["third", "second", "first"]


# ══════════════════════════════════════════════════════════════════════════
# Authentication
# ══════════════════════════════════════════════════════════════════════════

class TestAuthAPI:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/notes", "/contacts", "/tasks"])
    async def test_missing_token(self, test_client, path):
        response = await test_client.get(path)

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_invalid_token(self, test_client, make_token):
        token = make_token("u1", secret="wrong-secret")
        response = await test_client.get("/notes", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["message"] == "Authentication required"

    @pytest.mark.asyncio
    async def test_session_cookie(self, test_client, make_token):
        token = make_token("u1")
        response = await test_client.get("/notes", headers={"Cookie": f"session={token}"})

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_unauthenticated_write_stores_nothing(self, test_client, auth_headers):
        response = await test_client.post("/notes", json={"title": "T", "content": "C"})
        assert response.status_code == 401

        listed = await test_client.get("/notes", headers=auth_headers("u1"))
        assert listed.json() == []


# ══════════════════════════════════════════════════════════════════════════
# Contacts
# ══════════════════════════════════════════════════════════════════════════

class TestContactsAPI:

    @pytest.mark.asyncio
    async def test_create_contact(self, test_client, auth_headers):
        response = await test_client.post(
            "/contacts",
            json={"name": "Ada Lovelace", "email": "Ada@Example.com", "phone": "+44 20 7946 0000"},
            headers=auth_headers("u1"),
        )

        assert response.status_code == 201
        contact = response.json()
        assert contact["email"] == "ada@example.com"
        assert contact["phone"] == "+44 20 7946 0000"
        assert contact["createdAt"] == contact["updatedAt"]

    @pytest.mark.asyncio
    async def test_invalid_email_stores_nothing(self, test_client, auth_headers):
        headers = auth_headers("u1")
        response = await test_client.post(
            "/contacts", json={"name": "Bob", "email": "not-an-email"}, headers=headers
        )

        assert response.status_code == 400
        assert response.json()["details"]["errors"][0]["field"] == "email"
        assert (await test_client.get("/contacts", headers=headers)).json() == []

    @pytest.mark.asyncio
    async def test_invalid_email_on_update_keeps_stored_value(self, test_client, auth_headers):
        headers = auth_headers("u1")
        contact = (await test_client.post(
            "/contacts", json={"name": "Ada", "email": "ada@example.com"}, headers=headers
        )).json()

        response = await test_client.put(
            f"/contacts/{contact['id']}", json={"email": "not-an-email"}, headers=headers
        )

        assert response.status_code == 400
        assert response.json()["details"]["errors"][0]["field"] == "email"
        stored = await test_client.get(f"/contacts/{contact['id']}", headers=headers)
        assert stored.json()["email"] == "ada@example.com"
        assert stored.json()["updatedAt"] == contact["updatedAt"]

    @pytest.mark.asyncio
    async def test_contact_needs_a_channel(self, test_client, auth_headers):
        response = await test_client.post(
            "/contacts", json={"name": "Nobody"}, headers=auth_headers("u1")
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, test_client, auth_headers):
        payload = {"name": "Ada", "email": "ada@example.com"}
        first = await test_client.post("/contacts", json=payload, headers=auth_headers("u1"))
        dup = await test_client.post(
            "/contacts", json={"name": "Ada 2", "email": "ADA@example.com"}, headers=auth_headers("u1")
        )
        other_user = await test_client.post("/contacts", json=payload, headers=auth_headers("u2"))

        assert first.status_code == 201
        assert dup.status_code == 409
        assert dup.json()["error"] == "conflict"
        assert other_user.status_code == 201

    @pytest.mark.asyncio
    async def test_update_clears_email_when_phone_remains(self, test_client, auth_headers):
        headers = auth_headers("u1")
        contact = (await test_client.post(
            "/contacts",
            json={"name": "Ada", "email": "ada@example.com", "phone": "555-010-9999"},
            headers=headers,
        )).json()

        cleared = await test_client.put(
            f"/contacts/{contact['id']}", json={"email": None}, headers=headers
        )
        assert cleared.status_code == 200
        assert cleared.json()["email"] is None
        assert cleared.json()["phone"] == "555-010-9999"

        emptied = await test_client.put(
            f"/contacts/{contact['id']}", json={"phone": None}, headers=headers
        )
        assert emptied.status_code == 400

    @pytest.mark.asyncio
    async def test_search(self, test_client, auth_headers):
        headers = auth_headers("u1")
        await test_client.post("/contacts", json={"name": "Ada", "email": "ada@example.com"}, headers=headers)
        await test_client.post("/contacts", json={"name": "Grace", "phone": "555-010-1234"}, headers=headers)

        by_phone = await test_client.get("/contacts", params={"search": "1234"}, headers=headers)

        assert [c["name"] for c in by_phone.json()] == ["Grace"]
        assert by_phone.headers["X-Total-Count"] == "1"


# ══════════════════════════════════════════════════════════════════════════
# Tasks
# ══════════════════════════════════════════════════════════════════════════

class TestTasksAPI:

    @pytest.mark.asyncio
    async def test_defaults(self, test_client, auth_headers):
        response = await test_client.post(
            "/tasks", json={"title": "Write report"}, headers=auth_headers("u1")
        )

        assert response.status_code == 201
        task = response.json()
        assert task["status"] == "pending"
        assert task["priority"] == "medium"
        assert task["completedAt"] is None
        assert task["dueDate"] is None

    @pytest.mark.asyncio
    async def test_completion_lifecycle(self, test_client, auth_headers):
        headers = auth_headers("u1")
        task = (await test_client.post(
            "/tasks",
            json={"title": "Ship", "dueDate": "2026-03-01T09:00:00Z", "priority": "high"},
            headers=headers,
        )).json()

        done = (await test_client.put(
            f"/tasks/{task['id']}", json={"status": "completed"}, headers=headers
        )).json()
        assert done["completedAt"] is not None
        assert done["priority"] == "high"

        reopened = (await test_client.put(
            f"/tasks/{task['id']}", json={"status": "in-progress"}, headers=headers
        )).json()
        assert reopened["completedAt"] is None
        assert _ts(reopened["dueDate"]) == _ts("2026-03-01T09:00:00+00:00")

    @pytest.mark.asyncio
    async def test_invalid_status(self, test_client, auth_headers):
        response = await test_client.post(
            "/tasks", json={"title": "x", "status": "done"}, headers=auth_headers("u1")
        )

        assert response.status_code == 400
        assert response.json()["details"]["errors"][0]["field"] == "status"

    @pytest.mark.asyncio
    async def test_filters(self, test_client, auth_headers):
        headers = auth_headers("u1")
        await test_client.post("/tasks", json={"title": "a", "priority": "high"}, headers=headers)
        await test_client.post("/tasks", json={"title": "b", "status": "completed"}, headers=headers)
        await test_client.post("/tasks", json={"title": "c", "status": "completed", "priority": "high"}, headers=headers)

        completed = await test_client.get("/tasks", params={"status": "completed"}, headers=headers)
        high_done = await test_client.get(
            "/tasks", params={"status": "completed", "priority": "high"}, headers=headers
        )
        bad_filter = await test_client.get("/tasks", params={"status": "whenever"}, headers=headers)

        assert sorted(t["title"] for t in completed.json()) == ["b", "c"]
        assert [t["title"] for t in high_done.json()] == ["c"]
        assert bad_filter.status_code == 400


# ══════════════════════════════════════════════════════════════════════════
# Health & Request ID
# ══════════════════════════════════════════════════════════════════════════

class TestOperationalEndpoints:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/health")

        assert response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_request_id_echoed_in_errors(self, test_client):
        response = await test_client.get("/notes", headers={"X-Request-ID": "trace-42"})

        assert response.headers["X-Request-ID"] == "trace-42"
        assert response.json()["request_id"] == "trace-42"

    @pytest.mark.asyncio
    async def test_unexpected_error_carries_request_id(self, test_settings, database):
        app = create_app(settings=test_settings, database=database)

        @app.get("/explode")
        async def explode():
            raise RuntimeError("boom")

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/explode", headers={"X-Request-ID": "trace-500"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "internal_server_error"
        assert body["request_id"] == "trace-500"
        assert "boom" not in response.text
