"""
NoteMe Backend — API Integration Tests
=======================================

What:  Tests for the /api/post action endpoint and /health over HTTP.
Why:   Verifies the wire contract (status codes, body shapes, CORS headers)
       that the static front end depends on.
How:   httpx AsyncClient over ASGITransport against an app built with an
       in-memory store.

What we test:
    ✅ createUser / addNote success bodies
    ✅ 400 / 401 / 404 / 405 / 500 error bodies
    ✅ CORS headers on success, error and preflight responses
    ✅ Error language switch
    ✅ Health check
"""

from unittest.mock import patch

import pytest
from httpx import AsyncClient, ASGITransport

from noteme.exceptions import StoreUnavailableError, StoreWriteFailedError
from noteme.main import create_app
from noteme.services.memory_store import InMemoryDocumentStore

from conftest import ALICE_HASH, RecordingNotifier

ENDPOINT = "/api/post"


def assert_cors(response):
    assert response.headers["access-control-allow-origin"] == "*"
    assert "POST" in response.headers["access-control-allow-methods"]
    assert "OPTIONS" in response.headers["access-control-allow-methods"]
    assert response.headers["access-control-allow-headers"] == "Content-Type"


class FailingStore(InMemoryDocumentStore):
    """Store whose read or write raises the given error."""

    def __init__(self, record=None, read_error=None, write_error=None):
        super().__init__(record)
        self.read_error = read_error
        self.write_error = write_error

    async def read(self):
        if self.read_error:
            raise self.read_error
        return await super().read()

    async def write(self, document):
        if self.write_error:
            raise self.write_error
        await super().write(document)


class ExplodingStore(InMemoryDocumentStore):
    async def read(self):
        raise RuntimeError("boom: secret detail")


class TestCreateUserEndpoint:

    @pytest.mark.asyncio
    async def test_create_user_success(self, test_client, seeded_store, notifier):
        response = await test_client.post(
            ENDPOINT, json={"action": "createUser", "userId": "bob", "passwordHash": "hb"}
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert_cors(response)
        assert [u["id"] for u in seeded_store.record["users"]] == ["alice", "bob"]
        assert notifier.events == ["createUser"]

    @pytest.mark.asyncio
    async def test_duplicate_user(self, test_client, seeded_store):
        response = await test_client.post(
            ENDPOINT, json={"action": "createUser", "userId": "alice", "passwordHash": "x"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "user exists"}
        assert_cors(response)
        assert seeded_store.write_count == 0

    @pytest.mark.asyncio
    async def test_invalid_login(self, test_client):
        response = await test_client.post(
            ENDPOINT, json={"action": "createUser", "userId": "Bob", "passwordHash": "hb"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "invalid login format"}

    @pytest.mark.asyncio
    async def test_missing_password_hash(self, test_client):
        response = await test_client.post(
            ENDPOINT, json={"action": "createUser", "userId": "bob"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "missing fields"}


class TestAddNoteEndpoint:

    @pytest.mark.asyncio
    async def test_add_note_returns_note_id(self, test_client, seeded_store):
        first = await test_client.post(
            ENDPOINT,
            json={"action": "addNote", "userId": "alice", "passwordHash": ALICE_HASH, "text": "hello"},
        )
        second = await test_client.post(
            ENDPOINT,
            json={"action": "addNote", "userId": "alice", "passwordHash": ALICE_HASH, "text": "again"},
        )

        assert first.status_code == 200
        assert first.json() == {"success": True, "noteId": 1}
        assert second.json() == {"success": True, "noteId": 2}
        assert_cors(first)

        notes = seeded_store.record["users"][0]["notes"]
        assert [n["text"] for n in notes] == ["hello", "again"]
        assert all("createdAt" in n for n in notes)

    @pytest.mark.asyncio
    async def test_wrong_password(self, test_client, seeded_store):
        response = await test_client.post(
            ENDPOINT,
            json={"action": "addNote", "userId": "alice", "passwordHash": "nope", "text": "t"},
        )

        assert response.status_code == 401
        assert response.json() == {"error": "wrong password"}
        assert_cors(response)
        assert seeded_store.write_count == 0

    @pytest.mark.asyncio
    async def test_unknown_user(self, test_client):
        response = await test_client.post(
            ENDPOINT,
            json={"action": "addNote", "userId": "ghost", "passwordHash": "h", "text": "t"},
        )

        assert response.status_code == 404
        assert response.json() == {"error": "user not found"}

    @pytest.mark.asyncio
    async def test_whitespace_text_is_missing(self, test_client):
        response = await test_client.post(
            ENDPOINT,
            json={"action": "addNote", "userId": "alice", "passwordHash": ALICE_HASH, "text": "  "},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "missing fields"}


class TestRequestShape:

    @pytest.mark.asyncio
    async def test_unknown_action(self, test_client, seeded_store):
        response = await test_client.post(ENDPOINT, json={"action": "deleteUser", "userId": "alice"})

        assert response.status_code == 400
        assert response.json() == {"error": "unknown action"}
        assert seeded_store.read_count == 0

    @pytest.mark.asyncio
    async def test_missing_action(self, test_client):
        response = await test_client.post(ENDPOINT, json={"userId": "alice"})

        assert response.status_code == 400
        assert response.json() == {"error": "unknown action"}

    @pytest.mark.asyncio
    async def test_body_not_json(self, test_client):
        response = await test_client.post(
            ENDPOINT, content=b"not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "invalid request"}
        assert_cors(response)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [[1, 2], "createUser", 7])
    async def test_body_not_object(self, test_client, body):
        response = await test_client.post(ENDPOINT, json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "invalid request"}

    @pytest.mark.asyncio
    async def test_field_of_wrong_type(self, test_client, seeded_store):
        response = await test_client.post(
            ENDPOINT, json={"action": "createUser", "userId": 123, "passwordHash": "h"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "invalid request"}
        assert seeded_store.read_count == 0


class TestMethods:

    @pytest.mark.asyncio
    async def test_preflight(self, test_client):
        response = await test_client.options(ENDPOINT)

        assert response.status_code == 200
        assert response.content == b""
        assert_cors(response)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE"])
    async def test_other_methods_rejected(self, test_client, seeded_store, method):
        response = await test_client.request(method, ENDPOINT)

        assert response.status_code == 405
        assert response.json() == {"error": "method not allowed"}
        assert_cors(response)
        assert seeded_store.read_count == 0

    @pytest.mark.asyncio
    async def test_request_id_header(self, test_client):
        response = await test_client.options(ENDPOINT)
        assert response.headers.get("x-request-id")


class TestStoreFailures:

    async def _post(self, store, body):
        app = create_app(store=store, notifier=RecordingNotifier())
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            return await client.post(ENDPOINT, json=body)

    @pytest.mark.asyncio
    async def test_read_failure_is_generic_500(self):
        store = FailingStore(
            read_error=StoreUnavailableError(context={"response_body": "bin secret"})
        )

        response = await self._post(
            store, {"action": "createUser", "userId": "bob", "passwordHash": "hb"}
        )

        assert response.status_code == 500
        assert response.json() == {"error": "internal server error"}
        assert "secret" not in response.text
        assert_cors(response)
        assert store.write_count == 0

    @pytest.mark.asyncio
    async def test_write_failure_is_generic_500(self):
        notifier = RecordingNotifier()
        store = FailingStore(
            record={"users": [{"id": "alice", "passwordHash": ALICE_HASH, "notes": []}]},
            write_error=StoreWriteFailedError(response_body="quota exceeded", status_code=403),
        )
        app = create_app(store=store, notifier=notifier)
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post(
                ENDPOINT,
                json={"action": "addNote", "userId": "alice", "passwordHash": ALICE_HASH, "text": "t"},
            )

        assert response.status_code == 500
        assert response.json() == {"error": "internal server error"}
        assert "quota" not in response.text
        assert notifier.events == []

    @pytest.mark.asyncio
    async def test_unexpected_error_is_generic_500(self):
        response = await self._post(
            ExplodingStore(), {"action": "createUser", "userId": "bob", "passwordHash": "hb"}
        )

        assert response.status_code == 500
        assert response.json() == {"error": "internal server error"}
        assert "boom" not in response.text


class TestErrorLanguage:

    @pytest.mark.asyncio
    async def test_russian_messages(self, test_client):
        with patch("noteme.main.settings.error_language", "ru"):
            response = await test_client.post(
                ENDPOINT,
                json={"action": "addNote", "userId": "alice", "passwordHash": "bad", "text": "t"},
            )

        assert response.status_code == 401
        assert response.json() == {"error": "Неверный пароль"}


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["store"] == "reachable"
        assert "version" in data
        assert data["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_degraded_when_store_down(self):
        store = FailingStore(read_error=StoreUnavailableError())
        app = create_app(store=store, notifier=RecordingNotifier())
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["store"] == "unreachable"
