"""
NoteMe Backend — Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (in-memory store, fixed clock,
       recording deploy notifier, API client).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── memory_store: empty InMemoryDocumentStore
    ├── seeded_store: store holding user "alice" (hash "h-alice") with no notes
    ├── fixed_now / fixed_clock: deterministic createdAt values
    ├── notifier: DeployNotifier that records events instead of POSTing
    ├── notes_service: NotesService over seeded_store + notifier
    └── test_client: HTTPX AsyncClient bound to an app over seeded_store
"""

import os
from datetime import datetime, timezone
from typing import List

# Override settings for testing BEFORE any app imports
# Why: importing noteme.main builds an app from settings; it must not point at JSONBin
os.environ["STORE_BACKEND"] = "memory"
os.environ["JSONBIN_BIN_ID"] = ""
os.environ["JSONBIN_API_KEY"] = ""
os.environ.pop("DEPLOY_HOOK_URL", None)
os.environ["ERROR_LANGUAGE"] = "en"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from noteme.services.deploy_hook import DeployNotifier
from noteme.services.memory_store import InMemoryDocumentStore
from noteme.services.notes_service import NotesService


ALICE_HASH = "h-alice"


class RecordingNotifier(DeployNotifier):
    """Collects notify() events; lets tests assert the hook ran (or did not)."""

    def __init__(self):
        self.events: List[str] = []

    async def notify(self, event: str) -> None:
        self.events.append(event)


@pytest.fixture
def memory_store():
    return InMemoryDocumentStore()


@pytest.fixture
def seeded_store():
    """A document with one user and no notes."""
    return InMemoryDocumentStore(
        {"users": [{"id": "alice", "passwordHash": ALICE_HASH, "notes": []}]}
    )


@pytest.fixture
def fixed_now():
    return datetime(2024, 1, 15, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock(fixed_now):
    return lambda: fixed_now


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def notes_service(seeded_store, notifier, fixed_clock):
    return NotesService(store=seeded_store, notifier=notifier, clock=fixed_clock)


@pytest_asyncio.fixture
async def test_client(seeded_store, notifier):
    """
    HTTPX AsyncClient talking to an app built over `seeded_store`.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from noteme.main import create_app
    app = create_app(store=seeded_store, notifier=notifier)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
