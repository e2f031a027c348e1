"""
NoteMe Backend — Notes Service Unit Tests
==========================================

What:  Tests for NotesService business logic (createUser, addNote, dispatch).
Why:   The service owns validation order, id assignment and the
       read-modify-write cycle against the shared document.
How:   In-memory document store and a recording deploy notifier; no HTTP.

What we test:
    ✅ createUser validation order and duplicate detection
    ✅ addNote id assignment, trimming, ownership checks
    ✅ Rejected requests never write
    ✅ Unknown actions never touch the store
    ✅ Lost update when two cycles overlap
"""

import asyncio

import pytest

from noteme.exceptions import (
    AuthError,
    DuplicateError,
    NotFoundError,
    UnknownActionError,
    ValidationError,
)
from noteme.schemas.document import Document
from noteme.services.memory_store import InMemoryDocumentStore
from noteme.services.notes_service import NotesService

from conftest import ALICE_HASH, RecordingNotifier


class TestCreateUser:
    """Tests for the createUser operation."""

    @pytest.mark.asyncio
    async def test_create_user_appends_empty_user(self, memory_store, notifier):
        service = NotesService(store=memory_store, notifier=notifier)

        await service.create_user("bob_42", "hash-b")

        assert memory_store.record == {
            "users": [{"id": "bob_42", "passwordHash": "hash-b", "notes": []}]
        }
        assert notifier.events == ["createUser"]

    @pytest.mark.asyncio
    async def test_users_keep_creation_order(self, memory_store):
        service = NotesService(store=memory_store)

        for login in ["zed", "amy", "mike"]:
            await service.create_user(login, "x")

        assert [u["id"] for u in memory_store.record["users"]] == ["zed", "amy", "mike"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id,password_hash", [
        (None, "h"),
        ("bob", None),
        ("", "h"),
        ("bob", ""),
    ])
    async def test_missing_fields_rejected_before_read(self, memory_store, user_id, password_hash):
        service = NotesService(store=memory_store)

        with pytest.raises(ValidationError) as exc_info:
            await service.create_user(user_id, password_hash)

        assert exc_info.value.code == "missing_fields"
        assert memory_store.read_count == 0
        assert memory_store.write_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", [
        "Alice", "bob smith", "bob-smith", "bob.smith", "bob!", "ünï", " bob", "bob\n",
    ])
    async def test_invalid_login_format(self, memory_store, user_id):
        service = NotesService(store=memory_store)

        with pytest.raises(ValidationError) as exc_info:
            await service.create_user(user_id, "h")

        assert exc_info.value.code == "invalid_login_format"
        assert memory_store.write_count == 0

    @pytest.mark.asyncio
    async def test_trailing_newline_login_never_stored(self, memory_store):
        service = NotesService(store=memory_store)

        with pytest.raises(ValidationError) as exc_info:
            await service.create_user("bob\n", "h")

        assert exc_info.value.code == "invalid_login_format"
        assert memory_store.read_count == 0
        assert memory_store.record == {"users": []}

    @pytest.mark.asyncio
    async def test_missing_fields_wins_over_format(self, memory_store):
        """An empty hash with a bad login reports missing fields first."""
        service = NotesService(store=memory_store)

        with pytest.raises(ValidationError) as exc_info:
            await service.create_user("Bad Login", "")

        assert exc_info.value.code == "missing_fields"

    @pytest.mark.asyncio
    async def test_duplicate_user_rejected(self, notes_service, seeded_store, notifier):
        with pytest.raises(DuplicateError) as exc_info:
            await notes_service.create_user("alice", "another-hash")

        assert exc_info.value.code == "user_exists"
        assert seeded_store.write_count == 0
        assert notifier.events == []

    @pytest.mark.asyncio
    async def test_duplicate_is_a_validation_error(self, notes_service):
        with pytest.raises(ValidationError):
            await notes_service.create_user("alice", ALICE_HASH)


class TestAddNote:
    """Tests for the addNote operation."""

    @pytest.mark.asyncio
    async def test_first_note_gets_id_1(self, notes_service, seeded_store, fixed_now, notifier):
        note_id = await notes_service.add_note("alice", ALICE_HASH, "hello")

        assert note_id == 1
        user = Document.from_record(seeded_store.record).find_user("alice")
        assert len(user.notes) == 1
        assert user.notes[0].text == "hello"
        assert user.notes[0].created_at == fixed_now
        assert notifier.events == ["addNote"]

    @pytest.mark.asyncio
    async def test_ids_increase(self, notes_service):
        ids = [await notes_service.add_note("alice", ALICE_HASH, f"n{i}") for i in range(3)]
        assert ids == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_next_id_follows_max_not_count(self, notifier):
        """After hand-edited ids {1, 2, 5} the next id is 6."""
        store = InMemoryDocumentStore({"users": [{
            "id": "alice",
            "passwordHash": ALICE_HASH,
            "notes": [
                {"id": 1, "text": "a", "createdAt": "2024-01-01T00:00:00Z"},
                {"id": 5, "text": "c", "createdAt": "2024-01-03T00:00:00Z"},
                {"id": 2, "text": "b", "createdAt": "2024-01-02T00:00:00Z"},
            ],
        }]})
        service = NotesService(store=store, notifier=notifier)

        assert await service.add_note("alice", ALICE_HASH, "d") == 6

    @pytest.mark.asyncio
    async def test_ids_are_scoped_per_user(self, memory_store):
        service = NotesService(store=memory_store)
        await service.create_user("amy", "ha")
        await service.create_user("bob", "hb")

        await service.add_note("amy", "ha", "one")
        await service.add_note("amy", "ha", "two")

        assert await service.add_note("bob", "hb", "first") == 1

    @pytest.mark.asyncio
    async def test_text_trimmed_inner_whitespace_kept(self, notes_service, seeded_store):
        await notes_service.add_note("alice", ALICE_HASH, "  \n line one\n\n  line  two \t\n")

        note = seeded_store.record["users"][0]["notes"][0]
        assert note["text"] == "line one\n\n  line  two"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id,password_hash,text", [
        (None, ALICE_HASH, "t"),
        ("alice", None, "t"),
        ("alice", ALICE_HASH, None),
        ("alice", ALICE_HASH, ""),
        ("alice", ALICE_HASH, "   \n\t"),
    ])
    async def test_missing_fields(self, notes_service, seeded_store, user_id, password_hash, text):
        with pytest.raises(ValidationError) as exc_info:
            await notes_service.add_note(user_id, password_hash, text)

        assert exc_info.value.code == "missing_fields"
        assert seeded_store.write_count == 0

    @pytest.mark.asyncio
    async def test_unknown_user(self, notes_service, seeded_store):
        with pytest.raises(NotFoundError) as exc_info:
            await notes_service.add_note("nobody", ALICE_HASH, "t")

        assert exc_info.value.code == "user_not_found"
        assert seeded_store.write_count == 0

    @pytest.mark.asyncio
    async def test_user_lookup_is_case_sensitive(self, notes_service):
        with pytest.raises(NotFoundError):
            await notes_service.add_note("ALICE", ALICE_HASH, "t")

    @pytest.mark.asyncio
    async def test_wrong_password_never_mutates(self, notes_service, seeded_store, notifier):
        before = seeded_store.record

        with pytest.raises(AuthError):
            await notes_service.add_note("alice", "not-the-hash", "t")

        assert seeded_store.record == before
        assert seeded_store.write_count == 0
        assert notifier.events == []

    @pytest.mark.asyncio
    async def test_password_compared_verbatim(self, notes_service):
        """No hashing or normalisation on the server side."""
        with pytest.raises(AuthError):
            await notes_service.add_note("alice", ALICE_HASH.upper(), "t")
        with pytest.raises(AuthError):
            await notes_service.add_note("alice", ALICE_HASH + " ", "t")


class TestDispatch:
    """Tests for the action-tag dispatcher."""

    @pytest.mark.asyncio
    async def test_create_then_add(self, memory_store):
        service = NotesService(store=memory_store)

        created = await service.dispatch("createUser", {"userId": "bob", "passwordHash": "hb"})
        added = await service.dispatch(
            "addNote", {"userId": "bob", "passwordHash": "hb", "text": "hi"}
        )

        assert created.to_body() == {"success": True}
        assert added.to_body() == {"success": True, "noteId": 1}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", ["deleteUser", "", None, "createuser", 42])
    async def test_unknown_action_does_not_touch_store(self, memory_store, action):
        service = NotesService(store=memory_store)

        with pytest.raises(UnknownActionError):
            await service.dispatch(action, {"userId": "bob", "passwordHash": "hb"})

        assert memory_store.read_count == 0
        assert memory_store.write_count == 0


class TestLostUpdate:
    """
    Documents the last-writer-wins behavior of the single-document design.

    Two addNote cycles both read before either writes; the second write
    replaces the first, so only one of the two notes survives.
    """

    class GatedStore(InMemoryDocumentStore):
        """Holds every read until `readers` reads are in flight."""

        def __init__(self, record, readers: int):
            super().__init__(record)
            self._readers = readers
            self._arrived = 0
            self._all_read = asyncio.Event()

        async def read(self):
            document = await super().read()
            self._arrived += 1
            if self._arrived >= self._readers:
                self._all_read.set()
            await self._all_read.wait()
            return document

    @pytest.mark.asyncio
    async def test_overlapping_add_note_loses_one_update(self):
        store = self.GatedStore(
            {"users": [{"id": "alice", "passwordHash": ALICE_HASH, "notes": []}]},
            readers=2,
        )
        service = NotesService(store=store, notifier=RecordingNotifier())

        first, second = await asyncio.gather(
            service.add_note("alice", ALICE_HASH, "from tab one"),
            service.add_note("alice", ALICE_HASH, "from tab two"),
        )

        # Both cycles saw an empty list, so both assigned id 1 and both wrote
        assert first == second == 1
        assert store.write_count == 2
        notes = store.record["users"][0]["notes"]
        assert len(notes) == 1
        assert notes[0]["text"] in {"from tab one", "from tab two"}

    @pytest.mark.asyncio
    async def test_sequential_cycles_keep_both(self, notes_service, seeded_store):
        await notes_service.add_note("alice", ALICE_HASH, "one")
        await notes_service.add_note("alice", ALICE_HASH, "two")

        assert [n["id"] for n in seeded_store.record["users"][0]["notes"]] == [1, 2]
