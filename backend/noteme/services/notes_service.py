"""
NoteMe Backend — Notes Service (Business Logic)
================================================

What:  The two state transitions of NoteMe: createUser and addNote.
Why:   Keeps validation, ownership checks and id assignment out of the route.
How:   Each operation is one read-modify-write cycle against the whole document:

    ┌──────────┐   ┌──────────┐   ┌──────────────┐   ┌──────────┐   ┌──────────┐
    │ Validate │──▶│   Read   │──▶│ Check/Mutate │──▶│  Write   │──▶│  Notify  │
    │  input   │   │ document │   │  in memory   │   │ document │   │  deploy  │
    └──────────┘   └──────────┘   └──────────────┘   └──────────┘   └──────────┘

    Input-only checks (field presence, login format) run before the read, so
    a malformed request never touches the store. Checks that need the
    document (duplicate login, unknown user, password) run after the read.
    Every failure happens before the write, so a rejected request never
    changes the stored document.

Consistency:
    There is no revision token and no lock. Two cycles that both read before
    either writes lose one update (the later write wins). This is the
    documented behavior of the single-document design.

Passwords:
    `passwordHash` is hashed by the client. The service stores it as given
    and compares it with plain string equality. It performs no hashing.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional

from noteme.exceptions import (
    AuthError,
    DuplicateError,
    NotFoundError,
    UnknownActionError,
    ValidationError,
)
from noteme.schemas.api import ActionResponse
from noteme.schemas.document import Document, Note, User
from noteme.services.deploy_hook import DeployNotifier, NullDeployNotifier
from noteme.services.store_base import DocumentStore

logger = logging.getLogger(__name__)

LOGIN_PATTERN = re.compile(r"[a-z0-9_]+")

CREATE_USER = "createUser"
ADD_NOTE = "addNote"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _missing(*values: Optional[str]) -> bool:
    return any(not isinstance(v, str) or not v for v in values)


class NotesService:
    """
    Business logic layer for user and note creation.

    Args:
        store:    DocumentStore holding the one document
        notifier: Deploy hook, called after each successful write
        clock:    Source of `createdAt` timestamps (UTC)
    """

    def __init__(
        self,
        store: DocumentStore,
        notifier: Optional[DeployNotifier] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.notifier = notifier or NullDeployNotifier()
        self.clock = clock
        self._actions = {
            CREATE_USER: self._dispatch_create_user,
            ADD_NOTE: self._dispatch_add_note,
        }

    async def dispatch(self, action: Any, payload: Mapping[str, Any]) -> ActionResponse:
        """
        Route an action tag to its operation.

        Raises:
            UnknownActionError: `action` is not createUser / addNote. Raised
                before the store is contacted.
        """
        handler = self._actions.get(action) if isinstance(action, str) else None
        if handler is None:
            raise UnknownActionError(action)
        return await handler(payload)

    async def _dispatch_create_user(self, payload: Mapping[str, Any]) -> ActionResponse:
        await self.create_user(payload.get("userId"), payload.get("passwordHash"))
        return ActionResponse(success=True)

    async def _dispatch_add_note(self, payload: Mapping[str, Any]) -> ActionResponse:
        note_id = await self.add_note(
            payload.get("userId"), payload.get("passwordHash"), payload.get("text")
        )
        return ActionResponse(success=True, note_id=note_id)

    async def create_user(self, user_id: Optional[str], password_hash: Optional[str]) -> User:
        """
        Append a new user with no notes.

        Validation order (first failure wins):
            1. userId and passwordHash present   → ValidationError("missing fields")
            2. userId matches [a-z0-9_]+          → ValidationError("invalid login format")
            3. userId not taken (case-sensitive)  → DuplicateError("user exists")

        Raises:
            StoreUnavailableError / StoreWriteFailedError from the store.
        """
        if _missing(user_id, password_hash):
            raise ValidationError(message="missing fields", code="missing_fields")

        if not LOGIN_PATTERN.fullmatch(user_id):
            raise ValidationError(
                message="invalid login format",
                field="userId",
                code="invalid_login_format",
            )

        def mutate(document: Document) -> User:
            if document.find_user(user_id) is not None:
                raise DuplicateError(user_id)
            user = User(id=user_id, password_hash=password_hash, notes=[])
            document.users.append(user)
            return user

        user = await self._read_modify_write(mutate, CREATE_USER)
        logger.info("User created: %s", user_id)
        return user

    async def add_note(
        self,
        user_id: Optional[str],
        password_hash: Optional[str],
        text: Optional[str],
    ) -> int:
        """
        Append a note to an existing user's notes and return its id.

        Validation order (first failure wins):
            1. userId, passwordHash, text present → ValidationError("missing fields")
               (whitespace-only text counts as missing)
            2. user exists                        → NotFoundError("user")
            3. passwordHash equals stored value   → AuthError

        The new id is max(existing ids) + 1, or 1 for the first note. Gaps
        left by hand edits are not reused. Text is trimmed at both ends;
        inner whitespace and newlines are kept.
        """
        if _missing(user_id, password_hash, text) or not text.strip():
            raise ValidationError(message="missing fields", code="missing_fields")

        def mutate(document: Document) -> int:
            user = document.find_user(user_id)
            if user is None:
                raise NotFoundError(resource="user", resource_id=user_id)
            if user.password_hash != password_hash:
                raise AuthError(context={"user_id": user_id})

            note_id = user.next_note_id()
            user.notes.append(
                Note(id=note_id, text=text.strip(), created_at=self.clock())
            )
            return note_id

        note_id = await self._read_modify_write(mutate, ADD_NOTE)
        logger.info("Note %d added for user %s", note_id, user_id)
        return note_id

    async def _read_modify_write(self, mutate: Callable[[Document], Any], event: str) -> Any:
        """
        One full cycle: read, apply `mutate` in memory, write, notify.

        `mutate` raising leaves the store untouched (nothing was written).
        The deploy hook runs only after a successful write.
        """
        document = await self.store.read()
        result = mutate(document)
        await self.store.write(document)
        await self.notifier.notify(event)
        return result
