"""
NoteMe Backend — Persisted Document Model
==========================================

What:  Pydantic models for the ONE JSON document holding all users and notes.
Why:   The document is read and written as a whole; parsing it into typed
       models catches a corrupted document before it is modified and written back.
How:   Field aliases keep the stored camelCase names (`passwordHash`,
       `createdAt`) while Python code uses snake_case attributes.

Stored shape:
    {
        "users": [
            {
                "id": "alice",
                "passwordHash": "<opaque client-side hash>",
                "notes": [
                    {"id": 1, "text": "hello", "createdAt": "2024-01-15T12:00:00Z"}
                ]
            }
        ]
    }

Invariants (enforced by NotesService, not by these models):
    - users[].id unique, matches [a-z0-9_]+, insertion order = creation order
    - notes[].id unique per user, assigned as max + 1 (or 1)
    - nothing is ever deleted or edited

Why extra="allow":
    The document is shared with hand edits and the site builder. Keys we do
    not know about must survive a read-modify-write cycle untouched.

Strict known fields:
    Unknown keys are tolerated, but the known ones are not: a note with
    id < 1, a non-integer id or no `createdAt` fails validation, and the
    store read raises StoreUnavailableError. One bad hand edit therefore
    turns every createUser/addNote into a 500 until the document is fixed.
    Writing back a document we could not fully parse would risk silently
    rewriting the broken note, so the read refuses instead.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Note(BaseModel):
    """A single note. Immutable once appended."""

    id: int = Field(ge=1, description="Per-user note id, starts at 1")
    text: str = Field(description="Note body, surrounding whitespace trimmed")
    created_at: datetime = Field(alias="createdAt", description="Server clock at creation")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class User(BaseModel):
    """A user and the notes they own."""

    id: str = Field(description="Login, [a-z0-9_]+")
    password_hash: str = Field(
        alias="passwordHash",
        description="Caller-supplied pre-hashed credential (never hashed server-side)",
    )
    notes: List[Note] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def next_note_id(self) -> int:
        """One greater than the highest existing note id, or 1 when there are none."""
        if not self.notes:
            return 1
        return max(note.id for note in self.notes) + 1


class Document(BaseModel):
    """The entire persisted state."""

    users: List[User] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @classmethod
    def from_record(cls, record: Optional[Dict[str, Any]]) -> "Document":
        """
        Build a Document from a raw stored record.

        A missing/null record or a record without `users` is an empty
        document. This is about the SHAPE of a successfully read record;
        a failed read never reaches this method.
        """
        if not record:
            return cls()
        return cls.model_validate(record)

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the stored JSON shape (camelCase keys, ISO timestamps)."""
        return self.model_dump(mode="json", by_alias=True)

    def find_user(self, user_id: str) -> Optional[User]:
        """Exact, case-sensitive lookup by login."""
        for user in self.users:
            if user.id == user_id:
                return user
        return None
