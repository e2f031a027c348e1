"""
NoteMe Backend — Pydantic Request/Response Schemas
===================================================

What:  Pydantic models defining the API contract between the static front end
       and the action endpoint.
Why:   Automatic serialization and OpenAPI doc generation.
How:   The request model is deliberately loose (every field optional) so that
       missing fields are reported by NotesService with the contract's own
       messages instead of FastAPI's generic 422.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models: what the client sends
# ══════════════════════════════════════════════════════════════════════════


class ActionRequest(BaseModel):
    """
    What:  Body of POST /api/post.
    Who:   Sent by admin.html for both account creation and note posting.

    Fields:
        action:       "createUser" | "addNote"
        userId:       Login
        passwordHash: Hash computed in the browser; compared verbatim
        text:         Note body (addNote only)
    """
    action: Optional[str] = Field(default=None, description="createUser or addNote")
    user_id: Optional[str] = Field(default=None, alias="userId")
    password_hash: Optional[str] = Field(default=None, alias="passwordHash")
    text: Optional[str] = Field(default=None, description="Note text (addNote only)")

    model_config = ConfigDict(populate_by_name=True)


# ══════════════════════════════════════════════════════════════════════════
# Response Models: what the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class ActionResponse(BaseModel):
    """
    What:  Success acknowledgment.
    Why noteId optional: Only addNote assigns an id; createUser returns
           `{"success": true}` with no noteId key at all.
    """
    success: bool = Field(default=True)
    note_id: Optional[int] = Field(default=None, alias="noteId")

    model_config = ConfigDict(populate_by_name=True)

    def to_body(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ErrorResponse(BaseModel):
    """
    What:  Error body for every non-2xx response from the action endpoint.
    Why a single field: The front end shows `error` as-is in an alert.
    """
    error: str = Field(description="Human-readable error message")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and store status.
    Who:   Returned by GET /health for monitoring and deploy checks.
    """
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    store: str = Field(description="Document store: reachable, unreachable, not_configured")
    uptime_seconds: float = Field(description="Seconds since service started")
