"""
NoteMe Backend — Service Wiring
================================

What:  Builds the configured DocumentStore / DeployNotifier and exposes the
       NotesService to route handlers through FastAPI dependency injection.
Why:   Routes never construct stores themselves, and tests can hand
       create_app() an in-memory store instead of JSONBin.
"""

from typing import Optional

import httpx
from fastapi import Request

from noteme.config import settings
from noteme.services.file_store import FileDocumentStore
from noteme.services.jsonbin_store import jsonbin_store_from_settings
from noteme.services.memory_store import InMemoryDocumentStore
from noteme.services.notes_service import NotesService
from noteme.services.store_base import DocumentStore


def store_from_settings(client: Optional[httpx.AsyncClient] = None) -> DocumentStore:
    """Select the DocumentStore named by STORE_BACKEND."""
    if settings.store_backend == "file":
        return FileDocumentStore(settings.data_file)
    if settings.store_backend == "memory":
        return InMemoryDocumentStore()
    return jsonbin_store_from_settings(client=client)


def get_notes_service(request: Request) -> NotesService:
    """FastAPI dependency: the app-wide NotesService built in create_app()."""
    return request.app.state.notes_service
