"""
NoteMe Backend — Health Check Route
====================================

What:  Health check endpoint for monitoring and deploy probes.
Why:   The API is useless without its document store, so "healthy" means the
       store answered a read.
How:   Asks the configured DocumentStore for a health check.

    Status levels:
    - healthy:   store reachable
    - degraded:  store unreachable or not configured (HTTP 200, flag for monitoring)

Note: with JSONBin every health probe costs one read request against the
bin's quota. Keep probe intervals long.
"""

import logging
import time

from fastapi import APIRouter, Depends

from noteme import __version__
from noteme.dependencies import get_notes_service
from noteme.schemas.api import HealthResponse
from noteme.services.jsonbin_store import JsonBinDocumentStore
from noteme.services.notes_service import NotesService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    service: NotesService = Depends(get_notes_service),
) -> HealthResponse:
    """Probe the document store and report uptime."""
    store = service.store

    if isinstance(store, JsonBinDocumentStore) and not store.configured:
        store_status = "not_configured"
    elif await store.health_check():
        store_status = "reachable"
    else:
        store_status = "unreachable"

    overall = "healthy" if store_status == "reachable" else "degraded"
    if overall != "healthy":
        logger.warning("Health check: store %s", store_status)

    return HealthResponse(
        status=overall,
        version=__version__,
        store=store_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
