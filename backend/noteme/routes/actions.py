"""
NoteMe Backend — Action Endpoint
=================================

What:  The single write endpoint used by the static front end (admin.html).
Why:   One URL, one JSON body with an `action` tag, keeps the browser side
       to a single fetch() call for both account creation and note posting.
How:   Parses the body, delegates to NotesService.dispatch(), returns JSON.

Contract:
    POST    /api/post   {action, userId, passwordHash, text?}
            200 {"success": true[, "noteId": n]}
            400/401/404/500 {"error": "..."} (see exception handlers in main.py)
    OPTIONS /api/post   200, empty body, CORS headers
    other   /api/post   405 {"error": "method not allowed"}

CORS:
    The front end is served from a different origin (static hosting), so
    every response from this endpoint carries the three CORS headers below.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError as SchemaValidationError

from noteme.dependencies import get_notes_service
from noteme.exceptions import MethodNotAllowedError, ValidationError
from noteme.schemas.api import ActionRequest, ActionResponse, ErrorResponse
from noteme.services.notes_service import NotesService

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api", tags=["Notes"])


@router.options(
    "/post",
    status_code=200,
    summary="CORS preflight",
    response_class=Response,
)
async def preflight() -> Response:
    """Browser preflight for cross-origin POSTs. Empty body, CORS headers only."""
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post(
    "/post",
    response_model=ActionResponse,
    responses={
        200: {"description": "Action applied"},
        400: {"description": "Missing fields, invalid login, user exists, unknown action", "model": ErrorResponse},
        401: {"description": "Password hash mismatch", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
        500: {"description": "Document store failure", "model": ErrorResponse},
    },
    summary="Create a user or add a note",
    description=(
        "Single action-dispatch endpoint. `createUser` registers a login with a "
        "client-side password hash; `addNote` appends a note to that user's list "
        "and returns the assigned note id."
    ),
)
async def post_action(
    request: Request,
    service: NotesService = Depends(get_notes_service),
) -> JSONResponse:
    """
    Apply one action to the document.

    Why parse the body by hand:
        FastAPI would answer a missing/mistyped field with 422 and its own
        error shape. The contract promises 400 with `{"error": ...}`, and
        missing fields are reported by the service in a fixed order.
    """
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError(message="request body is not valid JSON", code="invalid_request")

    if not isinstance(body, dict):
        raise ValidationError(message="request body must be a JSON object", code="invalid_request")

    try:
        action_request = ActionRequest.model_validate(body)
    except SchemaValidationError as e:
        raise ValidationError(
            message="request fields have the wrong type",
            code="invalid_request",
            context={"errors": e.error_count()},
        )

    result = await service.dispatch(
        action_request.action,
        action_request.model_dump(by_alias=True),
    )

    return JSONResponse(status_code=200, content=result.to_body(), headers=CORS_HEADERS)


@router.api_route(
    "/post",
    methods=["GET", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def reject_method(request: Request) -> None:
    """Only POST and OPTIONS are served."""
    raise MethodNotAllowedError(request.method)
