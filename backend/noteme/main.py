"""
NoteMe Backend — FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes service wiring, middleware registration, route mounting,
       error mapping and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn noteme.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐                   │
    │  │ Req ID   │→│  Logging        │                   │
    │  └──────────┘ └─────────────────┘                   │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────────────────┐ ┌─────────────────┐     │
    │  │ POST/OPTIONS /api/post │ │ GET /health     │     │
    │  └────────────────────────┘ └─────────────────┘     │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐  │
    │  │ Validation→400 │ Auth→401 │ NotFound→404     │  │
    │  │ Method→405     │ Store→500 │ Exception→500   │  │
    │  └──────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Every error body is `{"error": <message>}` in ERROR_LANGUAGE and carries the
CORS headers, so the browser front end can read it.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from noteme import __version__
from noteme.config import settings
from noteme.dependencies import store_from_settings
from noteme.exceptions import (
    AuthError,
    MethodNotAllowedError,
    NoteMeError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from noteme.messages import translate
from noteme.logging_setup import setup_logging
from noteme.middleware.logging import RequestLoggingMiddleware
from noteme.middleware.request_id import RequestIDMiddleware, request_id_var
from noteme.routes import actions, health
from noteme.routes.actions import CORS_HEADERS
from noteme.services.deploy_hook import DeployNotifier, deploy_notifier_from_settings
from noteme.services.notes_service import NotesService
from noteme.services.store_base import DocumentStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: configure logging, report missing configuration.
    Shutdown: close the shared outbound HTTP client.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("NoteMe Backend %s starting up...", __version__)

    # Keep serving on bad config; /health reports the store as not configured
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    service: NotesService = app.state.notes_service
    logger.info("Document store: %s", service.store.name)
    logger.info("Deploy hook: %s", "enabled" if settings.deploy_hook_url else "disabled")
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("NoteMe Backend shutting down...")
    await service.store.aclose()
    await service.notifier.aclose()
    http_client: Optional[httpx.AsyncClient] = getattr(app.state, "http_client", None)
    if http_client is not None:
        await http_client.aclose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(status_code: int, code: str) -> JSONResponse:
    """`{"error": <localized message>}` with the CORS headers attached."""
    return JSONResponse(
        status_code=status_code,
        content={"error": translate(code, settings.error_language)},
        headers=CORS_HEADERS,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and `{"error": ...}` bodies.

    Handler hierarchy:
        ValidationError (+ DuplicateError, UnknownActionError) → 400
        AuthError              → 401
        NotFoundError          → 404
        MethodNotAllowedError  → 405
        StoreError             → 500 (details logged, never returned)
        NoteMeError (base)     → its status_code
        HTTPException          → its status code (unknown paths, HEAD, ...)
        Exception (fallback)   → 500

    Security: responses never carry stack traces, store response bodies or
    exception messages from libraries. Context dicts are logged server-side.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error (%s): %s", rid, exc.code, exc.message)
        return error_response(400, exc.code)

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        rid = request_id_var.get("")
        logger.warning("[%s] Authentication failed: %s", rid, exc.context)
        return error_response(401, exc.code)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, exc.code)

    @app.exception_handler(MethodNotAllowedError)
    async def handle_method_not_allowed(request: Request, exc: MethodNotAllowedError):
        return error_response(405, exc.code)

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        """Store unreachable or write rejected: generic message, context logged."""
        rid = request_id_var.get("")
        logger.error(
            "[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context
        )
        return error_response(500, "internal_error")

    @app.exception_handler(NoteMeError)
    async def handle_app_error(request: Request, exc: NoteMeError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return error_response(exc.status_code, exc.code)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            return error_response(405, "method_not_allowed")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=CORS_HEADERS,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: full stack trace to the log, generic 500 to the client."""
        rid = request_id_var.get("")
        logger.error(
            "[%s] Unexpected error: %s",
            rid,
            str(exc),
            exc_info=True,
        )
        return error_response(500, "internal_error")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    store: Optional[DocumentStore] = None,
    notifier: Optional[DeployNotifier] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        store:    DocumentStore override (tests pass an in-memory store).
                  Default: the store selected by STORE_BACKEND.
        notifier: DeployNotifier override. Default: webhook when
                  DEPLOY_HOOK_URL is set, otherwise a no-op.

    Why build services here (not in lifespan):
        Test clients built on ASGITransport do not run the lifespan, but
        still need app.state.notes_service.
    """
    app = FastAPI(
        title="NoteMe API",
        description=(
            "Minimal notes service. Users and notes live in one JSON document "
            "stored in JSONBin.io; a static site is rebuilt from it after each change."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Wire Services ─────────────────────────────────────────────────────
    # One pooled client for store + deploy hook when both are built from settings
    if store is None or notifier is None:
        app.state.http_client = httpx.AsyncClient(timeout=settings.store_timeout_seconds)
    client = getattr(app.state, "http_client", None)
    app.state.notes_service = NotesService(
        store=store if store is not None else store_from_settings(client=client),
        notifier=notifier if notifier is not None else deploy_notifier_from_settings(client=client),
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: RequestID → Logging → route
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(actions.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `noteme.main:app` to be importable
app = create_app()
