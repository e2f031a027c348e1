"""
NoteMe Backend — Request ID Middleware
=======================================

What:  Assigns a short correlation ID to each request and returns it in the
       X-Request-ID response header.
Why:   One API call produces several log lines (access log, store read, store
       write, deploy hook). The ID ties them together.
How:   Reuses a client-provided X-Request-ID, otherwise generates one; stores
       it in a ContextVar for loggers and in request.state for handlers.

The ID is never put in response bodies; error bodies only carry `error`.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local storage for the current request ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware that assigns a unique ID to each request for tracing."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 8 chars is enough to correlate log lines for a service this size
        rid = request.headers.get("X-Request-ID", str(uuid.uuid4())[:8])

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
