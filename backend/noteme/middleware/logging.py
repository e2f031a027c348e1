"""
NoteMe Backend — Request Logging Middleware
============================================

What:  One access-log line per HTTP request: method, path, status, duration.
Why:   The endpoint is the only writer of the shared document; knowing when
       each write request arrived and how long it took is the first thing
       needed to investigate a lost update.
How:   Times the downstream call and logs at a level derived from the status.

What we log vs what we DON'T log (privacy):
    ✅ Log: method, path, status, duration, IP, request ID
    ❌ Don't log: request body (it carries passwordHash and note text)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from noteme.middleware.request_id import request_id_var

logger = logging.getLogger("noteme.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs structured information about each HTTP request and response.

    Levels:
        5xx → ERROR (store failure or bug)
        4xx → WARNING (client error: bad input, wrong password, unknown user)
        2xx/3xx → INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path

        # Health probes are periodic; logging them drowns the write traffic
        if path == "/health":
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        rid = request_id_var.get("")

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
