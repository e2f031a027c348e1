# Middleware package init
"""
NoteMe Backend — Middleware Package
====================================

Middleware Chain:
    Request → [Request ID] → [Logging] → Route Handler

    1. Request ID first, so the access log line carries the correlation ID
    2. Logging measures the full handler time, store calls included

CORS is not a middleware here: the action endpoint and the exception
handlers set the three CORS headers themselves (see routes/actions.py).
"""
