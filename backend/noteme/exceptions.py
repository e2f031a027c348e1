"""
NoteMe Backend — Custom Exception Hierarchy
============================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages. They replace generic Python
       exceptions that would leak internal details to the client.
How:   Each exception class carries a message code, a message and an optional
       context dict. Global exception handlers (registered in main.py) catch
       these and return `{"error": <message>}` with the matching status code.
Who:   Raised by services and the store clients; caught by global handlers.

Exception Hierarchy:
    NoteMeError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    │   ├── DuplicateError       → 400 (login already taken)
    │   └── UnknownActionError   → 400 (bad dispatch tag)
    ├── AuthError                → 401 Unauthorized (password hash mismatch)
    ├── NotFoundError            → 404 Not Found
    ├── MethodNotAllowedError    → 405 Method Not Allowed
    └── StoreError               → 500 Internal Server Error
        ├── StoreUnavailableError  (read failed / store not configured)
        └── StoreWriteFailedError  (write rejected or failed)

The `code` attribute is stable and language-independent; the response text is
looked up from it in `noteme.messages`.
"""

from typing import Any, Dict, Optional


class NoteMeError(Exception):
    """
    Base exception for all NoteMe application errors.

    Attributes:
        code:     Stable message key (see noteme.messages)
        message:  Human-readable description (English)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500
    code = "internal_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
        code: Optional[str] = None,
    ):
        self.message = message
        self.context = context or {}
        if code:
            self.code = code
        super().__init__(self.message)


class ValidationError(NoteMeError):
    """
    Raised when client input fails validation.

    When:    Missing fields, login not matching [a-z0-9_]+, malformed body.
    HTTP:    400 Bad Request
    """

    status_code = 400
    code = "invalid_request"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        code: Optional[str] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx, code=code)
        self.field = field


class DuplicateError(ValidationError):
    """
    Raised when createUser is called with a login that already exists.

    The comparison is case-sensitive, but logins are restricted to lowercase
    so two distinct valid logins never differ only by case.
    """

    code = "user_exists"

    def __init__(self, user_id: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["user_id"] = user_id
        super().__init__(message="user exists", field="userId", context=ctx)
        self.user_id = user_id


class UnknownActionError(ValidationError):
    """Raised when the dispatch tag is not a known action. HTTP 400."""

    code = "unknown_action"

    def __init__(self, action: Any = None, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["action"] = action
        super().__init__(message="unknown action", field="action", context=ctx)
        self.action = action


class AuthError(NoteMeError):
    """
    Raised when the supplied password hash does not match the stored one.

    The server performs no hashing: the caller sends an already-hashed value
    and it is compared to the stored value with plain string equality.
    HTTP: 401 Unauthorized
    """

    status_code = 401
    code = "wrong_password"

    def __init__(
        self,
        message: str = "wrong password",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NoteMeError):
    """
    Raised when a requested resource does not exist.

    When:    addNote for a user id that is not in the document.
    HTTP:    404 Not Found
    """

    status_code = 404
    code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(
            message=f"{resource} not found",
            context=ctx,
            code=f"{resource}_not_found",
        )
        self.resource = resource


class MethodNotAllowedError(NoteMeError):
    """Raised for any method other than POST/OPTIONS on the action endpoint."""

    status_code = 405
    code = "method_not_allowed"

    def __init__(self, method: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["method"] = method
        super().__init__(message="method not allowed", context=ctx)


class StoreError(NoteMeError):
    """
    Base class for document store failures.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. Store response
        bodies and URLs are kept in `context` and only logged server-side.
    """

    status_code = 500
    code = "internal_error"


class StoreUnavailableError(StoreError):
    """
    Raised when the document could not be read.

    When:    Transport failure, non-2xx status, unparseable body, or missing
             credentials. The read path NEVER substitutes an empty document:
             a later write of that empty document would wipe real data.
    """

    def __init__(
        self,
        message: str = "Document store is unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreWriteFailedError(StoreError):
    """
    Raised when a full-document write was rejected or did not complete.

    Attributes:
        response_body: Raw body returned by the store (diagnostics only)
    """

    def __init__(
        self,
        message: str = "Document store write failed",
        response_body: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if response_body is not None:
            ctx["response_body"] = response_body
        if status_code is not None:
            ctx["store_status"] = status_code
        super().__init__(message=message, context=ctx)
        self.response_body = response_body
