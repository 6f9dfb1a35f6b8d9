"""
UserHub Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the error taxonomy of the API.
How:   Each exception carries a client-safe message, an optional context dict
       (logged, never returned) and the HTTP status it maps to. Global
       exception handlers (registered in main.py) turn them into envelopes.
Who:   Raised by the service layer; caught by global handlers.

Exception Hierarchy:
    UserHubError (base)          → 500 Internal Server Error
    ├── ValidationError          → 400 Bad Request
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class UserHubError(Exception):
    """
    Base exception for all UserHub application errors.

    Attributes:
        message:      User-facing error description (safe to return in API response)
        context:      Additional debug info (logged but NOT returned to client)
        status_code:  HTTP status used for both the transport and the envelope code
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(UserHubError):
    """
    Raised when the request body cannot be decoded or fails validation.

    HTTP: 400 Bad Request. The message names the offending field so the
    client can correct its input.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(UserHubError):
    """
    Raised when a requested record does not exist.

    When:  GET/PUT/DELETE /users/{id} with an unknown or non-numeric id,
           or a mutation that affected zero rows.
    HTTP:  404 Not Found
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "User",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)


class ConflictError(UserHubError):
    """
    Raised when a write violates a uniqueness constraint.

    When:  Create or update with an email that another user already has.
    HTTP:  409 Conflict. The transaction is rolled back; nothing is written.
    """

    status_code = 409

    def __init__(
        self,
        message: str = "A user with this email already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(UserHubError):
    """
    Raised when a database operation fails unexpectedly.

    When:  Connection lost mid-query, query error, any constraint other than
           email uniqueness.
    HTTP:  500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. The driver's
        error text is kept in `context` and logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
