"""
PIM Backend — Custom Exception Hierarchy
=========================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception carries a user-safe message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching status code.
Who:   Raised by services, the repository and the auth resolver.

Exception Hierarchy:
    PIMError (base)
    ├── ValidationError     → 400 Bad Request (client can fix)
    ├── UnauthorizedError   → 401 Unauthorized
    ├── NotFoundError       → 404 Not Found
    ├── ConflictError       → 409 Conflict
    └── DatabaseError       → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class PIMError(Exception):
    """
    Base exception for all PIM application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client,
                  except for ValidationError/ConflictError details)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PIMError):
    """
    Raised when client input fails validation.

    When:    Missing required fields, empty strings, malformed email or phone,
             status/priority outside the allowed set, empty update body.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Invalid email format",
            "details": {"field": "email"}
        }
    """

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


class UnauthorizedError(PIMError):
    """
    Raised when no verified user identifier can be extracted from a request.

    When:    No bearer token or session cookie, bad signature, expired token,
             wrong issuer/audience, or no user id claim.
    HTTP:    401 Unauthorized

    The reason is kept in `context` for the server log only; the client
    always receives the same message.
    """

    def __init__(
        self,
        reason: str = "missing credentials",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason
        super().__init__(message="Authentication required", context=ctx)
        self.reason = reason


class NotFoundError(PIMError):
    """
    Raised when a requested record does not exist for the calling user.

    When:    GET/PUT/DELETE /{resource}/{id} with an unknown id, a malformed
             id, or an id owned by another user.
    HTTP:    404 Not Found

    Another user's record is reported exactly like a missing one, so the
    response never reveals that the id exists.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(PIMError):
    """
    Raised when a write would break a uniqueness rule.

    When:    Creating or updating a contact with an email that another of
             the same user's contacts already uses.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "The record conflicts with an existing one",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DatabaseError(PIMError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost, pool exhausted, constraint violation, etc.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; SQL and driver
    details stay in the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
