"""
Scholar Stream Backend: Custom Exception Hierarchy
===================================================

What:  Application-specific exceptions for the different error scenarios.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching status code.
Who:   Raised by the auth dependencies and the services; caught by the handlers.

Exception Hierarchy:
    ScholarStreamError (base)
    ├── ValidationError        → 400 Bad Request
    ├── AuthenticationError    → 401 Unauthorized (no bearer token)
    ├── InvalidTokenError      → 403 Forbidden (token failed verification)
    ├── ForbiddenError         → 403 Forbidden (role guard rejected)
    ├── NotFoundError          → 404 Not Found
    ├── DatabaseError          → 500 Internal Server Error
    └── PaymentProviderError   → 500 Internal Server Error (provider text echoed)
"""

from typing import Any, Dict, Optional


class ScholarStreamError(Exception):
    """
    Base exception for all Scholar Stream application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ScholarStreamError):
    """
    Raised when client input fails a business rule.

    When:    Missing email on user creation, malformed document id.
    HTTP:    400 Bad Request

    FastAPI's own body-schema validation still answers with 422; this
    exception covers the checks the services make themselves.
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


class AuthenticationError(ScholarStreamError):
    """No bearer token was supplied. HTTP 401."""

    def __init__(
        self,
        message: str = "No token provided",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidTokenError(ScholarStreamError):
    """
    The bearer token could not be verified.

    When:    Bad signature, expired `exp`, malformed token, or no secret configured.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Invalid token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(ScholarStreamError):
    """
    The authenticated caller lacks the role a route requires.

    HTTP:    403 Forbidden, with a role-specific message
             ("Forbidden: Admins only", "Forbidden: Moderators only").
    """

    def __init__(
        self,
        message: str = "Forbidden",
        required_role: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if required_role:
            ctx["required_role"] = required_role
        super().__init__(message=message, context=ctx)
        self.required_role = required_role


class NotFoundError(ScholarStreamError):
    """
    Raised when a requested resource does not exist.

    When:    GET /users/{email} for an unknown email; review submission for an
             application or scholarship that is gone.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(ScholarStreamError):
    """
    Raised when a document-store operation fails unexpectedly.

    HTTP:    500 Internal Server Error

    The message is a short fixed text chosen per operation
    ("Failed to fetch users"). Driver details stay in `context` and the
    server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PaymentProviderError(ScholarStreamError):
    """
    Raised when the payment provider rejects or fails a checkout request.

    HTTP:    500 Internal Server Error
    The provider's own error text is returned to the client as the message.
    """

    def __init__(
        self,
        message: str = "Payment provider request failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
