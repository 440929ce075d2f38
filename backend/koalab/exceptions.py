"""
Koalab Backend: Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the failure modes of the service.
How:   Each exception carries a client-safe message and an optional context
       dict. Global exception handlers (registered in main.py) translate them
       into JSON error responses with the right HTTP status code.
Who:   Raised by services, the session gate and the lifespan; caught by the
       global handlers.

Exception Hierarchy:
    KoalabError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── InfrastructureError      → 500 Internal Server Error
    │   ├── DatabaseError
    │   └── IdentityServiceError
    └── StartupError             (fatal; aborts the process)
"""

from typing import Any, Dict, Optional


class KoalabError(Exception):
    """
    Base exception for all Koalab application errors.

    Attributes:
        message:  User-facing error description (safe to return in a response)
        context:  Additional debug info (logged, never returned to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(KoalabError):
    """
    Raised when a request body is malformed or fails validation.

    HTTP:  400 Bad Request
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


class AuthenticationError(KoalabError):
    """
    Raised when a caller cannot be authenticated.

    When:  Missing or forged session cookie, expired token, or an identity
           assertion the verifier did not accept.
    HTTP:  403 Forbidden
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(KoalabError):
    """
    Raised when a requested resource does not exist.

    When:  GET /api/boards/{id} with an id that was never inserted.
    HTTP:  404 Not Found
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


class InfrastructureError(KoalabError):
    """
    Raised when a collaborator (store, remote verifier) fails.

    HTTP:  500 Internal Server Error
    The client only ever sees `message`; details stay in the server log.
    """


class DatabaseError(InfrastructureError):
    """A store round-trip (query or insert) failed."""

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class IdentityServiceError(InfrastructureError):
    """
    The identity verifier could not be reached or answered with garbage.

    Distinct from AuthenticationError: a verifier outage is not evidence that
    the assertion is invalid.
    """

    def __init__(
        self,
        message: str = "The identity verification service is unavailable.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StartupError(KoalabError):
    """
    Raised during application startup when a required resource is unusable.

    When:  Secret file cannot be read or written, store is unreachable.
    Effect: Propagates out of the lifespan, so uvicorn aborts the process.
    """
