"""
Sakila Rentals Backend — Custom Exception Hierarchy
=====================================================

What:  Application-specific exceptions for every failure the services report.
Why:   One exception type per failure category lets the HTTP layer map
       errors to status codes in a single place, and keeps raw database
       text out of API responses.
How:   Every exception carries an `ErrorKind` (machine-readable category),
       a user-safe message and an optional context dict. The global handler
       in main.py turns `kind` into the HTTP status and error code.
Who:   Raised by services; caught by the global handler.

Exception Hierarchy:
    SakilaError (base)
    ├── BadRequestError          → 400 (missing/invalid input)
    │   └── InvalidReferenceError→ 400 (customer/staff/store id does not exist)
    ├── NotFoundError            → 404
    ├── ConflictError            → 409 (uniqueness violation)
    ├── AlreadyReturnedError     → 400 (rental already closed)
    ├── AllUnavailableError      → 400 (no requested copy could be rented)
    ├── AuthenticationError      → 401
    └── DatabaseError            → 500 (transient storage failure)

Partial success in batch rental creation is NOT an exception: the service
returns a result describing what was created and what was skipped.
"""

import enum
from typing import Any, Dict, List, Optional


class ErrorKind(str, enum.Enum):
    """Failure categories shared by every service operation."""

    BAD_REQUEST = "bad_request"
    INVALID_REFERENCE = "invalid_reference"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    ALREADY_RETURNED = "already_returned"
    ALL_UNAVAILABLE = "all_unavailable"
    UNAUTHORIZED = "unauthorized"
    DATABASE_ERROR = "database_error"


# HTTP status for each kind; the only place this mapping lives
HTTP_STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.INVALID_REFERENCE: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.ALREADY_RETURNED: 400,
    ErrorKind.ALL_UNAVAILABLE: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.DATABASE_ERROR: 500,
}


class SakilaError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        kind:     Failure category, mapped to an HTTP status by the handler
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for client errors)
    """

    kind: ErrorKind = ErrorKind.DATABASE_ERROR

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]


class BadRequestError(SakilaError):
    """
    Raised when client input is missing or invalid.

    Detected before touching storage wherever possible.
    """

    kind = ErrorKind.BAD_REQUEST

    def __init__(
        self,
        message: str = "Invalid request",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidReferenceError(BadRequestError):
    """
    Raised when a request names a related row that does not exist.

    Examples: a rental for an unknown customer, a signup with an unknown store.
    Unlike NotFoundError the missing row is an input, not the addressed resource,
    so the client gets 400 rather than 404.
    """

    kind = ErrorKind.INVALID_REFERENCE

    def __init__(
        self,
        resource: str,
        resource_id: Any,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx.update(resource=resource, resource_id=resource_id)
        super().__init__(
            message=f"Invalid {resource} reference: {resource_id}",
            field=f"{resource}_id",
            context=ctx,
        )


class NotFoundError(SakilaError):
    """
    Raised when the addressed resource does not exist.

    SQLAlchemy returns None for missing rows; the service layer converts
    that into this exception so the handler can answer 404.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(SakilaError):
    """Raised when a write would violate a uniqueness rule (e.g. duplicate user name)."""

    kind = ErrorKind.CONFLICT

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AlreadyReturnedError(SakilaError):
    """
    Raised when a return is requested for a rental that is already closed.

    Returning twice is rejected, not treated as a no-op; the stored
    return_date is never overwritten.
    """

    kind = ErrorKind.ALREADY_RETURNED

    def __init__(self, rental_id: int, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["rental_id"] = rental_id
        super().__init__(
            message=f"Rental {rental_id} has already been returned",
            context=ctx,
        )
        self.rental_id = rental_id


class AllUnavailableError(SakilaError):
    """Raised when none of the requested inventory copies could be rented."""

    kind = ErrorKind.ALL_UNAVAILABLE

    def __init__(
        self,
        inventory_ids: List[int],
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["unavailable_inventory_ids"] = list(inventory_ids)
        super().__init__(
            message="None of the requested inventory items are available for rent",
            context=ctx,
        )
        self.inventory_ids = list(inventory_ids)


class AuthenticationError(SakilaError):
    """Raised when signin credentials do not match a user."""

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, message: str = "Invalid credentials."):
        super().__init__(message=message)


class DatabaseError(SakilaError):
    """
    Raised when a database operation fails or times out.

    The message returned to the client is always generic. The underlying
    error type is kept in `context` and logged server-side only.
    """

    kind = ErrorKind.DATABASE_ERROR

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
