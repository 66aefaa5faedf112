"""Domain errors raised by the data-access layer.

Every error carries a stable code, a user-safe message and the HTTP status
the API renders it with. Nothing here is recovered locally: errors reach the
immediate caller, which only has to display ``message``.
"""
from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """Domain error codes."""

    UNAUTHORIZED = "UNAUTHORIZED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_IDENTIFIER = "MISSING_IDENTIFIER"
    NOT_OWNED = "NOT_OWNED"
    STORE_ERROR = "STORE_ERROR"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class Unauthorized(DomainError):
    """Raised when no identity can be resolved for an operation that needs one."""

    code = ErrorCode.UNAUTHORIZED
    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class ValidationError(DomainError):
    """Raised when an event payload fails schema constraints."""

    code = ErrorCode.VALIDATION_ERROR
    status_code = 422

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors) or "Invalid payload")
        self.errors = errors


class MissingIdentifier(DomainError):
    """Raised when an update arrives without the target event id."""

    code = ErrorCode.MISSING_IDENTIFIER
    status_code = 400

    def __init__(self, operation: str = "update") -> None:
        super().__init__(f"Event ID required for {operation}")


class NotOwned(DomainError):
    """Raised when an ownership-scoped mutation matched zero rows.

    The message is identical whether the row is missing or belongs to
    someone else.
    """

    code = ErrorCode.NOT_OWNED
    status_code = 404

    def __init__(self, event_id: str) -> None:
        super().__init__("Event not found")
        self.event_id = event_id


class StoreError(DomainError):
    """Raised when the record store rejects or fails a query."""

    code = ErrorCode.STORE_ERROR
    status_code = 502


class AuthenticationError(DomainError):
    """Raised when the session provider rejects credentials, a code or a sign-up."""

    code = ErrorCode.AUTHENTICATION_FAILED
    status_code = 400

    def __init__(self, message: str, upstream_status: Optional[int] = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
