"""Domain error taxonomy.

Every failure a service reports to its caller is a ``QuillifyError`` tagged
with one ``ErrorKind``. The API layer maps kinds to HTTP statuses in a single
place; infrastructure errors never cross the service boundary unwrapped.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed set of failure categories surfaced to callers."""

    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    INTERNAL_ERROR = "internal_error"


class QuillifyError(Exception):
    """Base class for all domain errors.

    Attributes:
        message: User-safe message.
        details: Optional structured details (e.g. field validation errors).
    """

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ConflictError(QuillifyError):
    kind = ErrorKind.CONFLICT


class UnauthorizedError(QuillifyError):
    kind = ErrorKind.UNAUTHORIZED


class BadRequestError(QuillifyError):
    kind = ErrorKind.BAD_REQUEST


class NotFoundError(QuillifyError):
    kind = ErrorKind.NOT_FOUND


class InternalError(QuillifyError):
    kind = ErrorKind.INTERNAL_ERROR


class NoPasswordError(BadRequestError):
    """The account has no password to verify against."""

    def __init__(self) -> None:
        super().__init__("This account uses a different sign-in method")


class PasswordPolicyError(BadRequestError):
    """The password does not satisfy the strength policy."""


class TokenNotFoundError(NotFoundError):
    """The token never existed or has already been consumed."""


class TokenExpiredError(BadRequestError):
    """The token exists but is past its expiry.

    Attributes:
        email: Email of the owning user, so callers can offer a resend.
    """

    def __init__(self, message: str, email: str | None = None) -> None:
        super().__init__(message)
        self.email = email


class EmailDeliveryError(InternalError):
    """The token was stored but the email carrying it could not be sent."""
