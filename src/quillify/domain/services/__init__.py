"""Domain services for Quillify.

Services hold the business rules for credentials, single-use tokens and the
book catalog, and own transaction boundaries.
"""

from quillify.domain.services.book_service import BookService
from quillify.domain.services.credential_service import CredentialService, normalize_email
from quillify.domain.services.email_verification_service import EmailVerificationService
from quillify.domain.services.password_reset_service import PasswordResetService
from quillify.domain.services.password_validator import (
    PasswordValidationError,
    PasswordValidator,
    default_password_validator,
)
from quillify.domain.services.token_cleanup import CleanupResult, cleanup_expired_tokens
from quillify.domain.services.token_lifecycle import IssuedToken, TokenLifecycle

__all__ = [
    "BookService",
    "CleanupResult",
    "CredentialService",
    "EmailVerificationService",
    "IssuedToken",
    "PasswordResetService",
    "PasswordValidationError",
    "PasswordValidator",
    "TokenLifecycle",
    "cleanup_expired_tokens",
    "default_password_validator",
    "normalize_email",
]
