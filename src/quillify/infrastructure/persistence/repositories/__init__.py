"""Persistence repositories for database operations."""

from quillify.infrastructure.persistence.repositories.book_repository import (
    BookRepository,
)
from quillify.infrastructure.persistence.repositories.email_verification_repository import (
    EmailVerificationRepository,
)
from quillify.infrastructure.persistence.repositories.password_reset_repository import (
    PasswordResetRepository,
)
from quillify.infrastructure.persistence.repositories.token_repository import (
    TokenRepository,
)
from quillify.infrastructure.persistence.repositories.user_repository import (
    UserRepository,
)

__all__ = [
    "BookRepository",
    "EmailVerificationRepository",
    "PasswordResetRepository",
    "TokenRepository",
    "UserRepository",
]
