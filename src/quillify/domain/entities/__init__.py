"""Domain entities for Quillify.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from quillify.domain.entities.book import (
    BookFilters,
    BookPage,
    BookSortField,
    BookStats,
    SortOrder,
)
from quillify.domain.entities.single_use_token import (
    EmailVerificationToken,
    PasswordResetToken,
    SingleUseToken,
    hash_token,
)
from quillify.domain.entities.user import PublicUser

__all__ = [
    "BookFilters",
    "BookPage",
    "BookSortField",
    "BookStats",
    "EmailVerificationToken",
    "PasswordResetToken",
    "PublicUser",
    "SingleUseToken",
    "SortOrder",
    "hash_token",
]
