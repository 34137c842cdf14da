"""ORM models. Importing this package registers every table on ``Base.metadata``."""

from quillify.infrastructure.persistence.models.book import BookModel
from quillify.infrastructure.persistence.models.email_verification import (
    EmailVerificationTokenModel,
)
from quillify.infrastructure.persistence.models.password_reset import PasswordResetTokenModel
from quillify.infrastructure.persistence.models.user import UserModel

__all__ = [
    "BookModel",
    "EmailVerificationTokenModel",
    "PasswordResetTokenModel",
    "UserModel",
]
