"""Repository for email verification token operations."""

from quillify.domain.entities.single_use_token import EmailVerificationToken
from quillify.infrastructure.persistence.models.email_verification import (
    EmailVerificationTokenModel,
)
from quillify.infrastructure.persistence.repositories.token_repository import TokenRepository


class EmailVerificationRepository(TokenRepository[EmailVerificationToken]):
    """Repository for email verification token database operations."""

    model_class = EmailVerificationTokenModel
    entity_class = EmailVerificationToken
