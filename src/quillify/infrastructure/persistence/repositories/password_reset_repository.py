"""Repository for password reset token operations."""

from quillify.domain.entities.single_use_token import PasswordResetToken
from quillify.infrastructure.persistence.models.password_reset import PasswordResetTokenModel
from quillify.infrastructure.persistence.repositories.token_repository import TokenRepository


class PasswordResetRepository(TokenRepository[PasswordResetToken]):
    """Repository for password reset token database operations."""

    model_class = PasswordResetTokenModel
    entity_class = PasswordResetToken
