"""Password reset token table."""

from quillify.infrastructure.persistence.database import Base
from quillify.infrastructure.persistence.models.single_use_token import SingleUseTokenColumns


class PasswordResetTokenModel(SingleUseTokenColumns, Base):
    __tablename__ = "password_reset_tokens"
