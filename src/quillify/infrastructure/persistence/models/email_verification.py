"""Email verification token table."""

from quillify.infrastructure.persistence.database import Base
from quillify.infrastructure.persistence.models.single_use_token import SingleUseTokenColumns


class EmailVerificationTokenModel(SingleUseTokenColumns, Base):
    __tablename__ = "email_verification_tokens"
