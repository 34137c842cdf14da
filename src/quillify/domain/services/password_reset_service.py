"""Service for password reset logic.

Handles token generation, sending reset emails, and resetting passwords.
"""

from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError

from quillify.core.logging import get_logger
from quillify.domain.entities.single_use_token import PasswordResetToken
from quillify.domain.exceptions import InternalError, NotFoundError
from quillify.domain.services.credential_service import normalize_email
from quillify.domain.services.password_validator import default_password_validator
from quillify.domain.services.token_lifecycle import IssuedToken, TokenLifecycle
from quillify.infrastructure.auth.password_hasher import hash_password

logger = get_logger(__name__)


class PasswordResetService(TokenLifecycle[PasswordResetToken]):
    """Service for handling password reset business logic."""

    kind = "password reset"
    template_type = "password_reset"
    category = "password_reset"
    not_found_message = "Invalid or expired reset link"
    expired_message = "This reset link has expired. Please request a new one."

    @property
    def ttl(self) -> timedelta:
        return timedelta(minutes=self.settings.password_reset_token_expire_minutes)

    @property
    def entity_class(self) -> type[PasswordResetToken]:
        return PasswordResetToken

    def build_link(self, raw_token: str) -> str:
        return f"{self.settings.app_url}/account/reset-password?token={raw_token}"

    async def request_reset(self, email: str) -> IssuedToken | None:
        """Send a reset link if an account exists for the email.

        Unknown emails succeed silently so the response does not reveal
        which addresses are registered.

        Returns:
            The issued token, or None when no account matched.
        """
        email = normalize_email(email)
        try:
            user = await self.user_repo.get_by_email(email)
        except SQLAlchemyError as e:
            logger.error("Failed to look up user for password reset", error=str(e))
            raise InternalError("Failed to process request. Please try again.") from e

        if user is None:
            logger.info("Password reset requested for unknown email", email=email)
            return None

        return await self.issue(user)

    async def reset_password(self, raw_token: str, new_password: str) -> str:
        """Set a new password using a reset token.

        The password policy is checked before the token is touched, so a
        weak password leaves the token usable.

        Returns:
            ID of the user whose password changed.

        Raises:
            PasswordPolicyError: If the new password is too weak.
            TokenNotFoundError: If the token is unknown or already used.
            TokenExpiredError: If the token has expired.
            InternalError: If the store fails.
        """
        default_password_validator.ensure_valid(new_password)
        new_hash = hash_password(new_password)

        async def apply(token: PasswordResetToken) -> None:
            if not await self.user_repo.set_password_hash(token.user_id, new_hash):
                raise NotFoundError("User not found")

        token = await self.consume(raw_token, apply)
        logger.info("Password reset successfully", user_id=token.user_id)
        return token.user_id
