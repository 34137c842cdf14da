"""Service for email verification logic.

Handles token generation, sending verification emails, and validating tokens.
"""

from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError

from quillify.core.logging import get_logger
from quillify.domain.entities.single_use_token import EmailVerificationToken
from quillify.domain.exceptions import BadRequestError, InternalError
from quillify.domain.services.credential_service import normalize_email
from quillify.domain.services.token_lifecycle import IssuedToken, TokenLifecycle
from quillify.infrastructure.persistence.models import UserModel

logger = get_logger(__name__)


class EmailVerificationService(TokenLifecycle[EmailVerificationToken]):
    """Service for handling email verification business logic."""

    kind = "email verification"
    template_type = "email_verification"
    category = "email_verification"
    not_found_message = "Invalid or already used verification link"
    expired_message = "This verification link has expired"

    @property
    def ttl(self) -> timedelta:
        return timedelta(hours=self.settings.email_verification_token_expire_hours)

    @property
    def entity_class(self) -> type[EmailVerificationToken]:
        return EmailVerificationToken

    def build_link(self, raw_token: str) -> str:
        return f"{self.settings.app_url}{self.settings.api_prefix}/verify-email?token={raw_token}"

    async def send_verification(
        self, user: UserModel, existing_user: bool = False
    ) -> IssuedToken:
        """Issue a verification token for a user and email it.

        Args:
            user: The user to verify.
            existing_user: Use the wording for accounts created before
                verification was introduced.
        """
        return await self.issue(user, template_variables={"is_existing_user": existing_user})

    async def resend(self, email: str) -> IssuedToken | None:
        """Send a fresh verification link to an unverified address.

        Unknown emails succeed silently.

        Returns:
            The issued token, or None when no account matched.

        Raises:
            BadRequestError: If the email is already verified.
        """
        email = normalize_email(email)
        try:
            user = await self.user_repo.get_by_email(email)
        except SQLAlchemyError as e:
            logger.error("Failed to look up user for verification", error=str(e))
            raise InternalError("Failed to process request. Please try again.") from e

        if user is None:
            logger.info("Verification requested for unknown email", email=email)
            return None
        if user.email_verified_at is not None:
            raise BadRequestError("Email is already verified")

        return await self.send_verification(user)

    async def verify_email(self, raw_token: str) -> str:
        """Mark the token owner's email as verified.

        An already verified user keeps the original timestamp.

        Returns:
            ID of the verified user.

        Raises:
            TokenNotFoundError: If the token is unknown or already used.
            TokenExpiredError: If the token has expired.
            InternalError: If the store fails.
        """

        async def apply(token: EmailVerificationToken) -> None:
            await self.user_repo.mark_email_verified(token.user_id)

        token = await self.consume(raw_token, apply)
        logger.info("Email verified successfully", user_id=token.user_id)
        return token.user_id
