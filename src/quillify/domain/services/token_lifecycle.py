"""Shared lifecycle for single-use emailed tokens.

A token is issued (stored as a hash and emailed as a link), validated
without side effects, and consumed at most once together with the state
change it authorizes. Subclasses supply the lifetime, the link and the
email template.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quillify.core.config import Settings, get_settings
from quillify.core.logging import get_logger
from quillify.domain.entities.single_use_token import SingleUseToken
from quillify.domain.exceptions import (
    BadRequestError,
    EmailDeliveryError,
    InternalError,
    QuillifyError,
    TokenExpiredError,
    TokenNotFoundError,
)
from quillify.infrastructure.persistence.models import UserModel
from quillify.infrastructure.persistence.repositories.token_repository import TokenRepository
from quillify.infrastructure.persistence.repositories.user_repository import UserRepository
from quillify.infrastructure.services.email_service import EmailService

logger = get_logger(__name__)

TokenT = TypeVar("TokenT", bound=SingleUseToken)


@dataclass(frozen=True)
class IssuedToken:
    """Result of issuing a token.

    Attributes:
        raw_token: The raw value placed in the emailed link.
        expires_at: When the token stops being accepted.
        delivered: Whether the email carrying it was sent.
    """

    raw_token: str
    expires_at: datetime
    delivered: bool


def describe_duration(delta: timedelta) -> str:
    """Human wording for a token lifetime, e.g. ``30 minutes`` or ``24 hours``."""
    minutes = int(delta.total_seconds() // 60)
    if minutes % 60 == 0:
        hours = minutes // 60
        return f"{hours} hour{'s' if hours != 1 else ''}"
    return f"{minutes} minute{'s' if minutes != 1 else ''}"


class TokenLifecycle(ABC, Generic[TokenT]):
    """Issue, validate, consume and clean up one kind of single-use token."""

    #: Name used in log events.
    kind: str
    #: Key of the built-in email template.
    template_type: str
    #: Provider category tag for the email.
    category: str

    not_found_message = "Invalid or already used token"
    expired_message = "Token has expired"

    def __init__(
        self,
        session: AsyncSession,
        user_repo: UserRepository,
        token_repo: TokenRepository[TokenT],
        email_service: EmailService,
        settings: Settings | None = None,
    ) -> None:
        self.session = session
        self.user_repo = user_repo
        self.token_repo = token_repo
        self.email_service = email_service
        self.settings = settings or get_settings()

    @property
    @abstractmethod
    def ttl(self) -> timedelta:
        """Lifetime of a freshly issued token."""

    @abstractmethod
    def build_link(self, raw_token: str) -> str:
        """URL emailed to the user."""

    @property
    @abstractmethod
    def entity_class(self) -> type[TokenT]: ...

    async def issue(
        self,
        user: UserModel,
        *,
        deliver: bool = True,
        template_variables: dict[str, Any] | None = None,
    ) -> IssuedToken:
        """Replace the user's token with a new one and email it.

        The token is committed before the email is sent, so a delivery
        failure leaves a valid token behind.

        Args:
            user: The owning user.
            deliver: Send the email (False only stores the token).
            template_variables: Extra variables for the email template.

        Returns:
            The raw token, its expiry and whether it was delivered.

        Raises:
            BadRequestError: If the user has no email address.
            InternalError: If the token could not be stored.
            EmailDeliveryError: If the email could not be sent.
        """
        # A failed commit below expires the instance; never touch it after that.
        user_id, email, name = user.id, user.email, user.name
        if not email:
            raise BadRequestError("Account has no email address")

        entity, raw_token = self.entity_class.generate(user_id, self.ttl)
        try:
            await self.token_repo.create(entity)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to store {self.kind} token", user_id=user_id, error=str(e))
            raise InternalError("Failed to create token. Please try again.") from e

        logger.info(
            f"{self.kind.capitalize()} token issued",
            user_id=user_id,
            expires_at=entity.expires_at.isoformat(),
        )

        if not deliver:
            return IssuedToken(raw_token=raw_token, expires_at=entity.expires_at, delivered=False)

        variables = {
            "user_name": name,
            "action_url": self.build_link(raw_token),
            "expires_in": describe_duration(self.ttl),
            **(template_variables or {}),
        }
        sent = await self.email_service.send_template(
            self.template_type, to=email, variables=variables, category=self.category
        )
        if not sent:
            logger.error(f"Failed to send {self.kind} email", user_id=user_id, email=email)
            raise EmailDeliveryError("Failed to send email. Please try again later.")

        logger.info(f"{self.kind.capitalize()} email sent", user_id=user_id, email=email)
        return IssuedToken(raw_token=raw_token, expires_at=entity.expires_at, delivered=True)

    async def validate(self, raw_token: str) -> TokenT:
        """Look up a token without consuming it.

        Raises:
            TokenNotFoundError: If the token does not exist (or was consumed).
            TokenExpiredError: If the token is past its expiry. Carries the
                owner's email when it is still known.
            InternalError: If the store fails.
        """
        try:
            token = await self.token_repo.get_by_token(raw_token) if raw_token else None
            if token is None:
                raise TokenNotFoundError(self.not_found_message)
            if token.is_expired():
                user = await self.user_repo.get_by_id(token.user_id)
                raise TokenExpiredError(self.expired_message, email=user.email if user else None)
        except SQLAlchemyError as e:
            logger.error(f"Failed to look up {self.kind} token", error=str(e))
            raise InternalError("Failed to validate token. Please try again.") from e
        return token

    async def consume(
        self, raw_token: str, action: Callable[[TokenT], Awaitable[None]]
    ) -> TokenT:
        """Consume a token and apply its state change atomically.

        The row is deleted inside the session transaction; a delete that
        affects nothing means a concurrent request consumed it first. Any
        failure rolls back both the deletion and the action.

        Args:
            raw_token: The raw token from the link.
            action: Coroutine applying the authorized change.

        Returns:
            The consumed token.

        Raises:
            TokenNotFoundError: If the token does not exist or was consumed.
            TokenExpiredError: If the token is past its expiry.
            InternalError: If the store fails.
        """
        token = await self.validate(raw_token)
        try:
            if not await self.token_repo.delete_by_id(token.id):
                logger.info(f"{self.kind.capitalize()} token already consumed", user_id=token.user_id)
                raise TokenNotFoundError(self.not_found_message)
            await action(token)
            await self.session.commit()
        except QuillifyError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to consume {self.kind} token", user_id=token.user_id, error=str(e))
            raise InternalError("Failed to complete request. Please try again.") from e

        logger.info(f"{self.kind.capitalize()} token consumed", user_id=token.user_id)
        return token

    async def cleanup_expired(self) -> int:
        """Delete every token past its expiry.

        Returns:
            Number of tokens deleted.
        """
        try:
            count = await self.token_repo.delete_expired(datetime.now(timezone.utc))
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to clean up {self.kind} tokens", error=str(e))
            raise InternalError("Failed to clean up expired tokens") from e

        logger.info(f"Expired {self.kind} tokens cleaned up", deleted_count=count)
        return count
