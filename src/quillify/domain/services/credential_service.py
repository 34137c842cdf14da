"""Credential service.

Registration, sign-in checks and the current-password gated account changes.
Emails are normalized (trimmed, lower-cased) before every lookup and write.
"""

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quillify.core.logging import get_logger
from quillify.domain.exceptions import (
    BadRequestError,
    ConflictError,
    InternalError,
    NoPasswordError,
    NotFoundError,
    UnauthorizedError,
)
from quillify.domain.services.password_validator import (
    PasswordValidator,
    default_password_validator,
)
from quillify.infrastructure.auth.password_hasher import (
    DUMMY_PASSWORD_HASH,
    hash_password,
    needs_rehash,
    verify_password,
)
from quillify.infrastructure.persistence.models import UserModel
from quillify.infrastructure.persistence.repositories.user_repository import UserRepository

logger = get_logger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
CURRENT_PASSWORD_INCORRECT_MESSAGE = "Current password is incorrect"
EMAIL_TAKEN_MESSAGE = "A user with this email already exists"


def normalize_email(email: str) -> str:
    """Canonical form used for storage and comparison."""
    return email.strip().lower()


class CredentialService:
    """Service for user credentials."""

    def __init__(
        self,
        session: AsyncSession,
        user_repo: UserRepository,
        password_validator: PasswordValidator | None = None,
    ) -> None:
        """Initialize the credential service.

        Args:
            session: SQLAlchemy async session (transactions are committed here).
            user_repo: Repository for user operations.
            password_validator: Strength policy, defaults to the standard one.
        """
        self.session = session
        self.user_repo = user_repo
        self.password_validator = password_validator or default_password_validator

    async def _commit(self, operation: str, **log_context: object) -> None:
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"{operation} failed", error=str(e), **log_context)
            raise InternalError(f"Failed to {operation.lower()}. Please try again.") from e

    async def _load_for_change(self, user_id: str, current_password: str) -> UserModel:
        """Load a user and check their current password."""
        user = await self.get_user(user_id)
        if not user.password_hash:
            raise NoPasswordError()
        if not verify_password(current_password, user.password_hash):
            logger.info("Current password check failed", user_id=user_id)
            raise UnauthorizedError(CURRENT_PASSWORD_INCORRECT_MESSAGE)
        return user

    async def register(
        self, email: str, password: str, name: str | None = None
    ) -> UserModel:
        """Create an unverified account.

        Args:
            email: Email address (normalized before storage).
            password: Plaintext password, checked against the strength policy.
            name: Optional display name.

        Returns:
            The created user.

        Raises:
            PasswordPolicyError: If the password is too weak.
            ConflictError: If the email is already registered.
            InternalError: If the store fails.
        """
        email = normalize_email(email)
        self.password_validator.ensure_valid(password)

        try:
            if await self.user_repo.email_exists(email):
                raise ConflictError(EMAIL_TAKEN_MESSAGE)

            user = UserModel(
                email=email,
                name=name.strip() if name and name.strip() else None,
                password_hash=hash_password(password),
                email_verified_at=None,
            )
            await self.user_repo.create(user)
            await self._commit("Register user", email=email)
        except IntegrityError as e:
            # Concurrent registration with the same email
            await self.session.rollback()
            logger.info("Registration lost race on unique email", email=email)
            raise ConflictError(EMAIL_TAKEN_MESSAGE) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Failed to register user", email=email, error=str(e))
            raise InternalError("Failed to create account. Please try again.") from e

        await self.session.refresh(user)
        logger.info("User registered", user_id=user.id, email=email)
        return user

    async def verify_credentials(self, email: str, password: str) -> UserModel:
        """Check an email / password pair.

        Unknown accounts and wrong passwords are indistinguishable to the
        caller, both in message and in time spent hashing.

        Raises:
            UnauthorizedError: If the account does not exist or the password is wrong.
            NoPasswordError: If the account has no password.
            InternalError: If the store fails.
        """
        email = normalize_email(email)
        try:
            user = await self.user_repo.get_by_email(email)
        except SQLAlchemyError as e:
            logger.error("Failed to look up user for sign-in", email=email, error=str(e))
            raise InternalError("Failed to sign in. Please try again.") from e

        if user is None:
            verify_password(password, DUMMY_PASSWORD_HASH)
            logger.info("Sign-in failed", email=email, reason="unknown_account")
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

        if not user.password_hash:
            raise NoPasswordError()

        if not verify_password(password, user.password_hash):
            logger.info("Sign-in failed", user_id=user.id, reason="wrong_password")
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

        if needs_rehash(user.password_hash):
            await self._upgrade_hash(user, password)

        logger.info("Credentials verified", user_id=user.id)
        return user

    async def _upgrade_hash(self, user: UserModel, password: str) -> None:
        try:
            await self.user_repo.set_password_hash(user.id, hash_password(password))
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning("Password hash upgrade failed", user_id=user.id, error=str(e))
            return
        logger.info("Password hash upgraded", user_id=user.id)

    async def get_user(self, user_id: str) -> UserModel:
        """Load a user by ID.

        Raises:
            NotFoundError: If the user does not exist.
            InternalError: If the store fails.
        """
        try:
            user = await self.user_repo.get_by_id(user_id)
        except SQLAlchemyError as e:
            logger.error("Failed to load user", user_id=user_id, error=str(e))
            raise InternalError("Failed to load account. Please try again.") from e
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def check_email(self, email: str) -> bool:
        """Return whether an account exists for the email."""
        try:
            return await self.user_repo.email_exists(normalize_email(email))
        except SQLAlchemyError as e:
            logger.error("Failed to check email", error=str(e))
            raise InternalError("Failed to check email. Please try again.") from e

    async def update_email(
        self, user_id: str, new_email: str, current_password: str
    ) -> UserModel:
        """Change a user's email after checking their current password.

        The verification timestamp is left as it is.

        Raises:
            NotFoundError: If the user no longer exists.
            NoPasswordError: If the account has no password.
            UnauthorizedError: If the current password is wrong.
            ConflictError: If another user already has the email.
            InternalError: If the store fails.
        """
        new_email = normalize_email(new_email)
        user = await self._load_for_change(user_id, current_password)

        if user.email == new_email:
            return user

        try:
            if await self.user_repo.email_exists(new_email, exclude_user_id=user_id):
                raise ConflictError(EMAIL_TAKEN_MESSAGE)
            await self.user_repo.set_email(user_id, new_email)
            await self._commit("Update email", user_id=user_id)
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError(EMAIL_TAKEN_MESSAGE) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Failed to update email", user_id=user_id, error=str(e))
            raise InternalError("Failed to update email. Please try again.") from e

        await self.session.refresh(user)
        logger.info("Email updated", user_id=user_id, email=new_email)
        return user

    async def update_password(
        self, user_id: str, current_password: str, new_password: str
    ) -> None:
        """Change a user's password after checking their current password.

        Existing sessions stay valid.

        Raises:
            NotFoundError: If the user no longer exists.
            NoPasswordError: If the account has no password.
            UnauthorizedError: If the current password is wrong.
            PasswordPolicyError: If the new password is too weak.
            InternalError: If the store fails.
        """
        await self._load_for_change(user_id, current_password)
        self.password_validator.ensure_valid(new_password, field="new_password")

        try:
            await self.user_repo.set_password_hash(user_id, hash_password(new_password))
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Failed to update password", user_id=user_id, error=str(e))
            raise InternalError("Failed to update password. Please try again.") from e
        await self._commit("Update password", user_id=user_id)

        logger.info("Password updated", user_id=user_id)

    async def update_name(self, user_id: str, name: str) -> UserModel:
        """Change a user's display name.

        Raises:
            BadRequestError: If the name is blank.
            NotFoundError: If the user no longer exists.
            InternalError: If the store fails.
        """
        name = name.strip()
        if not name:
            raise BadRequestError("Name cannot be empty")

        user = await self.get_user(user_id)
        try:
            await self.user_repo.set_name(user_id, name)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Failed to update name", user_id=user_id, error=str(e))
            raise InternalError("Failed to update name. Please try again.") from e
        await self._commit("Update name", user_id=user_id)

        await self.session.refresh(user)
        logger.info("Name updated", user_id=user_id)
        return user
