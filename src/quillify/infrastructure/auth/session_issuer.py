"""Session token issuer.

Sessions are signed JWTs (HS256). The token is the only session state: it
carries the user's identity, the verification flag as it was when the token
was signed, and whether the user asked to be remembered.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

import jwt
from pydantic import BaseModel

from quillify.core.config import get_settings
from quillify.core.logging import get_logger
from quillify.domain.exceptions import UnauthorizedError

logger = get_logger(__name__)


class SessionExpiredError(UnauthorizedError):
    """Raised when a session token has expired."""

    def __init__(self) -> None:
        super().__init__("Session has expired")


class InvalidSessionError(UnauthorizedError):
    """Raised when a session token is malformed or its signature does not match."""

    def __init__(self) -> None:
        super().__init__("Invalid session")


class SessionClaims(BaseModel):
    """Claims carried by a session token."""

    user_id: str
    email: str | None
    email_verified: bool
    remember_me: bool
    issued_at: datetime
    expires_at: datetime
    token_id: str


class _UserLookup(Protocol):
    async def get_by_id(self, user_id: str) -> Any: ...


class SessionIssuer:
    """Creates, validates and refreshes session tokens."""

    ALGORITHM = "HS256"
    ISSUER = "quillify"
    TOKEN_TYPE = "session"

    def __init__(self, secret_key: str | None = None) -> None:
        """Initialize the issuer.

        Args:
            secret_key: Secret key for signing tokens. If not provided,
                        uses the configured secret key from settings.
        """
        self._secret_key = secret_key

    @property
    def secret_key(self) -> str:
        """Get the secret key for signing tokens."""
        if self._secret_key:
            return self._secret_key
        return get_settings().secret_key

    @staticmethod
    def lifetime(remember_me: bool) -> timedelta:
        settings = get_settings()
        if remember_me:
            return timedelta(days=settings.remember_me_expire_days)
        return timedelta(hours=settings.session_expire_hours)

    def issue(self, user: Any, remember_me: bool = False) -> tuple[str, SessionClaims]:
        """Create a session for a user who just proved their credentials.

        Args:
            user: Any object exposing ``id``, ``email`` and ``email_verified_at``.
            remember_me: Extend the session lifetime.

        Returns:
            Tuple of (encoded token, claims).
        """
        # JWT timestamps have one-second resolution
        now = datetime.now(timezone.utc).replace(microsecond=0)
        claims = SessionClaims(
            user_id=user.id,
            email=user.email,
            email_verified=user.email_verified_at is not None,
            remember_me=remember_me,
            issued_at=now,
            expires_at=now + self.lifetime(remember_me),
            token_id=str(uuid.uuid4()),
        )
        logger.info("Session issued", user_id=user.id, remember_me=remember_me)
        return self.encode(claims), claims

    def encode(self, claims: SessionClaims) -> str:
        """Sign a set of claims, keeping their issue and expiry times."""
        payload = {
            "iss": self.ISSUER,
            "sub": claims.user_id,
            "iat": claims.issued_at,
            "exp": claims.expires_at,
            "jti": claims.token_id,
            "user_id": claims.user_id,
            "email": claims.email,
            "email_verified": claims.email_verified,
            "remember_me": claims.remember_me,
            "type": self.TOKEN_TYPE,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.ALGORITHM)

    def decode(self, token: str) -> SessionClaims:
        """Decode and validate a session token.

        Args:
            token: The encoded JWT.

        Returns:
            The session claims.

        Raises:
            SessionExpiredError: If the token has expired.
            InvalidSessionError: If the token is invalid or not a session token.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.ALGORITHM],
                issuer=self.ISSUER,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise SessionExpiredError() from e
        except jwt.InvalidTokenError as e:
            raise InvalidSessionError() from e

        if payload.get("type") != self.TOKEN_TYPE:
            raise InvalidSessionError()

        try:
            return SessionClaims(
                user_id=payload["user_id"],
                email=payload.get("email"),
                email_verified=bool(payload.get("email_verified", False)),
                remember_me=bool(payload.get("remember_me", False)),
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                token_id=payload.get("jti") or "",
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidSessionError() from e

    async def refresh_verification(
        self, claims: SessionClaims, user_repo: _UserLookup
    ) -> tuple[SessionClaims, bool]:
        """Bring the verification flag up to date with the store.

        Only an unverified session is looked up, and the flag only ever moves
        from false to true. Issue and expiry times are kept.

        Args:
            claims: Claims from the presented token.
            user_repo: Anything with an async ``get_by_id``.

        Returns:
            Tuple of (claims, changed). ``changed`` is True when the flag flipped.
        """
        if claims.email_verified:
            return claims, False

        user = await user_repo.get_by_id(claims.user_id)
        if user is None or user.email_verified_at is None:
            return claims, False

        logger.info("Session verification flag refreshed", user_id=claims.user_id)
        return claims.model_copy(update={"email_verified": True}), True


session_issuer = SessionIssuer()
