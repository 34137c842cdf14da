"""Single-use token entities.

A single-use token grants one specific state change (password reset or email
verification) for a bounded time. Only the SHA-256 hash of the raw token is
stored; the raw value exists in memory just long enough to be emailed.
"""

import hashlib
import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Self

TOKEN_BYTES = 32


def hash_token(raw_token: str) -> str:
    """Return the SHA-256 hex digest stored in place of a raw token."""
    return hashlib.sha256(raw_token.encode()).hexdigest()


@dataclass
class SingleUseToken:
    """Base token entity.

    Attributes:
        user_id: ID of the user this token belongs to.
        token_hash: SHA-256 hash of the raw token.
        expires_at: When the token stops being accepted.
        id: Unique identifier (UUID string).
        created_at: When the token was issued.
    """

    user_id: str
    token_hash: str
    expires_at: datetime
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def generate(cls, user_id: str, expires_in: timedelta) -> tuple[Self, str]:
        """Generate a new token entity and its raw value.

        Args:
            user_id: The ID of the owning user.
            expires_in: Token lifetime.

        Returns:
            A tuple of (entity, raw_token). The raw token is 256 bits, hex-encoded.
        """
        raw_token = secrets.token_hex(TOKEN_BYTES)
        now = datetime.now(timezone.utc).replace(microsecond=0)
        entity = cls(
            user_id=user_id,
            token_hash=hash_token(raw_token),
            expires_at=now + expires_in,
            created_at=now,
        )
        return entity, raw_token

    def is_expired(self, now: datetime | None = None) -> bool:
        """A token is expired once ``now`` is strictly after ``expires_at``."""
        now = now or datetime.now(timezone.utc)
        return now > self.expires_at


@dataclass
class PasswordResetToken(SingleUseToken):
    """Token authorizing one password change without the current password."""


@dataclass
class EmailVerificationToken(SingleUseToken):
    """Token authorizing the one-time transition to a verified email."""
