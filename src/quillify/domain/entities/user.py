"""Public user projection.

What the credential operations hand back to callers. It never carries the
password hash.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class PublicUser:
    """User identity safe to return from services and APIs.

    Attributes:
        id: Unique identifier (UUID string).
        email: Email address (may be null for accounts created elsewhere).
        name: Optional display name.
        email_verified_at: When the email was verified; None while unverified.
        created_at: When the account was created.
    """

    id: str
    email: str | None
    name: str | None = None
    email_verified_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def email_verified(self) -> bool:
        return self.email_verified_at is not None

    @classmethod
    def from_record(cls, record: Any) -> "PublicUser":
        """Build the projection from any object exposing the user columns."""
        return cls(
            id=record.id,
            email=record.email,
            name=record.name,
            email_verified_at=record.email_verified_at,
            created_at=record.created_at,
        )
