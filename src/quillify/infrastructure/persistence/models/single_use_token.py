"""Columns shared by the two single-use token tables."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column


class SingleUseTokenColumns:
    """Mixin for a table holding at most one live token per user.

    Only the SHA-256 hex digest of a token is stored. Consuming a token
    deletes its row, so a row that exists has never been used. Rows go away
    with their user through the foreign key cascade.
    """

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        index=True,
    )
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    # Indexed for the expired-token sweep.
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, user_id={self.user_id})>"
