"""Books table."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from quillify.infrastructure.persistence.database import Base


class BookModel(Base):
    """A book on one user's shelf; every query filters on ``user_id``."""

    __tablename__ = "books"
    __table_args__ = (
        CheckConstraint("number_of_pages > 0", name="ck_books_number_of_pages_positive"),
        # Listings are per user, newest first.
        Index("ix_books_user_created", "user_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    title: Mapped[str] = mapped_column(String(500))
    author: Mapped[str] = mapped_column(String(255))
    number_of_pages: Mapped[int]
    genre: Mapped[str | None] = mapped_column(String(100))
    publish_year: Mapped[int | None]
    is_read: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, title={self.title!r}, user_id={self.user_id})>"
