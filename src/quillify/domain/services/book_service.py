"""Book catalog service.

All operations act on the books of a single owner. A book that belongs to
someone else is reported exactly like a missing one.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quillify.core.logging import get_logger
from quillify.domain.entities.book import BookFilters, BookPage, BookStats
from quillify.domain.exceptions import BadRequestError, InternalError, NotFoundError
from quillify.infrastructure.persistence.models import BookModel
from quillify.infrastructure.persistence.repositories.book_repository import BookRepository

logger = get_logger(__name__)

UPDATABLE_FIELDS = frozenset(
    {"title", "author", "number_of_pages", "genre", "publish_year", "is_read"}
)
REQUIRED_FIELDS = frozenset({"title", "author", "number_of_pages", "is_read"})


class BookService:
    """Service for a user's book catalog."""

    def __init__(self, session: AsyncSession, book_repo: BookRepository) -> None:
        self.session = session
        self.book_repo = book_repo

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Failed to save book changes", error=str(e))
            raise InternalError("Failed to save changes. Please try again.") from e

    async def _get_owned(self, user_id: str, book_id: str) -> BookModel:
        book = await self.book_repo.get(user_id, book_id)
        if book is None:
            raise NotFoundError("Book not found")
        return book

    async def create(
        self,
        user_id: str,
        title: str,
        author: str,
        number_of_pages: int,
        genre: str | None = None,
        publish_year: int | None = None,
        is_read: bool = False,
    ) -> BookModel:
        """Add a book to the user's catalog.

        Raises:
            BadRequestError: If the page count is not positive.
        """
        if number_of_pages <= 0:
            raise BadRequestError("Number of pages must be positive")

        book = BookModel(
            user_id=user_id,
            title=title.strip(),
            author=author.strip(),
            number_of_pages=number_of_pages,
            genre=genre.strip() if genre and genre.strip() else None,
            publish_year=publish_year,
            is_read=is_read,
            created_at=datetime.now(timezone.utc),
        )
        try:
            await self.book_repo.create(book)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Failed to create book", user_id=user_id, error=str(e))
            raise InternalError("Failed to create book. Please try again.") from e
        await self._commit()

        logger.info("Book created", user_id=user_id, book_id=book.id)
        return book

    async def get(self, user_id: str, book_id: str) -> BookModel:
        return await self._get_owned(user_id, book_id)

    async def update(self, user_id: str, book_id: str, changes: dict[str, Any]) -> BookModel:
        """Apply a partial update.

        Only keys present in ``changes`` are touched; ``genre`` and
        ``publish_year`` may be cleared by passing None.

        Raises:
            NotFoundError: If the user has no such book.
            BadRequestError: If a required field is cleared or unknown fields are given.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise BadRequestError(f"Unknown fields: {', '.join(sorted(unknown))}")
        cleared = {key for key in REQUIRED_FIELDS if key in changes and changes[key] is None}
        if cleared:
            raise BadRequestError(f"Fields cannot be null: {', '.join(sorted(cleared))}")
        if "number_of_pages" in changes and changes["number_of_pages"] <= 0:
            raise BadRequestError("Number of pages must be positive")

        book = await self._get_owned(user_id, book_id)
        if not changes:
            return book

        try:
            await self.book_repo.update(book, changes)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Failed to update book", book_id=book_id, error=str(e))
            raise InternalError("Failed to update book. Please try again.") from e
        await self._commit()

        logger.info("Book updated", user_id=user_id, book_id=book_id, fields=sorted(changes))
        return book

    async def set_read(self, user_id: str, book_id: str, is_read: bool) -> BookModel:
        return await self.update(user_id, book_id, {"is_read": is_read})

    async def remove(self, user_id: str, book_id: str) -> None:
        """Delete a book.

        Raises:
            NotFoundError: If the user has no such book.
        """
        if not await self.book_repo.delete(user_id, book_id):
            raise NotFoundError("Book not found")
        await self._commit()
        logger.info("Book deleted", user_id=user_id, book_id=book_id)

    async def list(self, user_id: str, filters: BookFilters) -> BookPage:
        items, total = await self.book_repo.list(user_id, filters)
        return BookPage(
            items=items,
            total_count=total,
            page=filters.page,
            page_size=filters.page_size,
        )

    async def stats(self, user_id: str) -> BookStats:
        return await self.book_repo.stats(user_id)

    async def genres(self, user_id: str) -> list[str]:
        return await self.book_repo.genres(user_id)
