"""Book repository for database operations.

Every query is scoped to an owner; a book belonging to another user behaves
exactly like a missing one.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Select, case, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from quillify.domain.entities.book import BookFilters, BookStats, SortOrder
from quillify.infrastructure.persistence.models import BookModel


def _contains_pattern(text: str) -> str:
    """LIKE pattern matching ``text`` literally, wildcards included."""
    escaped = text.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class BookRepository:
    """Repository for book database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, book: BookModel) -> BookModel:
        self.session.add(book)
        await self.session.flush()
        await self.session.refresh(book)
        return book

    async def get(self, user_id: str, book_id: str) -> BookModel | None:
        """Get one of a user's books.

        Args:
            user_id: Owner ID.
            book_id: Book ID.

        Returns:
            Book model if the user owns it, None otherwise.
        """
        result = await self.session.execute(
            select(BookModel).where(BookModel.id == book_id, BookModel.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def update(self, book: BookModel, values: dict[str, Any]) -> BookModel:
        """Apply field changes to a book.

        Args:
            book: Book model to modify.
            values: Column names mapped to new values.

        Returns:
            The updated book model.
        """
        for key, value in values.items():
            setattr(book, key, value)
        await self.session.flush()
        return book

    async def delete(self, user_id: str, book_id: str) -> bool:
        """Delete one of a user's books.

        Returns:
            True if a row was deleted, False otherwise.
        """
        result = await self.session.execute(
            delete(BookModel).where(BookModel.id == book_id, BookModel.user_id == user_id)
        )
        return result.rowcount > 0

    def _apply_filters(self, stmt: Select, user_id: str, filters: BookFilters) -> Select:
        stmt = stmt.where(BookModel.user_id == user_id)
        if filters.search:
            pattern = _contains_pattern(filters.search)
            stmt = stmt.where(
                or_(
                    func.lower(BookModel.title).like(pattern, escape="\\"),
                    func.lower(BookModel.author).like(pattern, escape="\\"),
                    func.lower(BookModel.genre).like(pattern, escape="\\"),
                )
            )
        if filters.is_read is not None:
            stmt = stmt.where(BookModel.is_read == filters.is_read)
        if filters.genres:
            stmt = stmt.where(BookModel.genre.in_(filters.genres))
        return stmt

    async def list(self, user_id: str, filters: BookFilters) -> tuple[list[BookModel], int]:
        """Get a filtered, sorted page of a user's books.

        Args:
            user_id: Owner ID.
            filters: Search, filter, sort and paging criteria.

        Returns:
            Tuple of (books on the requested page, total matching count).
        """
        count_stmt = self._apply_filters(select(func.count(BookModel.id)), user_id, filters)
        total = (await self.session.execute(count_stmt)).scalar_one() or 0

        column = getattr(BookModel, filters.sort_by.value)
        order = column.asc() if filters.sort_order == SortOrder.ASC else column.desc()

        stmt = (
            self._apply_filters(select(BookModel), user_id, filters)
            .order_by(order, BookModel.id)
            .offset(filters.offset)
            .limit(filters.page_size)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def stats(self, user_id: str) -> BookStats:
        """Compute catalog totals for a user.

        Args:
            user_id: Owner ID.

        Returns:
            Total books, read books and pages read.
        """
        result = await self.session.execute(
            select(
                func.count(BookModel.id),
                func.coalesce(func.sum(case((BookModel.is_read.is_(True), 1), else_=0)), 0),
                func.coalesce(
                    func.sum(case((BookModel.is_read.is_(True), BookModel.number_of_pages), else_=0)),
                    0,
                ),
            ).where(BookModel.user_id == user_id)
        )
        total, read, pages_read = result.one()
        return BookStats(
            total_books=int(total or 0),
            read_books=int(read or 0),
            total_pages_read=int(pages_read or 0),
        )

    async def genres(self, user_id: str) -> list[str]:
        """Get the distinct genres across a user's books, sorted."""
        result = await self.session.execute(
            select(BookModel.genre)
            .where(BookModel.user_id == user_id, BookModel.genre.is_not(None))
            .distinct()
            .order_by(BookModel.genre)
        )
        return [genre for genre in result.scalars().all() if genre]
