"""Book catalog value objects.

Filters, pages and statistics for a user's book catalog.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class BookSortField(str, Enum):
    """Columns a catalog listing can be ordered by."""

    CREATED_AT = "created_at"
    TITLE = "title"
    AUTHOR = "author"
    NUMBER_OF_PAGES = "number_of_pages"
    PUBLISH_YEAR = "publish_year"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 100


@dataclass
class BookFilters:
    """Listing criteria for a user's books.

    Attributes:
        search: Case-insensitive substring matched against title, author and genre.
        is_read: Restrict to read (True) or unread (False) books.
        genres: Restrict to any of these genres.
        sort_by: Column to order by.
        sort_order: Ascending or descending.
        page: 1-based page number.
        page_size: Items per page.
    """

    search: str | None = None
    is_read: bool | None = None
    genres: list[str] = field(default_factory=list)
    sort_by: BookSortField = BookSortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        if self.search is not None:
            self.search = self.search.strip() or None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class BookPage:
    """One page of a listing plus the total across all pages."""

    items: list[Any]
    total_count: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total_count / self.page_size))


@dataclass(frozen=True)
class BookStats:
    """Aggregate numbers for a user's catalog."""

    total_books: int
    read_books: int
    total_pages_read: int

    @property
    def unread_books(self) -> int:
        return self.total_books - self.read_books
