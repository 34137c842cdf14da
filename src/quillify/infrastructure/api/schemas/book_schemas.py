"""Pydantic schemas for book endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class BookCreateRequest(BaseModel):
    """Request body for adding a book."""

    title: str = Field(..., min_length=1, max_length=500)
    author: str = Field(..., min_length=1, max_length=255)
    number_of_pages: int = Field(..., gt=0, description="Page count")
    genre: str | None = Field(None, max_length=100)
    publish_year: int | None = Field(None, ge=0, le=9999)
    is_read: bool = False


class BookUpdateRequest(BaseModel):
    """Partial update. Omitted fields are left unchanged."""

    title: str | None = Field(None, min_length=1, max_length=500)
    author: str | None = Field(None, min_length=1, max_length=255)
    number_of_pages: int | None = Field(None, gt=0)
    genre: str | None = Field(None, max_length=100)
    publish_year: int | None = Field(None, ge=0, le=9999)
    is_read: bool | None = None


class SetReadRequest(BaseModel):
    is_read: bool


class BookResponse(BaseModel):
    """A book in the user's catalog."""

    id: str
    title: str
    author: str
    number_of_pages: int
    genre: str | None
    publish_year: int | None
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class BookListResponse(BaseModel):
    """One page of books."""

    items: list[BookResponse]
    total_count: int
    page: int
    page_size: int
    total_pages: int


class BookStatsResponse(BaseModel):
    total_books: int
    read_books: int
    unread_books: int
    total_pages_read: int


class GenresResponse(BaseModel):
    genres: list[str]
