"""Book catalog API routes.

All endpoints act on the signed-in user's books only.
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from quillify.domain.entities import BookFilters, BookSortField, SortOrder
from quillify.domain.entities.book import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from quillify.infrastructure.api.dependencies import Books, CurrentSession
from quillify.infrastructure.api.schemas import (
    BookCreateRequest,
    BookListResponse,
    BookResponse,
    BookStatsResponse,
    BookUpdateRequest,
    ErrorResponse,
    GenresResponse,
    SetReadRequest,
)

router = APIRouter()

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Book not found"}}


@router.get("", response_model=BookListResponse)
async def list_books(
    claims: CurrentSession,
    books: Books,
    search: str | None = Query(None, max_length=200),
    is_read: Annotated[bool | None, Query()] = None,
    genre: Annotated[list[str] | None, Query()] = None,
    sort_by: Annotated[BookSortField, Query()] = BookSortField.CREATED_AT,
    sort_order: Annotated[SortOrder, Query()] = SortOrder.DESC,
    page: int = Query(1, ge=1),
    page_size: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
) -> BookListResponse:
    """List books with search, filters, sorting and pagination.

    ``genre`` may be repeated to match any of several genres.
    """
    filters = BookFilters(
        search=search,
        is_read=is_read,
        genres=genre or [],
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        page_size=page_size,
    )
    result = await books.list(claims.user_id, filters)
    return BookListResponse(
        items=[BookResponse.model_validate(book) for book in result.items],
        total_count=result.total_count,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=BookResponse)
async def create_book(
    request: BookCreateRequest, claims: CurrentSession, books: Books
) -> BookResponse:
    book = await books.create(claims.user_id, **request.model_dump())
    return BookResponse.model_validate(book)


@router.get("/stats", response_model=BookStatsResponse)
async def book_stats(claims: CurrentSession, books: Books) -> BookStatsResponse:
    stats = await books.stats(claims.user_id)
    return BookStatsResponse(
        total_books=stats.total_books,
        read_books=stats.read_books,
        unread_books=stats.unread_books,
        total_pages_read=stats.total_pages_read,
    )


@router.get("/genres", response_model=GenresResponse)
async def book_genres(claims: CurrentSession, books: Books) -> GenresResponse:
    return GenresResponse(genres=await books.genres(claims.user_id))


@router.get("/{book_id}", response_model=BookResponse, responses=_NOT_FOUND)
async def get_book(book_id: str, claims: CurrentSession, books: Books) -> BookResponse:
    return BookResponse.model_validate(await books.get(claims.user_id, book_id))


@router.patch("/{book_id}", response_model=BookResponse, responses=_NOT_FOUND)
async def update_book(
    book_id: str, request: BookUpdateRequest, claims: CurrentSession, books: Books
) -> BookResponse:
    """Partially update a book. Send ``null`` to clear ``genre`` or ``publish_year``."""
    changes = request.model_dump(exclude_unset=True)
    book = await books.update(claims.user_id, book_id, changes)
    return BookResponse.model_validate(book)


@router.put("/{book_id}/read", response_model=BookResponse, responses=_NOT_FOUND)
async def set_book_read(
    book_id: str, request: SetReadRequest, claims: CurrentSession, books: Books
) -> BookResponse:
    book = await books.set_read(claims.user_id, book_id, request.is_read)
    return BookResponse.model_validate(book)


@router.delete(
    "/{book_id}", status_code=status.HTTP_204_NO_CONTENT, responses=_NOT_FOUND
)
async def delete_book(book_id: str, claims: CurrentSession, books: Books) -> None:
    await books.remove(claims.user_id, book_id)
