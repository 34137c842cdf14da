"""Unit tests for BookService and BookRepository."""

import pytest
import pytest_asyncio

from quillify.domain.entities import BookFilters, BookSortField, SortOrder
from quillify.domain.entities.book import BookPage, BookStats
from quillify.domain.exceptions import BadRequestError, NotFoundError
from quillify.domain.services import BookService
from quillify.infrastructure.persistence.repositories import BookRepository


@pytest.fixture
def book_service(db_session):
    return BookService(db_session, BookRepository(db_session))


@pytest_asyncio.fixture
async def owner(make_user):
    return await make_user("owner@example.com")


async def _add(service, user_id, title, **kwargs):
    values = {"author": "Author", "number_of_pages": 100, **kwargs}
    return await service.create(user_id, title, **values)


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_strips_and_defaults(self, book_service, owner):
        book = await book_service.create(
            owner.id, "  Dune ", " Frank Herbert ", 412, genre="  ", publish_year=1965
        )

        assert book.id
        assert book.title == "Dune"
        assert book.author == "Frank Herbert"
        assert book.genre is None
        assert book.is_read is False
        assert book.created_at is not None

    @pytest.mark.asyncio
    async def test_page_count_must_be_positive(self, book_service, owner):
        with pytest.raises(BadRequestError):
            await book_service.create(owner.id, "Empty", "Nobody", 0)


class TestOwnership:
    @pytest.mark.asyncio
    async def test_other_users_books_look_missing(self, book_service, owner, make_user):
        stranger = await make_user("stranger@example.com")
        book = await _add(book_service, owner.id, "Private")

        with pytest.raises(NotFoundError):
            await book_service.get(stranger.id, book.id)
        with pytest.raises(NotFoundError):
            await book_service.update(stranger.id, book.id, {"title": "Mine now"})
        with pytest.raises(NotFoundError):
            await book_service.remove(stranger.id, book.id)

        assert (await book_service.get(owner.id, book.id)).title == "Private"


class TestUpdate:
    @pytest.mark.asyncio
    async def test_partial_update(self, book_service, owner):
        book = await _add(book_service, owner.id, "Draft", genre="Sci-Fi", publish_year=2001)

        updated = await book_service.update(owner.id, book.id, {"title": "Final", "genre": None})

        assert updated.title == "Final"
        assert updated.genre is None
        assert updated.publish_year == 2001
        assert updated.author == "Author"

    @pytest.mark.asyncio
    async def test_required_fields_cannot_be_cleared(self, book_service, owner):
        book = await _add(book_service, owner.id, "Kept")
        with pytest.raises(BadRequestError):
            await book_service.update(owner.id, book.id, {"title": None})

    @pytest.mark.asyncio
    async def test_unknown_fields_rejected(self, book_service, owner):
        book = await _add(book_service, owner.id, "Kept")
        with pytest.raises(BadRequestError):
            await book_service.update(owner.id, book.id, {"user_id": "someone-else"})

    @pytest.mark.asyncio
    async def test_set_read(self, book_service, owner):
        book = await _add(book_service, owner.id, "Read me")
        assert (await book_service.set_read(owner.id, book.id, True)).is_read is True
        assert (await book_service.set_read(owner.id, book.id, False)).is_read is False


@pytest.mark.asyncio
async def test_remove(book_service, owner):
    book = await _add(book_service, owner.id, "Gone")
    await book_service.remove(owner.id, book.id)

    with pytest.raises(NotFoundError):
        await book_service.get(owner.id, book.id)
    with pytest.raises(NotFoundError):
        await book_service.remove(owner.id, book.id)


class TestList:
    @pytest.mark.asyncio
    async def test_pagination_and_total(self, book_service, owner):
        for title in ["E", "B", "D", "A", "C"]:
            await _add(book_service, owner.id, title)

        filters = BookFilters(
            sort_by=BookSortField.TITLE, sort_order=SortOrder.ASC, page=2, page_size=2
        )
        page = await book_service.list(owner.id, filters)

        assert isinstance(page, BookPage)
        assert [b.title for b in page.items] == ["C", "D"]
        assert page.total_count == 5
        assert page.total_pages == 3

    @pytest.mark.asyncio
    async def test_search_filters_and_scope(self, book_service, owner, make_user):
        other = await make_user("other@example.com")
        await _add(book_service, owner.id, "The Hobbit", author="Tolkien", genre="Fantasy", is_read=True)
        await _add(book_service, owner.id, "Neuromancer", author="Gibson", genre="Sci-Fi")
        await _add(book_service, owner.id, "Foundation", author="Asimov", genre="Sci-Fi", is_read=True)
        await _add(book_service, other.id, "The Hobbit", author="Tolkien", genre="Fantasy")

        search = await book_service.list(owner.id, BookFilters(search="HOBBIT"))
        assert [b.title for b in search.items] == ["The Hobbit"]

        read_scifi = await book_service.list(
            owner.id, BookFilters(is_read=True, genres=["Sci-Fi"])
        )
        assert [b.title for b in read_scifi.items] == ["Foundation"]

        any_genre = await book_service.list(owner.id, BookFilters(genres=["Sci-Fi", "Fantasy"]))
        assert any_genre.total_count == 3

    @pytest.mark.asyncio
    async def test_empty_catalog(self, book_service, owner):
        page = await book_service.list(owner.id, BookFilters())
        assert page.items == []
        assert page.total_count == 0
        assert page.total_pages == 1

    def test_filters_validate_paging(self):
        with pytest.raises(ValueError):
            BookFilters(page=0)
        with pytest.raises(ValueError):
            BookFilters(page_size=101)
        assert BookFilters(search="   ").search is None
        assert BookFilters(page=3, page_size=10).offset == 20


@pytest.mark.asyncio
async def test_stats_and_genres(book_service, owner):
    await _add(book_service, owner.id, "A", number_of_pages=300, genre="Fantasy", is_read=True)
    await _add(book_service, owner.id, "B", number_of_pages=200, genre="Sci-Fi", is_read=True)
    await _add(book_service, owner.id, "C", number_of_pages=500, genre="Fantasy")
    await _add(book_service, owner.id, "D", number_of_pages=50)

    stats = await book_service.stats(owner.id)
    assert stats == BookStats(total_books=4, read_books=2, total_pages_read=500)
    assert stats.unread_books == 2

    assert await book_service.genres(owner.id) == ["Fantasy", "Sci-Fi"]


@pytest.mark.asyncio
async def test_stats_for_empty_catalog(book_service, owner):
    stats = await book_service.stats(owner.id)
    assert stats == BookStats(total_books=0, read_books=0, total_pages_read=0)
    assert await book_service.genres(owner.id) == []
