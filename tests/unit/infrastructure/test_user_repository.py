"""Unit tests for UserRepository."""

from datetime import datetime, timedelta, timezone

import pytest

from quillify.infrastructure.persistence.repositories import UserRepository


@pytest.mark.asyncio
async def test_lookups(db_session, make_user):
    user = await make_user("reader@example.com")
    repo = UserRepository(db_session)

    assert (await repo.get_by_id(user.id)).email == "reader@example.com"
    assert (await repo.get_by_email("reader@example.com")).id == user.id
    assert await repo.get_by_email("nobody@example.com") is None
    assert await repo.get_by_id("missing") is None


@pytest.mark.asyncio
async def test_email_exists_with_exclusion(db_session, make_user):
    user = await make_user("reader@example.com")
    repo = UserRepository(db_session)

    assert await repo.email_exists("reader@example.com") is True
    assert await repo.email_exists("reader@example.com", exclude_user_id=user.id) is False
    assert await repo.email_exists("other@example.com") is False


@pytest.mark.asyncio
async def test_setters_report_missing_rows(db_session, make_user):
    user = await make_user()
    repo = UserRepository(db_session)

    assert await repo.set_name(user.id, "New Name") is True
    assert await repo.set_password_hash(user.id, "$2b$04$x") is True
    assert await repo.set_email(user.id, "new@example.com") is True
    assert await repo.set_name("missing", "x") is False
    assert await repo.set_password_hash("missing", "x") is False


@pytest.mark.asyncio
async def test_mark_email_verified_keeps_first_timestamp(db_session, make_user):
    user = await make_user()
    repo = UserRepository(db_session)
    first = datetime(2026, 1, 1, tzinfo=timezone.utc)

    assert await repo.mark_email_verified(user.id, first) is True
    assert await repo.mark_email_verified(user.id, first + timedelta(days=1)) is False
    await db_session.commit()

    await db_session.refresh(user)
    assert user.email_verified_at.replace(tzinfo=timezone.utc) == first


@pytest.mark.asyncio
async def test_list_unverified(db_session, make_user):
    await make_user("verified@example.com", verified_at=datetime.now(timezone.utc))
    pending = await make_user("pending@example.com")
    await make_user(None)

    users = await UserRepository(db_session).list_unverified()
    assert [u.id for u in users] == [pending.id]
