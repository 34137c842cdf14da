"""Token lifecycle tests against a real SQLite database.

The mocked unit tests cannot show what SQLAlchemy does to loaded instances
after a rollback, or how two connections race for the same token row.
"""

import asyncio
from typing import AsyncGenerator
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from quillify.domain.exceptions import InternalError, TokenNotFoundError
from quillify.domain.services import EmailVerificationService, PasswordResetService
from quillify.infrastructure.auth.password_hasher import hash_password, verify_password
from quillify.infrastructure.persistence.database import Base
from quillify.infrastructure.persistence.models import PasswordResetTokenModel, UserModel
from quillify.infrastructure.persistence.repositories import (
    EmailVerificationRepository,
    PasswordResetRepository,
    TokenRepository,
    UserRepository,
)


def _store_failure() -> AsyncMock:
    return AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("database is locked")))


class TestIssueStoreFailure:
    @pytest.mark.asyncio
    async def test_raises_internal_error(self, db_session, make_user, email_service, mail):
        user = await make_user()
        service = EmailVerificationService(
            db_session,
            UserRepository(db_session),
            EmailVerificationRepository(db_session),
            email_service,
        )

        with patch.object(TokenRepository, "create", _store_failure()):
            with pytest.raises(InternalError):
                await service.send_verification(user)

        assert mail.messages == []

    @pytest.mark.asyncio
    async def test_user_can_be_reloaded_afterwards(self, db_session, make_user, email_service):
        user = await make_user(email="reload@example.com")
        user_id = user.id
        service = PasswordResetService(
            db_session,
            UserRepository(db_session),
            PasswordResetRepository(db_session),
            email_service,
        )

        with patch.object(TokenRepository, "create", _store_failure()):
            with pytest.raises(InternalError):
                await service.request_reset("reload@example.com")

        reloaded = await UserRepository(db_session).get_by_id(user_id)
        assert reloaded.email == "reload@example.com"


@pytest_asyncio.fixture
async def file_sessions(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory on a file database, so each session gets its own connection."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'quillify.db'}",
        connect_args={"timeout": 10},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


class TestConcurrentConsumption:
    @pytest.mark.asyncio
    async def test_only_one_reset_applies(self, file_sessions, email_service):
        async with file_sessions() as session:
            user = UserModel(email="race@example.com", password_hash=hash_password("Password123"))
            session.add(user)
            await session.commit()
            user_id = user.id
            issued = await PasswordResetService(
                session, UserRepository(session), PasswordResetRepository(session), email_service
            ).issue(user, deliver=False)

        async def reset(new_password: str):
            async with file_sessions() as session:
                service = PasswordResetService(
                    session, UserRepository(session), PasswordResetRepository(session), email_service
                )
                return await service.reset_password(issued.raw_token, new_password)

        results = await asyncio.gather(
            reset("FirstPassword1"), reset("SecondPassword2"), return_exceptions=True
        )

        winners = [i for i, result in enumerate(results) if result == user_id]
        losers = [i for i, result in enumerate(results) if isinstance(result, TokenNotFoundError)]
        assert len(winners) == 1, results
        assert len(losers) == 1, results

        async with file_sessions() as session:
            stored = await session.get(UserModel, user_id)
            remaining = await session.scalar(select(func.count()).select_from(PasswordResetTokenModel))
        winning_password = ("FirstPassword1", "SecondPassword2")[winners[0]]
        losing_password = ("FirstPassword1", "SecondPassword2")[losers[0]]
        assert verify_password(winning_password, stored.password_hash)
        assert not verify_password(losing_password, stored.password_hash)
        assert remaining == 0
