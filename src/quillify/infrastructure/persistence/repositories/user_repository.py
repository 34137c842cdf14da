"""Queries on the users table.

Emails arrive already normalized (trimmed, lower-cased) from the credential
service, so lookups compare them exactly. Nothing here commits.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from quillify.infrastructure.persistence.models import UserModel


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, user: UserModel) -> UserModel:
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: str) -> UserModel | None:
        return await self.session.get(UserModel, user_id)

    async def get_by_email(self, email: str) -> UserModel | None:
        result = await self.session.execute(select(UserModel).where(UserModel.email == email))
        return result.scalar_one_or_none()

    async def email_exists(self, email: str, exclude_user_id: str | None = None) -> bool:
        """Whether another account already uses ``email``.

        Args:
            email: Normalized address to look for.
            exclude_user_id: Account to ignore, for a user re-saving their own address.
        """
        stmt = select(UserModel.id).where(UserModel.email == email)
        if exclude_user_id is not None:
            stmt = stmt.where(UserModel.id != exclude_user_id)
        result = await self.session.execute(stmt.limit(1))
        return result.first() is not None

    async def _set(self, user_id: str, *conditions: Any, **values: Any) -> bool:
        result = await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user_id, *conditions)
            .values(**values)
            # Keep already loaded UserModel instances in step with the row.
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
        return result.rowcount > 0

    async def set_email(self, user_id: str, email: str) -> bool:
        return await self._set(user_id, email=email)

    async def set_password_hash(self, user_id: str, password_hash: str) -> bool:
        """Store a new bcrypt hash. False if the user no longer exists."""
        return await self._set(user_id, password_hash=password_hash)

    async def set_name(self, user_id: str, name: str | None) -> bool:
        return await self._set(user_id, name=name)

    async def mark_email_verified(self, user_id: str, verified_at: datetime | None = None) -> bool:
        """Stamp ``email_verified_at`` unless it is already set.

        Returns:
            True only for the call that moved the user from unverified to verified.
        """
        return await self._set(
            user_id,
            UserModel.email_verified_at.is_(None),
            email_verified_at=verified_at or datetime.now(timezone.utc),
        )

    async def list_unverified(self) -> list[UserModel]:
        """Users with an email address that was never verified, oldest first."""
        result = await self.session.execute(
            select(UserModel)
            .where(UserModel.email.is_not(None), UserModel.email_verified_at.is_(None))
            .order_by(UserModel.created_at)
        )
        return list(result.scalars())
