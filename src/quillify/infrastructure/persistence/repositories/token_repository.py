"""Storage shared by password reset and email verification tokens.

Subclasses bind ``model_class`` and ``entity_class``; the queries are the
same for both tables. Nothing here commits: the token lifecycle decides when
a deletion becomes permanent.
"""

from datetime import datetime, timezone
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from quillify.domain.entities.single_use_token import SingleUseToken, hash_token
from quillify.infrastructure.persistence.models.single_use_token import SingleUseTokenColumns

TokenEntity = TypeVar("TokenEntity", bound=SingleUseToken)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class TokenRepository(Generic[TokenEntity]):
    model_class: ClassVar[Any]
    entity_class: ClassVar[type[SingleUseToken]]

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def _to_entity(self, row: SingleUseTokenColumns) -> TokenEntity:
        return self.entity_class(
            id=row.id,
            user_id=row.user_id,
            token_hash=row.token_hash,
            expires_at=_as_utc(row.expires_at),
            created_at=_as_utc(row.created_at),
        )

    async def _one(self, *conditions: Any) -> TokenEntity | None:
        result = await self._session.execute(select(self.model_class).where(*conditions))
        row = result.scalar_one_or_none()
        return self._to_entity(row) if row is not None else None

    async def _delete(self, *conditions: Any) -> int:
        result = await self._session.execute(delete(self.model_class).where(*conditions))
        return result.rowcount

    async def create(self, entity: TokenEntity) -> TokenEntity:
        """Store ``entity`` as the user's only token, deleting any earlier one."""
        await self.delete_for_user(entity.user_id)
        row = self.model_class(
            id=entity.id,
            user_id=entity.user_id,
            token_hash=entity.token_hash,
            expires_at=entity.expires_at,
            created_at=entity.created_at,
        )
        self._session.add(row)
        await self._session.flush()
        return self._to_entity(row)

    async def get_by_token(self, raw_token: str) -> TokenEntity | None:
        """Find the row whose hash matches the token a user presented."""
        return await self._one(self.model_class.token_hash == hash_token(raw_token))

    async def delete_by_id(self, token_id: str) -> bool:
        """Delete one token.

        Returns:
            True if this call removed the row. When two requests consume the
            same token, only one of them sees True.
        """
        return await self._delete(self.model_class.id == token_id) > 0

    async def delete_for_user(self, user_id: str) -> int:
        return await self._delete(self.model_class.user_id == user_id)

    async def delete_expired(self, now: datetime | None = None) -> int:
        """Delete tokens that expired before ``now`` (default: the current time)."""
        return await self._delete(self.model_class.expires_at < (now or datetime.now(timezone.utc)))
