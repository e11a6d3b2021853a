"""Database service for provider token rows."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .models import UserToken


def _insert_for(session: AsyncSession):
    # ON CONFLICT lives on the dialect-specific insert construct
    if session.bind is not None and session.bind.dialect.name == "sqlite":
        return sqlite.insert
    return postgresql.insert


class TokenService:
    """High level service for working with :class:`UserToken` records.

    Values are stored exactly as given; encryption is the caller's concern.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def set_tokens(
        self,
        user_id: str,
        provider: str,
        access_token_enc: str,
        refresh_token_enc: str | None,
        expires_at: datetime | None,
    ) -> UserToken:
        """Create or replace the token row for ``(user_id, provider)``."""
        async with self._session_maker() as session:
            insert = _insert_for(session)
            stmt = (
                insert(UserToken)
                .values(
                    user_id=user_id,
                    provider=provider,
                    access_token_enc=access_token_enc,
                    refresh_token_enc=refresh_token_enc,
                    expires_at=expires_at,
                )
                .on_conflict_do_update(
                    index_elements=[UserToken.user_id, UserToken.provider],
                    set_={
                        "access_token_enc": access_token_enc,
                        "refresh_token_enc": refresh_token_enc,
                        "expires_at": expires_at,
                        "updated_at": func.now(),
                    },
                )
            )
            await session.execute(stmt)
            await session.commit()

            result = await session.execute(
                select(UserToken).where(
                    UserToken.user_id == user_id, UserToken.provider == provider
                )
            )
            return result.scalar_one()

    async def get_tokens(self, user_id: str, provider: str) -> UserToken | None:
        """Return the token row for ``(user_id, provider)`` if any."""
        async with self._session_maker() as session:
            stmt = select(UserToken).where(
                UserToken.user_id == user_id, UserToken.provider == provider
            )
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def delete_tokens(self, user_id: str, provider: str) -> None:
        """Remove the token row for ``(user_id, provider)``."""
        async with self._session_maker() as session:
            stmt = delete(UserToken).where(
                UserToken.user_id == user_id, UserToken.provider == provider
            )
            await session.execute(stmt)
            await session.commit()
