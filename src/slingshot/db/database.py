"""Database utilities for Slingshot."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from slingshot.settings import get_settings

from .models import Base
from .service import TokenService


class DatabaseManager:
    """Manages database connections and sessions without global state."""

    def __init__(self, database_url: str | None = None):
        """Initialize the database manager with optional database URL."""
        self._database_url = database_url or get_settings().database_url
        self._engine: AsyncEngine | None = None
        self._session_maker: async_sessionmaker[AsyncSession] | None = None

    def _ensure_initialized(self) -> None:
        """Ensure engine and session maker are initialized."""
        if self._session_maker is None:
            self._engine = create_async_engine(self._database_url, echo=False)
            self._session_maker = async_sessionmaker(
                self._engine, expire_on_commit=False
            )

    def get_session_maker(self) -> async_sessionmaker[AsyncSession]:
        """Return the session maker instance."""
        self._ensure_initialized()
        assert self._session_maker is not None
        return self._session_maker

    def get_token_service(self) -> TokenService:
        """Return a TokenService bound to this database manager."""
        return TokenService(self.get_session_maker())

    async def create_all(self) -> None:
        """Create all tables known to the ORM metadata."""
        self._ensure_initialized()
        assert self._engine is not None
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Close the database engine if it exists."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_maker = None
