from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from stockwatch.infrastructure.db.connection import DatabaseConnectionManager
from stockwatch.infrastructure.repositories.auth_repository import SqlAlchemyAuthRepository
from stockwatch.infrastructure.repositories.user_repository import SqlAlchemyUserRepository
from stockwatch.infrastructure.repositories.watchlist_repository import SqlAlchemyWatchlistRepository


class SqlAlchemyUnitOfWork:
    def __init__(self, *, connections: DatabaseConnectionManager) -> None:
        self._connections = connections
        self.session: AsyncSession | None = None
        self.auth_repo: SqlAlchemyAuthRepository | None = None
        self.users_repo: SqlAlchemyUserRepository | None = None
        self.watchlist_repo: SqlAlchemyWatchlistRepository | None = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        handle = await self._connections.acquire()
        self.session = handle.session_factory()
        self.auth_repo = SqlAlchemyAuthRepository(session=self.session)
        self.users_repo = SqlAlchemyUserRepository(session=self.session)
        self.watchlist_repo = SqlAlchemyWatchlistRepository(session=self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session is None:
            return
        try:
            if exc_type is not None:
                await self.session.rollback()
        finally:
            await self.session.close()
            self.session = None
            self.auth_repo = None
            self.users_repo = None
            self.watchlist_repo = None

    async def commit(self) -> None:
        if self.session is None:
            raise RuntimeError("Unit of work has no active session")
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is None:
            raise RuntimeError("Unit of work has no active session")
        await self.session.rollback()
