from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from stockwatch.domain.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DatabaseHandle:
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]


async def open_database(database_url: str) -> DatabaseHandle:
    """Create the engine and probe it so a bad connection fails here, not on the first query."""
    engine = create_async_engine(database_url, pool_pre_ping=True)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        await engine.dispose()
        raise UpstreamError("Database connection failed", kind="database") from exc
    except asyncio.CancelledError:
        await engine.dispose()
        raise
    return DatabaseHandle(
        engine=engine,
        session_factory=async_sessionmaker(engine, expire_on_commit=False),
    )


class DatabaseConnectionManager:
    """Process-wide, lazily opened database handle.

    Concurrent callers that arrive while the first connection attempt is in
    flight await that same attempt instead of opening their own. A failed
    attempt is forgotten so the next call starts a fresh one.
    """

    def __init__(
        self,
        *,
        database_url: str | None,
        connect: Callable[[str], Awaitable[DatabaseHandle]] = open_database,
    ) -> None:
        self._database_url = (database_url or "").strip()
        self._connect = connect
        self._handle: DatabaseHandle | None = None
        self._pending: asyncio.Task[DatabaseHandle] | None = None

    @property
    def is_ready(self) -> bool:
        return self._handle is not None

    @property
    def has_pending_attempt(self) -> bool:
        return self._pending is not None

    async def acquire(self) -> DatabaseHandle:
        if not self._database_url:
            raise ConfigurationError("DATABASE_URL must be set")
        if self._handle is not None:
            return self._handle

        # No await between the check and the assignment: the pair is atomic on the event loop.
        pending = self._pending
        if pending is None:
            pending = asyncio.ensure_future(self._open())
            self._pending = pending

        return await asyncio.shield(pending)

    async def close(self) -> None:
        pending = self._pending
        self._pending = None
        if pending is not None:
            pending.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await pending

        # A handle may have landed before the cancellation took effect.
        handle = self._handle
        self._handle = None
        if handle is not None:
            await handle.engine.dispose()

    async def _open(self) -> DatabaseHandle:
        try:
            handle = await self._connect(self._database_url)
        except BaseException:
            self._pending = None
            logger.warning("Database connection attempt failed")
            raise
        self._handle = handle
        self._pending = None
        logger.info("Database connection established")
        return handle
