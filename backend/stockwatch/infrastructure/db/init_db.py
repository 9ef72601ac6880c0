from __future__ import annotations

from stockwatch.infrastructure.db.base import Base
from stockwatch.infrastructure.db.connection import DatabaseConnectionManager

# Ensure models are registered with SQLAlchemy metadata.
from stockwatch.infrastructure.db import models  # noqa: F401


async def init_db(connections: DatabaseConnectionManager) -> None:
    handle = await connections.acquire()
    async with handle.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
