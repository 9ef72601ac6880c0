from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from stockwatch.domain.watchlist.schemas import WatchlistEntry
from stockwatch.infrastructure.db.mappers import watchlist_item_to_domain
from stockwatch.infrastructure.db.models.watchlist import WatchlistItemModel


class DuplicateWatchlistEntryError(ValueError):
    def __init__(self) -> None:
        super().__init__("Stock already in watchlist")


class SqlAlchemyWatchlistRepository:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session

    async def find_one(self, *, owner_id: int, symbol: str) -> WatchlistEntry | None:
        row = await self._session.scalar(
            select(WatchlistItemModel).where(
                WatchlistItemModel.user_id == owner_id,
                WatchlistItemModel.symbol == symbol,
            )
        )
        if row is None:
            return None
        return watchlist_item_to_domain(row)

    async def insert(self, *, owner_id: int, symbol: str, company: str) -> WatchlistEntry:
        item = WatchlistItemModel(user_id=owner_id, symbol=symbol, company=company)
        self._session.add(item)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            raise DuplicateWatchlistEntryError() from exc
        await self._session.refresh(item)
        return watchlist_item_to_domain(item)

    async def delete(self, *, owner_id: int, symbol: str) -> int:
        result = await self._session.execute(
            delete(WatchlistItemModel).where(
                WatchlistItemModel.user_id == owner_id,
                WatchlistItemModel.symbol == symbol,
            )
        )
        await self._session.flush()
        return result.rowcount or 0

    async def list_entries(self, *, owner_id: int) -> list[WatchlistEntry]:
        rows = await self._session.scalars(
            select(WatchlistItemModel)
            .where(WatchlistItemModel.user_id == owner_id)
            .order_by(WatchlistItemModel.added_at.desc(), WatchlistItemModel.id.desc())
        )
        return [watchlist_item_to_domain(row) for row in rows.all()]

    async def list_symbols(self, *, owner_id: int) -> list[str]:
        rows = await self._session.scalars(
            select(WatchlistItemModel.symbol)
            .where(WatchlistItemModel.user_id == owner_id)
            .order_by(WatchlistItemModel.added_at.desc(), WatchlistItemModel.id.desc())
        )
        return [str(symbol) for symbol in rows.all()]
