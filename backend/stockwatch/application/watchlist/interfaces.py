from __future__ import annotations

from typing import Protocol

from stockwatch.domain.market_data.schemas import StockDetails


class ViewInvalidator(Protocol):
    async def invalidate(self, path: str, *, user_id: int | None = None) -> None: ...


class StockDetailsProvider(Protocol):
    async def get_stock_details(self, symbol: str) -> StockDetails: ...
