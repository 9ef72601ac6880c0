from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from stockwatch.domain.market_data.schemas import StockDetails


class WatchlistEntry(BaseModel):
    owner_id: int
    symbol: str
    company: str
    added_at: datetime | None = None


class WatchlistEntryWithData(WatchlistEntry):
    details: StockDetails | None = None


class WatchlistActionResult(BaseModel):
    success: bool
    message: str | None = None
    error: str | None = None
