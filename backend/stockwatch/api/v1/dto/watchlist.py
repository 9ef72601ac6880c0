from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from stockwatch.api.v1.dto.market_data import StockDetailsOut


class WatchlistEntryCreate(BaseModel):
    symbol: str = Field(min_length=1, max_length=16)
    company: str = Field(default="", max_length=255)


class WatchlistEntryOut(BaseModel):
    symbol: str
    company: str
    added_at: datetime | None = None


class WatchlistEntryWithDataOut(WatchlistEntryOut):
    details: StockDetailsOut | None = None


class WatchlistActionOut(BaseModel):
    success: bool
    message: str | None = None
    error: str | None = None
