from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class RawNewsArticle(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int = 0
    headline: str | None = None
    summary: str | None = None
    url: str | None = None
    datetime: int | None = None
    source: str | None = None
    image: str | None = None
    category: str | None = None
    related: str | None = None


class NewsArticle(BaseModel):
    id: str
    headline: str
    summary: str
    source: str
    url: str
    datetime: int
    image: str
    category: str
    related: str


class NewsDistribution(BaseModel):
    items_per_symbol: int
    target_news_count: int


class StockSearchResult(BaseModel):
    symbol: str
    description: str
    display_symbol: str
    type: str
    exchange: str | None = None
    is_in_watchlist: bool = False


class StockDetails(BaseModel):
    symbol: str
    company: str
    current_price: float
    change_percent: float
    price_formatted: str
    change_formatted: str
    market_cap_formatted: str
    pe_ratio: str
