from __future__ import annotations

from pydantic import BaseModel


class NewsArticleOut(BaseModel):
    id: str
    headline: str
    summary: str
    source: str
    url: str
    datetime: int
    image: str
    category: str
    related: str


class StockSearchResultOut(BaseModel):
    symbol: str
    description: str
    display_symbol: str
    type: str
    exchange: str | None = None
    is_in_watchlist: bool = False


class StockDetailsOut(BaseModel):
    symbol: str
    company: str
    current_price: float
    change_percent: float
    price_formatted: str
    change_formatted: str
    market_cap_formatted: str
    pe_ratio: str
