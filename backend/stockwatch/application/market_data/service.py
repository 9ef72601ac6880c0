from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from stockwatch.application.market_data.constants import (
    MAX_SEARCH_RESULTS,
    NEWS_LOOKBACK_DAYS,
    POPULAR_STOCK_SYMBOLS,
    POPULAR_STOCKS_LOOKUP_COUNT,
)
from stockwatch.domain.errors import ConfigurationError, UpstreamError, ValidationError
from stockwatch.domain.market_data.formatting import (
    format_change_percent,
    format_market_cap_value,
    format_pe_ratio,
    format_price,
    get_date_range,
)
from stockwatch.domain.market_data.news import merge_company_news, parse_raw_articles, select_market_news
from stockwatch.domain.market_data.schemas import NewsArticle, RawNewsArticle, StockDetails, StockSearchResult
from stockwatch.infrastructure.clients.finnhub import FinnhubClient

logger = logging.getLogger(__name__)

WatchlistSymbolsLookup = Callable[[int], Awaitable[list[str]]]

ERROR_STOCK_DETAILS = "Failed to fetch stock details"
ERROR_NEWS = "Failed to fetch news"


class MarketDataApplicationService:
    def __init__(
        self,
        *,
        finnhub_client: FinnhubClient | None = None,
        watchlist_lookup: WatchlistSymbolsLookup | None = None,
    ) -> None:
        self._finnhub_client = finnhub_client
        self._watchlist_lookup = watchlist_lookup

    async def get_news(self, symbols: Sequence[str] | None = None) -> list[NewsArticle]:
        client = self._require_client()
        clean_symbols = _clean_symbols(symbols or ())

        if clean_symbols:
            date_range = get_date_range(NEWS_LOOKBACK_DAYS)
            fetched = await asyncio.gather(
                *(
                    self._company_news(client, symbol, from_date=date_range.from_date, to_date=date_range.to_date)
                    for symbol in clean_symbols
                )
            )
            merged = merge_company_news(dict(zip(clean_symbols, fetched)), clean_symbols)
            if merged:
                return merged

        try:
            general = parse_raw_articles(await client.get_market_news("general"))
        except Exception as exc:
            logger.exception("Market news request failed")
            raise UpstreamError(ERROR_NEWS) from exc
        return select_market_news(general)

    async def search_stocks(self, query: str | None = None, *, user_id: int | None = None) -> list[StockSearchResult]:
        """Best-effort symbol search; any failure yields an empty list."""
        try:
            client = self._require_client()
            trimmed = (query or "").strip()
            if trimmed:
                results = _parse_search_results(await client.search_symbols(trimmed))
            else:
                results = await self._popular_stocks(client)

            watched = await self._watchlist_symbols(user_id)
            for result in results:
                result.is_in_watchlist = result.symbol in watched
            return results[:MAX_SEARCH_RESULTS]
        except Exception:
            logger.exception("Stock search failed", extra={"query": query})
            return []

    async def get_stock_details(self, symbol: str) -> StockDetails:
        normalized = (symbol or "").strip().upper()
        if not normalized:
            raise ValidationError("Symbol is required")
        client = self._require_client()

        try:
            quote, profile, financials = await asyncio.gather(
                client.get_quote(normalized),
                client.get_profile(normalized),
                client.get_basic_financials(normalized),
            )
        except Exception as exc:
            logger.warning("Stock details request failed", extra={"symbol": normalized})
            raise UpstreamError(ERROR_STOCK_DETAILS) from exc

        current_price = _to_float(quote.get("c"))
        company = profile.get("name")
        if not current_price or not isinstance(company, str) or not company.strip():
            raise UpstreamError(ERROR_STOCK_DETAILS)

        change_percent = _to_float(quote.get("dp")) or 0.0
        market_cap_millions = _to_float(profile.get("marketCapitalization")) or 0.0
        metric = financials.get("metric") if isinstance(financials.get("metric"), dict) else {}

        return StockDetails(
            symbol=normalized,
            company=company.strip(),
            current_price=current_price,
            change_percent=change_percent,
            price_formatted=format_price(current_price),
            change_formatted=format_change_percent(change_percent),
            market_cap_formatted=format_market_cap_value(market_cap_millions * 1e6),
            pe_ratio=format_pe_ratio(_to_float(metric.get("peNormalizedAnnual"))),
        )

    def _require_client(self) -> FinnhubClient:
        if self._finnhub_client is None:
            raise ConfigurationError("FINNHUB API key is not configured")
        return self._finnhub_client

    async def _company_news(
        self,
        client: FinnhubClient,
        symbol: str,
        *,
        from_date: str,
        to_date: str,
    ) -> list[RawNewsArticle]:
        try:
            payload = await client.get_company_news(symbol, from_date=from_date, to_date=to_date)
            return parse_raw_articles(payload)
        except Exception:
            logger.warning("Company news request failed", extra={"symbol": symbol}, exc_info=True)
            return []

    async def _popular_stocks(self, client: FinnhubClient) -> list[StockSearchResult]:
        symbols = POPULAR_STOCK_SYMBOLS[:POPULAR_STOCKS_LOOKUP_COUNT]
        profiles = await asyncio.gather(*(self._profile_or_none(client, symbol) for symbol in symbols))

        results: list[StockSearchResult] = []
        for symbol, profile in zip(symbols, profiles):
            if not profile:
                continue
            name = profile.get("name") or profile.get("ticker")
            if not name:
                continue
            results.append(
                StockSearchResult(
                    symbol=symbol,
                    description=str(name),
                    display_symbol=symbol,
                    type="Common Stock",
                    exchange=profile.get("exchange") or None,
                )
            )
        return results

    async def _profile_or_none(self, client: FinnhubClient, symbol: str) -> dict[str, Any] | None:
        try:
            return await client.get_profile(symbol)
        except Exception:
            logger.warning("Profile lookup failed", extra={"symbol": symbol}, exc_info=True)
            return None

    async def _watchlist_symbols(self, user_id: int | None) -> set[str]:
        if user_id is None or self._watchlist_lookup is None:
            return set()
        return {symbol.upper() for symbol in await self._watchlist_lookup(user_id)}


def _clean_symbols(symbols: Sequence[str]) -> list[str]:
    cleaned: list[str] = []
    for symbol in symbols:
        normalized = (symbol or "").strip().upper()
        if normalized and normalized not in cleaned:
            cleaned.append(normalized)
    return cleaned


def _parse_search_results(payload: dict[str, Any]) -> list[StockSearchResult]:
    raw_results = payload.get("result")
    if not isinstance(raw_results, list):
        return []

    results: list[StockSearchResult] = []
    for item in raw_results:
        if not isinstance(item, dict):
            continue
        symbol = str(item.get("symbol") or "").strip().upper()
        if not symbol:
            continue
        results.append(
            StockSearchResult(
                symbol=symbol,
                description=item.get("description") or symbol,
                display_symbol=item.get("displaySymbol") or symbol,
                type=item.get("type") or "Stock",
            )
        )
    return results


def _to_float(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
