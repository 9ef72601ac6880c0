from __future__ import annotations

import asyncio
from typing import Any

import pytest

from stockwatch.application.market_data.service import MarketDataApplicationService
from stockwatch.domain.errors import ConfigurationError, UpstreamError, UpstreamHttpError


class FakeFinnhubClient:
    def __init__(self) -> None:
        self.quotes: dict[str, dict[str, Any]] = {}
        self.profiles: dict[str, dict[str, Any]] = {}
        self.financials: dict[str, dict[str, Any]] = {}
        self.company_news: dict[str, list[dict[str, Any]]] = {}
        self.market_news: list[dict[str, Any]] = []
        self.search_payload: dict[str, Any] = {"result": []}
        self.failing_symbols: set[str] = set()
        self.market_news_fails = False
        self.search_fails = False
        self.calls: list[tuple[str, str]] = []

    def _maybe_fail(self, symbol: str) -> None:
        if symbol in self.failing_symbols:
            raise UpstreamHttpError(status_code=500, body="boom")

    async def get_quote(self, symbol: str) -> dict[str, Any]:
        self.calls.append(("quote", symbol))
        self._maybe_fail(symbol)
        return self.quotes.get(symbol, {})

    async def get_profile(self, symbol: str) -> dict[str, Any]:
        self.calls.append(("profile", symbol))
        self._maybe_fail(symbol)
        return self.profiles.get(symbol, {})

    async def get_basic_financials(self, symbol: str) -> dict[str, Any]:
        self.calls.append(("metric", symbol))
        self._maybe_fail(symbol)
        return self.financials.get(symbol, {})

    async def search_symbols(self, query: str) -> dict[str, Any]:
        self.calls.append(("search", query))
        if self.search_fails:
            raise UpstreamHttpError(status_code=429, body="limit")
        return self.search_payload

    async def get_company_news(self, symbol: str, *, from_date: str, to_date: str) -> list[Any]:
        self.calls.append(("company-news", symbol))
        self._maybe_fail(symbol)
        return self.company_news.get(symbol, [])

    async def get_market_news(self, category: str = "general") -> list[Any]:
        self.calls.append(("news", category))
        if self.market_news_fails:
            raise UpstreamHttpError(status_code=502, body="bad gateway")
        return self.market_news


def _news(article_id: int, ts: int) -> dict[str, Any]:
    return {
        "id": article_id,
        "headline": f"Headline {article_id}",
        "summary": f"Summary {article_id}",
        "url": f"https://news.example.com/{article_id}",
        "datetime": ts,
        "source": "Reuters",
    }


def _aapl_client() -> FakeFinnhubClient:
    client = FakeFinnhubClient()
    client.quotes["AAPL"] = {"c": 190.5, "dp": 1.234}
    client.profiles["AAPL"] = {"name": "Apple Inc", "marketCapitalization": 3_000_000, "exchange": "NASDAQ"}
    client.financials["AAPL"] = {"metric": {}}
    return client


def test_stock_details_formats_quote_profile_and_metrics() -> None:
    client = _aapl_client()
    service = MarketDataApplicationService(finnhub_client=client)

    details = asyncio.run(service.get_stock_details("AAPL"))

    assert details.symbol == "AAPL"
    assert details.company == "Apple Inc"
    assert details.current_price == 190.5
    assert details.price_formatted == "$190.50"
    assert details.change_formatted == "+1.23%"
    assert details.market_cap_formatted == "$3.00T"
    assert details.pe_ratio == "—"


def test_stock_details_symbol_case_is_irrelevant() -> None:
    service = MarketDataApplicationService(finnhub_client=_aapl_client())

    async def scenario():
        return await service.get_stock_details("aapl"), await service.get_stock_details("AAPL")

    lower, upper = asyncio.run(scenario())

    assert lower == upper


def test_stock_details_runs_three_lookups() -> None:
    client = _aapl_client()
    client.financials["AAPL"] = {"metric": {"peNormalizedAnnual": 29.87}}
    service = MarketDataApplicationService(finnhub_client=client)

    details = asyncio.run(service.get_stock_details("AAPL"))

    assert details.pe_ratio == "29.9"
    assert sorted(kind for kind, _ in client.calls) == ["metric", "profile", "quote"]


def test_stock_details_failure_raises_upstream_error() -> None:
    client = _aapl_client()
    client.failing_symbols.add("AAPL")
    service = MarketDataApplicationService(finnhub_client=client)

    with pytest.raises(UpstreamError, match="Failed to fetch stock details"):
        asyncio.run(service.get_stock_details("AAPL"))


def test_stock_details_without_price_or_name_raises_upstream_error() -> None:
    client = _aapl_client()
    client.quotes["AAPL"] = {"c": 0}
    service = MarketDataApplicationService(finnhub_client=client)

    with pytest.raises(UpstreamError, match="Failed to fetch stock details"):
        asyncio.run(service.get_stock_details("AAPL"))


def test_missing_client_raises_configuration_error() -> None:
    service = MarketDataApplicationService()

    with pytest.raises(ConfigurationError):
        asyncio.run(service.get_stock_details("AAPL"))
    with pytest.raises(ConfigurationError):
        asyncio.run(service.get_news(["AAPL"]))


def test_news_for_symbols_uses_company_news() -> None:
    client = FakeFinnhubClient()
    client.company_news["AAPL"] = [_news(i, 1000 + i) for i in range(5)]
    client.company_news["MSFT"] = [_news(100 + i, 2000 + i) for i in range(5)]
    service = MarketDataApplicationService(finnhub_client=client)

    articles = asyncio.run(service.get_news([" aapl", "MSFT", "AAPL"]))

    assert len(articles) == 6
    assert {a.related for a in articles} == {"AAPL", "MSFT"}
    assert ("news", "general") not in client.calls
    assert [c for c in client.calls if c[0] == "company-news"] == [("company-news", "AAPL"), ("company-news", "MSFT")]


def test_news_falls_back_to_general_when_company_news_is_empty() -> None:
    client = FakeFinnhubClient()
    client.failing_symbols.add("AAPL")
    client.market_news = [_news(i, 500 + i) for i in range(10)]
    service = MarketDataApplicationService(finnhub_client=client)

    articles = asyncio.run(service.get_news(["AAPL"]))

    assert len(articles) == 6
    assert all(a.category == "general" for a in articles)


def test_malformed_news_items_are_skipped_for_company_and_general_news() -> None:
    malformed = {"id": None, "headline": "Broken", "summary": "x", "url": "https://x.test", "datetime": 5}
    client = FakeFinnhubClient()
    client.company_news["AAPL"] = [_news(1, 1000), malformed]
    client.market_news = [_news(2, 900), malformed]
    service = MarketDataApplicationService(finnhub_client=client)

    async def scenario():
        return await service.get_news(["AAPL"]), await service.get_news()

    company, general = asyncio.run(scenario())

    assert [a.id for a in company] == ["AAPL:1:0"]
    assert [a.id for a in general] == ["2"]


def test_news_without_symbols_returns_general_news() -> None:
    client = FakeFinnhubClient()
    client.market_news = [_news(1, 100)]
    service = MarketDataApplicationService(finnhub_client=client)

    articles = asyncio.run(service.get_news())

    assert [a.id for a in articles] == ["1"]


def test_general_news_failure_raises_upstream_error() -> None:
    client = FakeFinnhubClient()
    client.market_news_fails = True
    service = MarketDataApplicationService(finnhub_client=client)

    with pytest.raises(UpstreamError, match="Failed to fetch news"):
        asyncio.run(service.get_news([]))


def test_search_results_are_capped_uppercased_and_annotated() -> None:
    client = FakeFinnhubClient()
    client.search_payload = {
        "result": [
            {"symbol": f"sym{i}", "description": f"Company {i}", "displaySymbol": f"SYM{i}", "type": "Common Stock"}
            for i in range(20)
        ]
    }

    async def lookup(user_id: int) -> list[str]:
        assert user_id == 7
        return ["SYM1"]

    service = MarketDataApplicationService(finnhub_client=client, watchlist_lookup=lookup)

    results = asyncio.run(service.search_stocks("  sym ", user_id=7))

    assert len(results) == 15
    assert all(r.symbol == r.symbol.upper() for r in results)
    assert [r.symbol for r in results if r.is_in_watchlist] == ["SYM1"]
    assert ("search", "sym") in client.calls


def test_search_without_query_lists_popular_stocks() -> None:
    client = FakeFinnhubClient()
    client.profiles["AAPL"] = {"name": "Apple Inc", "exchange": "NASDAQ"}
    client.profiles["MSFT"] = {"name": "Microsoft Corp", "exchange": "NASDAQ"}
    service = MarketDataApplicationService(finnhub_client=client)

    results = asyncio.run(service.search_stocks(""))

    assert [r.symbol for r in results] == ["AAPL", "MSFT"]
    assert results[0].exchange == "NASDAQ"
    assert sum(1 for kind, _ in client.calls if kind == "profile") == 10


def test_search_is_best_effort() -> None:
    client = FakeFinnhubClient()
    client.search_fails = True

    assert asyncio.run(MarketDataApplicationService(finnhub_client=client).search_stocks("apple")) == []
    assert asyncio.run(MarketDataApplicationService().search_stocks("apple")) == []
