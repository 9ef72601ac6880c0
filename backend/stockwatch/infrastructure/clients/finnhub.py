from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from stockwatch.domain.errors import ConfigurationError, UpstreamHttpError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://finnhub.io/api/v1"

PROFILE_REVALIDATE_SECONDS = 3600
METRICS_REVALIDATE_SECONDS = 1800
SEARCH_REVALIDATE_SECONDS = 1800
NEWS_REVALIDATE_SECONDS = 300


class ResponseCache(Protocol):
    async def get(self, url: str) -> Any | None: ...

    async def set(self, url: str, payload: Any, *, ttl_seconds: int) -> None: ...


class FinnhubClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout_seconds: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
        response_cache: ResponseCache | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("FINNHUB API key is not configured")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._http_client = http_client
        self._response_cache = response_cache

    async def fetch_json(self, url: str, revalidate_seconds: int | None = None) -> Any:
        """GET `url` and decode the JSON body.

        Without `revalidate_seconds` the response cache is bypassed entirely;
        with it, a cached body is served until the TTL lapses.
        """
        use_cache = revalidate_seconds is not None and self._response_cache is not None
        if use_cache:
            cached = await self._cache_get(url)
            if cached is not None:
                return cached

        response = await self._get(url)
        if not response.is_success:
            raise UpstreamHttpError(status_code=response.status_code, body=response.text)
        payload = response.json()

        if use_cache:
            await self._cache_set(url, payload, ttl_seconds=revalidate_seconds)
        return payload

    async def get_quote(self, symbol: str) -> dict[str, Any]:
        return _as_dict(await self.fetch_json(self._url("/quote", symbol=symbol)))

    async def get_profile(self, symbol: str) -> dict[str, Any]:
        url = self._url("/stock/profile2", symbol=symbol)
        return _as_dict(await self.fetch_json(url, PROFILE_REVALIDATE_SECONDS))

    async def get_basic_financials(self, symbol: str) -> dict[str, Any]:
        url = self._url("/stock/metric", symbol=symbol, metric="all")
        return _as_dict(await self.fetch_json(url, METRICS_REVALIDATE_SECONDS))

    async def search_symbols(self, query: str) -> dict[str, Any]:
        url = self._url("/search", q=query)
        return _as_dict(await self.fetch_json(url, SEARCH_REVALIDATE_SECONDS))

    async def get_company_news(self, symbol: str, *, from_date: str, to_date: str) -> list[Any]:
        url = self._url("/company-news", symbol=symbol, **{"from": from_date, "to": to_date})
        return _as_list(await self.fetch_json(url, NEWS_REVALIDATE_SECONDS))

    async def get_market_news(self, category: str = "general") -> list[Any]:
        url = self._url("/news", category=category)
        return _as_list(await self.fetch_json(url, NEWS_REVALIDATE_SECONDS))

    def _url(self, path: str, **params: str) -> str:
        return str(httpx.URL(f"{self.base_url}{path}", params={**params, "token": self.api_key}))

    async def _get(self, url: str) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.get(url)
        async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
            return await client.get(url)

    async def _cache_get(self, url: str) -> Any | None:
        try:
            return await self._response_cache.get(url)
        except Exception:
            logger.warning("Response cache read failed", exc_info=True)
            return None

    async def _cache_set(self, url: str, payload: Any, *, ttl_seconds: int) -> None:
        try:
            await self._response_cache.set(url, payload, ttl_seconds=ttl_seconds)
        except Exception:
            logger.warning("Response cache write failed", exc_info=True)


def _as_dict(payload: Any) -> dict[str, Any]:
    return payload if isinstance(payload, dict) else {}


def _as_list(payload: Any) -> list[Any]:
    return payload if isinstance(payload, list) else []
