from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from pydantic import ValidationError as PydanticValidationError

from stockwatch.domain.market_data.schemas import NewsArticle, NewsDistribution, RawNewsArticle

logger = logging.getLogger(__name__)

MAX_NEWS_ARTICLES = 6
COMPANY_SUMMARY_LIMIT = 200
MARKET_SUMMARY_LIMIT = 150
ELLIPSIS = "..."


def calculate_news_distribution(symbol_count: int) -> NewsDistribution:
    if symbol_count < 3:
        items_per_symbol = 3
    elif symbol_count == 3:
        items_per_symbol = 2
    else:
        items_per_symbol = 1
    return NewsDistribution(items_per_symbol=items_per_symbol, target_news_count=MAX_NEWS_ARTICLES)


def validate_article(article: RawNewsArticle) -> bool:
    return bool(
        (article.headline or "").strip()
        and (article.summary or "").strip()
        and (article.url or "").strip()
        and article.datetime
    )


def truncate_summary(summary: str, *, limit: int) -> str:
    text = summary.strip()
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + ELLIPSIS


def format_article(
    article: RawNewsArticle,
    *,
    is_company_news: bool,
    symbol: str | None = None,
    index: int = 0,
) -> NewsArticle:
    if is_company_news:
        # Several symbols can surface the same upstream article id.
        article_id = f"{symbol}:{article.id}:{index}"
        limit = COMPANY_SUMMARY_LIMIT
        source = article.source or "Company News"
        category = "company"
        related = symbol or ""
    else:
        article_id = str(article.id + index)
        limit = MARKET_SUMMARY_LIMIT
        source = article.source or "Market News"
        category = article.category or "general"
        related = article.related or ""

    return NewsArticle(
        id=article_id,
        headline=(article.headline or "").strip(),
        summary=truncate_summary(article.summary or "", limit=limit),
        source=source,
        url=article.url or "",
        datetime=article.datetime or 0,
        image=article.image or "",
        category=category,
        related=related,
    )


def merge_company_news(
    per_symbol: Mapping[str, Sequence[RawNewsArticle]],
    symbols: Sequence[str],
) -> list[NewsArticle]:
    """Interleave company news round-robin across symbols.

    Each symbol contributes at most `items_per_symbol` valid articles and the
    merged list is capped at `target_news_count`, newest first.
    """
    distribution = calculate_news_distribution(len(symbols))
    queues = {symbol: [a for a in per_symbol.get(symbol, ()) if validate_article(a)] for symbol in symbols}

    collected: list[NewsArticle] = []
    for round_index in range(distribution.items_per_symbol):
        for symbol in symbols:
            queue = queues[symbol]
            if round_index >= len(queue):
                continue
            collected.append(
                format_article(queue[round_index], is_company_news=True, symbol=symbol, index=round_index)
            )
            if len(collected) >= distribution.target_news_count:
                break
        if len(collected) >= distribution.target_news_count:
            break

    collected.sort(key=lambda item: item.datetime, reverse=True)
    return collected


def select_market_news(articles: Iterable[RawNewsArticle]) -> list[NewsArticle]:
    seen: set[tuple[int, str, str]] = set()
    unique: list[RawNewsArticle] = []
    for article in articles:
        if not validate_article(article):
            continue
        key = (article.id, article.url or "", article.headline or "")
        if key in seen:
            continue
        seen.add(key)
        unique.append(article)
        if len(unique) >= MAX_NEWS_ARTICLES:
            break
    return [format_article(article, is_company_news=False, index=idx) for idx, article in enumerate(unique)]


def parse_raw_articles(payload: object) -> list[RawNewsArticle]:
    if not isinstance(payload, list):
        return []
    articles: list[RawNewsArticle] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        try:
            articles.append(RawNewsArticle.model_validate(item))
        except PydanticValidationError:
            logger.warning("Skipping malformed news item", extra={"article_id": item.get("id")})
    return articles
