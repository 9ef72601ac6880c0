from __future__ import annotations

import pytest

from stockwatch.domain.market_data.news import (
    calculate_news_distribution,
    format_article,
    merge_company_news,
    parse_raw_articles,
    select_market_news,
    truncate_summary,
    validate_article,
)
from stockwatch.domain.market_data.schemas import RawNewsArticle


def _article(article_id: int, *, ts: int, **overrides) -> RawNewsArticle:
    data = {
        "id": article_id,
        "headline": f"  Headline {article_id}  ",
        "summary": f"Summary {article_id}",
        "url": f"https://news.example.com/{article_id}",
        "datetime": ts,
        "source": "Reuters",
        "category": "company",
    }
    data.update(overrides)
    return RawNewsArticle(**data)


@pytest.mark.parametrize(
    ("symbol_count", "per_symbol"),
    [(0, 3), (1, 3), (2, 3), (3, 2), (5, 1)],
)
def test_news_distribution_by_symbol_count(symbol_count: int, per_symbol: int) -> None:
    distribution = calculate_news_distribution(symbol_count)

    assert distribution.items_per_symbol == per_symbol
    assert distribution.target_news_count == 6


def test_validate_article_requires_core_fields() -> None:
    assert validate_article(_article(1, ts=100)) is True
    assert validate_article(_article(1, ts=100, headline="   ")) is False
    assert validate_article(_article(1, ts=100, summary=None)) is False
    assert validate_article(_article(1, ts=100, url="")) is False
    assert validate_article(_article(1, ts=0)) is False


def test_truncate_summary_appends_ellipsis_only_when_cut() -> None:
    assert truncate_summary("a" * 200, limit=200) == "a" * 200
    assert truncate_summary("a" * 250, limit=200) == "a" * 200 + "..."
    assert truncate_summary("  short  ", limit=150) == "short"


def test_format_article_for_company_and_market_news() -> None:
    raw = _article(42, ts=1_700_000_000, summary="b" * 180, category=None, related="")

    company = format_article(raw, is_company_news=True, symbol="AAPL", index=1)
    market = format_article(raw, is_company_news=False, index=3)

    assert company.id == "AAPL:42:1"
    assert company.headline == "Headline 42"
    assert company.summary == "b" * 180
    assert company.category == "company"
    assert company.related == "AAPL"

    assert market.id == "45"
    assert market.summary == "b" * 150 + "..."
    assert market.category == "general"
    assert market.related == ""


def test_merge_company_news_round_robins_and_sorts_newest_first() -> None:
    per_symbol = {
        "AAPL": [_article(i, ts=1000 + i) for i in range(4)],
        "MSFT": [_article(10 + i, ts=2000 + i) for i in range(4)],
    }

    merged = merge_company_news(per_symbol, ["AAPL", "MSFT"])

    assert len(merged) == 6
    assert [a.related for a in merged].count("AAPL") == 3
    assert [a.related for a in merged].count("MSFT") == 3
    assert [a.datetime for a in merged] == sorted((a.datetime for a in merged), reverse=True)


def test_merge_company_news_caps_three_symbols_at_two_each() -> None:
    per_symbol = {symbol: [_article(i, ts=100 + i) for i in range(5)] for symbol in ("A", "B", "C")}

    merged = merge_company_news(per_symbol, ["A", "B", "C"])

    assert len(merged) == 6
    assert {a.related for a in merged} == {"A", "B", "C"}


def test_merge_company_news_skips_invalid_and_missing_symbols() -> None:
    per_symbol = {"AAPL": [_article(1, ts=10, url=""), _article(2, ts=20)]}

    merged = merge_company_news(per_symbol, ["AAPL", "TSLA"])

    assert [a.id for a in merged] == ["AAPL:2:0"]


def test_select_market_news_dedupes_and_caps_at_six() -> None:
    articles = [_article(i, ts=100 + i) for i in range(8)]
    articles.insert(1, _article(0, ts=100))

    selected = select_market_news(articles)

    assert len(selected) == 6
    assert [a.headline for a in selected][:2] == ["Headline 0", "Headline 1"]


def test_parse_raw_articles_ignores_non_objects() -> None:
    parsed = parse_raw_articles([{"id": 1, "headline": "x", "extra": True}, "noise", None])

    assert len(parsed) == 1
    assert parsed[0].headline == "x"
    assert parse_raw_articles({"error": "bad"}) == []


def test_parse_raw_articles_skips_malformed_items() -> None:
    good = {"id": 1, "headline": "Good", "summary": "s", "url": "https://x.test", "datetime": 10}
    bad = {"id": None, "headline": "Bad", "summary": "s", "url": "https://y.test", "datetime": "soon"}

    parsed = parse_raw_articles([good, bad])

    assert [a.headline for a in parsed] == ["Good"]


def test_merge_company_news_with_five_symbols_takes_one_each() -> None:
    symbols = ["A", "B", "C", "D", "E"]
    per_symbol = {symbol: [_article(i, ts=100 + i) for i in range(3)] for symbol in symbols}

    merged = merge_company_news(per_symbol, symbols)

    assert len(merged) == 5
    assert sorted(a.related for a in merged) == symbols


def test_merge_company_news_with_one_symbol_takes_three() -> None:
    merged = merge_company_news({"AAPL": [_article(i, ts=100 + i) for i in range(5)]}, ["AAPL"])

    assert len(merged) == 3
    assert {a.related for a in merged} == {"AAPL"}
