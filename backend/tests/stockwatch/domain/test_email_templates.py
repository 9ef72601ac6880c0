from __future__ import annotations

from datetime import datetime, timezone

from stockwatch.domain.market_data.schemas import NewsArticle
from stockwatch.domain.notifications.templates import render_news_summary_email, render_welcome_email


def test_welcome_email_lists_only_provided_preferences() -> None:
    rendered = render_welcome_email(
        {
            "email": "ada@example.com",
            "name": "Ada",
            "country": "UK",
            "investment_goals": "Growth",
            "risk_tolerance": "",
            "preferred_industry": None,
        }
    )

    assert "Hi Ada," in rendered.text
    assert "- Country: UK" in rendered.text
    assert "- Investment goals: Growth" in rendered.text
    assert "Risk tolerance" not in rendered.text
    assert "<li><strong>Country:</strong> UK</li>" in rendered.html


def test_welcome_email_escapes_html() -> None:
    rendered = render_welcome_email({"name": "<b>Eve</b>"})

    assert "&lt;b&gt;Eve&lt;/b&gt;" in rendered.html
    assert "Your preferences" not in rendered.text


def test_news_summary_email_includes_each_article() -> None:
    now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
    article = NewsArticle(
        id="AAPL:1:0",
        headline="Apple ships new chip",
        summary="Details inside.",
        source="Reuters",
        url="https://news.example.com/1",
        datetime=int(now.timestamp()) - 2 * 3600,
        image="",
        category="company",
        related="AAPL",
    )

    rendered = render_news_summary_email(name="Ada", articles=[article], now=now)

    assert rendered.subject == "Market News Summary Today - Monday, October 19, 2026"
    assert "AAPL: Apple ships new chip" in rendered.text
    assert "Reuters - 2 hours ago" in rendered.text
    assert 'href="https://news.example.com/1"' in rendered.html
