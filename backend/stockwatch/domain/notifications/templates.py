from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from html import escape

from stockwatch.domain.market_data.formatting import format_time_ago, get_formatted_today_date
from stockwatch.domain.market_data.schemas import NewsArticle

WELCOME_SUBJECT = "Welcome to Stockwatch - your market toolkit is ready!"


@dataclass(frozen=True, slots=True)
class RenderedEmail:
    subject: str
    text: str
    html: str


def render_welcome_email(data: dict) -> RenderedEmail:
    name = (data.get("name") or "").strip() or "there"
    preferences = [
        ("Country", data.get("country")),
        ("Investment goals", data.get("investment_goals")),
        ("Risk tolerance", data.get("risk_tolerance")),
        ("Preferred industry", data.get("preferred_industry")),
    ]
    listed = [(label, str(value).strip()) for label, value in preferences if value and str(value).strip()]

    lines = [
        f"Hi {name},",
        "",
        "Thanks for joining Stockwatch. You can now track stocks in your watchlist",
        "and get a daily summary of the news that matters to you.",
    ]
    if listed:
        lines += ["", "Your preferences:"]
        lines += [f"- {label}: {value}" for label, value in listed]
    lines += ["", "Happy investing!"]

    items = "".join(f"<li><strong>{escape(label)}:</strong> {escape(value)}</li>" for label, value in listed)
    html = f"<p>Hi {escape(name)},</p><p>Thanks for joining Stockwatch.</p>"
    if items:
        html += f"<p>Your preferences:</p><ul>{items}</ul>"
    html += "<p>Happy investing!</p>"

    return RenderedEmail(subject=WELCOME_SUBJECT, text="\n".join(lines), html=html)


def render_news_summary_email(
    *,
    name: str,
    articles: Sequence[NewsArticle],
    now: datetime | None = None,
) -> RenderedEmail:
    today = get_formatted_today_date(today=now.date() if now is not None else None)
    subject = f"Market News Summary Today - {today}"

    lines = [f"Hi {name},", "", f"Here is your market news summary for {today}.", ""]
    blocks: list[str] = []
    for article in articles:
        when = format_time_ago(article.datetime, now=now)
        heading = f"{article.related}: {article.headline}" if article.related else article.headline
        lines += [heading, f"{article.source} - {when}", article.summary, article.url, ""]
        blocks.append(
            f'<h3><a href="{escape(article.url)}">{escape(heading)}</a></h3>'
            f"<p><em>{escape(article.source)} - {escape(when)}</em></p>"
            f"<p>{escape(article.summary)}</p>"
        )

    html = f"<p>Hi {escape(name)},</p><p>Here is your market news summary for {escape(today)}.</p>" + "".join(blocks)
    return RenderedEmail(subject=subject, text="\n".join(lines).rstrip() + "\n", html=html)
