from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

NOT_AVAILABLE = "N/A"
PLACEHOLDER = "—"


@dataclass(frozen=True, slots=True)
class DateRange:
    from_date: str
    to_date: str


def format_market_cap_value(value: float | None) -> str:
    if value is None or not math.isfinite(value) or value <= 0:
        return NOT_AVAILABLE
    if value >= 1e12:
        return f"${value / 1e12:.2f}T"
    if value >= 1e9:
        return f"${value / 1e9:.2f}B"
    if value >= 1e6:
        return f"${value / 1e6:.2f}M"
    return f"${value:.2f}"


def format_price(value: float) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_change_percent(value: float | None) -> str:
    if not value:
        return ""
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.2f}%"


def format_pe_ratio(value: float | None) -> str:
    if not value:
        return PLACEHOLDER
    return f"{value:.1f}"


def format_time_ago(timestamp: int, *, now: datetime | None = None) -> str:
    current = now or datetime.now(tz=timezone.utc)
    elapsed = current - datetime.fromtimestamp(timestamp, tz=timezone.utc)
    hours = elapsed.total_seconds() / 3600

    if hours >= 24:
        days = int(hours // 24)
        return f"{days} day{'s' if days != 1 else ''} ago"
    if hours >= 1:
        whole_hours = int(hours)
        return f"{whole_hours} hour{'s' if whole_hours != 1 else ''} ago"
    minutes = int(elapsed.total_seconds() // 60)
    return f"{minutes} minute{'s' if minutes != 1 else ''} ago"


def get_date_range(days: int, *, today: date | None = None) -> DateRange:
    end = today or datetime.now(tz=timezone.utc).date()
    start = end - timedelta(days=days)
    return DateRange(from_date=start.isoformat(), to_date=end.isoformat())


def get_today_string(*, today: date | None = None) -> str:
    return (today or datetime.now(tz=timezone.utc).date()).isoformat()


def get_formatted_today_date(*, today: date | None = None) -> str:
    current = today or datetime.now(tz=timezone.utc).date()
    return f"{current:%A}, {current:%B} {current.day}, {current.year}"
