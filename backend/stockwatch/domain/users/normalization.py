from __future__ import annotations

from collections.abc import Iterable

from stockwatch.domain.users.schemas import UserSummary


def to_user_summaries(records: Iterable[dict]) -> list[UserSummary]:
    """Keep only records that have both an email and a display name."""
    summaries: list[UserSummary] = []
    for record in records:
        email = (record.get("email") or "").strip()
        name = (record.get("name") or "").strip()
        if not email or not name:
            continue
        summaries.append(
            UserSummary(
                id=str(record.get("id", "")),
                email=email,
                name=name,
                country=record.get("country"),
            )
        )
    return summaries
