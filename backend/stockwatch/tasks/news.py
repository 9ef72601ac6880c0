from __future__ import annotations

import asyncio
import logging

from stockwatch.application.container import (
    build_email_sender,
    build_task_market_data_service,
    build_uow,
    build_user_service,
)
from stockwatch.application.market_data.service import MarketDataApplicationService
from stockwatch.application.watchlist.service import WatchlistApplicationService
from stockwatch.core.celery_app import celery_app
from stockwatch.core.config import settings
from stockwatch.domain.notifications.templates import render_news_summary_email
from stockwatch.domain.users.schemas import UserSummary
from stockwatch.infrastructure.db.connection import DatabaseConnectionManager
from stockwatch.infrastructure.notifications.email import SmtpEmailSender

logger = logging.getLogger(__name__)


@celery_app.task(name="stockwatch.tasks.news.send_daily_news_summary")
def send_daily_news_summary() -> dict[str, int]:
    return asyncio.run(_send_daily_news_summary())


async def _send_daily_news_summary() -> dict[str, int]:
    # Async engines are bound to the loop that created them; each run opens its own.
    connections = DatabaseConnectionManager(database_url=settings.database_url)
    try:
        return await run_news_summary(
            users=await build_user_service(connections).fetch_users_for_news_email(),
            watchlist_service=WatchlistApplicationService(uow=build_uow(connections)),
            market_data_service=build_task_market_data_service(connections),
            email_sender=build_email_sender(),
        )
    finally:
        await connections.close()


async def run_news_summary(
    *,
    users: list[UserSummary],
    watchlist_service: WatchlistApplicationService,
    market_data_service: MarketDataApplicationService,
    email_sender: SmtpEmailSender,
) -> dict[str, int]:
    counters = {"users": len(users), "sent": 0, "skipped": 0, "failed": 0}

    for user in users:
        symbols = await watchlist_service.symbols_for_user(int(user.id))
        try:
            articles = await market_data_service.get_news(symbols or None)
        except Exception:
            logger.exception("News fetch failed for user", extra={"user_id": user.id})
            counters["skipped"] += 1
            continue

        if not articles:
            counters["skipped"] += 1
            continue

        rendered = render_news_summary_email(name=user.name, articles=articles)
        try:
            sent = await email_sender.send(
                to=user.email,
                subject=rendered.subject,
                text=rendered.text,
                html=rendered.html,
            )
        except Exception:
            logger.exception("News summary delivery failed", extra={"user_id": user.id})
            counters["failed"] += 1
            continue

        if sent:
            counters["sent"] += 1
        else:
            counters["skipped"] += 1

    logger.info("Daily news summary finished", extra=counters)
    return counters
