from __future__ import annotations

from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging

from stockwatch.core.config import settings
from stockwatch.core.logging_config import configure_logging

celery_app = Celery(
    "stockwatch",
    broker=settings.redis_url,
    include=["stockwatch.tasks.onboarding", "stockwatch.tasks.news"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    beat_schedule={
        "send-daily-news-summary": {
            "task": "stockwatch.tasks.news.send_daily_news_summary",
            "schedule": crontab(minute=0, hour=settings.news_summary_hour_utc),
        },
    },
)


@setup_logging.connect
def _configure_worker_logging(**_) -> None:
    configure_logging(settings.log_level)
