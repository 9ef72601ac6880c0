from __future__ import annotations

import asyncio
import logging
from typing import Any

from celery import Celery

from stockwatch.domain.auth.constants import EVENT_USER_CREATED

logger = logging.getLogger(__name__)

EVENT_TASKS: dict[str, str] = {
    EVENT_USER_CREATED: "stockwatch.tasks.onboarding.send_welcome_email",
}


class CeleryEventDispatcher:
    def __init__(self, *, celery_app: Celery) -> None:
        self._celery_app = celery_app

    async def send(self, name: str, data: dict[str, Any]) -> None:
        task_name = EVENT_TASKS.get(name)
        if task_name is None:
            raise ValueError(f"Unknown event: {name}")
        await asyncio.to_thread(self._celery_app.send_task, task_name, kwargs={"data": data})
        logger.info("Dispatched background event", extra={"event": name, "task": task_name})
