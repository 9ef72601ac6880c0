from __future__ import annotations

import asyncio
import logging

from stockwatch.application.container import build_email_sender
from stockwatch.core.celery_app import celery_app
from stockwatch.domain.notifications.templates import render_welcome_email

logger = logging.getLogger(__name__)


@celery_app.task(name="stockwatch.tasks.onboarding.send_welcome_email")
def send_welcome_email(data: dict) -> dict:
    email = (data.get("email") or "").strip()
    if not email:
        logger.warning("Welcome email skipped: payload has no email")
        return {"success": False, "message": "No email provided"}

    rendered = render_welcome_email(data)
    sent = asyncio.run(
        build_email_sender().send(to=email, subject=rendered.subject, text=rendered.text, html=rendered.html)
    )
    return {"success": sent, "message": "Welcome email sent" if sent else "Email delivery is not configured"}
