from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    def __init__(
        self,
        *,
        host: str | None,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        sender: str | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = sender
        self._timeout_seconds = timeout_seconds

    @property
    def configured(self) -> bool:
        return bool(self._host and self._sender)

    async def send(self, *, to: str, subject: str, text: str, html: str | None = None) -> bool:
        if not self.configured:
            logger.warning("SMTP is not configured; skipping email", extra={"to": to, "subject": subject})
            return False
        message = self._build_message(to=to, subject=subject, text=text, html=html)
        await asyncio.to_thread(self._deliver, message)
        return True

    def _build_message(self, *, to: str, subject: str, text: str, html: str | None) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self._sender
        message["To"] = to
        message.set_content(text)
        if html:
            message.add_alternative(html, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout_seconds) as server:
            server.starttls()
            if self._username and self._password:
                server.login(self._username, self._password)
            server.send_message(message)
