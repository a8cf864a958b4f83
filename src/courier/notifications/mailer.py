"""Mail transports for admin notifications."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from abc import abstractmethod
from email.message import EmailMessage
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from courier.models import Notification

if TYPE_CHECKING:
    from courier.config import Settings

logger = logging.getLogger(__name__)


@runtime_checkable
class Mailer(Protocol):
    """Protocol for sending a composed notification."""

    @abstractmethod
    async def send(self, message: Notification) -> None: ...


class SmtpMailer:
    """Sends notifications over SMTP.

    smtplib is blocking, so each send runs in a worker thread.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        sender: str = "courier@localhost",
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender
        self.timeout = timeout

    def build_message(self, message: Notification) -> EmailMessage:
        email = EmailMessage()
        email["From"] = self.sender
        email["To"] = message.recipient
        email["Subject"] = message.subject
        for name, value in message.headers.items():
            # Content-Type comes from set_content below
            if name.lower() != "content-type":
                email[name] = value
        email.set_content(message.body)
        return email

    async def send(self, message: Notification) -> None:
        await asyncio.to_thread(self._send_sync, self.build_message(message))
        logger.info("Sent %s notification to %s", message.kind, message.recipient)

    def _send_sync(self, email: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username and self.password:
                smtp.login(self.username, self.password)
            smtp.send_message(email)


class LogMailer:
    """Logs notifications instead of sending them. Used when SMTP is not configured."""

    def __init__(self) -> None:
        self.sent: list[Notification] = []

    async def send(self, message: Notification) -> None:
        self.sent.append(message)
        logger.warning(
            "Notification for %s (not mailed, SMTP not configured): %s",
            message.recipient,
            message.subject,
        )


def get_mailer(settings: Settings) -> Mailer:
    """SMTP mailer when ``smtp_host`` is set, otherwise a logging mailer."""
    if settings.smtp_host:
        return SmtpMailer(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            sender=settings.mail_from,
        )
    return LogMailer()
