"""Outbound notification delivery.

Only the envelope is modeled (kind, recipients, subject, context); the body
is a plain-text rendering of the context. Delivery goes through SMTP when
SMTP_HOST is configured, otherwise messages are only logged.
"""

import asyncio
import logging
import smtplib
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import Any, Dict, List, Protocol

from vos.core.config import settings
from vos.core.errors import ExternalFailureError

logger = logging.getLogger(__name__)


@dataclass
class NotificationMessage:
    kind: str
    recipients: List[str]
    subject: str
    context: Dict[str, Any] = field(default_factory=dict)

    def body(self) -> str:
        lines = [self.subject, ""]
        for key, value in self.context.items():
            if value is None or value == "":
                continue
            lines.append(f"{key}: {value}")
        return "\n".join(lines)


class Notifier(Protocol):
    async def send(self, message: NotificationMessage) -> None:
        ...


class LogNotifier:
    """Notifier used when no mail server is configured."""

    async def send(self, message: NotificationMessage) -> None:
        logger.info(
            "Notification %s to %s: %s",
            message.kind,
            ", ".join(message.recipients),
            message.subject,
        )


class SmtpNotifier:
    """Send notifications as plain-text email through an SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str = None,
        password: str = None,
        use_tls: bool = True,
        sender: str = None,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender or settings.MAIL_FROM
        self.timeout = timeout

    def _build(self, message: NotificationMessage) -> EmailMessage:
        email = EmailMessage()
        email["From"] = self.sender
        email["To"] = ", ".join(message.recipients)
        email["Subject"] = message.subject
        email.set_content(message.body())
        return email

    def _deliver(self, email: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password or "")
            smtp.send_message(email)

    async def send(self, message: NotificationMessage) -> None:
        email = self._build(message)
        try:
            await asyncio.to_thread(self._deliver, email)
        except (smtplib.SMTPException, OSError) as e:
            raise ExternalFailureError(f"Failed to send {message.kind} email: {e}") from e
        logger.info("Sent %s email to %s", message.kind, ", ".join(message.recipients))


def build_notifier() -> Notifier:
    if settings.SMTP_HOST:
        return SmtpNotifier(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            use_tls=settings.SMTP_USE_TLS,
        )
    return LogNotifier()
