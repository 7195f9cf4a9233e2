"""
Outbound email delivery.

Senders never raise: every outcome comes back as a DeliveryReceipt and the
caller decides how much a failed delivery matters.
"""

import asyncio
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Optional

from jobportal.config import Settings
from jobportal.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    text: str
    html: Optional[str] = None


@dataclass(frozen=True)
class DeliveryReceipt:
    delivered: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class EmailSender(ABC):
    """Delivery channel for account emails."""

    @abstractmethod
    async def send(self, email: OutgoingEmail) -> DeliveryReceipt:
        """Deliver one message."""


class SmtpEmailSender(EmailSender):
    """Sends through an SMTP relay; the blocking client runs in a worker thread."""

    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.user = settings.smtp_user
        self.password = settings.smtp_password
        self.use_tls = settings.smtp_use_tls
        self.timeout = settings.smtp_timeout_seconds
        self.sender = formataddr((settings.smtp_from_name, settings.smtp_from_email))
        self.sender_domain = settings.smtp_from_email.rpartition("@")[2] or None

    def build_message(self, email: OutgoingEmail) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = email.subject
        msg["From"] = self.sender
        msg["To"] = email.to
        msg["Message-ID"] = make_msgid(domain=self.sender_domain)
        msg.set_content(email.text)
        if email.html:
            msg.add_alternative(email.html, subtype="html")
        return msg

    async def send(self, email: OutgoingEmail) -> DeliveryReceipt:
        msg = self.build_message(email)
        return await asyncio.to_thread(self._deliver, msg)

    def _deliver(self, msg: EmailMessage) -> DeliveryReceipt:
        try:
            if self.port == 465:
                with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as server:
                    self._login(server)
                    server.send_message(msg)
            else:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                    if self.use_tls:
                        server.starttls()
                    self._login(server)
                    server.send_message(msg)
        except smtplib.SMTPAuthenticationError:
            logger.exception("SMTP authentication failed", extra={"smtp_host": self.host})
            return DeliveryReceipt(delivered=False, error="SMTP authentication failed")
        except smtplib.SMTPException as exc:
            logger.exception("SMTP rejected message", extra={"smtp_host": self.host})
            return DeliveryReceipt(delivered=False, error=f"SMTP error: {type(exc).__name__}")
        except OSError as exc:
            # Covers connection refused and timeouts
            logger.exception("SMTP connection failed", extra={"smtp_host": self.host})
            return DeliveryReceipt(delivered=False, error=f"SMTP connection error: {type(exc).__name__}")

        logger.info("Email sent", extra={"message_id": msg["Message-ID"]})
        return DeliveryReceipt(delivered=True, message_id=msg["Message-ID"])

    def _login(self, server: smtplib.SMTP) -> None:
        if self.user:
            server.login(self.user, self.password)


class LoggingEmailSender(EmailSender):
    """
    Development stand-in used when no SMTP relay is set.

    Writes the message to the log instead of sending it.
    """

    async def send(self, email: OutgoingEmail) -> DeliveryReceipt:
        message_id = make_msgid()
        logger.info(
            "[DEV] Email to %s: %s\n%s",
            email.to,
            email.subject,
            email.text,
            extra={"message_id": message_id},
        )
        return DeliveryReceipt(delivered=True, message_id=message_id)


class UnconfiguredEmailSender(EmailSender):
    """
    Used outside development when no SMTP relay is set.

    Sends nothing and never logs the body, which carries codes and links.
    """

    async def send(self, email: OutgoingEmail) -> DeliveryReceipt:
        logger.warning("Email not sent: SMTP not configured", extra={"subject": email.subject})
        return DeliveryReceipt(delivered=False, error="SMTP not configured")


def build_email_sender(settings: Settings) -> EmailSender:
    """Pick the sender for the configured environment."""
    if settings.email_configured:
        return SmtpEmailSender(settings)
    if settings.environment == "development":
        return LoggingEmailSender()
    logger.warning("SMTP_HOST not set in %s; emails will not be sent", settings.environment)
    return UnconfiguredEmailSender()
