"""SMTP email channel implementation."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import TYPE_CHECKING

from cscanary.config import DEFAULT_SMTP_TIMEOUT

if TYPE_CHECKING:
    from cscanary.config import Settings
    from cscanary.models import NotificationMessage

logger = logging.getLogger(__name__)


class EmailChannel:
    """Sends alerts through an SMTP relay.

    Logs in only when both username and password are set; otherwise the
    relay is used unauthenticated. Transport errors are logged and
    reported as a failed send, never raised.
    """

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        destination: str,
        *,
        username: str = "",
        password: str = "",
        use_ssl: bool = False,
        timeout: float = DEFAULT_SMTP_TIMEOUT,
    ) -> None:
        """Initialize email channel.

        Args:
            host: SMTP relay hostname.
            port: SMTP relay port.
            sender: Envelope and header From address.
            destination: Recipient address.
            username: SMTP login, empty for none.
            password: SMTP password, empty for none.
            use_ssl: Upgrade the session with STARTTLS.
            timeout: Socket timeout for the whole session in seconds.
        """
        self.host = host
        self.port = port
        self.sender = sender
        self.destination = destination
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.timeout = timeout
        self.name = "email"

    @property
    def auth_enabled(self) -> bool:
        """Check if SMTP login should be attempted."""
        return bool(self.username) and bool(self.password)

    @classmethod
    def from_settings(cls, settings: Settings) -> EmailChannel:
        """Create a channel from application settings."""
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.smtp_sender,
            destination=settings.smtp_destination,
            username=settings.smtp_username,
            password=settings.smtp_password.get_secret_value(),
            use_ssl=settings.smtp_use_ssl,
            timeout=settings.smtp_timeout,
        )

    def build_message(self, message: NotificationMessage) -> EmailMessage:
        """Build the MIME message for an alert."""
        msg = EmailMessage()
        msg["Subject"] = message.subject
        msg["From"] = self.sender
        msg["To"] = self.destination
        msg.set_content(message.body)
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as client:
            if self.use_ssl:
                client.starttls()
            if self.auth_enabled:
                client.login(self.username, self.password)
            client.send_message(msg)

    async def send(self, message: NotificationMessage) -> bool:
        """Send alert email.

        Returns:
            True if the relay accepted the message, False otherwise.
        """
        msg = self.build_message(message)
        try:
            await asyncio.to_thread(self._deliver, msg)
        except smtplib.SMTPAuthenticationError as e:
            logger.warning("SMTP authentication failed for %s: %s", self.username, e)
            return False
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("Email delivery to %s failed: %s", self.destination, e)
            return False

        logger.info("Alert email delivered to %s", self.destination)
        return True
