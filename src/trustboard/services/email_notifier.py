"""EmailNotifier: send transactional email over SMTP.

Blocking ``smtplib`` calls run in a worker thread so callers can await them.
Send failures propagate; the startup connectivity check only logs.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr, make_msgid

from trustboard.core.settings import settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(RuntimeError):
    """Raised when a message could not be handed to the SMTP server."""


@dataclass(frozen=True)
class SMTPConfig:
    """Immutable SMTP transport configuration."""

    host: str | None
    port: int
    secure: bool
    user: str | None
    password: str | None
    from_name: str
    timeout_seconds: float

    @property
    def sender(self) -> str:
        return formataddr((self.from_name, self.user or ""))


def load_smtp_config() -> SMTPConfig:
    """Build configuration object from global settings."""

    return SMTPConfig(
        host=settings.email_host,
        port=settings.email_port,
        secure=settings.email_secure,
        user=settings.email_user,
        password=settings.email_pass,
        from_name=settings.email_from_name,
        timeout_seconds=settings.email_connection_timeout_seconds,
    )


class EmailNotifier:
    """Sends notification emails through a single SMTP server."""

    def __init__(self, config: SMTPConfig | None = None) -> None:
        self.config = config or load_smtp_config()

    def _connect(self) -> smtplib.SMTP:
        """Open an authenticated SMTP connection.

        Raises:
            smtplib.SMTPException, OSError: On connection or auth errors
        """
        if not self.config.host:
            raise smtplib.SMTPException("SMTP host not configured")

        server: smtplib.SMTP
        if self.config.secure:
            server = smtplib.SMTP_SSL(
                self.config.host, self.config.port, timeout=self.config.timeout_seconds
            )
        else:
            server = smtplib.SMTP(
                self.config.host, self.config.port, timeout=self.config.timeout_seconds
            )
        try:
            if not self.config.secure:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls()
                    server.ehlo()
            if self.config.user:
                server.login(self.config.user, self.config.password or "")
        except BaseException:
            server.close()
            raise
        return server

    def _verify(self) -> None:
        with self._connect() as server:
            server.noop()

    async def verify_connection(self) -> bool:
        """Check that the SMTP server is reachable and accepts our credentials.

        Returns:
            True on success, False otherwise. Never raises.
        """
        try:
            await asyncio.to_thread(self._verify)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("SMTP Connection Failed: %s", exc)
            return False
        logger.info("SMTP Connection Verified: Ready to send emails")
        return True

    def build_message(
        self,
        to: str,
        subject: str,
        text: str | None = None,
        html: str | None = None,
    ) -> EmailMessage:
        """Build a message with a plain-text body and optional HTML alternative."""
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.config.sender
        message["To"] = to
        message["Message-ID"] = make_msgid(domain=(self.config.host or None))
        message.set_content(text or "")
        if html:
            message.add_alternative(html, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with self._connect() as server:
            server.send_message(message)

    async def send(
        self,
        to: str,
        subject: str,
        text: str | None = None,
        html: str | None = None,
    ) -> str:
        """Send one email.

        Args:
            to: Recipient address
            subject: Subject line
            text: Plain-text body
            html: Optional HTML body

        Returns:
            The Message-ID of the sent message

        Raises:
            EmailDeliveryError: If the SMTP transport fails
        """
        logger.info("Attempting to send email...")
        logger.debug(
            "Transporter Config: host=%s port=%s secure=%s user=%s pass=%s",
            self.config.host,
            self.config.port,
            self.config.secure,
            "***" if self.config.user else "MISSING",
            "***" if self.config.password else "MISSING",
        )

        message = self.build_message(to, subject, text=text, html=html)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Error sending email to %s: %s", to, exc)
            raise EmailDeliveryError(f"Failed to send email: {exc}") from exc

        message_id = message["Message-ID"]
        logger.info("Email sent successfully: %s", message_id)
        return message_id


class _EmailNotifierSingleton:
    """Singleton wrapper for EmailNotifier."""

    _instance: EmailNotifier | None = None

    @classmethod
    def get_instance(cls) -> EmailNotifier:
        """Get or create the singleton EmailNotifier instance."""
        if cls._instance is None:
            cls._instance = EmailNotifier()
        return cls._instance


def get_email_notifier() -> EmailNotifier:
    """Return a singleton email notifier instance."""
    return _EmailNotifierSingleton.get_instance()
