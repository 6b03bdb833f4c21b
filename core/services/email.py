"""
Core Email Service.

Provides a unified email sending service for the entire application.
Messages are sent asynchronously via aiosmtplib.

This is a framework-level service that modules should use instead of
implementing their own email sending logic.
"""

import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Optional

import aiosmtplib

from core.app_context import ConfigLoader

logger = logging.getLogger(__name__)


class EmailSendError(Exception):
    """Raised when email sending fails."""
    pass


class EmailConfig:
    """Email configuration from the environment."""

    def __init__(self, config: dict[str, Any]) -> None:
        self.enabled = bool(config.get("enabled", True))
        self.host = config.get("host", "")
        self.port = int(config.get("port", 587))
        self.username = config.get("username", "")
        self.password = config.get("password", "")
        self.from_email = config.get("from_email", "") or self.username
        self.from_name = config.get("from_name", "Vacation Tracker")
        # Implicit TLS (port 465) or STARTTLS (port 587); plain SMTP otherwise
        self.use_tls = bool(config.get("use_tls", self.port == 465))
        self.start_tls = not self.use_tls and bool(config.get("start_tls", self.port == 587))

    @property
    def is_configured(self) -> bool:
        """Check if email service is properly configured."""
        return bool(
            self.host and
            self.username and
            self.password and
            self.from_email
        )


class EmailService:
    """
    Unified email service for the application.

    Usage:
        email_svc = get_email_service()

        if email_svc.can_send:
            await email_svc.send_async(
                to_email="manager@example.com",
                subject="Hello",
                text_content="Hello",
            )
    """

    def __init__(self, config: Optional[dict[str, Any]] = None) -> None:
        """
        Initialize email service.

        Args:
            config: Email configuration dict. If None, loads from the environment.
        """
        if config is None:
            loader = ConfigLoader()
            loader.load()
            config = loader.get("email", {})

        self._config = EmailConfig(config)
        self._warned_unconfigured = False

    @property
    def is_configured(self) -> bool:
        """Check if email service is properly configured."""
        return self._config.is_configured

    @property
    def can_send(self) -> bool:
        """True when notifications are enabled and SMTP is configured."""
        return self._config.enabled and self._config.is_configured

    @property
    def config(self) -> EmailConfig:
        """Get email configuration."""
        return self._config

    def _create_message(
        self,
        to_email: str,
        subject: str,
        text_content: str,
        html_content: Optional[str] = None,
    ) -> MIMEMultipart:
        """
        Create MIME message for email.

        Args:
            to_email: Recipient email address.
            subject: Email subject.
            text_content: Plain text body content.
            html_content: Optional HTML body content.

        Returns:
            MIMEMultipart message ready to send.
        """
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self._config.from_name} <{self._config.from_email}>"
        msg["To"] = to_email

        msg.attach(MIMEText(text_content, "plain", "utf-8"))
        if html_content:
            msg.attach(MIMEText(html_content, "html", "utf-8"))

        return msg

    async def send_async(
        self,
        to_email: str,
        subject: str,
        text_content: str,
        html_content: Optional[str] = None,
    ) -> bool:
        """
        Send email asynchronously using aiosmtplib.

        Args:
            to_email: Recipient email address.
            subject: Email subject.
            text_content: Plain text body content.
            html_content: Optional HTML body content.

        Returns:
            bool: True if sent, False if skipped (not configured / no recipient).

        Raises:
            EmailSendError: If sending fails.
        """
        if not self.can_send:
            if not self._warned_unconfigured:
                self._warned_unconfigured = True
                logger.warning(
                    "Email notifications inactive: missing SMTP configuration "
                    "(SMTP_HOST/SMTP_USERNAME/SMTP_PASSWORD/SMTP_FROM_EMAIL) or disabled"
                )
            return False

        if not to_email:
            logger.warning("No recipient email provided, skipping send")
            return False

        msg = self._create_message(to_email, subject, text_content, html_content)

        try:
            logger.info(f"Sending email to {to_email}: {subject}")

            await aiosmtplib.send(
                msg,
                hostname=self._config.host,
                port=self._config.port,
                use_tls=self._config.use_tls,
                start_tls=self._config.start_tls,
                username=self._config.username,
                password=self._config.password,
                timeout=30,
            )

            logger.info(f"Email sent successfully to {to_email}")
            return True

        except aiosmtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP authentication failed: {e}")
            raise EmailSendError(f"SMTP authentication failed: {e}") from e
        except Exception as e:
            logger.error(f"Failed to send email: {e}")
            raise EmailSendError(f"Failed to send email: {e}") from e


# =============================================================================
# Singleton
# =============================================================================

_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """Get singleton EmailService instance."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service


def reset_email_service() -> None:
    """Drop the cached EmailService (tests, config reload)."""
    global _email_service
    _email_service = None
