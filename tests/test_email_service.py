"""
Unit Tests for the core EmailService.

SMTP delivery is replaced by an AsyncMock patched over aiosmtplib.send.
"""

import pytest
from email import message_from_string
from unittest.mock import AsyncMock, patch


def _email_config(**overrides):
    config = {
        "enabled": True,
        "host": "smtp.test.com",
        "port": 587,
        "username": "test@test.com",
        "password": "testpass",
        "from_email": "noreply@test.com",
        "from_name": "Test System",
    }
    config.update(overrides)
    return config


def _decoded_body(msg) -> str:
    parsed = message_from_string(msg.as_string())
    content = ""
    for part in parsed.walk():
        if part.get_content_type() in ("text/plain", "text/html"):
            payload = part.get_payload(decode=True)
            if payload:
                content += payload.decode("utf-8", errors="ignore")
    return content


class TestEmailConfig:
    """Tests for EmailConfig."""

    def test_is_configured(self):
        from core.services.email import EmailConfig

        assert EmailConfig(_email_config()).is_configured is True

    @pytest.mark.parametrize("missing", ["host", "username", "password"])
    def test_missing_field_means_unconfigured(self, missing):
        from core.services.email import EmailConfig

        assert EmailConfig(_email_config(**{missing: ""})).is_configured is False

    def test_from_email_defaults_to_username(self):
        from core.services.email import EmailConfig

        config = EmailConfig(_email_config(from_email=""))
        assert config.from_email == "test@test.com"

    def test_port_465_defaults_to_implicit_tls(self):
        from core.services.email import EmailConfig

        config = {k: v for k, v in _email_config(port=465).items()}
        assert EmailConfig(config).use_tls is True
        assert EmailConfig(config).start_tls is False

    @pytest.mark.parametrize(
        "port, start_tls",
        [(587, True), (25, False), (2525, False)],
    )
    def test_starttls_defaults_to_port_587(self, port, start_tls):
        from core.services.email import EmailConfig

        assert EmailConfig(_email_config(port=port)).start_tls is start_tls

    def test_explicit_starttls_setting(self):
        from core.services.email import EmailConfig

        assert EmailConfig(_email_config(port=25, start_tls=True)).start_tls is True
        assert EmailConfig(_email_config(port=587, start_tls=False)).start_tls is False


class TestEmailService:
    """Tests for EmailService.send_async."""

    def test_loads_config_from_environment(self, mock_env_vars):
        from core.services.email import EmailService

        service = EmailService()

        assert service.config.host == "smtp.test.com"
        assert service.config.port == 587
        assert service.can_send is True

    def test_disabled_service_cannot_send(self):
        from core.services.email import EmailService

        service = EmailService(_email_config(enabled=False))

        assert service.is_configured is True
        assert service.can_send is False

    @pytest.mark.asyncio
    async def test_send_success(self, mock_smtp_send):
        from core.services.email import EmailService

        service = EmailService(_email_config())
        result = await service.send_async(
            to_email="manager@example.com",
            subject="Signed vacation request missing",
            text_content="Jonė Jonaitė, 2025-06-01 - 2025-06-05",
        )

        assert result is True
        mock_smtp_send.assert_awaited_once()
        msg = mock_smtp_send.call_args[0][0]
        assert msg["To"] == "manager@example.com"
        assert "Test System" in str(msg["From"])
        assert "Jonė Jonaitė" in _decoded_body(msg)

    @pytest.mark.asyncio
    async def test_send_uses_starttls_on_587(self, mock_smtp_send):
        from core.services.email import EmailService

        await EmailService(_email_config()).send_async(
            to_email="manager@example.com", subject="s", text_content="t"
        )

        kwargs = mock_smtp_send.call_args[1]
        assert kwargs["hostname"] == "smtp.test.com"
        assert kwargs["port"] == 587
        assert kwargs["use_tls"] is False
        assert kwargs["start_tls"] is True
        assert kwargs["username"] == "test@test.com"

    @pytest.mark.asyncio
    async def test_send_plain_smtp_relay(self, mock_smtp_send):
        from core.services.email import EmailService

        await EmailService(_email_config(host="localhost", port=25)).send_async(
            to_email="manager@example.com", subject="s", text_content="t"
        )

        kwargs = mock_smtp_send.call_args[1]
        assert kwargs["port"] == 25
        assert kwargs["use_tls"] is False
        assert kwargs["start_tls"] is False

    @pytest.mark.asyncio
    async def test_send_html_alternative(self, mock_smtp_send):
        from core.services.email import EmailService

        await EmailService(_email_config()).send_async(
            to_email="manager@example.com",
            subject="s",
            text_content="plain",
            html_content="<p>html</p>",
        )

        msg = mock_smtp_send.call_args[0][0]
        types = [part.get_content_type() for part in msg.walk()]
        assert "text/plain" in types
        assert "text/html" in types

    @pytest.mark.asyncio
    async def test_unconfigured_returns_false_without_sending(self, mock_smtp_send):
        from core.services.email import EmailService

        service = EmailService(_email_config(host=""))
        result = await service.send_async(
            to_email="manager@example.com", subject="s", text_content="t"
        )

        assert result is False
        mock_smtp_send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_recipient_returns_false(self, mock_smtp_send):
        from core.services.email import EmailService

        result = await EmailService(_email_config()).send_async(
            to_email="", subject="s", text_content="t"
        )

        assert result is False
        mock_smtp_send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_smtp_error_raises_email_send_error(self):
        from core.services.email import EmailSendError, EmailService

        with patch("aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            mock_send.side_effect = Exception("SMTP connection failed")

            with pytest.raises(EmailSendError) as exc_info:
                await EmailService(_email_config()).send_async(
                    to_email="manager@example.com", subject="s", text_content="t"
                )

        assert "SMTP connection failed" in str(exc_info.value)


class TestEmailServiceSingleton:
    """Tests for get_email_service / reset_email_service."""

    def test_singleton_and_reset(self, mock_env_vars):
        from core.services.email import get_email_service, reset_email_service

        reset_email_service()
        first = get_email_service()
        assert get_email_service() is first

        reset_email_service()
        assert get_email_service() is not first
        reset_email_service()
