import asyncio
from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from session_auth.core.config import settings
from session_auth.services import email as email_service

TOKEN = "ab" * 32


@pytest.fixture
def smtp_settings(monkeypatch):
    monkeypatch.setattr(settings, "smtp_host", "smtp.example.com")
    monkeypatch.setattr(settings, "smtp_port", 587)
    monkeypatch.setattr(settings, "smtp_user", "mailer")
    monkeypatch.setattr(settings, "smtp_password", "secret")
    monkeypatch.setattr(settings, "smtp_from_email", "noreply@example.com")


def test_message_contains_token_without_frontend_url(monkeypatch):
    monkeypatch.setattr(settings, "frontend_url", None)
    message = email_service.build_password_reset_message("alice@example.com", TOKEN)

    assert message["To"] == "alice@example.com"
    assert TOKEN in message.as_string()


def test_message_contains_link_with_frontend_url(monkeypatch):
    monkeypatch.setattr(settings, "frontend_url", "http://localhost:3000/")
    message = email_service.build_password_reset_message("alice@example.com", TOKEN)

    assert f"http://localhost:3000/reset?token={TOKEN}" in message.as_string()


def test_deliver_without_smtp_is_skipped():
    with patch.object(email_service.aiosmtplib, "send", new=AsyncMock()) as send:
        assert asyncio.run(email_service.deliver_password_reset_token("a@example.com", TOKEN)) is False
    send.assert_not_called()


def test_deliver_sends_with_starttls(smtp_settings):
    with patch.object(email_service.aiosmtplib, "send", new=AsyncMock()) as send:
        assert asyncio.run(email_service.deliver_password_reset_token("a@example.com", TOKEN)) is True

    kwargs = send.await_args.kwargs
    assert kwargs["hostname"] == "smtp.example.com"
    assert kwargs["start_tls"] is True


def test_deliver_swallows_smtp_errors(smtp_settings):
    failing = AsyncMock(side_effect=aiosmtplib.SMTPException("relay denied"))
    with patch.object(email_service.aiosmtplib, "send", new=failing):
        assert asyncio.run(email_service.deliver_password_reset_token("a@example.com", TOKEN)) is False


def test_send_requires_smtp():
    with pytest.raises(ValueError):
        asyncio.run(email_service.send_password_reset_email("a@example.com", TOKEN))
