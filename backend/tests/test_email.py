"""Tests for transactional email delivery."""

import logging
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from onboard.services import email
from onboard.services.email import (
    SENDGRID_URL,
    send_password_reset_email,
    send_verification_email,
)

SECRET = "f00dfeedcafe" * 4


def sendgrid_reply(status_code: int) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request("POST", SENDGRID_URL))


@pytest.mark.unit
@pytest.mark.asyncio
class TestEmailDelivery:

    @pytest.mark.parametrize("send", [send_password_reset_email, send_verification_email])
    async def test_configured_delivery_never_logs_the_token(self, send, monkeypatch, caplog):
        monkeypatch.setattr(email.settings, "sendgrid_api_key", "SG.test-key")
        caplog.set_level(logging.INFO)

        with patch.object(
            httpx.AsyncClient, "post", new=AsyncMock(return_value=sendgrid_reply(202))
        ) as post:
            sent = await send("grace@example.com", "Grace", SECRET)

        assert sent is True
        post.assert_awaited_once()
        # The token still reaches the recipient
        assert SECRET in str(post.await_args.kwargs["json"])
        assert "Email sent to grace@example.com" in caplog.text
        assert SECRET not in caplog.text

    async def test_failed_delivery_never_logs_the_token(self, monkeypatch, caplog):
        monkeypatch.setattr(email.settings, "sendgrid_api_key", "SG.test-key")
        caplog.set_level(logging.INFO)

        with patch.object(
            httpx.AsyncClient, "post", new=AsyncMock(return_value=sendgrid_reply(500))
        ):
            sent = await send_password_reset_email("grace@example.com", "Grace", SECRET)

        assert sent is False
        assert "Failed to send email" in caplog.text
        assert SECRET not in caplog.text

    async def test_unconfigured_delivery_logs_the_link(self, monkeypatch, caplog):
        monkeypatch.setattr(email.settings, "sendgrid_api_key", "")
        caplog.set_level(logging.INFO)

        with patch.object(httpx.AsyncClient, "post", new=AsyncMock()) as post:
            sent = await send_verification_email("grace@example.com", "Grace", SECRET)

        assert sent is False
        post.assert_not_awaited()
        assert f"verify-email?token={SECRET}" in caplog.text
