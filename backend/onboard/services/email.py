"""Transactional email: verification, password reset and welcome.

Messages go through the SendGrid v3 HTTP API when `sendgrid_api_key` is
configured. Without a key (local development, tests) the action link is
logged instead. Delivery is scheduled as a FastAPI background task and
never raises: a failed send is logged and the request that triggered it
has already succeeded.
"""

import html
import logging
from datetime import datetime

import httpx

from onboard.config import settings

logger = logging.getLogger(__name__)

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"


def _base_template(content: str) -> str:
    year = datetime.now().year
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\"><title>Onboard</title></head>"
        "<body style=\"font-family: Arial, sans-serif; color: #333;\">"
        f"<div style=\"max-width: 600px; margin: 0 auto; padding: 40px 20px;\">{content}"
        "<hr><p style=\"color: #71717a; font-size: 14px;\">"
        f"&copy; {year} Onboard. This is an automated message, please do not reply.</p>"
        "</div></body></html>"
    )


async def send_email(
    to: str, subject: str, html_body: str, text_body: str, *, link: str | None = None
) -> bool:
    """Send one message; returns False instead of raising on failure.

    `link` is logged only when SendGrid is not configured, since it can
    carry a single-use token.
    """
    if not settings.sendgrid_api_key:
        logger.info("Email to %s not sent (SendGrid not configured): %s", to, subject)
        if link:
            logger.info("Action link for %s: %s", to, link)
        return False

    payload = {
        "personalizations": [{"to": [{"email": to}]}],
        "from": {"email": settings.email_from, "name": settings.email_from_name},
        "subject": subject,
        "content": [
            {"type": "text/plain", "value": text_body},
            {"type": "text/html", "value": html_body},
        ],
    }
    try:
        async with httpx.AsyncClient(timeout=10) as client:
            response = await client.post(
                SENDGRID_URL,
                json=payload,
                headers={"Authorization": f"Bearer {settings.sendgrid_api_key}"},
            )
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error("Failed to send email to %s: %s", to, e)
        return False

    logger.info("Email sent to %s: %s", to, subject)
    return True


async def send_verification_email(email: str, first_name: str, token: str) -> bool:
    url = f"{settings.frontend_url}/verify-email?token={token}"

    content = (
        "<h1>Verify your email address</h1>"
        f"<p>Hi {html.escape(first_name)},</p>"
        "<p>Thanks for signing up! Please verify your email address:</p>"
        f"<p><a href=\"{url}\">Verify Email</a></p>"
        f"<p>Or paste this link into your browser: {url}</p>"
        f"<p>This link will expire in {settings.email_verification_expire_hours} hours. "
        "If you didn't create an account, you can safely ignore this email.</p>"
    )
    text = (
        f"Hi {first_name},\n\nVerify your email address: {url}\n\n"
        f"This link will expire in {settings.email_verification_expire_hours} hours."
    )
    return await send_email(
        email, "Verify your email address", _base_template(content), text, link=url
    )


async def send_password_reset_email(email: str, first_name: str, token: str) -> bool:
    url = f"{settings.frontend_url}/reset-password?token={token}"

    content = (
        "<h1>Reset your password</h1>"
        f"<p>Hi {html.escape(first_name)},</p>"
        "<p>We received a request to reset your password:</p>"
        f"<p><a href=\"{url}\">Reset Password</a></p>"
        f"<p>Or paste this link into your browser: {url}</p>"
        f"<p>This link will expire in {settings.password_reset_expire_minutes} minutes. "
        "If you didn't request a password reset, you can safely ignore this email.</p>"
    )
    text = (
        f"Hi {first_name},\n\nReset your password: {url}\n\n"
        f"This link will expire in {settings.password_reset_expire_minutes} minutes."
    )
    return await send_email(
        email, "Reset your password", _base_template(content), text, link=url
    )


async def send_welcome_email(email: str, first_name: str) -> bool:
    url = f"{settings.frontend_url}/onboarding"
    content = (
        "<h1>Welcome to Onboard!</h1>"
        f"<p>Hi {html.escape(first_name)},</p>"
        "<p>Your email has been verified. Let's finish setting up your account.</p>"
        f"<p><a href=\"{url}\">Continue onboarding</a></p>"
    )
    text = f"Hi {first_name},\n\nYour email has been verified. Continue onboarding: {url}"
    return await send_email(email, "Welcome to Onboard!", _base_template(content), text)
