"""Fire-and-forget account notifications."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from config import settings

logger = logging.getLogger(__name__)

WELCOME_SUBJECT = "User Creation"
WELCOME_BODY = "Thank you for choosing us, your account has been created."


def _deliver(message: EmailMessage) -> None:
    with smtplib.SMTP(settings.MAIL_HOST, int(settings.MAIL_PORT), timeout=30) as smtp:
        if settings.MAIL_USE_TLS:
            smtp.starttls()
        if settings.MAIL_USERNAME:
            smtp.login(settings.MAIL_USERNAME, settings.MAIL_PASSWORD)
        smtp.send_message(message)


async def send_welcome_email(recipient: str) -> None:
    """Send the registration email; failures are logged and never propagated."""
    if not settings.MAIL_HOST:
        logger.info("Mail disabled; skipping welcome email to %s", recipient)
        return

    message = EmailMessage()
    message["From"] = settings.MAIL_FROM
    message["To"] = recipient
    message["Subject"] = WELCOME_SUBJECT
    message.set_content(WELCOME_BODY)
    try:
        await asyncio.to_thread(_deliver, message)
    except (smtplib.SMTPException, OSError) as exc:
        logger.warning("Welcome email to %s failed: %s", recipient, exc)
