import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

from session_auth.core.config import settings
from session_auth.core.security import mask_token

logger = logging.getLogger(__name__)


def build_password_reset_message(email: str, reset_token: str) -> MIMEMultipart:
    """Build the reset email: a link when FRONTEND_URL is set, the bare token otherwise."""
    minutes = settings.password_reset_token_expire_minutes
    message = MIMEMultipart("alternative")
    message["Subject"] = "Password Reset Request"
    message["From"] = settings.smtp_from_email or ""
    message["To"] = email

    if settings.frontend_url:
        reset_link = f"{settings.frontend_url.rstrip('/')}/reset?token={reset_token}"
        text = (
            "You requested a password reset for your account.\n\n"
            f"Please open the following link to reset your password:\n{reset_link}\n\n"
            f"This link will expire in {minutes} minutes.\n\n"
            "If you did not request this, please ignore this email.\n"
        )
        html = (
            "<html><body>"
            "<p>You requested a password reset for your account.</p>"
            f'<p><a href="{reset_link}">{reset_link}</a></p>'
            f"<p>This link will expire in {minutes} minutes.</p>"
            "<p>If you did not request this, please ignore this email.</p>"
            "</body></html>"
        )
    else:
        text = (
            "You requested a password reset for your account.\n\n"
            f"Your password reset token is:\n{reset_token}\n\n"
            f"This token will expire in {minutes} minutes.\n\n"
            "If you did not request this, please ignore this email.\n"
        )
        html = (
            "<html><body>"
            "<p>You requested a password reset for your account.</p>"
            f"<p>Your password reset token is:</p><p><code>{reset_token}</code></p>"
            f"<p>This token will expire in {minutes} minutes.</p>"
            "<p>If you did not request this, please ignore this email.</p>"
            "</body></html>"
        )

    message.attach(MIMEText(text, "plain"))
    message.attach(MIMEText(html, "html"))
    return message


async def send_password_reset_email(email: str, reset_token: str) -> None:
    """
    Send password reset email to user.

    Raises:
        ValueError: If SMTP is not configured.
    """
    if not settings.smtp_configured:
        raise ValueError("SMTP is not configured. Please configure SMTP settings in .env file.")

    message = build_password_reset_message(email, reset_token)
    send_kwargs = {
        "hostname": settings.smtp_host,
        "port": settings.smtp_port,
        "username": settings.smtp_user,
        "password": settings.smtp_password,
    }

    if settings.smtp_use_tls:
        # Port 465 uses direct TLS, everything else STARTTLS
        if settings.smtp_port == 465:
            send_kwargs["use_tls"] = True
        else:
            send_kwargs["start_tls"] = True

    await aiosmtplib.send(message, **send_kwargs)


async def deliver_password_reset_token(email: str, reset_token: str) -> bool:
    """
    Hand a reset token to the user out-of-band. Never raises.

    Returns: True if an email was sent.
    """
    if not settings.smtp_configured:
        logger.warning(
            "SMTP not configured - reset token %s for %s not emailed", mask_token(reset_token), email
        )
        return False

    try:
        await send_password_reset_email(email, reset_token)
    except (aiosmtplib.SMTPException, OSError) as e:
        logger.error("Failed to send password reset email: %s", e)
        return False

    logger.info("Password reset email sent to %s", email)
    return True
