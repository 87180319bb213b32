"""
Email Service

Sends the account verification email over SMTP.

When SMTP_HOST is not configured the message is not sent; the
verification link is logged instead so development setups can still
complete registration.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage

from mybook.config import get_settings

logger = logging.getLogger(__name__)


def build_verification_url(token: str) -> str:
    """Frontend link that completes verification for this token."""
    settings = get_settings()
    return f"{settings.frontend_url.rstrip('/')}/verify-email/{token}"


def build_verification_message(recipient: str, token: str) -> EmailMessage:
    """Plain-text and HTML verification email for a new account."""
    settings = get_settings()
    url = build_verification_url(token)

    message = EmailMessage()
    message["Subject"] = "Verify your MyBook account"
    message["From"] = settings.email_from
    message["To"] = recipient
    message.set_content(
        "Welcome to MyBook!\n\n"
        f"Please confirm your email address by opening this link:\n{url}\n\n"
        "If you did not create an account, you can ignore this email.\n"
    )
    message.add_alternative(
        "<h1>Welcome to MyBook!</h1>"
        "<p>Thanks for signing up. Please click the link below to verify your account:</p>"
        f'<p><a href="{url}">Verify my account</a></p>'
        "<p>If you did not create an account, you can ignore this email.</p>",
        subtype="html",
    )
    return message


def send_verification_email(recipient: str, token: str) -> bool:
    """
    Send the verification email.

    Runs as a FastAPI background task after registration, so failures are
    logged and reported through the return value instead of raised.

    Returns:
        True if the message was handed to the SMTP server
    """
    settings = get_settings()

    if not settings.smtp_host:
        logger.info(
            f"SMTP not configured; verification link for {recipient}: "
            f"{build_verification_url(token)}"
        )
        return False

    message = build_verification_message(recipient, token)

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as server:
            server.ehlo()
            if settings.smtp_use_tls:
                server.starttls(context=ssl.create_default_context())
                server.ehlo()
            if settings.smtp_username and settings.smtp_password:
                server.login(settings.smtp_username, settings.smtp_password)
            server.send_message(message)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send verification email to {recipient}: {e}")
        return False

    logger.info(f"Verification email sent to {recipient}")
    return True
