"""Outbound email over SMTP with a local simulated fallback."""

import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ideation.config import settings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

email_templates = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)


def render_email(template_name: str, **context) -> str:
    """Render one of the HTML email templates."""
    context.setdefault("app_name", settings.APP_NAME)
    context.setdefault("platform_url", settings.PLATFORM_URL)
    return email_templates.get_template(template_name).render(**context)


def _sender() -> str:
    address = settings.MAIL_FROM or settings.SMTP_USERNAME
    return f"{settings.APP_NAME} <{address}>"


def _send_email_sync(recipient_email: str, subject: str, html_body: str) -> bool:
    """Send (or simulate) one email. Returns False when delivery failed."""
    if not settings.SMTP_USERNAME or not settings.SMTP_PASSWORD:
        print("\n" + "=" * 60)
        print(f"SIMULATED EMAIL TO: {recipient_email}")
        print(f"SUBJECT: {subject}")
        print("=" * 60 + "\n")
        logger.info(f"Simulated email sent to {recipient_email}")
        return True

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = _sender()
    msg["To"] = recipient_email
    msg.attach(MIMEText(html_body, "html"))

    try:
        if settings.SMTP_SECURE:
            server = smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT)
        else:
            server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT)
            server.starttls()
        try:
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.send_message(msg)
        finally:
            server.quit()
        logger.info(f"Email successfully sent to {recipient_email}")
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}")
        return False


async def send_email(recipient_email: str, subject: str, html_body: str) -> bool:
    """Deliver one message without blocking the event loop."""
    return await asyncio.to_thread(_send_email_sync, recipient_email, subject, html_body)


async def send_verification_email(recipient_email: str, display_name: str, link: str) -> bool:
    html = render_email("verify_email.html", display_name=display_name, link=link)
    return await send_email(recipient_email, f"Verify your email for {settings.APP_NAME}", html)


async def send_password_reset_email(recipient_email: str, link: str) -> bool:
    html = render_email("reset_password.html", link=link)
    return await send_email(recipient_email, f"Reset your {settings.APP_NAME} password", html)
