"""Outbound email.

Two providers are supported, picked by ``EMAIL_PROVIDER``: Resend over its
HTTP API and plain SMTP. A provider only counts as configured when all of its
credentials are present; otherwise sending is skipped and reported as a
failed ``EmailResult`` so reminder runs can carry on.
"""
import enum
import html
import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import httpx

from ibdaily.config import Settings, get_settings

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class EmailProvider(str, enum.Enum):
    resend = "resend"
    smtp = "smtp"
    none = "none"


class EmailError(Exception):
    pass


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    html: str
    text: str | None = None


@dataclass(frozen=True)
class EmailResult:
    success: bool
    error: str | None = None


def get_email_provider(settings: Settings | None = None) -> EmailProvider:
    settings = settings or get_settings()
    provider = (settings.email_provider or "").lower()
    if provider == EmailProvider.resend.value and settings.resend_api_key:
        return EmailProvider.resend
    if provider == EmailProvider.smtp.value and all(
        (settings.smtp_host, settings.smtp_port, settings.smtp_user, settings.smtp_pass)
    ):
        return EmailProvider.smtp
    return EmailProvider.none


def is_email_configured(settings: Settings | None = None) -> bool:
    return get_email_provider(settings) != EmailProvider.none


def send_via_resend(message: EmailMessage, settings: Settings) -> None:
    payload = {
        "from": settings.email_from,
        "to": message.to,
        "subject": message.subject,
        "html": message.html,
    }
    if message.text:
        payload["text"] = message.text
    headers = {"Authorization": f"Bearer {settings.resend_api_key}"}
    timeout = httpx.Timeout(settings.email_timeout_seconds)

    try:
        with httpx.Client(timeout=timeout) as client:
            response = client.post(RESEND_API_URL, json=payload, headers=headers)
    except httpx.RequestError as exc:
        raise EmailError(f"Resend request failed: {exc}") from exc
    if response.status_code >= 400:
        raise EmailError(f"Resend API error: {response.status_code}")


def send_via_smtp(message: EmailMessage, settings: Settings) -> None:
    mime = MIMEMultipart("alternative")
    mime["Subject"] = message.subject
    mime["From"] = settings.email_from
    mime["To"] = message.to
    if message.text:
        mime.attach(MIMEText(message.text, "plain"))
    mime.attach(MIMEText(message.html, "html"))

    try:
        if settings.smtp_secure:
            with smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, timeout=settings.email_timeout_seconds) as smtp:
                smtp.login(settings.smtp_user, settings.smtp_pass)
                smtp.send_message(mime)
        else:
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.email_timeout_seconds) as smtp:
                smtp.starttls()
                smtp.login(settings.smtp_user, settings.smtp_pass)
                smtp.send_message(mime)
    except (smtplib.SMTPException, OSError) as exc:
        raise EmailError(f"SMTP send failed: {exc}") from exc


def send_email(message: EmailMessage, settings: Settings | None = None) -> EmailResult:
    settings = settings or get_settings()
    provider = get_email_provider(settings)
    if provider == EmailProvider.none:
        logger.warning("Email not configured, skipping send to %s", message.to)
        return EmailResult(success=False, error="Email not configured")

    try:
        if provider == EmailProvider.resend:
            send_via_resend(message, settings)
        else:
            send_via_smtp(message, settings)
    except EmailError as exc:
        logger.error("Email to %s failed: %s", message.to, exc)
        return EmailResult(success=False, error=str(exc))
    return EmailResult(success=True)


def render_reminder_email(
    user_name: str | None,
    cohort_name: str,
    minutes_left: int,
    is_last_call: bool,
    base_url: str | None = None,
) -> tuple[str, str, str]:
    """Return (subject, html, text) for a deadline reminder."""
    base_url = (base_url or get_settings().app_base_url).rstrip("/")
    name = user_name or "there"
    submit_url = f"{base_url}/submit"
    settings_url = f"{base_url}/settings"

    if is_last_call:
        subject = f"Last call! {minutes_left} minutes to submit - IBDaily"
        urgency = "This is your last call reminder!"
        background, accent = "#FEF2F2", "#DC2626"
    else:
        subject = f"Reminder: {minutes_left} minutes until deadline - IBDaily"
        urgency = "Friendly reminder:"
        background, accent = "#EFF6FF", "#2563EB"

    safe_name = html.escape(name)
    safe_cohort = html.escape(cohort_name)
    body = f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
  <div style="background: {background}; border-radius: 8px; padding: 20px; margin-bottom: 20px;">
    <h2 style="margin: 0 0 10px 0; color: {accent};">{urgency}</h2>
    <p style="margin: 0; font-size: 16px;">
      You have <strong>{minutes_left} minutes</strong> left to submit today's learning bullets.
    </p>
  </div>
  <p>Hi {safe_name},</p>
  <p>
    Your cohort <strong>{safe_cohort}</strong> is waiting for your submission!
    Don't break your streak - take 2 minutes to log what you learned today.
  </p>
  <div style="text-align: center; margin: 30px 0;">
    <a href="{submit_url}" style="display: inline-block; background: #2563EB; color: white; padding: 12px 24px; border-radius: 6px; text-decoration: none; font-weight: 500;">Submit Now</a>
  </div>
  <p style="font-size: 14px; color: #666;">Deadline: 9:00 PM IST</p>
  <hr style="border: none; border-top: 1px solid #E5E7EB; margin: 30px 0;">
  <p style="font-size: 12px; color: #9CA3AF;">
    You're receiving this because you enabled reminders in IBDaily.
    <a href="{settings_url}" style="color: #6B7280;">Manage preferences</a>
  </p>
</body>
</html>"""

    text = f"""{urgency}

You have {minutes_left} minutes left to submit today's learning bullets.

Hi {name},

Your cohort "{cohort_name}" is waiting for your submission! Don't break your streak - take 2 minutes to log what you learned today.

Submit now: {submit_url}

Deadline: 9:00 PM IST

---
You're receiving this because you enabled reminders in IBDaily.
Manage preferences: {settings_url}"""

    return subject, body, text
