from unittest.mock import MagicMock, patch

import httpx

from ibdaily.config import Settings
from ibdaily.services.email import (
    RESEND_API_URL,
    EmailMessage,
    EmailProvider,
    get_email_provider,
    render_reminder_email,
    send_email,
)

MESSAGE = EmailMessage(to="student@example.com", subject="Hi", html="<p>Hi</p>", text="Hi")


def make_settings(**overrides) -> Settings:
    values = {"DATABASE_URL": "sqlite://", "JWT_SECRET": "test-secret"}
    values.update(overrides)
    return Settings(**values)


def mock_client(response=None, error=None):
    client = MagicMock()
    if error is not None:
        client.post.side_effect = error
    else:
        client.post.return_value = response
    factory = MagicMock()
    factory.return_value.__enter__.return_value = client
    return factory, client


def test_provider_requires_credentials():
    assert get_email_provider(make_settings()) == EmailProvider.none
    assert get_email_provider(make_settings(EMAIL_PROVIDER="resend")) == EmailProvider.none
    assert get_email_provider(make_settings(EMAIL_PROVIDER="resend", RESEND_API_KEY="re_1")) == EmailProvider.resend
    smtp = make_settings(EMAIL_PROVIDER="smtp", SMTP_HOST="mail", SMTP_PORT=587, SMTP_USER="u", SMTP_PASS="p")
    assert get_email_provider(smtp) == EmailProvider.smtp


def test_send_skipped_when_unconfigured():
    result = send_email(MESSAGE, make_settings())

    assert result.success is False
    assert result.error == "Email not configured"


def test_send_via_resend():
    settings = make_settings(EMAIL_PROVIDER="resend", RESEND_API_KEY="re_1")
    factory, client = mock_client(response=MagicMock(status_code=200))

    with patch("ibdaily.services.email.httpx.Client", factory):
        result = send_email(MESSAGE, settings)

    assert result.success is True
    url = client.post.call_args.args[0]
    kwargs = client.post.call_args.kwargs
    assert url == RESEND_API_URL
    assert kwargs["headers"] == {"Authorization": "Bearer re_1"}
    assert kwargs["json"]["to"] == "student@example.com"
    assert kwargs["json"]["text"] == "Hi"


def test_resend_error_status_is_reported():
    settings = make_settings(EMAIL_PROVIDER="resend", RESEND_API_KEY="re_1")
    factory, _ = mock_client(response=MagicMock(status_code=422))

    with patch("ibdaily.services.email.httpx.Client", factory):
        result = send_email(MESSAGE, settings)

    assert result.success is False
    assert "422" in result.error


def test_resend_network_error_is_reported():
    settings = make_settings(EMAIL_PROVIDER="resend", RESEND_API_KEY="re_1")
    factory, _ = mock_client(error=httpx.ConnectError("boom"))

    with patch("ibdaily.services.email.httpx.Client", factory):
        result = send_email(MESSAGE, settings)

    assert result.success is False


def test_send_via_smtp():
    settings = make_settings(EMAIL_PROVIDER="smtp", SMTP_HOST="mail", SMTP_PORT=587, SMTP_USER="u", SMTP_PASS="p")
    smtp_factory = MagicMock()
    smtp = smtp_factory.return_value.__enter__.return_value

    with patch("ibdaily.services.email.smtplib.SMTP", smtp_factory):
        result = send_email(MESSAGE, settings)

    assert result.success is True
    smtp.starttls.assert_called_once()
    smtp.login.assert_called_once_with("u", "p")
    smtp.send_message.assert_called_once()


def test_render_reminder_email():
    subject, html, text = render_reminder_email("Asha", "HL Bio", 15, is_last_call=True, base_url="https://ibdaily.test/")

    assert subject == "Last call! 15 minutes to submit - IBDaily"
    assert "Hi Asha" in html
    assert "https://ibdaily.test/submit" in text
    assert "HL Bio" in text


def test_render_regular_reminder_defaults_name():
    subject, html, _ = render_reminder_email(None, "SL Maths", 90, is_last_call=False, base_url="https://ibdaily.test")

    assert subject == "Reminder: 90 minutes until deadline - IBDaily"
    assert "Hi there" in html


def test_render_escapes_names_in_html_only():
    subject, html, text = render_reminder_email(
        "<img src=x onerror=alert(1)>",
        '<a href="https://evil.example">Pay here</a>',
        20,
        is_last_call=False,
        base_url="https://ibdaily.test",
    )

    assert '<a href="https://evil.example">' not in html
    assert "<img src=x" not in html
    assert "&lt;a href=&quot;https://evil.example&quot;&gt;Pay here&lt;/a&gt;" in html
    assert "Hi &lt;img src=x onerror=alert(1)&gt;," in html
    assert '<a href="https://evil.example">Pay here</a>' in text
