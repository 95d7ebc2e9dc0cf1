"""Unit tests for rolegate.services.email: SMTP dispatch, log-only mode and reset email rendering."""

import smtplib
import unittest
from unittest.mock import MagicMock, patch

from rolegate.services.email import (
    EmailDeliveryError,
    EmailSender,
    redact_email,
    render_reset_email,
)
from sqlite_support import make_settings


def _sender(**kwargs: object) -> EmailSender:
    defaults = {
        "smtp_host": "smtp.example.com",
        "smtp_port": 587,
        "smtp_user": "mailer",
        "smtp_password": "pw",
        "from_email": "noreply@example.com",
    }
    defaults.update(kwargs)
    return EmailSender(**defaults)


class TestEmailSender(unittest.TestCase):
    @patch("rolegate.services.email.smtplib.SMTP")
    def test_not_configured_only_logs(self, mock_smtp: MagicMock) -> None:
        sender = EmailSender()
        self.assertFalse(sender.is_configured)
        with self.assertLogs("rolegate.services.email", level="INFO"):
            sender.send("ada@example.com", "Subject", "text", "<p>html</p>")
        mock_smtp.assert_not_called()

    @patch("rolegate.services.email.smtplib.SMTP")
    def test_sends_with_starttls_and_login(self, mock_smtp: MagicMock) -> None:
        server = mock_smtp.return_value.__enter__.return_value
        _sender().send("ada@example.com", "Subject", "text", "<p>html</p>")
        mock_smtp.assert_called_once_with("smtp.example.com", 587, timeout=30.0)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "pw")
        from_addr, to_addrs, message = server.sendmail.call_args.args
        self.assertEqual(from_addr, "noreply@example.com")
        self.assertEqual(to_addrs, ["ada@example.com"])
        self.assertIn("Subject: Subject", message)

    @patch("rolegate.services.email.smtplib.SMTP")
    def test_tls_disabled(self, mock_smtp: MagicMock) -> None:
        server = mock_smtp.return_value.__enter__.return_value
        _sender(smtp_use_tls=False, smtp_user=None, smtp_password=None).send(
            "ada@example.com", "Subject", "text", "html"
        )
        server.starttls.assert_not_called()
        server.login.assert_not_called()

    @patch("rolegate.services.email.smtplib.SMTP")
    def test_smtp_failure_raises_delivery_error(self, mock_smtp: MagicMock) -> None:
        server = mock_smtp.return_value.__enter__.return_value
        server.sendmail.side_effect = smtplib.SMTPRecipientsRefused({})
        with self.assertRaises(EmailDeliveryError) as ctx:
            _sender().send("ada@example.com", "Subject", "text", "html")
        self.assertIsInstance(ctx.exception.cause, smtplib.SMTPException)

    @patch("rolegate.services.email.smtplib.SMTP")
    def test_connection_failure_raises_delivery_error(self, mock_smtp: MagicMock) -> None:
        mock_smtp.side_effect = ConnectionRefusedError("refused")
        with self.assertRaises(EmailDeliveryError):
            _sender().send("ada@example.com", "Subject", "text", "html")

    def test_from_settings(self) -> None:
        settings = make_settings(
            SMTP_HOST="smtp.example.com",
            SMTP_USER="mailer",
            SMTP_PASSWORD="pw",
            EMAIL_FROM="noreply@example.com",
        )
        sender = EmailSender.from_settings(settings)
        self.assertTrue(sender.is_configured)
        self.assertEqual(sender.smtp_password, "pw")
        self.assertEqual(sender.from_name, "Rolegate")


class TestHelpers(unittest.TestCase):
    def test_redact_email(self) -> None:
        self.assertEqual(redact_email("ada@example.com"), "ad***@example.com")
        self.assertEqual(redact_email("not-an-email"), "redacted")

    def test_render_reset_email(self) -> None:
        text, html = render_reset_email("<Ada>", "tok.en.value", 60)
        self.assertIn("tok.en.value", text)
        self.assertIn("60 minutes", text)
        self.assertIn("&lt;Ada&gt;", html)
        self.assertNotIn("<Ada>", html)

    def test_render_without_name(self) -> None:
        text, _ = render_reset_email(None, "t", 5)
        self.assertTrue(text.startswith("Hello there"))


if __name__ == "__main__":
    unittest.main()
