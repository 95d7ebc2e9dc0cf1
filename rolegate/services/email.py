"""Transactional email over SMTP, with a log-only fallback when SMTP is not configured."""

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rolegate.core.config import Settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when the SMTP server rejects or cannot accept a message."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


def redact_email(email: str) -> str:
    """Redact an email address for logging to avoid PII leakage."""
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


class EmailSender:
    """
    Sends multipart (text + HTML) messages.

    Without SMTP_HOST and a sender address the message is only logged, which
    keeps local development and tests free of a mail server.
    """

    def __init__(
        self,
        *,
        smtp_host: str | None = None,
        smtp_port: int = 587,
        smtp_user: str | None = None,
        smtp_password: str | None = None,
        smtp_use_tls: bool = True,
        timeout: float = 30.0,
        from_email: str | None = None,
        from_name: str = "Rolegate",
    ) -> None:
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.smtp_use_tls = smtp_use_tls
        self.timeout = timeout
        self.from_email = from_email or smtp_user
        self.from_name = from_name

    @classmethod
    def from_settings(cls, settings: "Settings") -> "EmailSender":
        return cls(
            smtp_host=settings.SMTP_HOST,
            smtp_port=settings.SMTP_PORT,
            smtp_user=settings.SMTP_USER,
            smtp_password=(
                settings.SMTP_PASSWORD.get_secret_value() if settings.SMTP_PASSWORD else None
            ),
            smtp_use_tls=settings.SMTP_USE_TLS,
            timeout=settings.SMTP_TIMEOUT_SEC,
            from_email=settings.EMAIL_FROM,
            from_name=settings.EMAIL_FROM_NAME,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_host and self.from_email)

    def send(self, to_email: str, subject: str, text_body: str, html_body: str) -> None:
        """Send one message. Raises EmailDeliveryError on SMTP failure."""
        if not self.is_configured:
            logger.info(
                "Email not sent (SMTP not configured)",
                extra={"to": redact_email(to_email), "subject": subject},
            )
            return

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                if self.smtp_use_tls:
                    server.starttls(context=ssl.create_default_context())
                if self.smtp_user and self.smtp_password:
                    server.login(self.smtp_user, self.smtp_password)
                server.sendmail(self.from_email, [to_email], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError("Could not send email", cause=e) from e

        logger.info("Email sent", extra={"to": redact_email(to_email), "subject": subject})


def render_reset_email(first_name: str | None, token: str, valid_minutes: int) -> tuple[str, str]:
    """Return (text, html) bodies for the password reset message."""
    name = first_name or "there"
    text = (
        f"Hello {name},\n\n"
        "We received a request to reset the password for your account.\n"
        f"Use this token to continue:\n\n{token}\n\n"
        f"The token is valid for {valid_minutes} minutes. "
        "If you did not request a reset, ignore this email.\n"
    )
    html = (
        f"<p>Hello {escape(name)},</p>"
        "<p>We received a request to reset the password for your account.</p>"
        "<p>Use this token to continue:</p>"
        f"<p><strong>{escape(token)}</strong></p>"
        f"<p>The token is valid for {valid_minutes} minutes. "
        "If you did not request a reset, ignore this email.</p>"
    )
    return text, html
