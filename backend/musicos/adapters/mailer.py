import logging
import smtplib
from email.message import EmailMessage
from typing import Dict, List

log = logging.getLogger("mailer")


class MailerError(Exception):
    pass


def build_message(sender: str, to: str, subject: str, html: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content("Este email requer um cliente com suporte para HTML.")
    msg.add_alternative(html, subtype="html")
    return msg


class SmtpMailer:
    """SMTP transport configured from the EMAIL_* settings."""

    def __init__(self, host: str, port: int, user: str = "", password: str = "", secure: bool = False, timeout: int = 10):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.secure = secure
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings):
        return cls(
            host=settings.EMAIL_HOST,
            port=settings.EMAIL_PORT,
            user=settings.EMAIL_USER,
            password=settings.EMAIL_PASSWORD,
            secure=settings.EMAIL_SECURE,
            timeout=settings.EMAIL_TIMEOUT_SECONDS,
        )

    @property
    def sender(self) -> str:
        return self.user or "no-reply@musicosbooking.pt"

    def _connect(self) -> smtplib.SMTP:
        if self.secure:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        conn = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        conn.ehlo()
        if conn.has_extn("starttls"):
            conn.starttls()
            conn.ehlo()
        return conn

    def send(self, to: str, subject: str, html: str):
        msg = build_message(self.sender, to, subject, html)
        try:
            with self._connect() as conn:
                if self.user:
                    conn.login(self.user, self.password)
                conn.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise MailerError(f"SMTP delivery to {to} failed: {e}") from e
        log.info("mail sent to %s: %s", to, subject)

    def health_check(self) -> bool:
        try:
            with self._connect() as conn:
                conn.noop()
            return True
        except (smtplib.SMTPException, OSError):
            return False


class MockMailer:
    """
    In-memory mailer used by tests and local development.
    Set fail=True to simulate a transport failure.
    """

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.outbox: List[Dict] = []

    def send(self, to: str, subject: str, html: str):
        if self.fail:
            raise MailerError("Simulated mail failure")
        self.outbox.append({"to": to, "subject": subject, "html": html})

    def health_check(self) -> bool:
        return not self.fail
