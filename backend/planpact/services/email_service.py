"""Outbound email: invitations and reminders.

Delivery is best effort. Each recipient gets its own attempt loop, failures
are logged and never raised, so one bad address cannot block the others or
undo a pact that is already committed.
"""
import logging
import os
import smtplib
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from types import SimpleNamespace
from typing import Any, Iterable

import jinja2

from planpact.config import settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates")

env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(TEMPLATES_DIR),
    autoescape=jinja2.select_autoescape(enabled_extensions=("html",), default_for_string=False),
)


class EmailSender(ABC):
    @abstractmethod
    def send(self, to_address: str, subject: str, html_body: str, text_body: str) -> None:
        """Deliver one message or raise."""


class SMTPEmailSender(EmailSender):
    def __init__(self):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.username = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.from_address = settings.EMAILS_FROM

    def _create_message(
        self,
        to_address: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = to_address
        msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))
        return msg

    def send(self, to_address: str, subject: str, html_body: str, text_body: str) -> None:
        msg = self._create_message(to_address, subject, html_body, text_body)
        with smtplib.SMTP(self.host, self.port, timeout=30) as server:
            if self.username and self.password:
                server.starttls()
                server.login(self.username, self.password)
            server.send_message(msg)


class ConsoleEmailSender(EmailSender):
    """Logs messages instead of sending them (development)."""

    def send(self, to_address: str, subject: str, html_body: str, text_body: str) -> None:
        logger.info("Email to %s: %s\n%s", to_address, subject, text_body)


def get_email_sender() -> EmailSender:
    if settings.EMAIL_BACKEND == "smtp":
        return SMTPEmailSender()
    return ConsoleEmailSender()


# -- formatting --------------------------------------------------------------
def format_date(value: Any) -> str:
    if value is None:
        return ""
    return value.strftime("%A, %B %d, %Y")


def format_time(value: Any) -> str:
    if value is None:
        return ""
    return value.strftime("%I:%M %p").lstrip("0")


def pact_url(pact: Any) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/pact-detail.html?id={pact.pact_id}"


def _context(pact: Any, **extra: Any) -> dict[str, Any]:
    context = {
        "pact": pact,
        "event_date": format_date(pact.event_date),
        "event_time": format_time(pact.event_time),
        "timezone": settings.TIMEZONE,
        "pact_url": pact_url(pact),
    }
    context.update(extra)
    return context


def render(template: str, **context: Any) -> tuple[str, str]:
    """Render ``<template>.html`` and ``<template>.txt`` with the same context."""
    html = env.get_template(f"{template}.html").render(**context)
    text = env.get_template(f"{template}.txt").render(**context)
    return html, text


# -- delivery ----------------------------------------------------------------
def deliver(sender: EmailSender, to_address: str, subject: str, html: str, text: str) -> bool:
    """Try up to ``EMAIL_MAX_ATTEMPTS`` times; report success instead of raising."""
    attempts = max(1, settings.EMAIL_MAX_ATTEMPTS)
    for attempt in range(1, attempts + 1):
        try:
            sender.send(to_address, subject, html, text)
            return True
        except Exception as e:
            logger.warning(
                "Email to %s failed (attempt %d/%d): %s", to_address, attempt, attempts, e
            )
    logger.error("Giving up on email to %s: %s", to_address, subject)
    return False


def send_invitations(
    sender: EmailSender,
    pact: Any,
    host: Any,
    guests: Iterable[Any],
) -> int:
    """Mail every guest an invitation; returns the number delivered."""
    delivered = 0
    deadline = format_date(getattr(pact, "rsvp_deadline", None)) or "the event date"
    for guest in guests:
        html, text = render(
            "invitation",
            **_context(pact, guest=guest, host=host, response_deadline=deadline),
        )
        if deliver(sender, guest.email, f"You're invited to {pact.title}", html, text):
            delivered += 1
    logger.info("Sent %d invitation(s) for pact %s", delivered, pact.pact_id)
    return delivered


def send_reminders(sender: EmailSender, pact: Any, guests: Iterable[Any]) -> int:
    delivered = 0
    for guest in guests:
        html, text = render("reminder", **_context(pact, guest=guest))
        if deliver(sender, guest.email, f"Reminder: {pact.title} is coming up", html, text):
            delivered += 1
    logger.info("Sent %d reminder(s) for pact %s", delivered, pact.pact_id)
    return delivered


_DETACHED_FIELDS = (
    "pact_id", "title", "description", "event_date", "event_time", "location",
    "address", "rsvp_deadline", "user_id", "guest_id", "name", "email",
)


def detach(record: Any) -> SimpleNamespace:
    """Plain copy of a record, usable after the request's session is closed."""
    return SimpleNamespace(
        **{name: getattr(record, name) for name in _DETACHED_FIELDS if hasattr(record, name)}
    )
