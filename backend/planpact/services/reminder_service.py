"""Reminder selection: pacts happening today or tomorrow in the configured timezone."""
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

import pytz

from planpact.config import settings
from planpact.models.guest import RSVPStatus
from planpact.services import email_service
from planpact.storage.base import PactStore

logger = logging.getLogger(__name__)


def reminder_window(now: Optional[datetime] = None, tz_name: Optional[str] = None) -> tuple[date, date]:
    """Local (today, tomorrow) for ``now`` converted to ``tz_name``."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = pytz.utc.localize(now)
    tz = pytz.timezone(tz_name or settings.TIMEZONE)
    today = now.astimezone(tz).date()
    return today, today + timedelta(days=1)


def confirmed_guests(store: PactStore, pact_id: str) -> list[Any]:
    return [
        guest for guest, rsvp in store.list_guests(pact_id)
        if rsvp is not None and rsvp.status == RSVPStatus.confirmed
    ]


def send_due_reminders(
    store: PactStore,
    sender: email_service.EmailSender,
    now: Optional[datetime] = None,
) -> dict[str, int]:
    """Mail confirmed guests of every due pact; returns ``{pact_id: delivered}``."""
    start, end = reminder_window(now)
    summary: dict[str, int] = {}
    for pact in store.list_pacts_needing_reminders(start, end):
        guests = confirmed_guests(store, pact.pact_id)
        summary[pact.pact_id] = email_service.send_reminders(sender, pact, guests)
    logger.info("Reminder run for %s..%s covered %d pact(s)", start, end, len(summary))
    return summary
