"""One-shot reminder job: ``python -m planpact.jobs.send_reminders``.

Run it from cron (or any scheduler) once a day.
"""
import logging

from planpact.dependencies import open_store
from planpact.logging_config import setup_logging
from planpact.services.email_service import get_email_sender
from planpact.services.reminder_service import send_due_reminders

logger = logging.getLogger(__name__)


def main() -> int:
    setup_logging()
    with open_store() as store:
        summary = send_due_reminders(store, get_email_sender())
    logger.info("Reminders sent: %d", sum(summary.values()))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
