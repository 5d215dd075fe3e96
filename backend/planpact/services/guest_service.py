"""Guest ledger: per-pact invite list keyed on (pact, email)."""
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from planpact.errors import NotFoundError, ValidationError
from planpact.models.guest import RSVPStatus
from planpact.models.pact import PactStatus
from planpact.services.auth_service import normalize_email
from planpact.storage.base import PactStore

logger = logging.getLogger(__name__)


def _collect_invites(invites: Iterable[Mapping[str, Any]]) -> dict[str, str]:
    """Normalise invites to ``{email: name}``; a repeated email keeps its last name."""
    collected: dict[str, str] = {}
    for invite in invites:
        email = normalize_email(invite.get("email"))
        if not email or "@" not in email:
            raise ValidationError(f"Invalid guest email: {invite.get('email')!r}")
        name = (invite.get("name") or "").strip()
        collected[email] = name or collected.get(email, "")
    return collected


def enroll_host(store: PactStore, pact: Any, host: Any) -> Any:
    """Put the host on their own guest list, already attending."""
    now = datetime.now(timezone.utc)
    guest = store.add_guest(
        pact_id=pact.pact_id,
        email=host.email,
        name=host.name,
        user_id=host.user_id,
        invited_at=now,
    )
    store.add_rsvp(
        guest_id=guest.guest_id,
        pact_id=pact.pact_id,
        status=RSVPStatus.attending,
        plus_ones=0,
        responded_at=now,
    )
    return guest


def add_guests(
    store: PactStore,
    pact_id: str,
    invites: Iterable[Mapping[str, Any]],
) -> tuple[list[Any], list[Any]]:
    """Upsert guests on ``(pact_id, email)``.

    Existing guests get the new display name (when one is given) and a fresh
    ``invited_at``. New guests are bound to a registered identity with the same
    email when there is one, default their name to the email's local part and
    start with a pending RSVP.

    Returns ``(guests, created)`` where ``created`` holds only new rows.
    """
    collected = _collect_invites(invites)

    with store.transaction(pact_id=pact_id):
        pact = store.get_pact(pact_id)
        if pact is None:
            raise NotFoundError("Pact not found")
        if pact.status != PactStatus.active:
            raise ValidationError("Cannot invite guests to a cancelled pact")

        # The host may have changed email since enrolling; skip both addresses.
        host_emails = set()
        host_row = store.find_guest_by_user(pact.pact_id, pact.host_id)
        if host_row is not None:
            host_emails.add(host_row.email)
        host = store.get_user(pact.host_id)
        if host is not None:
            host_emails.add(host.email)
        now = datetime.now(timezone.utc)
        guests, created = [], []
        for email, name in collected.items():
            if email in host_emails:
                continue

            guest = store.find_guest(pact.pact_id, email)
            if guest is not None:
                if name:
                    guest.name = name
                guest.invited_at = now
                guests.append(guest)
                continue

            identity = store.get_user_by_email(email)
            guest = store.add_guest(
                pact_id=pact.pact_id,
                email=email,
                name=name or email.split("@", 1)[0],
                user_id=identity.user_id if identity is not None else None,
                invited_at=now,
            )
            store.add_rsvp(
                guest_id=guest.guest_id,
                pact_id=pact.pact_id,
                status=RSVPStatus.pending,
                plus_ones=0,
            )
            guests.append(guest)
            created.append(guest)

    logger.info(
        "Invited %d guest(s) to pact %s (%d new)", len(guests), pact_id, len(created)
    )
    return guests, created


def list_guests(store: PactStore, pact_id: str) -> list[tuple[Any, Any]]:
    """Guests of a pact with their RSVP, ordered by display name."""
    return store.list_guests(pact_id)
