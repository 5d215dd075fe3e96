"""RSVP tracker: guest responses and per-pact statistics."""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from planpact.errors import NotFoundError, ValidationError
from planpact.models.guest import RSVPStatus
from planpact.models.pact import PactStatus
from planpact.services.access import ensure_host
from planpact.services.pact_service import get_pact
from planpact.storage.base import PactStore

logger = logging.getLogger(__name__)

# "attending" is what the host row uses; a guest saying it means confirmed.
_RESPONSE_ALIASES = {
    "confirmed": RSVPStatus.confirmed,
    "attending": RSVPStatus.confirmed,
    "declined": RSVPStatus.declined,
}


class NotInvitedError(NotFoundError):
    """The caller has no guest row on the pact."""

    default_detail = "You are not a guest of this pact"


def _resolve_guest(store: PactStore, pact_id: str, user: Any) -> Any:
    """Find the caller's guest row: bound identity first, then email."""
    guest = store.find_guest_by_user(pact_id, user.user_id)
    if guest is None and user.email:
        guest = store.find_guest(pact_id, user.email)
    if guest is None:
        raise NotInvitedError()
    return guest


def _parse_response(status: Any) -> RSVPStatus:
    value = status.value if isinstance(status, RSVPStatus) else status
    parsed = _RESPONSE_ALIASES.get(value) if isinstance(value, str) else None
    if parsed is None:
        raise ValidationError('A valid status ("confirmed" or "declined") is required.')
    return parsed


def _projected_attendees(store: PactStore, pact_id: str, guest_id: str, extra: int) -> int:
    total = extra
    for guest, rsvp in store.list_guests(pact_id):
        if guest.guest_id == guest_id or rsvp is None:
            continue
        if rsvp.status in (RSVPStatus.attending, RSVPStatus.confirmed):
            total += 1 + (rsvp.plus_ones or 0)
    return total


def record_response(
    store: PactStore,
    pact_id: str,
    user: Any,
    status: Any,
    plus_ones: Optional[int] = None,
    message: Optional[str] = None,
) -> Any:
    """Overwrite the caller's RSVP (last write wins) and stamp ``responded_at``."""
    new_status = _parse_response(status)
    plus_ones = plus_ones or 0
    if plus_ones < 0:
        raise ValidationError("plus_ones cannot be negative")

    with store.transaction(pact_id=pact_id):
        pact = get_pact(store, pact_id)
        guest = _resolve_guest(store, pact_id, user)
        if pact.host_id == user.user_id:
            raise ValidationError("The host does not RSVP to their own pact")
        if pact.status != PactStatus.active:
            raise ValidationError("This pact has been cancelled")
        if plus_ones > 0 and not pact.allow_plus_ones:
            raise ValidationError("Plus-ones are not allowed for this pact")
        if new_status == RSVPStatus.declined:
            plus_ones = 0
        if new_status == RSVPStatus.confirmed and pact.max_attendees:
            projected = _projected_attendees(store, pact_id, guest.guest_id, 1 + plus_ones)
            if projected > pact.max_attendees:
                raise ValidationError("This pact has reached its maximum number of attendees")

        rsvp = store.get_rsvp_for_guest(guest.guest_id)
        if rsvp is None:
            rsvp = store.add_rsvp(guest_id=guest.guest_id, pact_id=pact_id)
        rsvp.status = new_status
        rsvp.plus_ones = plus_ones
        rsvp.message = message
        rsvp.responded_at = datetime.now(timezone.utc)

    logger.info(
        "Guest %s responded '%s' (+%d) to pact %s",
        guest.guest_id, new_status.value, plus_ones, pact_id,
    )
    return rsvp


def get_stats(store: PactStore, pact_id: str) -> dict[str, int]:
    """Response counts over invited guests; the host only adds to attendees."""
    stats = {"total_invited": 0, "confirmed": 0, "declined": 0, "pending": 0, "total_attendees": 0}
    for _guest, rsvp in store.list_guests(pact_id):
        status = rsvp.status if rsvp is not None else RSVPStatus.pending
        if status == RSVPStatus.attending:
            stats["total_attendees"] += 1
            continue
        stats["total_invited"] += 1
        if status == RSVPStatus.confirmed:
            stats["confirmed"] += 1
            stats["total_attendees"] += 1 + (rsvp.plus_ones or 0)
        elif status == RSVPStatus.declined:
            stats["declined"] += 1
    stats["pending"] = stats["total_invited"] - stats["confirmed"] - stats["declined"]
    return stats


def list_responses(store: PactStore, pact_id: str, caller_id: str) -> list[dict[str, Any]]:
    """All RSVPs of a pact with guest name/email, latest response first; host only."""
    pact = get_pact(store, pact_id)
    ensure_host(pact, caller_id, "view RSVPs for")
    rows = [
        {
            "rsvp_id": rsvp.rsvp_id,
            "guest_id": guest.guest_id,
            "guest_name": guest.name,
            "guest_email": guest.email,
            "status": rsvp.status,
            "plus_ones": rsvp.plus_ones,
            "message": rsvp.message,
            "responded_at": rsvp.responded_at,
        }
        for guest, rsvp in store.list_guests(pact_id)
        if rsvp is not None
    ]
    responded = [r for r in rows if r["responded_at"] is not None]
    waiting = [r for r in rows if r["responded_at"] is None]
    responded.sort(key=lambda r: r["responded_at"], reverse=True)
    return responded + waiting
