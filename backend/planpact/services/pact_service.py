"""Core pact service: the event registry.

Responsibilities:
- Creation with the host auto-enrolled and every invite on the guest list
- Host-only update / cancel / delete
- Status only moves active -> cancelled
- Listing the pacts an identity hosts or is invited to
"""
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from planpact.errors import NotFoundError, ValidationError
from planpact.models.pact import PactStatus
from planpact.services import guest_service
from planpact.services.access import ensure_access, ensure_host
from planpact.storage.base import PactStore

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "title",
    "description",
    "event_date",
    "event_time",
    "location",
    "address",
    "rsvp_deadline",
    "send_reminders",
    "allow_plus_ones",
    "max_attendees",
    "status",
)

_CREATE_FIELDS = UPDATABLE_FIELDS[:-1]


def _coerce_status(value: Any) -> PactStatus:
    try:
        return PactStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid pact status: {value}")


def create_pact(
    store: PactStore,
    host_id: str,
    fields: Mapping[str, Any],
    invites: Iterable[Mapping[str, Any]],
) -> tuple[Any, list[Any]]:
    """Create a pact, enroll the host as attending and invite every guest.

    Returns ``(pact, created_guests)``; the host row is not part of
    ``created_guests``.
    """
    invites = list(invites or [])
    title = (fields.get("title") or "").strip()
    if not title or not fields.get("event_date") or not invites:
        raise ValidationError("Title, date, and at least one guest are required.")

    with store.transaction():
        host = store.get_user(host_id)
        if host is None or not host.is_active:
            raise NotFoundError("Host user not found")

        now = datetime.now(timezone.utc)
        values = {name: fields[name] for name in _CREATE_FIELDS if fields.get(name) is not None}
        values["title"] = title
        pact = store.add_pact(
            host_id=host.user_id,
            status=PactStatus.active,
            created_at=now,
            updated_at=now,
            **values,
        )
        guest_service.enroll_host(store, pact, host)
        _, created = guest_service.add_guests(store, pact.pact_id, invites)

    logger.info("Created pact '%s' (%s) by host %s", title, pact.pact_id, host_id)
    return pact, created


def get_pact(store: PactStore, pact_id: str) -> Any:
    pact = store.get_pact(pact_id)
    if pact is None:
        raise NotFoundError("Pact not found")
    return pact


def get_pact_for_identity(store: PactStore, pact_id: str, user: Any) -> Any:
    """Fetch a pact the caller hosts or is invited to."""
    pact = get_pact(store, pact_id)
    ensure_access(store, pact, user)
    return pact


def list_pacts_for_identity(
    store: PactStore, user: Any, status: Optional[PactStatus] = None
) -> list[Any]:
    pacts = store.list_pacts_for_identity(user.user_id, user.email)
    if status is not None:
        pacts = [p for p in pacts if p.status == status]
    return pacts


def update_pact(store: PactStore, pact_id: str, caller_id: str, patch: Mapping[str, Any]) -> Any:
    """Apply the allow-listed fields of ``patch``; host only."""
    updates = {k: v for k, v in patch.items() if k in UPDATABLE_FIELDS}

    with store.transaction(pact_id=pact_id):
        pact = get_pact(store, pact_id)
        ensure_host(pact, caller_id, "edit")
        if not updates:
            raise ValidationError("No valid fields to update")

        if "title" in updates:
            title = (updates["title"] or "").strip()
            if not title:
                raise ValidationError("Title cannot be empty")
            updates["title"] = title
        if "event_date" in updates and updates["event_date"] is None:
            raise ValidationError("Date cannot be empty")
        for flag in ("send_reminders", "allow_plus_ones"):
            if flag in updates and updates[flag] is None:
                raise ValidationError(f"{flag} cannot be null")
        if "status" in updates:
            new_status = _coerce_status(updates["status"])
            if pact.status == PactStatus.cancelled and new_status != PactStatus.cancelled:
                raise ValidationError("A cancelled pact cannot be reactivated")
            updates["status"] = new_status

        for field, value in updates.items():
            setattr(pact, field, value)
        pact.updated_at = datetime.now(timezone.utc)

    logger.info("Updated pact %s fields %s", pact_id, sorted(updates))
    return pact


def cancel_pact(store: PactStore, pact_id: str, caller_id: str) -> Any:
    """Soft-cancel; cancelling an already-cancelled pact is a no-op."""
    with store.transaction(pact_id=pact_id):
        pact = get_pact(store, pact_id)
        ensure_host(pact, caller_id, "cancel")
        if pact.status == PactStatus.cancelled:
            return pact
        pact.status = PactStatus.cancelled
        pact.updated_at = datetime.now(timezone.utc)

    logger.info("Cancelled pact %s", pact_id)
    return pact


def delete_pact(store: PactStore, pact_id: str, caller_id: str) -> None:
    """Hard delete together with guests and RSVPs; host only."""
    with store.transaction(pact_id=pact_id):
        pact = get_pact(store, pact_id)
        ensure_host(pact, caller_id, "delete")
        store.delete_pact(pact)

    logger.info("Deleted pact %s", pact_id)
