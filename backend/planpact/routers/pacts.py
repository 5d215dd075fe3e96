"""Pact API routes: delegates to the services for every rule."""
import logging
from typing import Any, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from planpact.dependencies import get_current_user, get_email_sender, get_store
from planpact.errors import ForbiddenError, NotFoundError
from planpact.models.pact import PactStatus
from planpact.schemas.pact import (
    GuestOut,
    GuestsAdd,
    MessageOut,
    PactCreate,
    PactDetailOut,
    PactOut,
    PactUpdate,
    RSVPListItem,
    RSVPOut,
    RSVPRequest,
    RSVPStats,
)
from planpact.services import email_service, guest_service, pact_service, rsvp_service
from planpact.services.access import ensure_host
from planpact.storage.base import PactStore

logger = logging.getLogger(__name__)
router = APIRouter()


def _guest_rows(store: PactStore, pact_id: str) -> list[GuestOut]:
    rows = []
    for guest, rsvp in guest_service.list_guests(store, pact_id):
        row = {
            "guest_id": guest.guest_id,
            "name": guest.name,
            "email": guest.email,
            "user_id": guest.user_id,
            "invited_at": guest.invited_at,
        }
        if rsvp is not None:
            row.update(
                status=rsvp.status,
                plus_ones=rsvp.plus_ones or 0,
                message=rsvp.message,
                responded_at=rsvp.responded_at,
            )
        rows.append(GuestOut(**row))
    return rows


def _detail(store: PactStore, pact: Any) -> PactDetailOut:
    return PactDetailOut(
        **PactOut.model_validate(pact).model_dump(),
        guests=_guest_rows(store, pact.pact_id),
        stats=RSVPStats(**rsvp_service.get_stats(store, pact.pact_id)),
    )


def _schedule_invitations(
    background: BackgroundTasks,
    sender: email_service.EmailSender,
    pact: Any,
    host: Any,
    guests: list[Any],
) -> None:
    if not guests:
        return
    background.add_task(
        email_service.send_invitations,
        sender,
        email_service.detach(pact),
        email_service.detach(host),
        [email_service.detach(g) for g in guests],
    )


@router.post("", response_model=PactDetailOut, status_code=status.HTTP_201_CREATED)
def create_pact(
    payload: PactCreate,
    background: BackgroundTasks,
    user=Depends(get_current_user),
    store: PactStore = Depends(get_store),
    sender: email_service.EmailSender = Depends(get_email_sender),
):
    """Create a pact; the caller becomes host and every guest is mailed an invitation."""
    fields = payload.model_dump(exclude={"guests"})
    invites = [g.model_dump() for g in payload.guests]
    pact, created = pact_service.create_pact(store, user.user_id, fields, invites)
    _schedule_invitations(background, sender, pact, user, created)
    return _detail(store, pact)


@router.get("", response_model=list[PactOut])
def list_pacts(
    status_filter: Optional[PactStatus] = Query(None, alias="status"),
    user=Depends(get_current_user),
    store: PactStore = Depends(get_store),
):
    """Pacts the caller hosts or is invited to, oldest first."""
    return pact_service.list_pacts_for_identity(store, user, status_filter)


@router.get("/{pact_id}", response_model=PactDetailOut)
def get_pact(pact_id: str, user=Depends(get_current_user), store: PactStore = Depends(get_store)):
    try:
        pact = pact_service.get_pact_for_identity(store, pact_id, user)
    except ForbiddenError:
        # Do not reveal that the pact exists.
        raise NotFoundError("Pact not found")
    return _detail(store, pact)


@router.put("/{pact_id}", response_model=PactOut)
def update_pact(
    pact_id: str,
    payload: PactUpdate,
    user=Depends(get_current_user),
    store: PactStore = Depends(get_store),
):
    patch = payload.model_dump(exclude_unset=True)
    return pact_service.update_pact(store, pact_id, user.user_id, patch)


@router.delete("/{pact_id}", response_model=MessageOut)
def delete_pact(pact_id: str, user=Depends(get_current_user), store: PactStore = Depends(get_store)):
    pact_service.delete_pact(store, pact_id, user.user_id)
    return {"message": "Pact deleted successfully"}


@router.post("/{pact_id}/cancel", response_model=PactOut)
def cancel_pact(pact_id: str, user=Depends(get_current_user), store: PactStore = Depends(get_store)):
    return pact_service.cancel_pact(store, pact_id, user.user_id)


@router.get("/{pact_id}/guests", response_model=list[GuestOut])
def list_guests(pact_id: str, user=Depends(get_current_user), store: PactStore = Depends(get_store)):
    pact_service.get_pact_for_identity(store, pact_id, user)
    return _guest_rows(store, pact_id)


@router.post("/{pact_id}/guests", response_model=list[GuestOut])
def add_guests(
    pact_id: str,
    payload: GuestsAdd,
    background: BackgroundTasks,
    user=Depends(get_current_user),
    store: PactStore = Depends(get_store),
    sender: email_service.EmailSender = Depends(get_email_sender),
):
    """Invite more guests; only newly added ones receive an invitation."""
    pact = pact_service.get_pact(store, pact_id)
    ensure_host(pact, user.user_id, "invite guests to")
    _, created = guest_service.add_guests(store, pact_id, [g.model_dump() for g in payload.guests])
    _schedule_invitations(background, sender, pact, user, created)
    return _guest_rows(store, pact_id)


@router.post("/{pact_id}/rsvp", response_model=RSVPOut)
def respond(
    pact_id: str,
    payload: RSVPRequest,
    user=Depends(get_current_user),
    store: PactStore = Depends(get_store),
):
    try:
        return rsvp_service.record_response(
            store, pact_id, user, payload.status, payload.plus_ones, payload.message
        )
    except rsvp_service.NotInvitedError:
        raise ForbiddenError("You are not invited to this pact")


@router.get("/{pact_id}/rsvps", response_model=list[RSVPListItem])
def list_rsvps(pact_id: str, user=Depends(get_current_user), store: PactStore = Depends(get_store)):
    return rsvp_service.list_responses(store, pact_id, user.user_id)


@router.get("/{pact_id}/stats", response_model=RSVPStats)
def pact_stats(pact_id: str, user=Depends(get_current_user), store: PactStore = Depends(get_store)):
    pact_service.get_pact_for_identity(store, pact_id, user)
    return rsvp_service.get_stats(store, pact_id)
