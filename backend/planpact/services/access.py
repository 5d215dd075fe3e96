"""Access evaluation for pacts: host rights and guest-level visibility."""
from typing import Any, Optional

from planpact.errors import ForbiddenError
from planpact.storage.base import PactStore


def can_access(store: PactStore, pact: Any, user_id: str, email: Optional[str]) -> bool:
    """True iff the identity hosts the pact or is on its guest list.

    A guest row bound to the identity is a shortcut for the email match, so an
    invitee who registers later with the invited address gains access too.
    """
    if pact.host_id == user_id:
        return True
    if store.find_guest_by_user(pact.pact_id, user_id) is not None:
        return True
    return bool(email) and store.find_guest(pact.pact_id, email) is not None


def ensure_access(store: PactStore, pact: Any, user: Any) -> None:
    if not can_access(store, pact, user.user_id, user.email):
        raise ForbiddenError("You do not have access to this pact")


def ensure_host(pact: Any, user_id: str, action: str = "modify") -> None:
    """Only the host may edit, cancel or delete a pact."""
    if pact.host_id != user_id:
        raise ForbiddenError(f"Only the host can {action} this pact")
