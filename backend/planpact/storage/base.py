"""Storage capability used by the pact services.

Adapters only store and fetch records. Every rule about who may do what,
and what a valid pact, guest or RSVP looks like, lives in ``planpact.services``.
"""
import abc
from contextlib import AbstractContextManager
from datetime import date
from typing import Any, Optional


class PactStore(abc.ABC):
    """Record-level operations over users, pacts, guests and RSVPs.

    Records returned by an adapter expose the same attribute names as the ORM
    models in ``planpact.models`` and may be mutated in place; changes made
    inside ``transaction()`` are applied atomically when the block exits.
    """

    @abc.abstractmethod
    def transaction(self, pact_id: Optional[str] = None) -> AbstractContextManager:
        """Group writes into one atomic unit.

        When ``pact_id`` is given, writes touching that pact are serialized
        with any other transaction on the same pact. Nested calls join the
        outermost transaction. If the block raises, nothing is applied.
        """

    # -- identities -------------------------------------------------------
    @abc.abstractmethod
    def add_user(self, **fields: Any) -> Any: ...

    @abc.abstractmethod
    def get_user(self, user_id: str) -> Optional[Any]: ...

    @abc.abstractmethod
    def get_user_by_email(self, email: str) -> Optional[Any]: ...

    # -- pacts ------------------------------------------------------------
    @abc.abstractmethod
    def add_pact(self, **fields: Any) -> Any: ...

    @abc.abstractmethod
    def get_pact(self, pact_id: str) -> Optional[Any]: ...

    @abc.abstractmethod
    def list_pacts_for_identity(self, user_id: str, email: str) -> list[Any]:
        """Pacts hosted by ``user_id`` or with a guest bound to it or invited at ``email``."""

    @abc.abstractmethod
    def list_pacts_needing_reminders(self, start: date, end: date) -> list[Any]:
        """Active pacts with reminders enabled and an event date in [start, end]."""

    @abc.abstractmethod
    def delete_pact(self, pact: Any) -> None:
        """Remove a pact with its guests and RSVPs."""

    # -- guests -----------------------------------------------------------
    @abc.abstractmethod
    def add_guest(self, **fields: Any) -> Any: ...

    @abc.abstractmethod
    def find_guest(self, pact_id: str, email: str) -> Optional[Any]: ...

    @abc.abstractmethod
    def find_guest_by_user(self, pact_id: str, user_id: str) -> Optional[Any]: ...

    @abc.abstractmethod
    def list_guests(self, pact_id: str) -> list[tuple[Any, Any]]:
        """``(guest, rsvp)`` pairs for a pact, ordered by guest name."""

    # -- rsvps ------------------------------------------------------------
    @abc.abstractmethod
    def add_rsvp(self, **fields: Any) -> Any: ...

    @abc.abstractmethod
    def get_rsvp_for_guest(self, guest_id: str) -> Optional[Any]: ...
