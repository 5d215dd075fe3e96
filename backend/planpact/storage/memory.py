"""In-memory storage adapter: plain records in lists, linear scans.

Suited to tests and single-process demos. Writes are serialized by one
re-entrant lock; a failed transaction restores the state it started from.
"""
import contextlib
import copy
import threading
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Iterator, Optional

from planpact.errors import ConflictError
from planpact.models.guest import RSVPStatus
from planpact.models.pact import PactStatus
from planpact.storage.base import PactStore


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class UserRecord:
    name: str
    email: str
    password_hash: str
    user_id: str = field(default_factory=_new_id)
    is_active: bool = True
    email_verified: bool = False
    last_login: Optional[datetime] = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class PactRecord:
    host_id: str
    title: str
    event_date: date
    description: Optional[str] = None
    event_time: Optional[time] = None
    location: Optional[str] = None
    address: Optional[str] = None
    rsvp_deadline: Optional[date] = None
    send_reminders: bool = True
    allow_plus_ones: bool = False
    max_attendees: Optional[int] = None
    status: PactStatus = PactStatus.active
    pact_id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class GuestRecord:
    pact_id: str
    email: str
    name: str
    user_id: Optional[str] = None
    guest_id: str = field(default_factory=_new_id)
    invited_at: datetime = field(default_factory=_now)


@dataclass
class RSVPRecord:
    guest_id: str
    pact_id: str
    status: RSVPStatus = RSVPStatus.pending
    plus_ones: int = 0
    message: Optional[str] = None
    responded_at: Optional[datetime] = None
    rsvp_id: str = field(default_factory=_new_id)


@dataclass
class _State:
    users: list[UserRecord] = field(default_factory=list)
    pacts: list[PactRecord] = field(default_factory=list)
    guests: list[GuestRecord] = field(default_factory=list)
    rsvps: list[RSVPRecord] = field(default_factory=list)


_TABLES = ("users", "pacts", "guests", "rsvps")
_PRIMARY_KEYS = {
    UserRecord: "user_id",
    PactRecord: "pact_id",
    GuestRecord: "guest_id",
    RSVPRecord: "rsvp_id",
}


def _key(rec: Any) -> tuple[type, str]:
    return type(rec), getattr(rec, _PRIMARY_KEYS[type(rec)])


class InMemoryStore(PactStore):
    """PactStore holding everything in process memory."""

    def __init__(self):
        self._state = _State()
        self._lock = threading.RLock()
        self._depth = 0

    @contextlib.contextmanager
    def transaction(self, pact_id: Optional[str] = None) -> Iterator[None]:
        with self._lock:
            outermost = self._depth == 0
            snapshot = copy.deepcopy(self._state) if outermost else None
            self._depth += 1
            try:
                yield
            except Exception:
                if outermost:
                    self._restore(snapshot)
                raise
            finally:
                self._depth -= 1

    def _restore(self, snapshot: _State) -> None:
        # Restore in place so records already handed out keep their identity.
        live = {_key(rec): rec for name in _TABLES for rec in getattr(self._state, name)}
        for name in _TABLES:
            restored = []
            for saved in getattr(snapshot, name):
                rec = live.get(_key(saved), saved)
                if rec is not saved:
                    rec.__dict__.update(saved.__dict__)
                restored.append(rec)
            setattr(self._state, name, restored)

    # -- identities -------------------------------------------------------
    def add_user(self, **fields: Any) -> UserRecord:
        user = UserRecord(**fields)
        with self._lock:
            if self.get_user_by_email(user.email) is not None:
                raise ConflictError("User with this email already exists")
            self._state.users.append(user)
        return user

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        return next((u for u in self._state.users if u.user_id == user_id), None)

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        return next((u for u in self._state.users if u.email == email), None)

    # -- pacts ------------------------------------------------------------
    def add_pact(self, **fields: Any) -> PactRecord:
        pact = PactRecord(**fields)
        with self._lock:
            self._state.pacts.append(pact)
        return pact

    def get_pact(self, pact_id: str) -> Optional[PactRecord]:
        return next((p for p in self._state.pacts if p.pact_id == pact_id), None)

    def list_pacts_for_identity(self, user_id: str, email: str) -> list[PactRecord]:
        invited = {
            g.pact_id for g in self._state.guests
            if g.user_id == user_id or g.email == email
        }
        return [p for p in self._state.pacts if p.host_id == user_id or p.pact_id in invited]

    def list_pacts_needing_reminders(self, start: date, end: date) -> list[PactRecord]:
        due = [
            p for p in self._state.pacts
            if p.status == PactStatus.active and p.send_reminders and start <= p.event_date <= end
        ]
        return sorted(due, key=lambda p: p.event_date)

    def delete_pact(self, pact: PactRecord) -> None:
        with self._lock:
            state = self._state
            guest_ids = {g.guest_id for g in state.guests if g.pact_id == pact.pact_id}
            state.rsvps = [r for r in state.rsvps if r.guest_id not in guest_ids]
            state.guests = [g for g in state.guests if g.pact_id != pact.pact_id]
            state.pacts = [p for p in state.pacts if p.pact_id != pact.pact_id]

    # -- guests -----------------------------------------------------------
    def add_guest(self, **fields: Any) -> GuestRecord:
        guest = GuestRecord(**fields)
        with self._lock:
            if self.find_guest(guest.pact_id, guest.email) is not None:
                raise ConflictError("Guest already invited to this pact")
            self._state.guests.append(guest)
        return guest

    def find_guest(self, pact_id: str, email: str) -> Optional[GuestRecord]:
        return next(
            (g for g in self._state.guests if g.pact_id == pact_id and g.email == email), None
        )

    def find_guest_by_user(self, pact_id: str, user_id: str) -> Optional[GuestRecord]:
        return next(
            (g for g in self._state.guests if g.pact_id == pact_id and g.user_id == user_id), None
        )

    def list_guests(self, pact_id: str) -> list[tuple[GuestRecord, Optional[RSVPRecord]]]:
        guests = sorted(
            (g for g in self._state.guests if g.pact_id == pact_id),
            key=lambda g: (g.name, g.email),
        )
        return [(g, self.get_rsvp_for_guest(g.guest_id)) for g in guests]

    # -- rsvps ------------------------------------------------------------
    def add_rsvp(self, **fields: Any) -> RSVPRecord:
        rsvp = RSVPRecord(**fields)
        with self._lock:
            self._state.rsvps.append(rsvp)
        return rsvp

    def get_rsvp_for_guest(self, guest_id: str) -> Optional[RSVPRecord]:
        return next((r for r in self._state.rsvps if r.guest_id == guest_id), None)
