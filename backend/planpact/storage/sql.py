"""Relational storage adapter on a SQLAlchemy session."""
import contextlib
import logging
from datetime import date
from typing import Any, Iterator, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from planpact.errors import ConflictError, InternalError
from planpact.models.guest import Guest, RSVP
from planpact.models.pact import Pact, PactStatus
from planpact.models.user import User
from planpact.storage.base import PactStore

logger = logging.getLogger(__name__)


class SqlAlchemyStore(PactStore):
    """PactStore backed by the ORM models; one instance per session."""

    def __init__(self, db: Session):
        self.db = db
        self._depth = 0

    @contextlib.contextmanager
    def transaction(self, pact_id: Optional[str] = None) -> Iterator[None]:
        outermost = self._depth == 0
        self._depth += 1
        try:
            if pact_id is not None:
                # Row lock on the pact serializes writers to the same pact (no-op on SQLite).
                self.db.query(Pact).filter(Pact.pact_id == pact_id).with_for_update().first()
            yield
            if outermost:
                self.db.commit()
        except IntegrityError as exc:
            if outermost:
                self.db.rollback()
            raise ConflictError("Resource already exists") from exc
        except SQLAlchemyError as exc:
            if outermost:
                self.db.rollback()
            logger.error("Storage failure: %s", exc)
            raise InternalError("Storage unavailable") from exc
        except Exception:
            if outermost:
                self.db.rollback()
            raise
        finally:
            self._depth -= 1

    def _add(self, obj: Any) -> Any:
        self.db.add(obj)
        self.db.flush()
        return obj

    # -- identities -------------------------------------------------------
    def add_user(self, **fields: Any) -> User:
        return self._add(User(**fields))

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.user_id == user_id).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    # -- pacts ------------------------------------------------------------
    def add_pact(self, **fields: Any) -> Pact:
        return self._add(Pact(**fields))

    def get_pact(self, pact_id: str) -> Optional[Pact]:
        return self.db.query(Pact).filter(Pact.pact_id == pact_id).first()

    def list_pacts_for_identity(self, user_id: str, email: str) -> list[Pact]:
        invited = (
            self.db.query(Guest.pact_id)
            .filter(or_(Guest.user_id == user_id, Guest.email == email))
        )
        return (
            self.db.query(Pact)
            .filter(or_(Pact.host_id == user_id, Pact.pact_id.in_(invited)))
            .order_by(Pact.created_at)
            .all()
        )

    def list_pacts_needing_reminders(self, start: date, end: date) -> list[Pact]:
        return (
            self.db.query(Pact)
            .filter(
                Pact.status == PactStatus.active,
                Pact.send_reminders.is_(True),
                Pact.event_date >= start,
                Pact.event_date <= end,
            )
            .order_by(Pact.event_date)
            .all()
        )

    def delete_pact(self, pact: Pact) -> None:
        self.db.delete(pact)
        self.db.flush()

    # -- guests -----------------------------------------------------------
    def add_guest(self, **fields: Any) -> Guest:
        return self._add(Guest(**fields))

    def find_guest(self, pact_id: str, email: str) -> Optional[Guest]:
        return (
            self.db.query(Guest)
            .filter(Guest.pact_id == pact_id, Guest.email == email)
            .first()
        )

    def find_guest_by_user(self, pact_id: str, user_id: str) -> Optional[Guest]:
        return (
            self.db.query(Guest)
            .filter(Guest.pact_id == pact_id, Guest.user_id == user_id)
            .first()
        )

    def list_guests(self, pact_id: str) -> list[tuple[Guest, RSVP]]:
        rows = (
            self.db.query(Guest, RSVP)
            .outerjoin(RSVP, RSVP.guest_id == Guest.guest_id)
            .filter(Guest.pact_id == pact_id)
            .order_by(Guest.name, Guest.email)
            .all()
        )
        return [(guest, rsvp) for guest, rsvp in rows]

    # -- rsvps ------------------------------------------------------------
    def add_rsvp(self, **fields: Any) -> RSVP:
        return self._add(RSVP(**fields))

    def get_rsvp_for_guest(self, guest_id: str) -> Optional[RSVP]:
        return self.db.query(RSVP).filter(RSVP.guest_id == guest_id).first()
