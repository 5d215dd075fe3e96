"""FastAPI dependencies: storage handle, authenticated identity, email sender."""
import contextlib
from typing import Iterator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from planpact.config import settings
from planpact.database import SessionLocal
from planpact.errors import AuthError
from planpact.services import auth_service, email_service
from planpact.storage import InMemoryStore, PactStore, SqlAlchemyStore

_bearer = HTTPBearer(auto_error=False)


def _memory_store(app) -> InMemoryStore:
    if getattr(app.state, "store", None) is None:
        app.state.store = InMemoryStore()
    return app.state.store


@contextlib.contextmanager
def open_store(app=None) -> Iterator[PactStore]:
    """Storage handle selected by ``STORAGE_BACKEND``.

    The in-memory store is owned by the application object; the SQL store
    wraps a fresh session that is closed on exit.
    """
    if settings.STORAGE_BACKEND == "memory":
        if app is None:
            yield InMemoryStore()
        else:
            yield _memory_store(app)
        return
    db = SessionLocal()
    try:
        yield SqlAlchemyStore(db)
    finally:
        db.close()


def get_store(request: Request) -> Iterator[PactStore]:
    with open_store(request.app) as store:
        yield store


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    store: PactStore = Depends(get_store),
):
    if credentials is None or not credentials.credentials:
        raise AuthError("Authentication required: No token provided.")
    return auth_service.resolve_identity(store, credentials.credentials)


def get_email_sender() -> email_service.EmailSender:
    return email_service.get_email_sender()
