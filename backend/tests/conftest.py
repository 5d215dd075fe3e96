"""Pytest fixtures: in-memory store by default, SQLite for the SQL adapter."""
import os

# Configure before planpact is imported; settings and the engine are built at import.
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["DATABASE_URL"] = "sqlite:///./planpact_test.db"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["EMAIL_BACKEND"] = "console"
os.environ["EMAIL_MAX_ATTEMPTS"] = "2"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from planpact.database import Base
from planpact.dependencies import get_email_sender, get_store
from planpact.main import app
from planpact.services.email_service import EmailSender
from planpact.storage import InMemoryStore, SqlAlchemyStore

# Import all models so they register with Base.metadata
from planpact.models.user import User            # noqa: F401
from planpact.models.pact import Pact            # noqa: F401
from planpact.models.guest import Guest, RSVP    # noqa: F401

SQLITE_URL = "sqlite:///./planpact_test.db"


class RecordingEmailSender(EmailSender):
    """Keeps every message; addresses in ``failing`` raise instead."""

    def __init__(self):
        self.sent = []
        self.attempts = []
        self.failing = set()

    def send(self, to_address, subject, html_body, text_body):
        self.attempts.append(to_address)
        if to_address in self.failing:
            raise ConnectionError(f"mailbox unavailable: {to_address}")
        self.sent.append({"to": to_address, "subject": subject, "html": html_body, "text": text_body})

    def recipients(self):
        return [m["to"] for m in self.sent]


@pytest.fixture
def outbox():
    return RecordingEmailSender()


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Each storage adapter in turn."""
    if request.param == "memory":
        return InMemoryStore()
    return SqlAlchemyStore(request.getfixturevalue("db"))


@pytest.fixture(scope="function")
def client(outbox):
    """TestClient backed by a fresh in-memory store."""
    memory = InMemoryStore()

    def _override_get_store():
        yield memory

    app.dependency_overrides[get_store] = _override_get_store
    app.dependency_overrides[get_email_sender] = lambda: outbox
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def sql_client(db_engine, outbox):
    """TestClient with the store dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_store():
        session = TestingSession()
        try:
            yield SqlAlchemyStore(session)
        finally:
            session.close()

    app.dependency_overrides[get_store] = _override_get_store
    app.dependency_overrides[get_email_sender] = lambda: outbox
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(params=["memory", "sql"])
def api(request):
    """The API client over each storage adapter."""
    return request.getfixturevalue("client" if request.param == "memory" else "sql_client")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register_user(
    client: TestClient,
    name: str = "Alice",
    email: str = "alice@example.com",
    password: str = "secret123",
) -> dict:
    """POST /api/auth/register and return ``{token, user}``."""
    resp = client.post("/api/auth/register", json={
        "name": name,
        "email": email,
        "password": password,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_pact(client: TestClient, token: str, guests=None, **fields) -> dict:
    """POST /api/pacts and return the created pact with its guests."""
    body = {
        "title": "Board Game Night",
        "date": "2030-06-01",
        "time": "19:00",
        "location": "Alice's place",
        "guests": guests if guests is not None else [{"name": "Bob", "email": "bob@example.com"}],
    }
    body.update(fields)
    resp = client.post("/api/pacts", json=body, headers=auth_headers(token))
    assert resp.status_code == 201, resp.text
    return resp.json()


def rsvp(client: TestClient, token: str, pact_id: str, status: str, **extra):
    return client.post(
        f"/api/pacts/{pact_id}/rsvp",
        json={"status": status, **extra},
        headers=auth_headers(token),
    )
