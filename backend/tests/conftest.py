"""Pytest fixtures — SQLite database with a fresh schema for every test."""
from datetime import date, timedelta

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from app.database import Base, configure_sqlite, get_db
from app.main import app

# Import all models so they register with Base.metadata
from app.models.user import User                       # noqa: F401
from app.models.event import Event, EventParticipant   # noqa: F401
from app.models.response import AttendanceResponse     # noqa: F401

SQLITE_URL = "sqlite:///./test.db"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
    configure_sqlite(engine)

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session, closed after the test."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def as_user(user: dict) -> dict:
    """Headers identifying the caller."""
    return {"X-User-ID": user["user_id"]}


def today_iso(offset_days: int = 0) -> str:
    return (date.today() + timedelta(days=offset_days)).isoformat()


def create_test_user(client: TestClient, name: str = "Test User", email: str = None) -> dict:
    """Helper — POST /api/users and return response JSON."""
    email = email or f"{name.lower().replace(' ', '.')}@example.com"
    resp = client.post("/api/users/", json={"name": name, "email": email})
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_event(client: TestClient, organizer: dict, title: str = "Team Standup",
                      description: str = "Daily sync for the whole team",
                      date_offset: int = 1, time: str = "09:30",
                      location: str = "Room 42, HQ") -> dict:
    """Helper — POST /api/events as ``organizer`` and return response JSON."""
    resp = client.post("/api/events/", headers=as_user(organizer), json={
        "title": title,
        "description": description,
        "date": today_iso(date_offset),
        "time": time,
        "location": location,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def invite(client: TestClient, organizer: dict, event: dict, *users: dict):
    return client.post(
        f"/api/events/{event['event_id']}/invite",
        headers=as_user(organizer),
        json={"user_ids": [u["user_id"] for u in users]},
    )
