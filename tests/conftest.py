import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("COOKIE_SECURE", "false")

from fastapi.testclient import TestClient

from taskflow.main import app
from taskflow.db.session import Base, get_db
from taskflow.deps.auth import login_limiter
from taskflow.deps.clock import get_now


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock():
    return FakeClock(datetime(2024, 5, 1, 9, 0, 0, tzinfo=timezone.utc))


@pytest.fixture()
def make_client(session_factory, clock):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_now] = clock
    login_limiter.reset()
    clients = []

    def _make(**kwargs) -> TestClient:
        client = TestClient(app, **kwargs)
        clients.append(client)
        return client

    try:
        yield _make
    finally:
        for client in clients:
            client.close()
        app.dependency_overrides.clear()
        login_limiter.reset()


@pytest.fixture()
def client(make_client):
    return make_client()


def signup(client, username="ada", email=None, password="s3cret!"):
    response = client.post(
        "/auth/signup",
        json={"email": email or f"{username}@example.com", "username": username, "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture()
def user_client(make_client):
    """A client already signed in through the session cookie."""
    client = make_client()
    signup(client)
    return client
