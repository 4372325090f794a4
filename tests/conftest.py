"""
Shared fixtures.

Every test gets its own ``EntityStore`` and application so no state
leaks between tests.  ``FakeClock`` advances one second per call,
which makes ``created_at`` ordering deterministic.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from posts_api.app.core.config import Settings
from posts_api.app.core.store import EntityStore
from posts_api.app.main import create_app

TEST_SECRET = "test-secret-for-posts-api"
PASSWORD = "password123"


class FakeClock:
    """Datetime source that ticks forward one second per call."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def settings() -> Settings:
    # Low iteration count keeps the suite fast; the format is unchanged.
    return Settings(jwt_secret=TEST_SECRET, password_hash_iterations=1_000)


@pytest.fixture
def store() -> EntityStore:
    return EntityStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def app(settings, store, clock):
    return create_app(settings=settings, store=store, clock=clock)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


def signup(client: TestClient, email: str = "a@x.com", username: str = "alice", password: str = PASSWORD):
    return client.post("/auth/signup", json={"email": email, "username": username, "password": password})


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(client):
    """Signed-up user ``a@x.com``; returns the signup response body."""
    response = signup(client)
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def bob(client):
    response = signup(client, email="b@x.com", username="bob")
    assert response.status_code == 200
    return response.json()
