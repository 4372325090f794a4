"""End-to-end tests for health, signup, login and the current-user profile."""

import asyncio
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi.testclient import TestClient

from posts_api.app.core.errors import InvalidCredentials, UserAlreadyExists
from posts_api.app.core.security import TokenService
from posts_api.app.main import create_app
from posts_api.app.schemas.user import LoginRequest, SignupRequest
from posts_api.app.services.user_service import UserService
from tests.conftest import PASSWORD, TEST_SECRET, auth_header, signup


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert isinstance(body["timestamp"], int)


class TestSignup:
    def test_signup_returns_token_and_user(self, client):
        response = signup(client)
        assert response.status_code == 200
        body = response.json()
        assert body["user"]["email"] == "a@x.com"
        assert body["user"]["username"] == "alice"
        assert set(body["user"]) == {"id", "email", "username", "created_at"}
        assert body["token"]

    def test_token_resolves_to_new_user(self, client, app, alice):
        identity = app.state.tokens.authenticate(f"Bearer {alice['token']}")
        assert str(identity.user_id) == alice["user"]["id"]
        assert identity.email == "a@x.com"

    def test_password_hash_is_never_returned(self, client, store, alice):
        stored = store.users.get(store.email_index.lookup("a@x.com"))
        assert "password" not in signup(client, email="c@x.com").text
        me = client.get("/users/me", headers=auth_header(alice["token"]))
        assert "password" not in me.text
        assert stored.password_hash not in me.text

    def test_duplicate_email_conflicts(self, client, alice):
        response = signup(client, username="alice2")
        assert response.status_code == 409
        assert response.json() == {"error": "User already exists"}

    def test_email_case_is_preserved(self, client):
        response = signup(client, email="Alice@x.com")
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "Alice@x.com"
        assert signup(client, email="alice@x.com").status_code == 200

    def test_invalid_email(self, client):
        response = signup(client, email="not-an-email")
        assert response.status_code == 400
        assert "email" in response.json()["error"]

    def test_username_length(self, client):
        assert signup(client, username="ab").status_code == 400
        assert signup(client, username="a" * 21).status_code == 400
        assert signup(client, username="abc").status_code == 200

    def test_password_length(self, client):
        assert signup(client, password="short").status_code == 400
        assert signup(client, password="x" * 101).status_code == 400
        assert signup(client, password="x" * 8).status_code == 200

    def test_missing_field(self, client):
        response = client.post("/auth/signup", json={"email": "a@x.com", "password": PASSWORD})
        assert response.status_code == 400
        assert "username" in response.json()["error"]

    def test_failed_signup_leaves_no_index_entry(self, client, store):
        signup(client, password="short")
        assert store.email_index.lookup("a@x.com") is None


class TestLogin:
    def test_concrete_scenario(self, client):
        created = signup(client, email="a@x.com", username="alice", password="password123")
        assert created.status_code == 200
        assert created.json()["user"]["email"] == "a@x.com"

        response = client.post("/auth/login", json={"email": "a@x.com", "password": "password123"})
        assert response.status_code == 200
        body = response.json()
        assert body["user"]["id"] == created.json()["user"]["id"]
        me = client.get("/users/me", headers=auth_header(body["token"]))
        assert me.json()["id"] == created.json()["user"]["id"]

        assert client.get("/posts/00000000-0000-0000-0000-000000000000").status_code == 404

    def test_wrong_password(self, client, alice):
        response = client.post("/auth/login", json={"email": "a@x.com", "password": "wrong-password"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials"}

    def test_unknown_email_looks_like_wrong_password(self, client, alice):
        response = client.post("/auth/login", json={"email": "nobody@x.com", "password": PASSWORD})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials"}

    def test_email_is_case_sensitive(self, client, alice):
        response = client.post("/auth/login", json={"email": "A@x.com", "password": PASSWORD})
        assert response.status_code == 401

    def test_unencodable_password_is_invalid_credentials(self, client, alice):
        # JSON escape for a lone surrogate; it cannot be encoded as UTF-8.
        body = '{"email": "a@x.com", "password": "\\ud800wrongpass"}'
        response = client.post(
            "/auth/login",
            content=body,
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials"}


class TestCurrentUser:
    def test_me(self, client, alice):
        response = client.get("/users/me", headers=auth_header(alice["token"]))
        assert response.status_code == 200
        assert response.json() == alice["user"]

    def test_requires_token(self, client):
        response = client.get("/users/me")
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_rejects_wrong_scheme(self, client, alice):
        response = client.get("/users/me", headers={"Authorization": f"Token {alice['token']}"})
        assert response.status_code == 401

    def test_rejects_tampered_token(self, client, alice):
        token = alice["token"]
        tampered = token[:-1] + ("A" if token[-1] != "A" else "B")
        assert client.get("/users/me", headers=auth_header(tampered)).status_code == 401

    def test_rejects_expired_token(self, settings, store, clock):
        now = [1_800_000_000.0]
        tokens = TokenService(TEST_SECRET, clock=lambda: now[0])
        client = TestClient(create_app(settings=settings, store=store, tokens=tokens, clock=clock))
        token = signup(client).json()["token"]
        assert client.get("/users/me", headers=auth_header(token)).status_code == 200
        now[0] += 24 * 60 * 60
        assert client.get("/users/me", headers=auth_header(token)).status_code == 401

    def test_valid_token_for_unknown_user(self, client, app):
        token = app.state.tokens.issue(uuid.uuid4(), "ghost@x.com")
        response = client.get("/users/me", headers=auth_header(token))
        assert response.status_code == 404


class TestConcurrentSignup:
    def test_same_email_has_exactly_one_winner(self, store):
        service = UserService(store, TokenService(TEST_SECRET), hash_iterations=1_000)
        barrier = threading.Barrier(12)

        def attempt(n: int) -> str:
            barrier.wait()
            request = SignupRequest(email="race@x.com", username=f"user{n}", password=PASSWORD)
            try:
                asyncio.run(service.signup(request))
                return "ok"
            except UserAlreadyExists:
                return "conflict"

        with ThreadPoolExecutor(max_workers=12) as pool:
            outcomes = list(pool.map(attempt, range(12)))

        assert outcomes.count("ok") == 1
        assert outcomes.count("conflict") == 11
        assert len(store.users) == 1
        assert len(store.email_index) == 1
        user = store.find_user_by_email("race@x.com")
        assert store.email_index.lookup("race@x.com") == user.id

    def test_distinct_emails_all_succeed(self, store):
        service = UserService(store, TokenService(TEST_SECRET), hash_iterations=1_000)

        def attempt(n: int):
            request = SignupRequest(email=f"user{n}@x.com", username=f"user{n}", password=PASSWORD)
            return asyncio.run(service.signup(request))

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, range(20)))

        assert len({r.user.id for r in results}) == 20
        assert len(store.users) == 20
        for user in store.users.scan():
            assert store.email_index.lookup(user.email) == user.id

    def test_failed_user_insert_releases_email(self, store, monkeypatch):
        service = UserService(store, TokenService(TEST_SECRET), hash_iterations=1_000)

        def broken_insert(key, value):
            raise RuntimeError("insert failed")

        monkeypatch.setattr(store.users, "insert", broken_insert)
        request = SignupRequest(email="a@x.com", username="alice", password=PASSWORD)
        with pytest.raises(RuntimeError):
            asyncio.run(service.signup(request))
        assert store.email_index.lookup("a@x.com") is None

    def test_login_with_wrong_password_is_invalid_credentials(self, store):
        service = UserService(store, TokenService(TEST_SECRET), hash_iterations=1_000)
        asyncio.run(service.signup(SignupRequest(email="a@x.com", username="alice", password=PASSWORD)))
        for password in ["", "password12", "PASSWORD123", PASSWORD + " "]:
            with pytest.raises(InvalidCredentials):
                asyncio.run(service.login(LoginRequest(email="a@x.com", password=password)))
