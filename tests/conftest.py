from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from core.passwords import PasswordHasher
from main import create_app
from settings import Settings

JWT_SECRET = "test-jwt-secret-0123456789abcdef0123456789abcdef"
POLKA_KEY = "f271c81ff7084ee5b99a5091b42d486e"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        jwt_secret=JWT_SECRET,
        polka_key=POLKA_KEY,
        db_url=f"sqlite+aiosqlite:///{tmp_path / 'chirpy-test.db'}",
        access_token_ttl=timedelta(hours=1),
        refresh_token_ttl=timedelta(days=60),
        bcrypt_rounds=4,
    )


@pytest.fixture
def hasher() -> PasswordHasher:
    # minimum bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(client):
    def _make(email: str = "walt@breakingbad.com", password: str = "04234"):
        resp = client.post("/api/users", json={"email": email, "password": password})
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def login(client):
    def _login(email: str = "walt@breakingbad.com", password: str = "04234"):
        resp = client.post("/api/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _login
