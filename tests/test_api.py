from __future__ import annotations

import uuid
from datetime import timedelta

from core.jwt_tokens import make_jwt
from tests.conftest import JWT_SECRET, POLKA_KEY

UNAUTHORIZED = {"detail": "Unauthorized"}


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_healthz(client) -> None:
    resp = client.get("/api/healthz")
    assert resp.status_code == 200
    assert resp.text == "OK"
    assert resp.headers["content-type"].startswith("text/plain")


def test_create_user_hides_password(client, make_user) -> None:
    user = make_user()
    assert user["email"] == "walt@breakingbad.com"
    assert user["is_chirpy_red"] is False
    assert "password" not in user and "hashed_password" not in user
    uuid.UUID(user["id"])


def test_create_user_twice(client, make_user) -> None:
    make_user()
    resp = client.post("/api/users", json={"email": "walt@breakingbad.com", "password": "x"})
    assert resp.status_code == 400


def test_login_returns_both_tokens(client, make_user, login) -> None:
    user = make_user()
    body = login()
    assert body["id"] == user["id"]
    assert body["token"]
    assert len(body["refresh_token"]) == 64


def test_bad_login_is_uniform_401(client, make_user) -> None:
    make_user()
    wrong_pw = client.post("/api/login", json={"email": "walt@breakingbad.com", "password": "nope"})
    unknown = client.post("/api/login", json={"email": "skyler@breakingbad.com", "password": "04234"})
    assert wrong_pw.status_code == unknown.status_code == 401
    assert wrong_pw.json() == unknown.json() == UNAUTHORIZED


def test_password_over_72_bytes_is_refused(client) -> None:
    # 37 characters but 74 bytes
    resp = client.post("/api/users", json={"email": "walt@breakingbad.com", "password": "é" * 37})
    assert resp.status_code == 422
    ok = client.post("/api/users", json={"email": "walt@breakingbad.com", "password": "é" * 36})
    assert ok.status_code == 201


def test_login_with_extra_bytes_past_72_fails(client, make_user, login) -> None:
    stored = "é" * 36
    make_user(password=stored)
    assert login(password=stored)["token"]

    resp = client.post("/api/login", json={"email": "walt@breakingbad.com", "password": stored + "zzzz"})
    assert resp.status_code == 401
    assert resp.json() == UNAUTHORIZED


def test_update_user_requires_valid_access_token(client, make_user, login) -> None:
    make_user()
    token = login()["token"]

    resp = client.put(
        "/api/users",
        json={"email": "heisenberg@breakingbad.com", "password": "blue-sky"},
        headers=bearer(token),
    )
    assert resp.status_code == 200
    assert resp.json()["email"] == "heisenberg@breakingbad.com"
    login("heisenberg@breakingbad.com", "blue-sky")


def test_update_user_rejections_look_identical(client, make_user, login) -> None:
    user = make_user()
    payload = {"email": "heisenberg@breakingbad.com", "password": "blue-sky"}
    expired = make_jwt(uuid.UUID(user["id"]), JWT_SECRET, timedelta(seconds=-1))
    forged = make_jwt(uuid.UUID(user["id"]), "f" * 48, timedelta(hours=1))

    cases = [
        {},
        {"Authorization": ""},
        {"Authorization": f"ApiKey {POLKA_KEY}"},
        bearer(expired),
        bearer(forged),
        bearer("garbage"),
    ]
    for headers in cases:
        resp = client.put("/api/users", json=payload, headers=headers)
        assert resp.status_code == 401, headers
        assert resp.json() == UNAUTHORIZED


def test_refresh_mints_new_access_token(client, make_user, login) -> None:
    make_user()
    refresh_token = login()["refresh_token"]

    resp = client.post("/api/refresh", headers=bearer(refresh_token))
    assert resp.status_code == 200
    new_token = resp.json()["token"]

    resp = client.put(
        "/api/users",
        json={"email": "walt@breakingbad.com", "password": "04234"},
        headers=bearer(new_token),
    )
    assert resp.status_code == 200


def test_access_token_is_not_a_refresh_token(client, make_user, login) -> None:
    make_user()
    access = login()["token"]
    resp = client.post("/api/refresh", headers=bearer(access))
    assert resp.status_code == 401


def test_revoke_then_refresh_fails(client, make_user, login) -> None:
    make_user()
    refresh_token = login()["refresh_token"]

    assert client.post("/api/revoke", headers=bearer(refresh_token)).status_code == 204
    resp = client.post("/api/refresh", headers=bearer(refresh_token))
    assert resp.status_code == 401
    assert resp.json() == UNAUTHORIZED

    # idempotent
    assert client.post("/api/revoke", headers=bearer(refresh_token)).status_code == 204


def test_revoke_unknown_token(client) -> None:
    resp = client.post("/api/revoke", headers=bearer("0" * 64))
    assert resp.status_code == 401


def test_revoke_requires_bearer(client) -> None:
    assert client.post("/api/revoke").status_code == 401


def test_webhook_upgrades_user(client, make_user, login) -> None:
    user = make_user()
    resp = client.post(
        "/api/polka/webhooks",
        json={"event": "user.upgraded", "data": {"user_id": user["id"]}},
        headers={"Authorization": f"ApiKey {POLKA_KEY}"},
    )
    assert resp.status_code == 204
    assert login()["is_chirpy_red"] is True


def test_webhook_ignores_other_events(client, make_user, login) -> None:
    user = make_user()
    resp = client.post(
        "/api/polka/webhooks",
        json={"event": "user.payment_failed", "data": {"user_id": user["id"]}},
        headers={"Authorization": f"ApiKey {POLKA_KEY}"},
    )
    assert resp.status_code == 204
    assert login()["is_chirpy_red"] is False


def test_webhook_auth_failures(client, make_user, login) -> None:
    user = make_user()
    payload = {"event": "user.upgraded", "data": {"user_id": user["id"]}}
    access = login()["token"]

    for headers in ({}, {"Authorization": "ApiKey wrong"}, bearer(access), bearer(POLKA_KEY)):
        resp = client.post("/api/polka/webhooks", json=payload, headers=headers)
        assert resp.status_code == 401, headers
        assert resp.json() == UNAUTHORIZED
    assert login()["is_chirpy_red"] is False


def test_webhook_bad_or_unknown_user(client) -> None:
    headers = {"Authorization": f"ApiKey {POLKA_KEY}"}
    bad = client.post(
        "/api/polka/webhooks",
        json={"event": "user.upgraded", "data": {"user_id": "nope"}},
        headers=headers,
    )
    assert bad.status_code == 400

    unknown = client.post(
        "/api/polka/webhooks",
        json={"event": "user.upgraded", "data": {"user_id": str(uuid.uuid4())}},
        headers=headers,
    )
    assert unknown.status_code == 404


def test_webhook_unusable_body_is_400(client) -> None:
    headers = {"Authorization": f"ApiKey {POLKA_KEY}"}
    bodies = (
        {"event": "user.upgraded", "data": {"user_id": 123}},
        {"data": {"user_id": str(uuid.uuid4())}},
        {"event": "user.upgraded", "data": "nope"},
        ["user.upgraded"],
    )
    for body in bodies:
        resp = client.post("/api/polka/webhooks", json=body, headers=headers)
        assert resp.status_code == 400, body

    not_json = client.post(
        "/api/polka/webhooks",
        content="{not json",
        headers={**headers, "Content-Type": "application/json"},
    )
    assert not_json.status_code == 400


def test_unauthorized_challenge_names_the_expected_scheme(client, make_user, login) -> None:
    user = make_user()
    payload = {"event": "user.upgraded", "data": {"user_id": user["id"]}}
    for headers in ({}, {"Authorization": "ApiKey wrong"}, bearer(login()["token"])):
        resp = client.post("/api/polka/webhooks", json=payload, headers=headers)
        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "ApiKey"

    resp = client.put("/api/users", json={"email": "a@b.com", "password": "x"})
    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Bearer"


def test_login_is_rate_limited(client, make_user) -> None:
    make_user()
    statuses = [
        client.post("/api/login", json={"email": "walt@breakingbad.com", "password": "nope"}).status_code
        for _ in range(11)
    ]
    assert statuses[:10] == [401] * 10
    assert statuses[10] == 429
