"""HTTP tests for /auth and bearer verification."""
from datetime import datetime, timedelta, timezone

import jwt


def test_register_login_me(client):
    registered = client.post(
        "/auth/register",
        json={"username": "ann", "email": "Ann@Example.com", "password": "pw"},
    )
    assert registered.status_code == 201
    user = registered.json()["data"]
    assert user["email"] == "ann@example.com"
    assert "password" not in user

    login = client.post("/auth/login", json={"email": "ann@example.com", "password": "pw"})
    assert login.status_code == 200
    token = login.json()["data"]["access_token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["id"] == user["id"]


def test_duplicate_email(client, seeded):
    resp = client.post(
        "/auth/register",
        json={"username": "x", "email": "buyer@example.com", "password": "pw"},
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Email already exists"


def test_missing_fields(client):
    resp = client.post("/auth/register", json={"email": "a@b.c"})
    assert resp.status_code == 400


def test_wrong_password(client, seeded):
    resp = client.post("/auth/login", json={"email": "buyer@example.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid credentials"


def test_bad_authorization_headers(client, seeded, settings):
    assert client.get("/auth/me", headers={"Authorization": "Token abc"}).json()["message"] == (
        "Invalid Authorization format"
    )

    resp = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid or expired token"

    expired = jwt.encode(
        {"id": seeded.user, "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        settings.jwt_secret,
        algorithm="HS256",
    )
    resp = client.get("/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 401

    forged = jwt.encode({"id": seeded.user}, "other-secret", algorithm="HS256")
    assert client.get("/auth/me", headers={"Authorization": f"Bearer {forged}"}).status_code == 401


def test_me_for_unknown_user(client, settings):
    token = jwt.encode({"id": "ghost"}, settings.jwt_secret, algorithm="HS256")
    resp = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 404


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "OK"


def test_duplicate_email_caught_by_unique_index(client, seeded, monkeypatch):
    # another request registered the address after this one checked it
    monkeypatch.setattr("bookstore.auth.router._email_taken", lambda session, email: False)
    resp = client.post(
        "/auth/register",
        json={"username": "x", "email": "Buyer@example.com", "password": "pw"},
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Email already exists"
