# tests/test_auth.py

import time

import jwt

from shidduch.routers import auth_router


def _token(**claims):
    payload = {"sub": "user-1", "email": "u@test.local", "aud": "authenticated", "exp": int(time.time()) + 600}
    payload.update(claims)
    return jwt.encode(payload, auth_router.SECRET_KEY, algorithm=auth_router.ALGORITHM)


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"


def test_routes_require_auth(client):
    assert client.get("/profiles").status_code == 401
    assert client.get("/library").status_code == 401
    assert client.post("/ai-search/child-1").status_code == 401
    assert client.get("/ai-search/results").status_code == 401


def test_invalid_token(client):
    r = client.get("/auth/me", headers={"Authorization": "Bearer invalid-token"})
    assert r.status_code == 401


def test_expired_token(client):
    r = client.get("/auth/me", headers={"Authorization": f"Bearer {_token(exp=int(time.time()) - 10)}"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Token expired"


def test_token_without_subject(client):
    r = client.get("/auth/me", headers={"Authorization": f"Bearer {_token(sub='')}"})
    assert r.status_code == 401


def test_valid_provider_token(client):
    r = client.get("/auth/me", headers={"Authorization": f"Bearer {_token()}"})
    assert r.status_code == 200
    assert r.json() == {"id": "user-1", "email": "u@test.local"}


def test_token_cookie_is_accepted(client):
    client.cookies.set("token", _token(sub="cookie-user"))
    r = client.get("/auth/me")
    assert r.status_code == 200
    assert r.json()["id"] == "cookie-user"
