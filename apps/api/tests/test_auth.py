from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from conftest import DEFAULT_PASSWORD, auth_headers, register
from tasktaco.config import settings
from tasktaco.rate_limit import WINDOW_SECONDS, AuthThrottle
from tasktaco.security import create_access_token, decode_access_token


@pytest.mark.anyio
async def test_register_login_and_me(client: AsyncClient) -> None:
  r = await client.post("/auth/register", json={"name": "Cook", "email": " Cook@TacoTaco.Local ", "password": DEFAULT_PASSWORD})
  assert r.status_code == 201, r.text
  body = r.json()
  assert body["user"]["email"] == "cook@tacotaco.local"
  assert body["token"]

  r = await client.post("/auth/login", json={"email": "COOK@tacotaco.local", "password": DEFAULT_PASSWORD})
  assert r.status_code == 200, r.text
  token = r.json()["token"]

  me = await client.get("/auth/me", headers=auth_headers(token))
  assert me.status_code == 200, me.text
  assert me.json() == {"id": body["user"]["id"], "name": "Cook", "email": "cook@tacotaco.local", "profilePicture": None}


@pytest.mark.anyio
async def test_register_duplicate_email_conflicts(client: AsyncClient) -> None:
  await register(client, "dup@tasktaco.local")
  r = await client.post("/auth/register", json={"name": "Again", "email": "DUP@tasktaco.local", "password": DEFAULT_PASSWORD})
  assert r.status_code == 409


@pytest.mark.anyio
async def test_register_validation(client: AsyncClient) -> None:
  r = await client.post("/auth/register", json={"name": "x", "email": "not-an-email", "password": DEFAULT_PASSWORD})
  assert r.status_code == 400
  r = await client.post("/auth/register", json={"name": "x", "email": "a@b.c", "password": "123"})
  assert r.status_code == 422


@pytest.mark.anyio
async def test_login_failures_are_indistinguishable(client: AsyncClient) -> None:
  await register(client, "cook@tasktaco.local")
  wrong_pw = await client.post("/auth/login", json={"email": "cook@tasktaco.local", "password": "nope-nope"})
  no_user = await client.post("/auth/login", json={"email": "ghost@tasktaco.local", "password": "nope-nope"})
  assert wrong_pw.status_code == no_user.status_code == 401
  assert wrong_pw.json() == no_user.json() == {"detail": "Invalid email or password"}


@pytest.mark.anyio
async def test_bearer_token_is_required_and_checked(client: AsyncClient) -> None:
  assert (await client.get("/auth/me")).status_code == 401
  r = await client.get("/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
  assert r.status_code == 401
  assert r.json()["detail"] == "Invalid token"

  h = await register(client)
  me = (await client.get("/auth/me", headers=h)).json()
  stale = create_access_token(
    user_id=me["id"],
    email=me["email"],
    name=me["name"],
    now=datetime.now(timezone.utc) - timedelta(days=settings.access_token_ttl_days + 1),
  )
  r = await client.get("/auth/me", headers=auth_headers(stale))
  assert r.status_code == 401
  assert r.json()["detail"] == "Token expired"


def test_token_round_trip_carries_identity_claims() -> None:
  token = create_access_token(user_id="u-1", email="a@b.c", name="A")
  claims = decode_access_token(token)
  assert claims["sub"] == "u-1"
  assert claims["email"] == "a@b.c"
  assert claims["iss"] == settings.jwt_issuer
  assert claims["aud"] == settings.jwt_audience


@pytest.mark.anyio
async def test_login_rate_limited(client: AsyncClient) -> None:
  orig = settings.rate_limit_login_ip_per_minute
  settings.rate_limit_login_ip_per_minute = 3
  try:
    for _ in range(3):
      r = await client.post("/auth/login", json={"email": "nobody@example.com", "password": "bad"})
      assert r.status_code == 401, r.text
    r = await client.post("/auth/login", json={"email": "nobody@example.com", "password": "bad"})
    assert r.status_code == 429, r.text
    assert r.headers.get("retry-after")
  finally:
    settings.rate_limit_login_ip_per_minute = orig


@pytest.mark.anyio
async def test_register_rate_limited(client: AsyncClient) -> None:
  orig = settings.rate_limit_register_ip_per_minute
  settings.rate_limit_register_ip_per_minute = 2
  try:
    await register(client, "one@tasktaco.local")
    await register(client, "two@tasktaco.local")
    r = await client.post("/auth/register", json={"name": "x", "email": "three@tasktaco.local", "password": DEFAULT_PASSWORD})
    assert r.status_code == 429, r.text
  finally:
    settings.rate_limit_register_ip_per_minute = orig


def test_throttle_window_slides(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setattr(settings, "rate_limit_login_ip_per_minute", 2)
  now = [1000.0]
  throttle = AuthThrottle(clock=lambda: now[0])

  assert throttle.attempt("login", "10.0.0.1") == 0
  now[0] += 20
  assert throttle.attempt("login", "10.0.0.1") == 0
  assert throttle.attempt("login", "10.0.0.1") == WINDOW_SECONDS - 20
  assert throttle.attempt("login", "10.0.0.2") == 0
  assert throttle.attempt("register", "10.0.0.1") == 0

  # the first attempt ages out, the second still counts
  now[0] += 40
  assert throttle.attempt("login", "10.0.0.1") == 0
  assert throttle.attempt("login", "10.0.0.1") == 20
