from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from passlib.context import CryptContext

from tasktaco.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenError(Exception):
  """Raised when a bearer token cannot be trusted."""


class TokenExpired(TokenError):
  pass


def hash_password(password: str) -> str:
  return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
  try:
    return pwd_context.verify(password, password_hash)
  except ValueError:
    # malformed stored hash
    return False


def create_access_token(*, user_id: str, email: str, name: str, now: datetime | None = None) -> str:
  issued = now or datetime.now(timezone.utc)
  claims: dict[str, Any] = {
    "sub": user_id,
    "email": email,
    "name": name,
    "iss": settings.jwt_issuer,
    "aud": settings.jwt_audience,
    "iat": issued,
    "exp": issued + timedelta(days=settings.access_token_ttl_days),
  }
  return jwt.encode(claims, settings.app_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
  try:
    return jwt.decode(
      token,
      settings.app_secret,
      algorithms=[settings.jwt_algorithm],
      issuer=settings.jwt_issuer,
      audience=settings.jwt_audience,
      options={"require": ["sub", "exp"]},
    )
  except jwt.ExpiredSignatureError as exc:
    raise TokenExpired("Token expired") from exc
  except jwt.InvalidTokenError as exc:
    raise TokenError("Invalid token") from exc
