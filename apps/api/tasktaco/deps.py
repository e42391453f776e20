from __future__ import annotations

from typing import AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tasktaco.db import SessionLocal
from tasktaco.models import User
from tasktaco.security import TokenError, decode_access_token


async def get_db() -> AsyncIterator[AsyncSession]:
  async with SessionLocal() as session:
    try:
      yield session
    except Exception:
      await session.rollback()
      raise


def _bearer_token(request: Request) -> str:
  auth = request.headers.get("authorization")
  if not auth or not auth.lower().startswith("bearer "):
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
  token = auth.split(" ", 1)[1].strip()
  if not token:
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
  return token


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
  token = _bearer_token(request)
  try:
    claims = decode_access_token(token)
  except TokenError as exc:
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

  res = await db.execute(select(User).where(User.id == str(claims["sub"])))
  u = res.scalar_one_or_none()
  if not u:
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
  return u


def client_ip(request: Request) -> str | None:
  return request.client.host if request.client else None
