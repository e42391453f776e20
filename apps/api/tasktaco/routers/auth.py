from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tasktaco.accounts.service import create_user, find_user_by_email, normalize_email
from tasktaco.audit import write_audit
from tasktaco.deps import client_ip, get_current_user, get_db
from tasktaco.models import User
from tasktaco.rate_limit import throttle
from tasktaco.schemas import AuthOut, LoginIn, RegisterIn, UserOut
from tasktaco.security import create_access_token, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def user_out(u: User) -> UserOut:
  return UserOut(id=u.id, name=u.name, email=u.email, profilePicture=u.profile_picture)


def _auth_out(u: User) -> AuthOut:
  token = create_access_token(user_id=u.id, email=u.email, name=u.name)
  return AuthOut(token=token, user=user_out(u))


def _rate_limit_or_429(action: str, ip: str) -> None:
  retry_after = throttle.attempt(action, ip)
  if not retry_after:
    return
  logger.warning("rate limited %s from %s (retry in %ss)", action, ip, retry_after)
  raise HTTPException(
    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
    detail={"code": "rate_limited", "message": "Too many requests", "retryAfterSeconds": retry_after},
    headers={"Retry-After": str(retry_after)},
  )


@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterIn, request: Request, db: AsyncSession = Depends(get_db)) -> AuthOut:
  ip = client_ip(request) or "unknown"
  _rate_limit_or_429("register", ip)

  email = normalize_email(payload.email)
  if "@" not in email or email.startswith("@") or email.endswith("@"):
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email")
  if not payload.name.strip():
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name is required")
  if await find_user_by_email(db, email):
    raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email is already registered")

  u = await create_user(db, name=payload.name, email=email, password=payload.password)
  await write_audit(db, event_type="auth.registered", entity_type="User", entity_id=u.id, actor_id=u.id, payload={"email": email})
  await db.commit()
  return _auth_out(u)


@router.post("/login", response_model=AuthOut)
async def login(payload: LoginIn, request: Request, db: AsyncSession = Depends(get_db)) -> AuthOut:
  ip = client_ip(request) or "unknown"
  _rate_limit_or_429("login", ip)

  email = normalize_email(payload.email)
  u = await find_user_by_email(db, email)
  if not u or not verify_password(payload.password, u.password_hash):
    logger.warning("failed login for %s from %s", email, ip)
    await write_audit(db, event_type="auth.login.failed", entity_type="Auth", entity_id=None, payload={"email": email, "ip": ip})
    await db.commit()
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

  await write_audit(db, event_type="auth.login.success", entity_type="User", entity_id=u.id, actor_id=u.id, payload={"ip": ip})
  await db.commit()
  return _auth_out(u)


@router.get("/me", response_model=UserOut)
async def me(user: User = Depends(get_current_user)) -> UserOut:
  return user_out(user)
