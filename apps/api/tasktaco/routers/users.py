from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tasktaco.accounts.service import apply_settings, ensure_settings, find_user_by_email, normalize_email
from tasktaco.audit import write_audit
from tasktaco.deps import get_current_user, get_db
from tasktaco.models import AVAILABLE_THEMES, User, UserSettings, utcnow
from tasktaco.routers.auth import user_out
from tasktaco.schemas import MessageOut, PasswordChangeIn, ProfileUpdateIn, SettingsOut, SettingsUpdateIn, UserOut
from tasktaco.security import hash_password, verify_password

router = APIRouter(prefix="/user", tags=["user"])


def _settings_out(s: UserSettings) -> SettingsOut:
  return SettingsOut(theme=s.theme, defaultEmoji=s.default_emoji, availableThemes=list(AVAILABLE_THEMES))


@router.get("/profile", response_model=UserOut)
async def get_profile(user: User = Depends(get_current_user)) -> UserOut:
  return user_out(user)


@router.put("/profile", response_model=UserOut)
async def update_profile(payload: ProfileUpdateIn, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)) -> UserOut:
  # blank fields keep the current value
  name = (payload.name or "").strip()
  email = normalize_email(payload.email)
  if email and email != user.email:
    if "@" not in email or email.startswith("@") or email.endswith("@"):
      raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email")
    other = await find_user_by_email(db, email)
    if other and other.id != user.id:
      raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email is already registered")
    user.email = email
  if name:
    user.name = name
  user.updated_at = utcnow()
  await write_audit(db, event_type="user.profile.updated", entity_type="User", entity_id=user.id, actor_id=user.id, payload={"name": user.name, "email": user.email})
  await db.commit()
  return user_out(user)


@router.get("/settings", response_model=SettingsOut)
async def get_settings(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)) -> SettingsOut:
  s = await ensure_settings(db, user_id=user.id)
  await db.commit()
  return _settings_out(s)


@router.put("/settings", response_model=SettingsOut)
async def update_settings(payload: SettingsUpdateIn, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)) -> SettingsOut:
  s = await ensure_settings(db, user_id=user.id)
  apply_settings(s, theme=payload.theme, default_emoji=payload.defaultEmoji)
  await db.commit()
  return _settings_out(s)


@router.patch("/password", response_model=MessageOut)
async def change_password(payload: PasswordChangeIn, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)) -> MessageOut:
  if payload.newPassword != payload.confirmNewPassword:
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="New password and confirmation do not match")
  if not verify_password(payload.currentPassword, user.password_hash):
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
  user.password_hash = hash_password(payload.newPassword)
  user.updated_at = utcnow()
  await write_audit(db, event_type="user.password.changed", entity_type="User", entity_id=user.id, actor_id=user.id)
  await db.commit()
  return MessageOut(message="Password changed successfully")
