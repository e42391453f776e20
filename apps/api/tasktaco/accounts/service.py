from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tasktaco.models import AVAILABLE_THEMES, DEFAULT_EMOJI, DEFAULT_THEME, User, UserSettings, new_id, utcnow
from tasktaco.security import hash_password


def normalize_email(email: str | None) -> str:
  return (email or "").strip().lower()


async def find_user_by_email(db: AsyncSession, email: str) -> User | None:
  res = await db.execute(select(User).where(User.email == normalize_email(email)))
  return res.scalar_one_or_none()


async def create_user(db: AsyncSession, *, name: str, email: str, password: str) -> User:
  u = User(id=new_id(), name=name.strip(), email=normalize_email(email), password_hash=hash_password(password))
  db.add(u)
  db.add(UserSettings(id=new_id(), user_id=u.id, theme=DEFAULT_THEME, default_emoji=DEFAULT_EMOJI))
  await db.flush()
  return u


async def ensure_settings(db: AsyncSession, *, user_id: str) -> UserSettings:
  """Return the user's settings row, creating the defaults on first access."""
  res = await db.execute(select(UserSettings).where(UserSettings.user_id == user_id))
  s = res.scalar_one_or_none()
  if s:
    return s
  s = UserSettings(id=new_id(), user_id=user_id, theme=DEFAULT_THEME, default_emoji=DEFAULT_EMOJI)
  db.add(s)
  await db.flush()
  return s


def apply_settings(s: UserSettings, *, theme: str | None, default_emoji: str | None) -> UserSettings:
  # unknown themes and blank emoji leave the stored value alone
  if theme and theme in AVAILABLE_THEMES:
    s.theme = theme
  if default_emoji and default_emoji.strip():
    s.default_emoji = default_emoji.strip()
  s.updated_at = utcnow()
  return s
