from __future__ import annotations

import asyncio
import logging
import os
import secrets

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tasktaco.accounts.service import create_user, find_user_by_email
from tasktaco.boards.service import create_board
from tasktaco.columns.service import board_columns
from tasktaco.config import settings
from tasktaco.db import SessionLocal
from tasktaco.logs import configure_logging
from tasktaco.models import Board
from tasktaco.outcomes import unwrap
from tasktaco.tasks.service import create_task

logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@tasktaco.local"
DEMO_BOARD_NAME = "My Kanban Board"

# (column, title, description, priority)
SAMPLE_TASKS = [
  ("Planned", "AI Scene Analysis", "AI Integration", "Medium"),
  ("Planned", "Real-time Video Chat", "Real-time Collaboration", "High"),
  ("Planned", "Multi-User Permissions", "Real-time Collaboration", "Medium"),
  ("Planned", "Global CDN Integration", "Cloud Migration", "Medium"),
  ("In Progress", "Collaborative Editing", "Real-time Collaboration", "High"),
  ("In Progress", "AI Voice-to-Text Subtitles", "AI Integration", "Medium"),
  ("In Progress", "Version Control System", "Real-time Collaboration", "High"),
  ("Done", "AI-Powered Color Grading", "AI Integration", "High"),
  ("Done", "Cloud Asset Management", "Cloud Migration", "Medium"),
  ("Done", "Real-time Project Analytics", "Cloud Migration", "Low"),
]


def _bootstrap_password(env_key: str) -> tuple[str, bool]:
  configured = (os.getenv(env_key) or "").strip()
  if configured:
    return configured, False
  return secrets.token_urlsafe(14), True


async def seed_demo(db: AsyncSession) -> tuple[str | None, bool]:
  """Create the demo user and board if missing.

  Returns ``(password, generated)`` when the user was created, ``(None, False)``
  otherwise.
  """
  password: str | None = None
  generated = False
  user = await find_user_by_email(db, DEMO_EMAIL)
  if not user:
    password, generated = _bootstrap_password("SEED_DEMO_PASSWORD")
    user = await create_user(db, name="Demo User", email=DEMO_EMAIL, password=password)

  bres = await db.execute(select(Board).where(Board.user_id == user.id, Board.name == DEMO_BOARD_NAME))
  board = bres.scalar_one_or_none()
  if not board:
    board = await create_board(
      db,
      owner_id=user.id,
      name=DEMO_BOARD_NAME,
      description="Sample board created by the seed script",
      default_columns=True,
    )
    columns = {c.name: c for c in await board_columns(db, board.id)}
    for col_name, title, desc, priority in SAMPLE_TASKS:
      unwrap(
        await create_task(
          db,
          owner_id=user.id,
          column_id=columns[col_name].id,
          title=title,
          description=desc,
          priority=priority,
          labels=[desc],
        )
      )
    logger.info("seeded board %s with %d task(s)", board.id, len(SAMPLE_TASKS))

  await db.commit()
  return password, generated


async def seed() -> None:
  async with SessionLocal() as db:
    password, generated = await seed_demo(db)
  if password:
    print("TaskTaco demo credentials created:")
    print(f"  {DEMO_EMAIL}={password} (generated={str(generated).lower()})")


def main() -> None:
  configure_logging(settings.log_level)
  asyncio.run(seed())


if __name__ == "__main__":
  main()
