from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from tasktaco.models import Board, Column, Task, new_id, utcnow

logger = logging.getLogger(__name__)

DEFAULT_COLUMN_NAMES = ("Planned", "In Progress", "Done")


async def get_owned_board(db: AsyncSession, *, owner_id: str, board_id: str, lock: bool = False) -> Board | None:
  """Load a board visible to ``owner_id``.

  With ``lock`` the row is selected FOR UPDATE so writers of the board's
  column group queue behind each other.
  """
  q = select(Board).where(Board.id == board_id, Board.user_id == owner_id)
  if lock:
    q = q.with_for_update()
  res = await db.execute(q)
  return res.scalar_one_or_none()


async def list_boards(db: AsyncSession, *, owner_id: str) -> list[Board]:
  res = await db.execute(select(Board).where(Board.user_id == owner_id).order_by(Board.created_at.desc()))
  return list(res.scalars().all())


async def create_board(
  db: AsyncSession,
  *,
  owner_id: str,
  name: str,
  description: str | None = None,
  default_columns: bool = False,
) -> Board:
  b = Board(id=new_id(), name=name.strip(), description=description, user_id=owner_id)
  db.add(b)
  if default_columns:
    for idx, col_name in enumerate(DEFAULT_COLUMN_NAMES):
      db.add(Column(id=new_id(), board_id=b.id, name=col_name, order=idx))
  await db.flush()
  return b


def update_board(b: Board, *, name: str, description: str | None) -> Board:
  b.name = name.strip()
  b.description = description
  b.updated_at = utcnow()
  return b


async def delete_board_everything(db: AsyncSession, *, board: Board) -> int:
  """Delete a board with its columns and tasks; returns the number of tasks removed."""
  col_ids = select(Column.id).where(Column.board_id == board.id)
  res = await db.execute(delete(Task).where(Task.column_id.in_(col_ids)))
  await db.execute(delete(Column).where(Column.board_id == board.id))
  await db.delete(board)
  await db.flush()
  removed = int(res.rowcount or 0)
  logger.info("board %s deleted with %d task(s)", board.id, removed)
  return removed


async def load_board_tree(db: AsyncSession, *, board: Board) -> list[tuple[Column, list[Task]]]:
  """Columns of ``board`` in order, each with its tasks in order."""
  cres = await db.execute(
    select(Column).where(Column.board_id == board.id).order_by(Column.order.asc(), Column.created_at.asc())
  )
  cols = list(cres.scalars().all())
  if not cols:
    return []
  tres = await db.execute(
    select(Task)
    .where(Task.column_id.in_([c.id for c in cols]))
    .order_by(Task.order.asc(), Task.created_at.asc())
  )
  by_col: dict[str, list[Task]] = {c.id: [] for c in cols}
  for t in tres.scalars().all():
    by_col[t.column_id].append(t)
  return [(c, by_col[c.id]) for c in cols]
