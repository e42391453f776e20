"""Columns of a board: ordered, uniquely named siblings."""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from tasktaco.boards.service import get_owned_board
from tasktaco.models import Board, Column, Task, new_id, utcnow
from tasktaco.ordering import compact_after, renumber, splice
from tasktaco.outcomes import Conflict, NotFound, Ok, Outcome

logger = logging.getLogger(__name__)


def duplicate_name_reason(name: str) -> str:
  return f"A column with the name '{name}' already exists in this board."


async def get_column(
  db: AsyncSession, *, owner_id: str, column_id: str, lock: bool = False, fresh: bool = False
) -> Column | None:
  q = select(Column).join(Board, Board.id == Column.board_id).where(Column.id == column_id, Board.user_id == owner_id)
  if lock:
    q = q.with_for_update(of=Column)
  if lock or fresh:
    # overwrite whatever an earlier unlocked read left in the identity map
    q = q.execution_options(populate_existing=True)
  res = await db.execute(q)
  return res.scalar_one_or_none()


async def board_columns(db: AsyncSession, board_id: str, *, exclude_id: str | None = None) -> list[Column]:
  q = select(Column).where(Column.board_id == board_id)
  if exclude_id is not None:
    q = q.where(Column.id != exclude_id)
  res = await db.execute(q.order_by(Column.order.asc(), Column.created_at.asc()))
  return list(res.scalars().all())


async def _name_taken(db: AsyncSession, board_id: str, name: str, *, exclude_id: str | None = None) -> bool:
  # exact, case-sensitive match
  q = select(Column.id).where(Column.board_id == board_id, Column.name == name)
  if exclude_id is not None:
    q = q.where(Column.id != exclude_id)
  res = await db.execute(q.limit(1))
  return res.scalar_one_or_none() is not None


def _place(siblings: list[Column], col: Column, target: int) -> None:
  changed = renumber(splice(siblings, col, target))
  if changed:
    logger.info("renumbered %d column(s) on board %s (group size %d)", len(changed), col.board_id, len(siblings) + 1)


async def list_columns(db: AsyncSession, *, owner_id: str, board_id: str) -> Outcome[list[Column]]:
  board = await get_owned_board(db, owner_id=owner_id, board_id=board_id)
  if not board:
    return NotFound("Board")
  return Ok(await board_columns(db, board.id))


async def create_column(db: AsyncSession, *, owner_id: str, board_id: str, name: str, order: int | None = None) -> Outcome[Column]:
  board = await get_owned_board(db, owner_id=owner_id, board_id=board_id, lock=True)
  if not board:
    return NotFound("Board")
  if await _name_taken(db, board.id, name):
    logger.warning("column name %r already used on board %s", name, board.id)
    return Conflict(duplicate_name_reason(name))

  siblings = await board_columns(db, board.id)
  col = Column(id=new_id(), board_id=board.id, name=name, order=len(siblings))
  _place(siblings, col, len(siblings) if order is None else order)
  db.add(col)
  await db.flush()
  return Ok(col)


async def _locked_column(db: AsyncSession, *, owner_id: str, column_id: str) -> Column | None:
  """Lock the owning board, then re-read the column so its order is current."""
  col = await get_column(db, owner_id=owner_id, column_id=column_id)
  if not col:
    return None
  await get_owned_board(db, owner_id=owner_id, board_id=col.board_id, lock=True)
  return await get_column(db, owner_id=owner_id, column_id=column_id, fresh=True)


async def move_column(db: AsyncSession, *, owner_id: str, column_id: str, new_order: int) -> Outcome[Column]:
  col = await _locked_column(db, owner_id=owner_id, column_id=column_id)
  if not col:
    return NotFound("Column")
  siblings = await board_columns(db, col.board_id, exclude_id=col.id)
  _place(siblings, col, new_order)
  col.updated_at = utcnow()
  await db.flush()
  return Ok(col)


async def update_column(db: AsyncSession, *, owner_id: str, column_id: str, name: str, order: int) -> Outcome[Column]:
  col = await _locked_column(db, owner_id=owner_id, column_id=column_id)
  if not col:
    return NotFound("Column")
  if name != col.name and await _name_taken(db, col.board_id, name, exclude_id=col.id):
    logger.warning("column name %r already used on board %s", name, col.board_id)
    return Conflict(duplicate_name_reason(name))

  col.name = name
  if order != col.order:
    siblings = await board_columns(db, col.board_id, exclude_id=col.id)
    _place(siblings, col, order)
  col.updated_at = utcnow()
  await db.flush()
  return Ok(col)


async def delete_column(db: AsyncSession, *, owner_id: str, column_id: str) -> Outcome[int]:
  """Delete a column with its tasks and close the gap; the value is the task count removed."""
  col = await _locked_column(db, owner_id=owner_id, column_id=column_id)
  if not col:
    return NotFound("Column")

  res = await db.execute(delete(Task).where(Task.column_id == col.id))
  removed_tasks = int(res.rowcount or 0)
  removed_order = col.order
  await db.delete(col)

  later = await db.execute(
    select(Column).where(Column.board_id == col.board_id, Column.id != col.id, Column.order > removed_order)
  )
  changed = compact_after(later.scalars().all(), removed_order)
  await db.flush()
  logger.info(
    "column %s deleted from board %s with %d task(s); %d column(s) shifted",
    col.id,
    col.board_id,
    removed_tasks,
    len(changed),
  )
  return Ok(removed_tasks)
