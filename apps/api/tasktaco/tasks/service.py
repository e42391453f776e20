"""Tasks of a column.

Create appends, move splices into the target column and renumbers both the
old and new groups, delete closes the gap. ``order`` and ``column_id`` are only
ever changed here.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, NamedTuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tasktaco.columns.service import get_column
from tasktaco.models import Board, Column, Task, new_id, utcnow
from tasktaco.ordering import compact_after, renumber, splice
from tasktaco.outcomes import NotFound, Ok, Outcome

logger = logging.getLogger(__name__)

# fields the partial update may touch
EDITABLE_FIELDS = ("title", "description", "status", "priority", "due_date", "labels", "checklist", "stickers")


class MovedTask(NamedTuple):
  task: Task
  from_column_id: str


async def get_task(db: AsyncSession, *, owner_id: str, task_id: str, fresh: bool = False) -> Task | None:
  q = (
    select(Task)
    .join(Column, Column.id == Task.column_id)
    .join(Board, Board.id == Column.board_id)
    .where(Task.id == task_id, Board.user_id == owner_id)
  )
  if fresh:
    q = q.execution_options(populate_existing=True)
  res = await db.execute(q)
  return res.scalar_one_or_none()


async def column_tasks(db: AsyncSession, column_id: str, *, exclude_id: str | None = None) -> list[Task]:
  q = select(Task).where(Task.column_id == column_id)
  if exclude_id is not None:
    q = q.where(Task.id != exclude_id)
  res = await db.execute(q.order_by(Task.order.asc(), Task.created_at.asc()))
  return list(res.scalars().all())


def _place(siblings: list[Task], t: Task, target: int) -> None:
  changed = renumber(splice(siblings, t, target))
  if changed:
    logger.info("renumbered %d task(s) in column %s (group size %d)", len(changed), t.column_id, len(siblings) + 1)


async def list_tasks(db: AsyncSession, *, owner_id: str, column_id: str) -> Outcome[list[Task]]:
  col = await get_column(db, owner_id=owner_id, column_id=column_id)
  if not col:
    return NotFound("Column")
  return Ok(await column_tasks(db, col.id))


async def create_task(
  db: AsyncSession,
  *,
  owner_id: str,
  column_id: str,
  title: str,
  description: str = "",
  status: str | None = None,
  priority: str = "Medium",
  due_date: datetime | None = None,
  labels: list[str] | None = None,
  checklist: list[dict[str, Any]] | None = None,
  stickers: list[str] | None = None,
) -> Outcome[Task]:
  col = await get_column(db, owner_id=owner_id, column_id=column_id, lock=True)
  if not col:
    return NotFound("Column")

  siblings = await column_tasks(db, col.id)
  now = utcnow()
  t = Task(
    id=new_id(),
    column_id=col.id,
    title=title.strip(),
    description=description or "",
    # a snapshot of the column name; not kept in sync on move
    status=(status or "").strip() or col.name,
    priority=priority,
    due_date=due_date,
    labels=list(labels or []),
    checklist=list(checklist or []),
    stickers=list(stickers or []),
    order=len(siblings),
    created_at=now,
    updated_at=now,
  )
  _place(siblings, t, len(siblings))
  db.add(t)
  await db.flush()
  return Ok(t)


async def update_task(db: AsyncSession, *, owner_id: str, task_id: str, changes: dict[str, Any]) -> Outcome[Task]:
  t = await get_task(db, owner_id=owner_id, task_id=task_id)
  if not t:
    return NotFound("Task")
  for field, value in changes.items():
    if field not in EDITABLE_FIELDS:
      raise ValueError(f"Task field {field!r} is not editable")
    setattr(t, field, value)
  t.updated_at = utcnow()
  await db.flush()
  return Ok(t)


async def _locked_task(db: AsyncSession, *, owner_id: str, task_id: str, also: tuple[str, ...] = ()) -> Task | None:
  """Lock the task's column (plus ``also``), then re-read the task.

  A concurrent move may have carried the task to another column while we
  waited; keep locking until the column it sits in is one we hold.
  """
  t = await get_task(db, owner_id=owner_id, task_id=task_id)
  locked: set[str] = set()
  while t is not None and t.column_id not in locked:
    # stable order so crossing moves cannot deadlock
    for cid in sorted({t.column_id, *also} - locked):
      await get_column(db, owner_id=owner_id, column_id=cid, lock=True)
      locked.add(cid)
    t = await get_task(db, owner_id=owner_id, task_id=task_id, fresh=True)
  return t


async def move_task(db: AsyncSession, *, owner_id: str, task_id: str, column_id: str, order: int) -> Outcome[MovedTask]:
  if not await get_task(db, owner_id=owner_id, task_id=task_id):
    return NotFound("Task")
  target = await get_column(db, owner_id=owner_id, column_id=column_id)
  if not target:
    return NotFound("Column")
  t = await _locked_task(db, owner_id=owner_id, task_id=task_id, also=(target.id,))
  if not t:
    return NotFound("Task")

  source_id = t.column_id
  if source_id != target.id:
    left_behind = await column_tasks(db, source_id, exclude_id=t.id)
    changed = renumber(left_behind)
    if changed:
      logger.info("renumbered %d task(s) in column %s (group size %d)", len(changed), source_id, len(left_behind))
    t.column_id = target.id

  siblings = await column_tasks(db, target.id, exclude_id=t.id)
  _place(siblings, t, order)
  t.updated_at = utcnow()
  await db.flush()
  return Ok(MovedTask(t, source_id))


async def delete_task(db: AsyncSession, *, owner_id: str, task_id: str) -> Outcome[Task]:
  t = await _locked_task(db, owner_id=owner_id, task_id=task_id)
  if not t:
    return NotFound("Task")

  removed_order = t.order
  await db.delete(t)
  later = await db.execute(
    select(Task).where(Task.column_id == t.column_id, Task.id != t.id, Task.order > removed_order)
  )
  changed = compact_after(later.scalars().all(), removed_order)
  await db.flush()
  if changed:
    logger.info("shifted %d task(s) in column %s after delete", len(changed), t.column_id)
  return Ok(t)
