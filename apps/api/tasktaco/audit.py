"""Audit trail.

Rows are staged in the caller's session and land with the caller's single
commit, so a failed request leaves no event behind. Events carry plain ids
rather than foreign keys and outlive the things they describe.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi.encoders import jsonable_encoder
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tasktaco.models import AuditEvent, Column, Task

logger = logging.getLogger(__name__)


async def write_audit(
  db: AsyncSession,
  *,
  event_type: str,
  entity_type: str,
  entity_id: str | None,
  board_id: str | None = None,
  task_id: str | None = None,
  actor_id: str | None = None,
  payload: dict[str, Any] | None = None,
) -> AuditEvent:
  ev = AuditEvent(
    board_id=board_id,
    task_id=task_id,
    actor_id=actor_id,
    event_type=event_type,
    entity_type=entity_type,
    entity_id=entity_id,
    # datetimes and the like become JSON-safe values
    payload=jsonable_encoder(payload or {}),
  )
  db.add(ev)
  logger.debug("audit %s %s=%s by %s", event_type, entity_type, entity_id, actor_id)
  return ev


async def audit_task(
  db: AsyncSession,
  event_type: str,
  t: Task,
  *,
  actor_id: str,
  payload: dict[str, Any] | None = None,
) -> AuditEvent:
  """Audit a task event, filing it under the board that holds the task's column."""
  res = await db.execute(select(Column.board_id).where(Column.id == t.column_id))
  return await write_audit(
    db,
    event_type=event_type,
    entity_type="Task",
    entity_id=t.id,
    board_id=res.scalar_one_or_none(),
    task_id=t.id,
    actor_id=actor_id,
    payload=payload,
  )
