from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tasktaco.boards.service import get_owned_board
from tasktaco.deps import get_current_user, get_db
from tasktaco.models import AuditEvent, Board, User, as_utc
from tasktaco.schemas import AuditOut

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("", response_model=list[AuditOut])
async def list_audit(
  boardId: str | None = None,
  taskId: str | None = None,
  user: User = Depends(get_current_user),
  db: AsyncSession = Depends(get_db),
) -> list[AuditOut]:
  if boardId and not await get_owned_board(db, owner_id=user.id, board_id=boardId):
    return []
  q = select(AuditEvent).order_by(AuditEvent.created_at.desc()).limit(200)
  if boardId:
    q = q.where(AuditEvent.board_id == boardId)
  if taskId:
    q = q.where(AuditEvent.task_id == taskId)
  if not boardId:
    # without a board filter, only events the caller made or that belong to their boards
    owned = select(Board.id).where(Board.user_id == user.id)
    q = q.where((AuditEvent.actor_id == user.id) | AuditEvent.board_id.in_(owned))
  res = await db.execute(q)
  out = []
  for ev in res.scalars().all():
    out.append(
      AuditOut(
        id=ev.id,
        boardId=ev.board_id,
        taskId=ev.task_id,
        actorId=ev.actor_id,
        eventType=ev.event_type,
        entityType=ev.entity_type,
        entityId=ev.entity_id,
        payload=ev.payload or {},
        createdAt=as_utc(ev.created_at),
      )
    )
  return out
