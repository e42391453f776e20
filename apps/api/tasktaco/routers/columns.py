from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tasktaco.audit import write_audit
from tasktaco.columns import service
from tasktaco.deps import get_current_user, get_db
from tasktaco.models import Column, User, as_utc
from tasktaco.outcomes import unwrap
from tasktaco.schemas import ColumnCreateIn, ColumnMoveIn, ColumnOut, ColumnUpdateIn

router = APIRouter(tags=["columns"])


def column_out(c: Column) -> ColumnOut:
  return ColumnOut(
    id=c.id,
    boardId=c.board_id,
    name=c.name,
    order=c.order,
    createdAt=as_utc(c.created_at),
    updatedAt=as_utc(c.updated_at),
  )


@router.get("/boards/{board_id}/columns", response_model=list[ColumnOut])
async def list_columns(board_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)) -> list[ColumnOut]:
  cols = unwrap(await service.list_columns(db, owner_id=user.id, board_id=board_id))
  return [column_out(c) for c in cols]


@router.post("/boards/{board_id}/columns", response_model=ColumnOut, status_code=status.HTTP_201_CREATED)
async def create_column(
  board_id: str,
  payload: ColumnCreateIn,
  user: User = Depends(get_current_user),
  db: AsyncSession = Depends(get_db),
) -> ColumnOut:
  if not payload.name.strip():
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name is required")
  c = unwrap(await service.create_column(db, owner_id=user.id, board_id=board_id, name=payload.name, order=payload.order))
  await write_audit(
    db,
    event_type="column.created",
    entity_type="Column",
    entity_id=c.id,
    board_id=c.board_id,
    actor_id=user.id,
    payload={"name": c.name, "order": c.order},
  )
  await db.commit()
  return column_out(c)


@router.get("/columns/{column_id}", response_model=ColumnOut)
async def get_column(column_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)) -> ColumnOut:
  c = await service.get_column(db, owner_id=user.id, column_id=column_id)
  if not c:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Column not found")
  return column_out(c)


@router.put("/columns/{column_id}", response_model=ColumnOut)
async def update_column(
  column_id: str,
  payload: ColumnUpdateIn,
  user: User = Depends(get_current_user),
  db: AsyncSession = Depends(get_db),
) -> ColumnOut:
  if not payload.name.strip():
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name is required")
  c = unwrap(await service.update_column(db, owner_id=user.id, column_id=column_id, name=payload.name, order=payload.order))
  await write_audit(
    db,
    event_type="column.updated",
    entity_type="Column",
    entity_id=c.id,
    board_id=c.board_id,
    actor_id=user.id,
    payload={"name": c.name, "order": c.order},
  )
  await db.commit()
  return column_out(c)


@router.patch("/columns/{column_id}/move", response_model=ColumnOut)
async def move_column(
  column_id: str,
  payload: ColumnMoveIn,
  user: User = Depends(get_current_user),
  db: AsyncSession = Depends(get_db),
) -> ColumnOut:
  c = unwrap(await service.move_column(db, owner_id=user.id, column_id=column_id, new_order=payload.newOrder))
  await write_audit(
    db,
    event_type="column.moved",
    entity_type="Column",
    entity_id=c.id,
    board_id=c.board_id,
    actor_id=user.id,
    payload={"requestedOrder": payload.newOrder, "order": c.order},
  )
  await db.commit()
  return column_out(c)


@router.delete("/columns/{column_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_column(column_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)) -> Response:
  c = await service.get_column(db, owner_id=user.id, column_id=column_id)
  if not c:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Column not found")
  board_id, name = c.board_id, c.name
  removed_tasks = unwrap(await service.delete_column(db, owner_id=user.id, column_id=column_id))
  await write_audit(
    db,
    event_type="column.deleted",
    entity_type="Column",
    entity_id=column_id,
    board_id=board_id,
    actor_id=user.id,
    payload={"name": name, "removedTasks": removed_tasks},
  )
  await db.commit()
  return Response(status_code=status.HTTP_204_NO_CONTENT)
