from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tasktaco.audit import write_audit
from tasktaco.boards import service
from tasktaco.deps import get_current_user, get_db
from tasktaco.export.service import export_board
from tasktaco.models import Board, User, as_utc
from tasktaco.routers.columns import column_out
from tasktaco.routers.tasks import task_out
from tasktaco.schemas import BoardCreateIn, BoardDetailOut, BoardOut, BoardUpdateIn, ColumnWithTasksOut, ExportOut

router = APIRouter(prefix="/boards", tags=["boards"])


def _board_out(b: Board) -> BoardOut:
  return BoardOut(
    id=b.id,
    name=b.name,
    description=b.description,
    userId=b.user_id,
    createdAt=as_utc(b.created_at),
    updatedAt=as_utc(b.updated_at),
  )


async def _owned_or_404(db: AsyncSession, user: User, board_id: str) -> Board:
  b = await service.get_owned_board(db, owner_id=user.id, board_id=board_id)
  if not b:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Board not found")
  return b


@router.get("", response_model=list[BoardOut])
async def list_boards(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)) -> list[BoardOut]:
  return [_board_out(b) for b in await service.list_boards(db, owner_id=user.id)]


@router.post("", response_model=BoardOut, status_code=status.HTTP_201_CREATED)
async def create_board(payload: BoardCreateIn, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)) -> BoardOut:
  if not payload.name.strip():
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name is required")
  b = await service.create_board(
    db,
    owner_id=user.id,
    name=payload.name,
    description=payload.description,
    default_columns=payload.defaultColumns,
  )
  await write_audit(
    db,
    event_type="board.created",
    entity_type="Board",
    entity_id=b.id,
    board_id=b.id,
    actor_id=user.id,
    payload={"name": b.name, "defaultColumns": payload.defaultColumns},
  )
  await db.commit()
  return _board_out(b)


@router.get("/{board_id}", response_model=BoardDetailOut)
async def get_board(board_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)) -> BoardDetailOut:
  b = await _owned_or_404(db, user, board_id)
  tree = await service.load_board_tree(db, board=b)
  columns = [
    ColumnWithTasksOut(**column_out(c).model_dump(), tasks=[task_out(t) for t in tasks])
    for c, tasks in tree
  ]
  return BoardDetailOut(**_board_out(b).model_dump(), columns=columns)


@router.put("/{board_id}", response_model=BoardOut)
async def update_board(
  board_id: str,
  payload: BoardUpdateIn,
  user: User = Depends(get_current_user),
  db: AsyncSession = Depends(get_db),
) -> BoardOut:
  if not payload.name.strip():
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name is required")
  b = await _owned_or_404(db, user, board_id)
  service.update_board(b, name=payload.name, description=payload.description)
  await write_audit(
    db,
    event_type="board.updated",
    entity_type="Board",
    entity_id=b.id,
    board_id=b.id,
    actor_id=user.id,
    payload={"name": b.name},
  )
  await db.commit()
  return _board_out(b)


@router.delete("/{board_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_board(board_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)) -> Response:
  b = await _owned_or_404(db, user, board_id)
  removed_tasks = await service.delete_board_everything(db, board=b)
  await write_audit(
    db,
    event_type="board.deleted",
    entity_type="Board",
    entity_id=board_id,
    board_id=board_id,
    actor_id=user.id,
    payload={"name": b.name, "removedTasks": removed_tasks},
  )
  await db.commit()
  return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{board_id}/export", response_model=ExportOut)
async def export(board_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)) -> ExportOut:
  b = await _owned_or_404(db, user, board_id)
  json_text, prompt = await export_board(db, board=b)
  return ExportOut(json=json_text, prompt=prompt)
