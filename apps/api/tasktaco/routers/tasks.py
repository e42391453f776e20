from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tasktaco.audit import audit_task
from tasktaco.deps import get_current_user, get_db
from tasktaco.models import Task, User, as_utc
from tasktaco.outcomes import unwrap
from tasktaco.schemas import TaskCreateIn, TaskMoveIn, TaskOut, TaskUpdateIn
from tasktaco.tasks import service

router = APIRouter(tags=["tasks"])

# wire name -> model attribute
_UPDATE_FIELDS = {
  "title": "title",
  "description": "description",
  "status": "status",
  "priority": "priority",
  "dueDate": "due_date",
  "labels": "labels",
  "checklist": "checklist",
  "stickers": "stickers",
}


def task_out(t: Task, *, now: datetime | None = None) -> TaskOut:
  due = as_utc(t.due_date)
  now = now or datetime.now(timezone.utc)
  return TaskOut(
    id=t.id,
    columnId=t.column_id,
    title=t.title,
    description=t.description or "",
    status=t.status or "",
    priority=t.priority,
    dueDate=due,
    isOverdue=bool(due and due < now),
    labels=list(t.labels or []),
    checklist=list(t.checklist or []),
    stickers=list(t.stickers or []),
    order=t.order,
    createdAt=as_utc(t.created_at),
    updatedAt=as_utc(t.updated_at),
  )


@router.get("/columns/{column_id}/tasks", response_model=list[TaskOut])
async def list_tasks(column_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)) -> list[TaskOut]:
  tasks = unwrap(await service.list_tasks(db, owner_id=user.id, column_id=column_id))
  return [task_out(t) for t in tasks]


@router.post("/columns/{column_id}/tasks", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
async def create_task(
  column_id: str,
  payload: TaskCreateIn,
  user: User = Depends(get_current_user),
  db: AsyncSession = Depends(get_db),
) -> TaskOut:
  if not payload.title.strip():
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="title is required")
  t = unwrap(
    await service.create_task(
      db,
      owner_id=user.id,
      column_id=column_id,
      title=payload.title,
      description=payload.description,
      status=payload.status,
      priority=payload.priority,
      due_date=payload.dueDate,
      labels=payload.labels,
      checklist=[i.model_dump() for i in payload.checklist],
      stickers=payload.stickers,
    )
  )
  await audit_task(db, "task.created", t, actor_id=user.id, payload={"title": t.title, "columnId": t.column_id, "order": t.order})
  await db.commit()
  return task_out(t)


@router.get("/tasks/{task_id}", response_model=TaskOut)
async def get_task(task_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)) -> TaskOut:
  t = await service.get_task(db, owner_id=user.id, task_id=task_id)
  if not t:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
  return task_out(t)


@router.patch("/tasks/{task_id}", response_model=TaskOut)
async def update_task(
  task_id: str,
  payload: TaskUpdateIn,
  user: User = Depends(get_current_user),
  db: AsyncSession = Depends(get_db),
) -> TaskOut:
  changes = {}
  for wire, attr in _UPDATE_FIELDS.items():
    if wire not in payload.model_fields_set:
      continue
    value = getattr(payload, wire)
    if value is None and wire != "dueDate":
      # only the due date may be cleared
      continue
    if wire == "checklist":
      value = [i.model_dump() for i in value]
    changes[attr] = value
  if "title" in changes:
    changes["title"] = changes["title"].strip()
    if not changes["title"]:
      raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="title is required")

  t = unwrap(await service.update_task(db, owner_id=user.id, task_id=task_id, changes=changes))
  await audit_task(db, "task.updated", t, actor_id=user.id, payload={"fields": sorted(changes.keys())})
  await db.commit()
  return task_out(t)


@router.put("/tasks/{task_id}/move", response_model=TaskOut)
async def move_task(
  task_id: str,
  payload: TaskMoveIn,
  user: User = Depends(get_current_user),
  db: AsyncSession = Depends(get_db),
) -> TaskOut:
  t, from_column = unwrap(await service.move_task(db, owner_id=user.id, task_id=task_id, column_id=payload.columnId, order=payload.order))
  await audit_task(db, "task.moved", t, actor_id=user.id, payload={"fromColumnId": from_column, "toColumnId": t.column_id, "order": t.order})
  await db.commit()
  return task_out(t)


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)) -> Response:
  t = unwrap(await service.delete_task(db, owner_id=user.id, task_id=task_id))
  await audit_task(db, "task.deleted", t, actor_id=user.id, payload={"title": t.title, "columnId": t.column_id})
  await db.commit()
  return Response(status_code=status.HTTP_204_NO_CONTENT)
