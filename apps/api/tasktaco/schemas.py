from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field
from pydantic import field_validator

from tasktaco.models import PRIORITIES


_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _parse_dt_utc(value: object) -> object:
  if value is None:
    return None
  if isinstance(value, datetime):
    dt = value
  elif isinstance(value, str):
    s = value.strip()
    if not s:
      return None
    if _DATE_ONLY_RE.fullmatch(s):
      dt = datetime.fromisoformat(s)
    else:
      dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
  else:
    return value

  if dt.tzinfo is None:
    return dt.replace(tzinfo=timezone.utc)
  return dt.astimezone(timezone.utc)


def parse_priority(value: object) -> str:
  """Map any casing of Low/Medium/High onto the stored name; anything else is Medium."""
  if isinstance(value, str):
    for p in PRIORITIES:
      if p.lower() == value.strip().lower():
        return p
  return "Medium"


def _clean_labels(values: list[str]) -> list[str]:
  return [v.strip() for v in values if v and v.strip()]


# --- auth / users ---


class UserOut(BaseModel):
  id: str
  name: str
  email: str
  profilePicture: str | None = None


class RegisterIn(BaseModel):
  name: str = Field(min_length=1, max_length=100)
  email: str = Field(min_length=3, max_length=320)
  password: str = Field(min_length=6, max_length=200)


class LoginIn(BaseModel):
  email: str
  password: str


class AuthOut(BaseModel):
  token: str
  user: UserOut


class ProfileUpdateIn(BaseModel):
  name: str | None = Field(default=None, max_length=100)
  email: str | None = Field(default=None, max_length=320)


class SettingsOut(BaseModel):
  theme: str
  defaultEmoji: str
  availableThemes: list[str]


class SettingsUpdateIn(BaseModel):
  theme: str | None = None
  defaultEmoji: str | None = Field(default=None, max_length=10)


class PasswordChangeIn(BaseModel):
  currentPassword: str
  newPassword: str = Field(min_length=6, max_length=200)
  confirmNewPassword: str


class MessageOut(BaseModel):
  message: str


class PicturePathOut(BaseModel):
  profilePicturePath: str | None


class PictureUploadOut(BaseModel):
  profilePicturePath: str
  message: str


# --- boards ---


class BoardCreateIn(BaseModel):
  name: str = Field(min_length=1, max_length=200)
  description: str | None = Field(default=None, max_length=2000)
  defaultColumns: bool = False


class BoardUpdateIn(BaseModel):
  name: str = Field(min_length=1, max_length=200)
  description: str | None = Field(default=None, max_length=2000)


class BoardOut(BaseModel):
  id: str
  name: str
  description: str | None
  userId: str
  createdAt: datetime
  updatedAt: datetime


class ExportOut(BaseModel):
  json_: str = Field(alias="json")
  prompt: str


# --- columns ---


class ColumnCreateIn(BaseModel):
  name: str = Field(min_length=1, max_length=100)
  # omitted: append after the last column
  order: int | None = None


class ColumnUpdateIn(BaseModel):
  name: str = Field(min_length=1, max_length=100)
  order: int


class ColumnMoveIn(BaseModel):
  newOrder: int


class ColumnOut(BaseModel):
  id: str
  boardId: str
  name: str
  order: int
  createdAt: datetime
  updatedAt: datetime


# --- tasks ---


class ChecklistItem(BaseModel):
  id: str = Field(min_length=1, max_length=64)
  text: str = Field(min_length=1, max_length=500)
  done: bool = False

  @field_validator("id", "text")
  @classmethod
  def _not_blank(cls, v: str) -> str:
    if not v.strip():
      raise ValueError("must not be blank")
    return v


class TaskCreateIn(BaseModel):
  title: str = Field(min_length=1, max_length=500)
  description: str = Field(default="", max_length=2000)
  status: str | None = Field(default=None, max_length=100)
  priority: str = "Medium"
  dueDate: datetime | None = None
  labels: list[str] = []
  checklist: list[ChecklistItem] = []
  stickers: list[str] = []

  @field_validator("dueDate", mode="before")
  @classmethod
  def _due_date_to_utc(cls, v: object) -> object:
    return _parse_dt_utc(v)

  @field_validator("priority", mode="before")
  @classmethod
  def _priority(cls, v: object) -> str:
    return parse_priority(v)

  @field_validator("labels")
  @classmethod
  def _labels(cls, v: list[str]) -> list[str]:
    return _clean_labels(v)


class TaskUpdateIn(BaseModel):
  title: str | None = Field(default=None, min_length=1, max_length=500)
  description: str | None = Field(default=None, max_length=2000)
  status: str | None = Field(default=None, max_length=100)
  priority: str | None = None
  dueDate: datetime | None = None
  labels: list[str] | None = None
  checklist: list[ChecklistItem] | None = None
  stickers: list[str] | None = None

  @field_validator("dueDate", mode="before")
  @classmethod
  def _due_date_to_utc(cls, v: object) -> object:
    return _parse_dt_utc(v)

  @field_validator("priority", mode="before")
  @classmethod
  def _priority(cls, v: object) -> object:
    return None if v is None else parse_priority(v)

  @field_validator("labels")
  @classmethod
  def _labels(cls, v: list[str] | None) -> list[str] | None:
    return None if v is None else _clean_labels(v)


class TaskMoveIn(BaseModel):
  columnId: str
  order: int = 0


class TaskOut(BaseModel):
  id: str
  columnId: str
  title: str
  description: str
  status: str
  priority: str
  dueDate: datetime | None
  isOverdue: bool
  labels: list[str]
  checklist: list[ChecklistItem]
  stickers: list[str]
  order: int
  createdAt: datetime
  updatedAt: datetime


class ColumnWithTasksOut(ColumnOut):
  tasks: list[TaskOut]


class BoardDetailOut(BoardOut):
  columns: list[ColumnWithTasksOut]


# --- audit ---


class AuditOut(BaseModel):
  id: str
  boardId: str | None
  taskId: str | None
  actorId: str | None
  eventType: str
  entityType: str
  entityId: str | None
  payload: dict[str, Any]
  createdAt: datetime
