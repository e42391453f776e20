from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# JSONB on PostgreSQL, plain JSON text elsewhere
JsonDoc = JSON().with_variant(JSONB(), "postgresql")

PRIORITIES = ("Low", "Medium", "High")
AVAILABLE_THEMES = ("Classic Taco", "Guacamole", "Salsa")
DEFAULT_THEME = "Classic Taco"
DEFAULT_EMOJI = "🌮"


def utcnow() -> datetime:
  return datetime.now(timezone.utc)


def new_id() -> str:
  return str(uuid.uuid4())


def as_utc(dt: datetime | None) -> datetime | None:
  # SQLite hands DateTime(timezone=True) values back naive
  if dt is None or dt.tzinfo is not None:
    return dt
  return dt.replace(tzinfo=timezone.utc)


class Base(DeclarativeBase):
  pass


class User(Base):
  __tablename__ = "users"

  id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
  email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
  name: Mapped[str] = mapped_column(String(100), nullable=False)
  password_hash: Mapped[str] = mapped_column(String, nullable=False)
  profile_picture: Mapped[str | None] = mapped_column(String, nullable=True)
  created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
  updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class UserSettings(Base):
  __tablename__ = "user_settings"

  id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
  user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
  theme: Mapped[str] = mapped_column(String(50), nullable=False, default=DEFAULT_THEME)
  default_emoji: Mapped[str] = mapped_column(String(10), nullable=False, default=DEFAULT_EMOJI)
  created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
  updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class Board(Base):
  __tablename__ = "boards"

  id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
  name: Mapped[str] = mapped_column(String(200), nullable=False)
  description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
  user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
  created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
  updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class Column(Base):
  __tablename__ = "columns"
  __table_args__ = (UniqueConstraint("board_id", "name", name="ux_columns_board_name"),)

  id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
  board_id: Mapped[str] = mapped_column(String(36), ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True)
  name: Mapped[str] = mapped_column(String(100), nullable=False)
  order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
  created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
  updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class Task(Base):
  __tablename__ = "tasks"
  __table_args__ = (Index("ix_tasks_column_order", "column_id", "order"),)

  id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
  column_id: Mapped[str] = mapped_column(String(36), ForeignKey("columns.id", ondelete="CASCADE"), nullable=False, index=True)
  title: Mapped[str] = mapped_column(String(500), nullable=False)
  description: Mapped[str] = mapped_column(String(2000), nullable=False, default="")
  status: Mapped[str] = mapped_column(String, nullable=False, default="")
  priority: Mapped[str] = mapped_column(String(16), nullable=False, default="Medium")
  due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
  labels: Mapped[list[str]] = mapped_column(JsonDoc, nullable=False, default=list)
  checklist: Mapped[list[dict[str, Any]]] = mapped_column(JsonDoc, nullable=False, default=list)
  stickers: Mapped[list[str]] = mapped_column(JsonDoc, nullable=False, default=list)
  order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
  created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
  updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class AuditEvent(Base):
  __tablename__ = "audit_events"

  # No foreign keys: the trail outlives the rows it describes.
  id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
  board_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
  task_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
  actor_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
  event_type: Mapped[str] = mapped_column(String, nullable=False)
  entity_type: Mapped[str] = mapped_column(String, nullable=False)
  entity_id: Mapped[str | None] = mapped_column(String, nullable=True)
  payload: Mapped[dict[str, Any]] = mapped_column(JsonDoc, nullable=False, default=dict)
  created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
