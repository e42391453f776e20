from __future__ import annotations

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from tasktaco.config import settings


def _connect_args(url: str) -> dict:
  # aiosqlite connections are shared across the event loop's worker thread
  if url.startswith("sqlite"):
    return {"check_same_thread": False}
  return {}


engine = create_async_engine(settings.database_url, connect_args=_connect_args(settings.database_url), pool_pre_ping=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
