from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
  sys.path.insert(0, str(ROOT))

# must be set before the settings object is built
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./tasktaco_test.db")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="tasktaco-uploads-"))
os.environ.setdefault("APP_SECRET", "tasktaco-test-secret-0123456789abcdef0123456789")

from tasktaco.config import settings  # noqa: E402
from tasktaco.db import engine  # noqa: E402
from tasktaco.main import app  # noqa: E402
from tasktaco.models import Base  # noqa: E402
from tasktaco.rate_limit import throttle  # noqa: E402

DEFAULT_PASSWORD = "taco1234"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
  return "asyncio"


async def _reset_db() -> None:
  throttle.clear()
  async with engine.begin() as conn:
    await conn.run_sync(Base.metadata.drop_all)
    await conn.run_sync(Base.metadata.create_all)
  await engine.dispose()


@pytest.fixture
async def clean_db() -> None:
  if not settings.is_test_db():
    raise RuntimeError(
      "Refusing to run destructive tests against non-test DB. "
      "Set DATABASE_URL to a *_test database (e.g. tasktaco_test)."
    )
  await _reset_db()
  yield
  await engine.dispose()


@pytest.fixture
async def client(clean_db: None) -> AsyncClient:
  transport = ASGITransport(app=app)
  async with AsyncClient(transport=transport, base_url="http://localhost") as c:
    yield c


async def register(
  client: AsyncClient,
  email: str = "cook@tasktaco.local",
  *,
  name: str = "Cook",
  password: str = DEFAULT_PASSWORD,
) -> dict[str, str]:
  """Register a user and return bearer auth headers for it."""
  res = await client.post("/auth/register", json={"name": name, "email": email, "password": password})
  assert res.status_code == 201, res.text
  return auth_headers(res.json()["token"])


def auth_headers(token: str) -> dict[str, str]:
  return {"Authorization": f"Bearer {token}"}


async def make_board(client: AsyncClient, headers: dict[str, str], name: str = "Board", **extra) -> dict:
  res = await client.post("/boards", json={"name": name, **extra}, headers=headers)
  assert res.status_code == 201, res.text
  return res.json()


async def make_column(client: AsyncClient, headers: dict[str, str], board_id: str, name: str, order: int | None = None) -> dict:
  body: dict = {"name": name}
  if order is not None:
    body["order"] = order
  res = await client.post(f"/boards/{board_id}/columns", json=body, headers=headers)
  assert res.status_code == 201, res.text
  return res.json()


async def make_task(client: AsyncClient, headers: dict[str, str], column_id: str, title: str, **extra) -> dict:
  res = await client.post(f"/columns/{column_id}/tasks", json={"title": title, **extra}, headers=headers)
  assert res.status_code == 201, res.text
  return res.json()


async def column_orders(client: AsyncClient, headers: dict[str, str], board_id: str) -> list[tuple[str, int]]:
  res = await client.get(f"/boards/{board_id}/columns", headers=headers)
  assert res.status_code == 200, res.text
  return [(c["name"], c["order"]) for c in res.json()]


async def task_orders(client: AsyncClient, headers: dict[str, str], column_id: str) -> list[tuple[str, int]]:
  res = await client.get(f"/columns/{column_id}/tasks", headers=headers)
  assert res.status_code == 200, res.text
  return [(t["title"], t["order"]) for t in res.json()]
