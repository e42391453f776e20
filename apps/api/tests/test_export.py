from __future__ import annotations

import json

import pytest
from httpx import AsyncClient

from conftest import make_board, make_column, make_task, register


@pytest.mark.anyio
async def test_export_contains_columns_and_tasks_in_order(client: AsyncClient) -> None:
  h = await register(client)
  b = await make_board(client, h, "Launch", description="Q4 launch")
  later = await make_column(client, h, b["id"], "Later")
  now = await make_column(client, h, b["id"], "Now", order=0)
  await make_task(client, h, now["id"], "ship", priority="high", labels=["release"], dueDate="2030-05-01")
  first = await make_task(client, h, now["id"], "test")
  await client.put(f"/tasks/{first['id']}/move", json={"columnId": now["id"], "order": 0}, headers=h)

  r = await client.get(f"/boards/{b['id']}/export", headers=h)
  assert r.status_code == 200, r.text
  body = r.json()
  assert set(body) == {"json", "prompt"}

  data = json.loads(body["json"])
  assert data["name"] == "Launch"
  assert data["description"] == "Q4 launch"
  assert [c["name"] for c in data["columns"]] == ["Now", "Later"]
  assert [t["title"] for t in data["columns"][0]["tasks"]] == ["test", "ship"]
  ship = data["columns"][0]["tasks"][1]
  assert ship["priority"] == "High"
  assert ship["labels"] == ["release"]
  assert ship["dueDate"].startswith("2030-05-01")
  assert data["columns"][1]["id"] == later["id"]

  assert "Board Name: Launch" in body["prompt"]
  assert "Board Description: Q4 launch" in body["prompt"]
  assert body["json"] in body["prompt"]


@pytest.mark.anyio
async def test_export_prompt_for_board_without_description(client: AsyncClient) -> None:
  h = await register(client)
  b = await make_board(client, h, "Bare")
  body = (await client.get(f"/boards/{b['id']}/export", headers=h)).json()
  assert "Board Description: (none provided)" in body["prompt"]
  assert json.loads(body["json"])["columns"] == []
  assert (await client.get("/boards/missing/export", headers=h)).status_code == 404
