from __future__ import annotations

import random

import pytest
from httpx import AsyncClient

from conftest import make_board, make_column, make_task, register
from tasktaco.ordering import is_dense


async def _assert_board_dense(client: AsyncClient, h: dict[str, str], board_id: str) -> dict:
  res = await client.get(f"/boards/{board_id}", headers=h)
  assert res.status_code == 200, res.text
  board = res.json()
  assert is_dense(c["order"] for c in board["columns"]), board["columns"]
  assert [c["order"] for c in board["columns"]] == list(range(len(board["columns"])))
  for c in board["columns"]:
    assert is_dense(t["order"] for t in c["tasks"]), (c["name"], c["tasks"])
    assert all(t["columnId"] == c["id"] for t in c["tasks"])
  names = [c["name"] for c in board["columns"]]
  assert len(names) == len(set(names))
  return board


@pytest.mark.anyio
@pytest.mark.parametrize("seed", [7, 2024])
async def test_random_operation_sequences_keep_orders_dense(client: AsyncClient, seed: int) -> None:
  rng = random.Random(seed)
  h = await register(client)
  b = await make_board(client, h, "Fuzz")
  for name in ("c0", "c1", "c2"):
    await make_column(client, h, b["id"], name)
  board = await _assert_board_dense(client, h, b["id"])
  next_col = 3
  next_task = 0

  for _ in range(60):
    cols = board["columns"]
    tasks = [t for c in cols for t in c["tasks"]]
    op = rng.choice(["create_task", "create_task", "move_task", "move_task", "delete_task", "create_column", "move_column", "delete_column"])

    if op == "create_task" and cols:
      await make_task(client, h, rng.choice(cols)["id"], f"t{next_task}")
      next_task += 1
    elif op == "move_task" and tasks:
      t = rng.choice(tasks)
      target = rng.choice(cols)
      r = await client.put(
        f"/tasks/{t['id']}/move",
        json={"columnId": target["id"], "order": rng.randint(-2, len(target["tasks"]) + 2)},
        headers=h,
      )
      assert r.status_code == 200, r.text
    elif op == "delete_task" and tasks:
      r = await client.delete(f"/tasks/{rng.choice(tasks)['id']}", headers=h)
      assert r.status_code == 204, r.text
    elif op == "create_column":
      await make_column(client, h, b["id"], f"c{next_col}", order=rng.randint(-1, len(cols) + 1))
      next_col += 1
    elif op == "move_column" and cols:
      c = rng.choice(cols)
      r = await client.patch(f"/columns/{c['id']}/move", json={"newOrder": rng.randint(-1, len(cols) + 1)}, headers=h)
      assert r.status_code == 200, r.text
    elif op == "delete_column" and len(cols) > 1:
      r = await client.delete(f"/columns/{rng.choice(cols)['id']}", headers=h)
      assert r.status_code == 204, r.text

    board = await _assert_board_dense(client, h, b["id"])


@pytest.mark.anyio
async def test_task_counts_survive_moves(client: AsyncClient) -> None:
  h = await register(client)
  b = await make_board(client, h, "Counts", defaultColumns=True)
  board = await _assert_board_dense(client, h, b["id"])
  planned, doing, done = board["columns"]
  ids = [(await make_task(client, h, planned["id"], f"t{i}"))["id"] for i in range(5)]

  for i, task_id in enumerate(ids):
    target = doing if i % 2 else done
    r = await client.put(f"/tasks/{task_id}/move", json={"columnId": target["id"], "order": 0}, headers=h)
    assert r.status_code == 200, r.text

  board = await _assert_board_dense(client, h, b["id"])
  assert [len(c["tasks"]) for c in board["columns"]] == [0, 2, 3]
  # each move went to the front, so the latest arrivals lead
  assert [t["title"] for t in board["columns"][2]["tasks"]] == ["t4", "t2", "t0"]
  assert [t["title"] for t in board["columns"][1]["tasks"]] == ["t3", "t1"]
