from __future__ import annotations

import os

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import register
from tasktaco.config import settings

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _disk(public_path: str) -> str:
  return os.path.join(settings.upload_dir, *public_path.removeprefix("uploads/").split("/"))


@pytest.mark.anyio
async def test_upload_replace_and_delete_picture(client: AsyncClient) -> None:
  h = await register(client)
  assert (await client.get("/profile/picture-path", headers=h)).json() == {"profilePicturePath": None}

  r = await client.post("/profile/upload-picture", files={"file": ("me.PNG", PNG, "image/png")}, headers=h)
  assert r.status_code == 200, r.text
  first = r.json()["profilePicturePath"]
  assert first.startswith("uploads/profiles/") and first.endswith(".png")
  assert os.path.isfile(_disk(first))

  served = await client.get(f"/{first}")
  assert served.status_code == 200
  assert served.content == PNG

  r = await client.post("/profile/upload-picture", files={"file": ("me.jpg", b"jpegdata", "image/jpeg")}, headers=h)
  assert r.status_code == 200, r.text
  second = r.json()["profilePicturePath"]
  assert second != first
  assert not os.path.exists(_disk(first))
  assert (await client.get("/auth/me", headers=h)).json()["profilePicture"] == second

  r = await client.delete("/profile/delete-picture", headers=h)
  assert r.status_code == 200, r.text
  assert not os.path.exists(_disk(second))
  assert (await client.get("/profile/picture-path", headers=h)).json() == {"profilePicturePath": None}
  assert (await client.delete("/profile/delete-picture", headers=h)).status_code == 404


@pytest.mark.anyio
async def test_upload_rejects_bad_files(client: AsyncClient) -> None:
  h = await register(client)
  r = await client.post("/profile/upload-picture", files={"file": ("notes.txt", b"hello", "text/plain")}, headers=h)
  assert r.status_code == 400
  r = await client.post("/profile/upload-picture", files={"file": ("empty.png", b"", "image/png")}, headers=h)
  assert r.status_code == 400

  orig = settings.max_profile_picture_bytes
  settings.max_profile_picture_bytes = 16
  try:
    r = await client.post("/profile/upload-picture", files={"file": ("big.png", PNG, "image/png")}, headers=h)
    assert r.status_code == 400
    assert "5MB" in r.json()["detail"]
  finally:
    settings.max_profile_picture_bytes = orig
  assert (await client.get("/profile/picture-path", headers=h)).json() == {"profilePicturePath": None}


@pytest.mark.anyio
async def test_upload_removes_new_file_when_commit_fails(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
  h = await register(client)
  profiles = os.path.join(settings.upload_dir, "profiles")
  before = set(os.listdir(profiles)) if os.path.isdir(profiles) else set()

  async def failing_commit(self: AsyncSession) -> None:
    raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

  monkeypatch.setattr(AsyncSession, "commit", failing_commit)
  r = await client.post("/profile/upload-picture", files={"file": ("me.png", PNG, "image/png")}, headers=h)
  monkeypatch.undo()

  assert r.status_code == 500
  after = set(os.listdir(profiles)) if os.path.isdir(profiles) else set()
  assert after == before
  assert (await client.get("/profile/picture-path", headers=h)).json() == {"profilePicturePath": None}
