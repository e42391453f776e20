from __future__ import annotations

import logging
import os
from uuid import uuid4

from tasktaco.config import settings

logger = logging.getLogger(__name__)

PROFILE_SUBDIR = "profiles"
# stored paths are relative to the site root and served from /uploads
PUBLIC_PREFIX = "uploads/"


class PictureRejected(ValueError):
  pass


def check_picture(filename: str | None, data: bytes) -> str:
  """Validate an upload; returns the lower-cased extension."""
  if not data:
    raise PictureRejected("No file uploaded.")
  ext = os.path.splitext(filename or "")[1].lower()
  if ext not in settings.profile_picture_extension_set():
    raise PictureRejected("Invalid file type. Only JPG, PNG, and GIF files are allowed.")
  if len(data) > int(settings.max_profile_picture_bytes):
    raise PictureRejected("File size exceeds 5MB limit.")
  return ext


def _disk_path(public_path: str) -> str | None:
  if not public_path.startswith(PUBLIC_PREFIX):
    return None
  parts = public_path[len(PUBLIC_PREFIX):].split("/")
  if any(p in ("", ".", "..") for p in parts):
    return None
  return os.path.join(settings.upload_dir, *parts)


def save_picture(user_id: str, ext: str, data: bytes) -> str:
  """Write the picture to disk and return its public path."""
  out_dir = os.path.join(settings.upload_dir, PROFILE_SUBDIR)
  os.makedirs(out_dir, exist_ok=True)
  name = f"{user_id}_{uuid4().hex}{ext}"
  with open(os.path.join(out_dir, name), "wb") as f:
    f.write(data)
  return f"{PUBLIC_PREFIX}{PROFILE_SUBDIR}/{name}"


def remove_picture(public_path: str | None) -> bool:
  """Delete a stored picture; a missing file is not an error."""
  if not public_path:
    return False
  path = _disk_path(public_path)
  if not path or not os.path.isfile(path):
    return False
  try:
    os.remove(path)
  except OSError:
    logger.warning("could not remove profile picture %s", path, exc_info=True)
    return False
  return True
