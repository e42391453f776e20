from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from tasktaco.audit import write_audit
from tasktaco.config import settings
from tasktaco.deps import get_current_user, get_db
from tasktaco.models import User, utcnow
from tasktaco.profiles.service import PictureRejected, check_picture, remove_picture, save_picture
from tasktaco.schemas import MessageOut, PicturePathOut, PictureUploadOut

router = APIRouter(prefix="/profile", tags=["profile"])


@router.post("/upload-picture", response_model=PictureUploadOut)
async def upload_picture(
  file: UploadFile | None = File(default=None),
  user: User = Depends(get_current_user),
  db: AsyncSession = Depends(get_db),
) -> PictureUploadOut:
  data = await file.read(int(settings.max_profile_picture_bytes) + 1) if file is not None else b""
  try:
    ext = check_picture(file.filename if file is not None else None, data)
  except PictureRejected as exc:
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

  previous = user.profile_picture
  stored = save_picture(user.id, ext, data)
  user.profile_picture = stored
  user.updated_at = utcnow()
  try:
    await write_audit(db, event_type="user.picture.uploaded", entity_type="User", entity_id=user.id, actor_id=user.id, payload={"path": stored})
    await db.commit()
  except Exception:
    # nothing references the new file once the row change is lost
    remove_picture(stored)
    raise
  remove_picture(previous)
  return PictureUploadOut(profilePicturePath=stored, message="Profile picture uploaded successfully")


@router.delete("/delete-picture", response_model=MessageOut)
async def delete_picture(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)) -> MessageOut:
  if not user.profile_picture:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No profile picture to delete")
  previous = user.profile_picture
  user.profile_picture = None
  user.updated_at = utcnow()
  await write_audit(db, event_type="user.picture.deleted", entity_type="User", entity_id=user.id, actor_id=user.id, payload={"path": previous})
  await db.commit()
  remove_picture(previous)
  return MessageOut(message="Profile picture deleted successfully")


@router.get("/picture-path", response_model=PicturePathOut)
async def picture_path(user: User = Depends(get_current_user)) -> PicturePathOut:
  return PicturePathOut(profilePicturePath=user.profile_picture)
