from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from photoblog.auth import require_admin
from photoblog.db_sa import Admin, Photo, PhotoRepo
from photoblog.deps import get_session, get_storage
from photoblog.errors import BadRequest, NotFound
from photoblog.schemas import MessageOut, PhotoEnvelope, PhotoOut, PhotoUpdate
from photoblog.storage import ALLOWED_FORMATS, PhotoStorage, is_allowed_format

logger = logging.getLogger("photos")

router = APIRouter(prefix="/api/photos", tags=["photos"])


def _normalize_day(day: Optional[str]) -> Optional[str]:
    v = (day or "").strip()
    return v if v else None


def _get_or_404(repo: PhotoRepo, photo_id: int) -> Photo:
    row = repo.get(int(photo_id))
    if row is None:
        raise NotFound("Photo not found")
    return row


@router.post(
    "", response_model=PhotoEnvelope, status_code=status.HTTP_201_CREATED
)
def create_photo(
    title: str = Form(...),
    description: str = Form(...),
    date: str = Form(...),
    day: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    admin: Admin = Depends(require_admin),
    s: Session = Depends(get_session),
    storage: PhotoStorage = Depends(get_storage),
) -> PhotoEnvelope:
    if photo is None or not photo.filename:
        raise BadRequest("No file uploaded")
    # A zero-byte part has a filename but nothing to store.
    if not photo.file.read(1):
        raise BadRequest("No file uploaded")
    photo.file.seek(0)
    if not is_allowed_format(photo.filename):
        raise BadRequest(
            "Unsupported file format. Allowed: " + ", ".join(ALLOWED_FORMATS)
        )

    logger.info(
        "Received photo data admin_id=%s title=%r date=%r day=%r",
        admin.id,
        title,
        date,
        day,
    )

    try:
        stored = storage.upload(photo.file, photo.filename)
    finally:
        try:
            photo.file.close()
        except Exception:
            pass

    repo = PhotoRepo(s)
    try:
        row = repo.create(
            title=title,
            description=description,
            date=date,
            day=_normalize_day(day),
            image_url=stored.url,
            public_id=stored.public_id,
        )
    except Exception:
        s.rollback()
        # Do not leave an orphaned upload behind.
        try:
            storage.delete(stored.public_id)
        except Exception:
            logger.exception(
                "Failed to clean up upload public_id=%s", stored.public_id
            )
        raise

    return PhotoEnvelope(
        message="Photo uploaded successfully",
        photo=PhotoOut.model_validate(row),
    )


@router.get("", response_model=list[PhotoOut])
def list_photos(s: Session = Depends(get_session)) -> list[PhotoOut]:
    return [PhotoOut.model_validate(p) for p in PhotoRepo(s).list_newest_first()]


@router.get("/{photo_id}", response_model=PhotoOut)
def get_photo(photo_id: int, s: Session = Depends(get_session)) -> PhotoOut:
    return PhotoOut.model_validate(_get_or_404(PhotoRepo(s), photo_id))


@router.put("/{photo_id}", response_model=PhotoEnvelope)
def update_photo(
    photo_id: int,
    payload: PhotoUpdate,
    admin: Admin = Depends(require_admin),
    s: Session = Depends(get_session),
) -> PhotoEnvelope:
    repo = PhotoRepo(s)
    row = _get_or_404(repo, photo_id)
    logger.info("Updating photo id=%s admin_id=%s", photo_id, admin.id)
    row = repo.update_fields(
        row,
        title=payload.title,
        description=payload.description,
        date=payload.date,
        day=_normalize_day(payload.day),
    )
    return PhotoEnvelope(
        message="Photo updated successfully",
        photo=PhotoOut.model_validate(row),
    )


@router.delete("/{photo_id}", response_model=MessageOut)
def delete_photo(
    photo_id: int,
    admin: Admin = Depends(require_admin),
    s: Session = Depends(get_session),
    storage: PhotoStorage = Depends(get_storage),
) -> MessageOut:
    repo = PhotoRepo(s)
    row = _get_or_404(repo, photo_id)

    # Two independent steps: a failure here leaves the row in place.
    if row.public_id:
        storage.delete(row.public_id)

    repo.delete(row)
    logger.info("Photo id=%s deleted by admin_id=%s", photo_id, admin.id)
    return MessageOut(message="Photo deleted successfully")
