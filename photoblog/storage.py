from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Protocol

import cloudinary.uploader

from photoblog.config import Settings

logger = logging.getLogger("storage")

ALLOWED_FORMATS = ("jpg", "jpeg", "png", "gif")


@dataclass(frozen=True)
class StoredObject:
    url: str
    public_id: str


class PhotoStorage(Protocol):
    def upload(self, fileobj: BinaryIO, filename: str) -> StoredObject: ...

    def delete(self, public_id: str) -> None: ...


def file_format(filename: str) -> str:
    return Path(filename or "").suffix.lstrip(".").lower()


def is_allowed_format(filename: str) -> bool:
    return file_format(filename) in ALLOWED_FORMATS


class CloudinaryStorage:
    """Image storage backed by Cloudinary.

    Credentials travel with every call instead of through the global
    ``cloudinary.config()``, so several instances can coexist.
    """

    def __init__(
        self,
        *,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str,
    ):
        self.folder = folder
        self._credentials = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
            "secure": True,
        }
        logger.info(
            "Cloudinary storage configured (cloud=%s folder=%s)",
            cloud_name,
            folder,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CloudinaryStorage":
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.cloudinary_folder,
        )

    def upload(self, fileobj: BinaryIO, filename: str) -> StoredObject:
        logger.info("Upload.start filename=%s folder=%s", filename, self.folder)
        result = cloudinary.uploader.upload(
            fileobj,
            folder=self.folder,
            allowed_formats=list(ALLOWED_FORMATS),
            resource_type="image",
            **self._credentials,
        )
        stored = StoredObject(
            url=result["secure_url"], public_id=result["public_id"]
        )
        logger.info("Upload.done public_id=%s", stored.public_id)
        return stored

    def delete(self, public_id: str) -> None:
        result = cloudinary.uploader.destroy(
            public_id, invalidate=True, **self._credentials
        )
        outcome = (result or {}).get("result")
        if outcome != "ok":
            logger.warning(
                "Cloudinary destroy public_id=%s returned %r",
                public_id,
                outcome,
            )
            return
        logger.info("Deleted public_id=%s", public_id)


@dataclass
class MemoryStorage:
    """Keeps uploads in a dict. Used by tests and local runs without Cloudinary."""

    folder: str = "noticing_eye_photos"
    base_url: str = "https://images.local"
    objects: dict[str, bytes] = field(default_factory=dict)
    deleted: list[str] = field(default_factory=list)

    def upload(self, fileobj: BinaryIO, filename: str) -> StoredObject:
        public_id = f"{self.folder}/{uuid.uuid4().hex}"
        self.objects[public_id] = fileobj.read()
        ext = file_format(filename) or "jpg"
        return StoredObject(
            url=f"{self.base_url}/{public_id}.{ext}", public_id=public_id
        )

    def delete(self, public_id: str) -> None:
        self.deleted.append(public_id)
        self.objects.pop(public_id, None)
