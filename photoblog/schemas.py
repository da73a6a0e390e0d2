from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _Camel(BaseModel):
    # Wire format is camelCase (imageUrl, publicId, adminId, ...).
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _ORM(_Camel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class MessageOut(BaseModel):
    message: str


class HealthOut(BaseModel):
    status: str
    message: str


# ---- Auth ----


class InitAdminIn(_Camel):
    username: str
    password: str
    secret_key: str


class InitAdminOut(_Camel):
    message: str
    admin_id: int


class LoginIn(BaseModel):
    username: str
    password: str


class AdminOut(_ORM):
    id: int
    username: str


class LoginOut(BaseModel):
    message: str
    token: str
    admin: AdminOut


# ---- Photos ----


class PhotoOut(_ORM):
    id: int
    title: str
    description: str
    day: Optional[str] = None
    date: str
    image_url: str
    public_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PhotoUpdate(BaseModel):
    # Unknown keys such as imageUrl/publicId are dropped by pydantic.
    title: Optional[str] = None
    description: Optional[str] = None
    day: Optional[str] = None
    date: Optional[str] = None


class PhotoEnvelope(BaseModel):
    message: str
    photo: PhotoOut
