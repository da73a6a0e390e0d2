from __future__ import annotations

from typing import Generator

from sqlalchemy.orm import Session
from starlette.requests import Request

from photoblog.config import Settings
from photoblog.db_sa import Db
from photoblog.storage import PhotoStorage


def get_db(request: Request) -> Db:
    return request.app.state.db


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> PhotoStorage:
    return request.app.state.storage


def get_session(request: Request) -> Generator[Session, None, None]:
    s = get_db(request).session()
    try:
        yield s
    finally:
        s.close()
