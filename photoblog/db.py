"""Database layer (SQLAlchemy + Alembic) for the photo blog API."""

from photoblog.db_migrations import upgrade_head
from photoblog.db_sa import AdminRepo, Db, PhotoRepo, create_db

__all__ = [
    "Db",
    "create_db",
    "init_db",
    "AdminRepo",
    "PhotoRepo",
]


def init_db(*, database_url: str) -> Db:
    db = create_db(database_url=database_url)
    upgrade_head(database_url=database_url)
    return db
