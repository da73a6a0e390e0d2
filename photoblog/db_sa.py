import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
    func,
    select,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    mapped_column,
    sessionmaker,
)
from sqlalchemy.pool import StaticPool

logger = logging.getLogger("db")


class Base(DeclarativeBase):
    pass


class Admin(Base):
    __tablename__ = "admins"
    __table_args__ = (
        UniqueConstraint("username", name="uq_admins_username"),
        # Every row carries singleton=1, so a second admin violates this.
        UniqueConstraint("singleton", name="uq_admins_singleton"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    username: Mapped[str] = mapped_column(String, nullable=False)
    # bcrypt hash, never the plaintext.
    password: Mapped[str] = mapped_column(String, nullable=False)
    singleton: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default="1"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.current_timestamp()
    )


class Photo(Base):
    __tablename__ = "photos"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    # Free-form display date: "15/May/2024" or ISO.
    date: Mapped[str] = mapped_column(String, nullable=False)
    day: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    public_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.current_timestamp(),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(),
    )


@dataclass(frozen=True)
class Db:
    engine: Engine
    session_factory: sessionmaker[Session]

    def session(self) -> Session:
        return self.session_factory()

    def dispose(self) -> None:
        self.engine.dispose()


def redact_db_url(raw: str) -> str:
    # Parsed the way create_engine parses it, percent-escapes included.
    try:
        return make_url(raw).render_as_string(hide_password=True)
    except ArgumentError:
        return "<invalid-db-url>"


def create_db(database_url: str) -> Db:
    engine_kwargs = {"future": True}
    if database_url.startswith("sqlite") and (
        ":memory:" in database_url or "mode=memory" in database_url
    ):
        engine_kwargs.update(
            {
                "connect_args": {"check_same_thread": False},
                "poolclass": StaticPool,
            }
        )
    engine = create_engine(database_url, **engine_kwargs)
    SessionFactory = sessionmaker(
        bind=engine, expire_on_commit=False, future=True
    )

    logger.info("SQLAlchemy engine created: %s", redact_db_url(database_url))
    return Db(engine=engine, session_factory=SessionFactory)


# --- Repository layer ---


class AdminRepo:
    def __init__(self, s: Session):
        self.s = s
        self._log = logging.getLogger(self.__class__.__name__)

    def get(self, admin_id: int) -> Optional[Admin]:
        return self.s.get(Admin, admin_id)

    def get_by_username(self, username: str) -> Optional[Admin]:
        return self.s.scalar(select(Admin).where(Admin.username == username))

    def any_exists(self) -> bool:
        return self.s.scalar(select(Admin.id).limit(1)) is not None

    def create(self, username: str, password_hash: str) -> Admin:
        row = Admin(username=username, password=password_hash)
        self.s.add(row)
        self.s.commit()
        self.s.refresh(row)
        self._log.info("Admin created id=%s username=%s", row.id, username)
        return row


class PhotoRepo:
    def __init__(self, s: Session):
        self.s = s
        self._log = logging.getLogger(self.__class__.__name__)

    def get(self, photo_id: int) -> Optional[Photo]:
        return self.s.get(Photo, photo_id)

    def list_newest_first(self) -> list[Photo]:
        stmt = select(Photo).order_by(
            Photo.created_at.desc(), Photo.id.desc()
        )
        return list(self.s.scalars(stmt))

    def create(
        self,
        *,
        title: str,
        description: str,
        date: str,
        day: Optional[str],
        image_url: str,
        public_id: Optional[str],
    ) -> Photo:
        row = Photo(
            title=title,
            description=description,
            date=date,
            day=day,
            image_url=image_url,
            public_id=public_id,
        )
        self.s.add(row)
        self.s.commit()
        self.s.refresh(row)
        self._log.info("Photo created id=%s public_id=%s", row.id, public_id)
        return row

    def update_fields(
        self,
        row: Photo,
        *,
        title: Optional[str],
        description: Optional[str],
        date: Optional[str],
        day: Optional[str],
    ) -> Photo:
        # image_url and public_id are fixed at creation.
        if title is not None:
            row.title = title
        if description is not None:
            row.description = description
        if date is not None:
            row.date = date
        row.day = day
        self.s.commit()
        self.s.refresh(row)
        self._log.info("Photo updated id=%s", row.id)
        return row

    def delete(self, row: Photo) -> None:
        photo_id = row.id
        self.s.delete(row)
        self.s.commit()
        self._log.info("Photo deleted id=%s", photo_id)
