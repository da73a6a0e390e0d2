import pytest
from alembic.autogenerate import compare_metadata
from alembic.runtime.migration import MigrationContext
from sqlalchemy.exc import IntegrityError

from photoblog.db_migrations import upgrade_head
from photoblog.db_sa import AdminRepo, Base, PhotoRepo, create_db, redact_db_url


def test_admin_repo_create_and_lookup(db):
    with db.session() as s:
        admins = AdminRepo(s)
        assert admins.any_exists() is False

        row = admins.create("alice", "$2b$10$hash")
        assert admins.any_exists() is True
        assert admins.get(row.id).username == "alice"
        assert admins.get_by_username("alice").id == row.id
        assert admins.get_by_username("bob") is None


def test_admin_repo_username_is_unique(db):
    with db.session() as s:
        admins = AdminRepo(s)
        admins.create("alice", "h1")
        with pytest.raises(IntegrityError):
            admins.create("alice", "h2")


def test_photo_repo_create_update_delete(db):
    with db.session() as s:
        photos = PhotoRepo(s)
        row = photos.create(
            title="t",
            description="d",
            date="15/May/2024",
            day=None,
            image_url="https://images.local/x.jpg",
            public_id="folder/x",
        )
        assert row.id is not None
        assert row.created_at is not None

        photos.update_fields(
            row, title="t2", description=None, date=None, day="Wednesday"
        )
        again = photos.get(row.id)
        assert again.title == "t2"
        assert again.description == "d"
        assert again.day == "Wednesday"
        assert again.image_url == "https://images.local/x.jpg"
        assert again.public_id == "folder/x"

        photos.delete(again)
        assert photos.get(row.id) is None


def test_photo_repo_list_ties_break_by_id(db):
    with db.session() as s:
        photos = PhotoRepo(s)
        ids = [
            photos.create(
                title=str(n),
                description="d",
                date="1/May/2024",
                day=None,
                image_url="u",
                public_id=None,
            ).id
            for n in range(3)
        ]
        # Same-second inserts share created_at; newest id comes first.
        assert [p.id for p in photos.list_newest_first()] == list(reversed(ids))


def test_redact_db_url_hides_password():
    assert (
        redact_db_url("postgresql://blog:s3cret@db:5432/blog")
        == "postgresql://blog:***@db:5432/blog"
    )
    assert redact_db_url("sqlite:///blog.db") == "sqlite:///blog.db"
    assert (
        redact_db_url("postgresql+psycopg://blog:s%40cret@db/blog?sslmode=require")
        == "postgresql+psycopg://blog:***@db/blog?sslmode=require"
    )
    assert redact_db_url("not a database url") == "<invalid-db-url>"


def test_admin_repo_allows_a_single_admin(db):
    with db.session() as s:
        admins = AdminRepo(s)
        admins.create("alice", "h1")
        with pytest.raises(IntegrityError):
            admins.create("bob", "h2")
        s.rollback()
        assert admins.get_by_username("bob") is None


def test_models_match_migrated_schema(tmp_path):
    db_url = f"sqlite:///{tmp_path / 'blog.sqlite3'}"
    upgrade_head(database_url=db_url)
    db = create_db(db_url)
    with db.engine.connect() as conn:
        diff = compare_metadata(MigrationContext.configure(conn), Base.metadata)
    db.dispose()
    assert diff == []
