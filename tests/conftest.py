import pytest
from fastapi.testclient import TestClient

from photoblog.app import create_app
from photoblog.config import Settings
from photoblog.db_sa import Base, create_db
from photoblog.storage import MemoryStorage

ADMIN_SECRET = "TEST_ADMIN_SECRET"
JWT_SECRET = "TEST_JWT_SECRET"


def make_settings(**overrides) -> Settings:
    values = dict(
        database_url="sqlite+pysqlite:///:memory:",
        jwt_secret=JWT_SECRET,
        admin_secret_key=ADMIN_SECRET,
        cloudinary_cloud_name="test-cloud",
        cloudinary_api_key="key",
        cloudinary_api_secret="secret",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def db():
    # In-memory DB for fast, isolated tests.
    db = create_db(database_url="sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(db.engine)
    return db


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def client(db, settings, storage) -> TestClient:
    app = create_app(settings=settings, db=db, storage=storage)
    return TestClient(app)


@pytest.fixture()
def admin_client(client) -> TestClient:
    r = client.post(
        "/api/init-admin",
        json={"username": "a", "password": "p", "secretKey": ADMIN_SECRET},
    )
    assert r.status_code == 201
    r = client.post("/api/login", json={"username": "a", "password": "p"})
    assert r.status_code == 200
    client.headers.update({"Authorization": f"Bearer {r.json()['token']}"})
    return client
