from datetime import datetime, timedelta

from photoblog.db_sa import Photo
from photoblog.storage import MemoryStorage


def _upload(c, title="t", filename="a.jpg", **fields):
    data = {"title": title, "description": "d", "date": "15/May/2024"}
    data.update(fields)
    return c.post(
        "/api/photos",
        data=data,
        files={"photo": (filename, b"\xff\xd8\xffimage-bytes", "image/jpeg")},
    )


def test_scenario_from_empty_store(admin_client):
    # Public list works without auth on an empty store.
    r = admin_client.get("/api/photos", headers={"Authorization": ""})
    assert r.status_code == 200
    assert r.json() == []

    r = admin_client.delete("/api/photos/999")
    assert r.status_code == 404
    assert r.json()["message"] == "Photo not found"


def test_create_requires_token(client):
    r = _upload(client)
    assert r.status_code == 401


def test_create_without_file_is_bad_request(admin_client):
    r = admin_client.post(
        "/api/photos",
        data={"title": "t", "description": "d", "date": "15/May/2024"},
    )
    assert r.status_code == 400
    assert r.json()["message"] == "No file uploaded"


def test_create_with_empty_file_is_bad_request(admin_client, storage, db):
    r = admin_client.post(
        "/api/photos",
        data={"title": "t", "description": "d", "date": "15/May/2024"},
        files={"photo": ("a.jpg", b"", "image/jpeg")},
    )
    assert r.status_code == 400
    assert r.json() == {"message": "No file uploaded"}
    assert storage.objects == {}
    with db.session() as s:
        assert s.query(Photo).count() == 0


def test_create_rejects_unsupported_format(admin_client, storage):
    r = _upload(admin_client, filename="notes.txt")
    assert r.status_code == 400
    assert storage.objects == {}


def test_create_and_get(admin_client, storage):
    r = _upload(admin_client, title="Sunset", day="Wednesday")
    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "Photo uploaded successfully"
    photo = body["photo"]
    assert photo["title"] == "Sunset"
    assert photo["day"] == "Wednesday"
    assert photo["date"] == "15/May/2024"
    assert photo["publicId"] in storage.objects
    assert storage.objects[photo["publicId"]] == b"\xff\xd8\xffimage-bytes"
    assert photo["imageUrl"].endswith(".jpg")
    assert "createdAt" in photo and "updatedAt" in photo

    r = admin_client.get(f"/api/photos/{photo['id']}")
    assert r.status_code == 200
    assert r.json()["imageUrl"] == photo["imageUrl"]


def test_create_with_empty_day_stores_null(admin_client):
    r = _upload(admin_client, day="")
    assert r.status_code == 201
    assert r.json()["photo"]["day"] is None


def test_get_missing_is_404(client):
    r = client.get("/api/photos/12345")
    assert r.status_code == 404
    assert r.json() == {"message": "Photo not found"}


def test_list_is_newest_first(admin_client, db):
    ids = [_upload(admin_client, title=f"p{n}").json()["photo"]["id"] for n in range(3)]

    # Give each row a distinct creation time, oldest first.
    base = datetime(2024, 1, 1, 12, 0, 0)
    with db.session() as s:
        for n, photo_id in enumerate(ids):
            s.get(Photo, photo_id).created_at = base + timedelta(minutes=n)
        s.commit()

    r = admin_client.get("/api/photos")
    assert r.status_code == 200
    assert [p["id"] for p in r.json()] == list(reversed(ids))


def test_update_changes_text_fields_only(admin_client):
    photo = _upload(admin_client).json()["photo"]

    r = admin_client.put(
        f"/api/photos/{photo['id']}",
        json={
            "title": "New title",
            "description": "New description",
            "day": "Friday",
            "date": "17/May/2024",
            "imageUrl": "https://evil.example/x.jpg",
            "publicId": "evil",
        },
    )
    assert r.status_code == 200
    assert r.json()["message"] == "Photo updated successfully"
    updated = r.json()["photo"]
    assert updated["title"] == "New title"
    assert updated["description"] == "New description"
    assert updated["day"] == "Friday"
    assert updated["date"] == "17/May/2024"
    assert updated["imageUrl"] == photo["imageUrl"]
    assert updated["publicId"] == photo["publicId"]


def test_update_partial_keeps_other_fields(admin_client):
    photo = _upload(admin_client, title="keep", day="Wednesday").json()["photo"]

    r = admin_client.put(f"/api/photos/{photo['id']}", json={"description": "x"})
    assert r.status_code == 200
    updated = r.json()["photo"]
    assert updated["title"] == "keep"
    assert updated["description"] == "x"
    # Missing day is cleared.
    assert updated["day"] is None


def test_update_requires_token(client):
    r = client.put("/api/photos/1", json={"title": "x"})
    assert r.status_code == 401


def test_update_missing_is_404(admin_client):
    r = admin_client.put("/api/photos/999", json={"title": "x"})
    assert r.status_code == 404


def test_delete_removes_row_and_stored_image(admin_client, storage):
    photo = _upload(admin_client).json()["photo"]

    r = admin_client.delete(f"/api/photos/{photo['id']}")
    assert r.status_code == 200
    assert r.json() == {"message": "Photo deleted successfully"}
    assert storage.deleted == [photo["publicId"]]

    assert admin_client.get(f"/api/photos/{photo['id']}").status_code == 404


def test_delete_without_public_id_skips_storage(admin_client, db, storage):
    with db.session() as s:
        row = Photo(
            title="legacy",
            description="d",
            date="1/May/2024",
            image_url="https://images.local/legacy.jpg",
            public_id=None,
        )
        s.add(row)
        s.commit()
        photo_id = row.id

    r = admin_client.delete(f"/api/photos/{photo_id}")
    assert r.status_code == 200
    assert storage.deleted == []


def test_delete_requires_token(client):
    r = client.delete("/api/photos/1")
    assert r.status_code == 401


class _BrokenDeleteStorage(MemoryStorage):
    def delete(self, public_id: str) -> None:
        raise RuntimeError("storage exploded: secret-details")


def test_storage_failure_on_delete_keeps_row(db, settings):
    from fastapi.testclient import TestClient

    from photoblog.app import create_app

    storage = _BrokenDeleteStorage()
    c = TestClient(create_app(settings=settings, db=db, storage=storage))
    c.post(
        "/api/init-admin",
        json={
            "username": "a",
            "password": "p",
            "secretKey": settings.admin_secret_key,
        },
    )
    token = c.post("/api/login", json={"username": "a", "password": "p"}).json()[
        "token"
    ]
    c.headers.update({"Authorization": f"Bearer {token}"})

    photo = _upload(c).json()["photo"]
    r = c.delete(f"/api/photos/{photo['id']}")
    assert r.status_code == 500
    assert r.json() == {"message": "An unexpected error occurred"}

    assert c.get(f"/api/photos/{photo['id']}").status_code == 200
