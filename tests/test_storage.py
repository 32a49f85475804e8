import pytest
import requests

from app.core.config import settings
from app.core.errors import PermissionDenied, StorageError
from app.models.issue import Issue
from app.services import storage
from app.services.issues import MAX_PHOTO_BYTES


class _FakeResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture
def configured_storage(monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", "https://portal.supabase.co")
    monkeypatch.setattr(settings, "supabase_service_role", "service-role-key")
    calls = []

    def fake_post(url, headers=None, data=None, timeout=None):
        calls.append({"url": url, "headers": headers, "data": data})
        return _FakeResponse()

    monkeypatch.setattr(storage.requests, "post", fake_post)
    return calls


def test_object_key_is_namespaced_by_owner():
    assert storage.make_object_key(42, "Leak.JPG", now=1700000000.5) == "42/1700000000500.jpg"
    assert storage.make_object_key(42, "noext", now=1.0) == "42/1000.jpg"


def test_upload_returns_public_url(configured_storage):
    url = storage.upload_image(b"img", "image/png", "7/1.png")
    assert url == "https://portal.supabase.co/storage/v1/object/public/issue-photos/7/1.png"
    assert configured_storage[0]["url"] == "https://portal.supabase.co/storage/v1/object/issue-photos/7/1.png"
    assert configured_storage[0]["headers"]["Authorization"] == "Bearer service-role-key"


def test_upload_without_configuration_fails(monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", None)
    with pytest.raises(StorageError):
        storage.upload_image(b"img", "image/png", "7/1.png")


def test_submit_with_photo_attaches_url(client, student, departments, auth, configured_storage):
    data = {"department_id": str(departments["CS"].id), "room_no": "L-3", "item_id": "BENCH-4", "title": "Broken bench"}
    files = {"photo": ("bench.png", b"\x89PNG...", "image/png")}
    r = client.post("/issues", data=data, files=files, headers=auth(student))
    assert r.status_code == 201, r.text
    photo_url = r.json()["photo_url"]
    assert photo_url.startswith(f"https://portal.supabase.co/storage/v1/object/public/issue-photos/{student.id}/")
    assert photo_url.endswith(".png")
    assert len(configured_storage) == 1


def test_failed_upload_creates_no_issue(client, db, student, departments, auth, monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", "https://portal.supabase.co")
    monkeypatch.setattr(settings, "supabase_service_role", "service-role-key")

    def unreachable(*args, **kwargs):
        raise requests.ConnectionError("storage unreachable")

    monkeypatch.setattr(storage.requests, "post", unreachable)
    data = {"department_id": str(departments["CS"].id), "room_no": "L-3", "item_id": "BENCH-4", "title": "Broken bench"}
    files = {"photo": ("bench.png", b"\x89PNG...", "image/png")}
    r = client.post("/issues", data=data, files=files, headers=auth(student))
    assert r.status_code == 502
    assert db.query(Issue).count() == 0


def test_rejected_upload_creates_no_issue(client, db, student, departments, auth, monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", "https://portal.supabase.co")
    monkeypatch.setattr(settings, "supabase_service_role", "service-role-key")
    monkeypatch.setattr(storage.requests, "post", lambda *a, **k: _FakeResponse(403))
    data = {"department_id": str(departments["CS"].id), "room_no": "L-3", "item_id": "BENCH-4", "title": "Broken bench"}
    files = {"photo": ("bench.png", b"\x89PNG...", "image/png")}
    r = client.post("/issues", data=data, files=files, headers=auth(student))
    assert r.status_code == 502
    assert db.query(Issue).count() == 0


def test_unsupported_photo_type(client, db, student, departments, auth, configured_storage):
    data = {"department_id": str(departments["CS"].id), "room_no": "L-3", "item_id": "BENCH-4", "title": "Broken bench"}
    files = {"photo": ("notes.txt", b"hello", "text/plain")}
    r = client.post("/issues", data=data, files=files, headers=auth(student))
    assert r.status_code == 422
    assert configured_storage == []
    assert db.query(Issue).count() == 0


def test_oversized_photo_rejected_before_upload(client, db, student, departments, auth, configured_storage):
    data = {"department_id": str(departments["CS"].id), "room_no": "L-3", "item_id": "BENCH-4", "title": "Broken bench"}
    files = {"photo": ("big.jpg", b"\xff" * (MAX_PHOTO_BYTES + 10), "image/jpeg")}
    r = client.post("/issues", data=data, files=files, headers=auth(student))
    assert r.status_code == 422
    assert r.json()["detail"] == "Image exceeds 5MB"
    assert configured_storage == []
    assert db.query(Issue).count() == 0


def test_object_ownership_is_the_key_prefix():
    assert storage.owns_object(7, "7/1700000000000.png")
    assert not storage.owns_object(7, "77/1700000000000.png")
    assert not storage.owns_object(7, "8/7/1.png")


@pytest.fixture
def deletes(monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", "https://portal.supabase.co")
    monkeypatch.setattr(settings, "supabase_service_role", "service-role-key")
    calls = []

    def fake_delete(url, headers=None, timeout=None):
        calls.append(url)
        return _FakeResponse()

    monkeypatch.setattr(storage.requests, "delete", fake_delete)
    return calls


def test_delete_object_rejects_foreign_key(deletes):
    with pytest.raises(PermissionDenied):
        storage.delete_object(7, "8/1700000000000.png")
    assert deletes == []


def test_owner_deletes_own_photo(client, student, make_user, auth, deletes):
    other = make_user("other")
    r = client.delete(f"/photos/{student.id}/1700000000000.png", headers=auth(student))
    assert r.status_code == 204
    assert deletes == [f"https://portal.supabase.co/storage/v1/object/issue-photos/{student.id}/1700000000000.png"]

    r = client.delete(f"/photos/{other.id}/1700000000000.png", headers=auth(student))
    assert r.status_code == 403
    assert len(deletes) == 1
