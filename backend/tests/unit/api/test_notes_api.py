"""Unit tests for the notes router (notu/api/notes.py)."""

import uuid
from datetime import datetime, timezone

import pytest

from conftest import PNG_BYTES
from notu.config import Settings
from notu.core.services.note_service import NoteService
from notu.core.storage import get_image_storage
from notu.database import get_db_session
from notu.main import app
from notu.middleware.auth import get_current_user_id

USER_ID = uuid.uuid4()
NOTE_ID = uuid.uuid4()


async def _no_db():
    yield None


@pytest.fixture
def authed_client(client, fake_storage):
    app.dependency_overrides[get_db_session] = _no_db
    app.dependency_overrides[get_image_storage] = lambda: fake_storage
    app.dependency_overrides[get_current_user_id] = lambda: USER_ID
    return client


def _note(**overrides):
    now = datetime(2025, 1, 1, tzinfo=timezone.utc).isoformat()
    note = {
        "id": str(NOTE_ID),
        "title": "Catatan",
        "content": "",
        "color": "#E9D5FF",
        "images": [],
        "date": now,
        "owner_id": str(USER_ID),
        "is_pinned": False,
        "is_archived": False,
        "is_deleted": False,
        "deleted_at": None,
        "is_public": True,
        "likes_count": 0,
        "is_liked": False,
        "created_at": now,
        "updated_at": now,
    }
    note.update(overrides)
    return note


def test_list_notes_passes_filters(monkeypatch, authed_client):
    called = {}

    async def fake_list(self, user_id, page, per_page, archived, deleted):
        called.update(page=page, per_page=per_page, archived=archived, deleted=deleted)
        return {
            "items": [_note()],
            "total": 1,
            "page": page,
            "per_page": per_page,
            "pages": 1,
            "has_next": False,
            "has_prev": False,
        }

    monkeypatch.setattr(NoteService, "list_user_notes", fake_list, raising=True)

    resp = authed_client.get("/api/notes/", params={"archived": "true", "page": 2, "per_page": 10})
    assert resp.status_code == 200
    assert called == {"page": 2, "per_page": 10, "archived": True, "deleted": False}


def test_list_notes_rejects_large_page_size(authed_client):
    assert authed_client.get("/api/notes/", params={"per_page": 500}).status_code == 422


def test_create_note_returns_201(monkeypatch, authed_client):
    async def fake_create(self, user_id, request):
        return _note(title=request.title)

    monkeypatch.setattr(NoteService, "create_note", fake_create, raising=True)

    resp = authed_client.post("/api/notes/", json={"title": "Baru"})
    assert resp.status_code == 201
    assert resp.json()["title"] == "Baru"


def test_create_note_invalid_color(authed_client):
    resp = authed_client.post("/api/notes/", json={"color": "ungu"})
    assert resp.status_code == 422


def test_empty_trash_route_is_not_a_note_id(monkeypatch, authed_client):
    async def fake_empty(self, user_id):
        return {"message": "Trash emptied successfully", "deleted_count": 3}

    monkeypatch.setattr(NoteService, "empty_trash", fake_empty, raising=True)

    resp = authed_client.delete("/api/notes/trash/empty")
    assert resp.status_code == 200
    assert resp.json()["deleted_count"] == 3


def test_delete_note_permanent_flag(monkeypatch, authed_client):
    called = {}

    async def fake_delete(self, note_id, user_id, permanent=False):
        called["permanent"] = permanent
        return {"message": "Note permanently deleted"}

    monkeypatch.setattr(NoteService, "delete_note", fake_delete, raising=True)

    resp = authed_client.delete(f"/api/notes/{NOTE_ID}", params={"permanent": "true"})
    assert resp.status_code == 200
    assert called["permanent"] is True


def test_upload_file(authed_client, fake_storage):
    resp = authed_client.post(
        "/api/notes/upload-file", files={"file": ("dot.png", PNG_BYTES, "image/png")}
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["public_id"] == "fake-1"
    assert fake_storage.saved["fake-1"] == PNG_BYTES


def test_upload_file_missing(authed_client):
    resp = authed_client.post("/api/notes/upload-file")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "No file provided"


def test_upload_file_wrong_type(authed_client):
    resp = authed_client.post(
        "/api/notes/upload-file", files={"file": ("notes.txt", b"halo", "text/plain")}
    )
    assert resp.status_code == 400


def test_upload_file_reads_at_most_one_byte_past_limit(monkeypatch, authed_client, fake_storage):
    fake_storage.settings = Settings(_env_file=None, max_image_size_mb=1)
    limit = 1024 * 1024
    seen = {}

    original = NoteService.upload_image_file

    async def spy(self, data, content_type):
        seen["size"] = len(data)
        return await original(self, data, content_type)

    monkeypatch.setattr(NoteService, "upload_image_file", spy, raising=True)

    resp = authed_client.post(
        "/api/notes/upload-file",
        files={"file": ("big.png", PNG_BYTES + b"\0" * limit, "image/png")},
    )
    assert resp.status_code == 400
    assert "maximum size" in resp.json()["detail"]
    assert seen["size"] == limit + 1
    assert fake_storage.saved == {}


def test_like_and_visibility(monkeypatch, authed_client):
    async def fake_like(self, note_id, user_id):
        return {"liked": True, "likes_count": 1}

    async def fake_visibility(self, note_id, user_id, is_public):
        return {"message": "Note visibility updated", "is_public": is_public}

    monkeypatch.setattr(NoteService, "toggle_like", fake_like, raising=True)
    monkeypatch.setattr(NoteService, "set_visibility", fake_visibility, raising=True)

    assert authed_client.post(f"/api/notes/{NOTE_ID}/like").json() == {"liked": True, "likes_count": 1}

    resp = authed_client.put(f"/api/notes/{NOTE_ID}/visibility", json={"is_public": False})
    assert resp.json() == {"message": "Note visibility updated", "is_public": False}


def test_notes_require_auth(client):
    app.dependency_overrides[get_db_session] = _no_db
    assert client.get("/api/notes/").status_code == 401
