"""Shared pytest fixtures configured to use SQLite in-memory for tests."""

import logging
import os
import tempfile
from uuid import uuid4

# Must be set before the app (and its settings) are imported
os.environ.setdefault("NOTU_SKIP_LIFESPAN_DB", "1")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="notu-logs-"))
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="notu-uploads-"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from notu.core.models import BaseModel, Note, User  # noqa: E402
from notu.core.storage import ImageStorage, StoredImage, get_image_storage  # noqa: E402
from notu.database import get_db_session  # noqa: E402
from notu.main import app  # noqa: E402
from notu.security.jwt import create_access_token  # noqa: E402
from notu.security.password import hash_password  # noqa: E402

# Silence extremely verbose DEBUG logs from aiosqlite to keep test output readable
logging.getLogger("aiosqlite").setLevel(logging.WARNING)

TEST_PASSWORD = "rahasia123"

# 1x1 transparent PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d49484452000000010000000108060000001f15c489"
    "0000000d4944415478da636460f85f0f0002870180eb47ba920000000049454e44ae426082"
)
PNG_DATA_URI = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="


class FakeImageStorage(ImageStorage):
    """In-memory image storage that records uploads and deletions."""

    def __init__(self):
        super().__init__()
        self.saved = {}
        self.deleted = []

    async def _store(self, data: bytes, content_type: str) -> StoredImage:
        public_id = f"fake-{len(self.saved) + len(self.deleted) + 1}"
        self.saved[public_id] = data
        return StoredImage(url=f"https://img.test/{public_id}.png", public_id=public_id)

    async def delete(self, public_id: str) -> None:
        self.deleted.append(public_id)
        self.saved.pop(public_id, None)


@pytest.fixture
async def test_engine():
    """Fresh SQLite in-memory engine per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,  # keep the same memory DB across connections
        connect_args={"check_same_thread": False},
    )

    # SQLite only honours ON DELETE CASCADE with foreign keys switched on
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def test_session(test_engine):
    """Database session bound to the per-test engine."""
    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def fake_storage():
    return FakeImageStorage()


@pytest.fixture
def test_app(test_session, fake_storage):
    """App wired to the test session and the fake image storage."""

    async def _override_get_db():
        yield test_session

    app.dependency_overrides[get_db_session] = _override_get_db
    app.dependency_overrides[get_image_storage] = lambda: fake_storage
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(test_app):
    """Async client talking to the app in-process."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def client():
    """Plain TestClient for router tests that patch services."""
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(test_session):
    """Factory creating users straight in the database."""

    async def _make_user(name: str = "Test User", email: str = None, password: str = TEST_PASSWORD, **kwargs):
        user = User(
            email=email or f"user_{uuid4().hex[:8]}@example.com",
            name=name,
            password_hash=hash_password(password) if password else None,
            **kwargs,
        )
        test_session.add(user)
        await test_session.commit()
        await test_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_note(test_session):
    """Factory creating notes straight in the database."""

    async def _make_note(owner: User, **kwargs):
        kwargs.setdefault("title", "Test Note")
        kwargs.setdefault("content", "Isi catatan")
        note = Note(owner_id=owner.id, **kwargs)
        test_session.add(note)
        await test_session.commit()
        await test_session.refresh(note)
        return note

    return _make_note


def auth_headers_for(user: User) -> dict:
    """Authorization header with a fresh access token for the user."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
async def test_user(make_user):
    return await make_user(name="Budi", email="budi@example.com")


@pytest.fixture
def auth_headers(test_user):
    return auth_headers_for(test_user)
