"""
Pytest configuration and fixtures for Content Shield tests

Every test gets its own in-memory SQLite database (with foreign keys enforced)
and its own blob store under tmp_path. Tests that interleave two sessions use
a file-backed database instead, since each session needs its own connection.
"""

import uuid
from collections.abc import AsyncGenerator
from datetime import timedelta
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from content_shield.auth import create_access_token, hash_password
from content_shield.config import settings
from content_shield.constants.licensing import LicenseType, RequestStatus
from content_shield.database import Base, get_db
from content_shield.models.content import ContentItem
from content_shield.models.license_request import LicenseRequest
from content_shield.models.user import User
from content_shield.schemas.content import ContentMetadata
from content_shield.services.blob_store import LocalBlobStore, get_blob_store
from content_shield.services.content_identity import ContentIdentityService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def test_engine():
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest.fixture
async def file_session_maker(tmp_path):
    """Sessions on a file-backed database, for tests that interleave two connections"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'shared.db'}")
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def test_db(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def blob_store(tmp_path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "uploads")


async def _create_user(db: AsyncSession, email: str, role: str = "user") -> User:
    user = User(email=email, hashed_password=hash_password("password123"), role=role)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def test_user(test_db: AsyncSession) -> User:
    """Content owner in most tests"""
    return await _create_user(test_db, "owner@example.com")


@pytest.fixture
async def other_user(test_db: AsyncSession) -> User:
    """A second, non-owner user"""
    return await _create_user(test_db, "viewer@example.com")


@pytest.fixture
async def test_admin(test_db: AsyncSession) -> User:
    return await _create_user(test_db, "admin@example.com", role="admin")


@pytest.fixture
def make_content(test_db: AsyncSession, blob_store: LocalBlobStore):
    """Factory registering unique content for an owner"""

    async def _make(
        owner: User,
        license_type: LicenseType = LicenseType.FREE,
        allow_download: bool = False,
        data: bytes | None = None,
        title: str = "Test Post",
    ) -> ContentItem:
        metadata = ContentMetadata(
            title=title,
            license_type=license_type,
            allow_download=allow_download,
            original_filename="post.txt",
            content_type="text/plain",
        )
        payload = data if data is not None else f"content-{uuid.uuid4()}".encode()
        return await ContentIdentityService(test_db, blob_store).register_content(owner, payload, metadata)

    return _make


@pytest.fixture
def grant_license(test_db: AsyncSession):
    """Factory inserting a license request with a given status"""

    async def _grant(content: ContentItem, requester: User, status: RequestStatus = RequestStatus.APPROVED):
        request = LicenseRequest(
            content_id=content.id,
            requester_id=requester.id,
            owner_id=content.owner_id,
            status=status.value,
        )
        test_db.add(request)
        await test_db.commit()
        await test_db.refresh(request)
        return request

    return _grant


def _auth_headers(user: User) -> dict:
    token = create_access_token(data={"sub": user.email}, expires_delta=timedelta(minutes=30))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    return _auth_headers(test_user)


@pytest.fixture
def other_auth_headers(other_user: User) -> dict:
    return _auth_headers(other_user)


@pytest.fixture
def admin_auth_headers(test_admin: User) -> dict:
    return _auth_headers(test_admin)


@pytest.fixture
async def client(session_maker, blob_store, tmp_path, monkeypatch) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, wired to the test database and blob store"""
    from main import create_app

    monkeypatch.setattr(settings, "temp_upload_dir", tmp_path / "staging")

    app = create_app()

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def shared_users(file_session_maker) -> SimpleNamespace:
    """Owner, viewer and admin accounts in the file-backed database"""
    async with file_session_maker() as session:
        return SimpleNamespace(
            owner=await _create_user(session, "owner@example.com"),
            viewer=await _create_user(session, "viewer@example.com"),
            admin=await _create_user(session, "admin@example.com", role="admin"),
        )


@pytest.fixture
def shared_content(blob_store: LocalBlobStore):
    """Factory registering content through a given session"""

    async def _make(
        session: AsyncSession,
        owner: User,
        license_type: LicenseType = LicenseType.FREE,
        data: bytes | None = None,
    ) -> ContentItem:
        metadata = ContentMetadata(
            title="Shared Post",
            license_type=license_type,
            original_filename="post.txt",
            content_type="text/plain",
        )
        payload = data if data is not None else f"content-{uuid.uuid4()}".encode()
        return await ContentIdentityService(session, blob_store).register_content(owner, payload, metadata)

    return _make
