"""Service test fixtures: async DB, FastAPI test client and identity helpers.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - Identity verifier overridden with an HS256 verifier; tokens minted by `token_for`
    - Image storage overridden with a LocalImageStorage under tmp_path

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for store and
      API tests (row locks and ON DELETE CASCADE are PostgreSQL-only and not
      exercised here; the ORM cascades cover deletes)
    - db_manager patched: the readiness probe uses db_manager directly
"""

import json

import jwt
import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from guildhall.api.graphql.context import get_identity_verifier, get_image_storage
from guildhall.db.base import Base
from guildhall.infrastructure.database import get_db, DatabaseSessionManager
from guildhall.infrastructure.identity import JwtIdentityVerifier
from guildhall.infrastructure.image_storage import LocalImageStorage
from guildhall.models.profile import Profile
import guildhall.infrastructure.database as db_module
from guildhall.main import app

TEST_SECRET = "guildhall-test-secret-key-0123456789abcdef"
IMAGE_BASE_URL = "http://test/images"
MAX_UPLOAD_BYTES = 1024


def token_for(email: str, subject: str | None = None) -> str:
    payload = {"email": email, "sub": subject or f"user|{email}"}
    return jwt.encode(payload, TEST_SECRET, algorithm="HS256")


def auth_headers(email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_for(email)}"}


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def image_storage(tmp_path):
    return LocalImageStorage(tmp_path / "images", IMAGE_BASE_URL, MAX_UPLOAD_BYTES)


@pytest.fixture
async def client(test_engine, test_session_factory, image_storage):
    """FastAPI test client with DB, identity and storage dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_verifier] = (
        lambda: JwtIdentityVerifier(TEST_SECRET, ["HS256"])
    )
    app.dependency_overrides[get_image_storage] = lambda: image_storage

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def make_profile(test_db):
    """Insert a profile directly; returns an async factory."""
    async def _make(name: str, email: str) -> Profile:
        profile = Profile(name=name, email=email, user_id=f"user|{email}")
        test_db.add(profile)
        await test_db.commit()
        return profile
    return _make


@pytest.fixture
def gql(client):
    """POST a GraphQL operation as `email` (anonymous when None)."""
    async def _post(query: str, variables: dict | None = None, email: str | None = None):
        headers = auth_headers(email) if email else {}
        res = await client.post(
            "/graphql",
            json={"query": query, "variables": variables or {}},
            headers=headers,
        )
        assert res.status_code == 200
        return res.json()
    return _post


@pytest.fixture
def post_multipart(client):
    """POST raw multipart GraphQL parts as `email`; returns the response."""
    async def _post(operations: dict, file_map: dict, files: dict, email: str):
        return await client.post(
            "/graphql",
            data={
                "operations": json.dumps(operations),
                "map": json.dumps(file_map),
            },
            files=files,
            headers=auth_headers(email),
        )
    return _post


@pytest.fixture
def gql_upload(post_multipart):
    """POST a multipart GraphQL request with `file` bound to an upload."""
    async def _post(
        query: str,
        variables: dict,
        email: str,
        content: bytes = b"\x89PNG fake image",
        filename: str = "icon.png",
    ):
        res = await post_multipart(
            {"query": query, "variables": {**variables, "file": None}},
            {"0": ["variables.file"]},
            {"0": (filename, content, "image/png")},
            email,
        )
        assert res.status_code == 200
        return res.json()
    return _post
