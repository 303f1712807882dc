"""
Shared fixtures: in-memory SQLite, fake storage and cache, seeded orgs.

Two organizations are seeded: "Hack A" (alice: lead/tech, bob: member/logistics)
and "Hack B" (carol: lead). Fixtures hand out plain ids so tests never touch
ORM instances that a rollback might have expired.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import hackportal.models  # noqa: F401
from hackportal.api.deps import get_route_cache, get_storage
from hackportal.core.auth import create_access_token
from hackportal.core.context import InMemoryOrgSelectionStore, RequestContext, SessionUser
from hackportal.core.database import get_session
from hackportal.core.storage import StorageError
from hackportal.main import app
from hackportal.models.org_member import OrgMember
from hackportal.models.organization import Organization
from hackportal.models.profile import Profile


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeStorage:
    """In-memory object store with switchable failures."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.fail_upload = False
        self.fail_remove = False
        self.fail_sign = False
        self.removed: list[str] = []

    async def upload(self, path, content, *, content_type, upsert=False):
        if self.fail_upload:
            raise StorageError("upload rejected")
        if path in self.objects and not upsert:
            raise StorageError("The resource already exists")
        self.objects[path] = content

    async def remove(self, paths):
        if self.fail_remove:
            raise StorageError("remove rejected")
        for path in paths:
            self.objects.pop(path, None)
            self.removed.append(path)

    async def create_signed_url(self, path, expires_in):
        if self.fail_sign:
            raise StorageError("Object not found")
        return f"https://storage.test/signed/{path}?expires_in={expires_in}"


class RecordingCache:
    def __init__(self):
        self.paths: list[str] = []

    async def revalidate(self, path):
        self.paths.append(path)


@dataclass
class Seed:
    org_a: uuid.UUID
    org_b: uuid.UUID
    alice: uuid.UUID
    bob: uuid.UUID
    carol: uuid.UUID
    outsider: uuid.UUID = field(default_factory=uuid.uuid4)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seed(session) -> Seed:
    seed = Seed(
        org_a=uuid.uuid4(),
        org_b=uuid.uuid4(),
        alice=uuid.uuid4(),
        bob=uuid.uuid4(),
        carol=uuid.uuid4(),
    )
    session.add_all([
        Organization(id=seed.org_a, name="Hack A", slug="hack-a"),
        Organization(id=seed.org_b, name="Hack B", slug="hack-b"),
        Profile(id=seed.alice, email="alice@example.com", full_name="Alice Adams"),
        Profile(id=seed.bob, email="bob@example.com", full_name="Bob Brown"),
        Profile(id=seed.carol, email="carol@example.com", full_name="Carol Chen"),
    ])
    await session.flush()
    session.add_all([
        OrgMember(user_id=seed.alice, org_id=seed.org_a, role="lead", team="tech"),
        OrgMember(user_id=seed.bob, org_id=seed.org_a, role="member", team="logistics"),
        OrgMember(user_id=seed.carol, org_id=seed.org_b, role="lead"),
    ])
    await session.commit()
    return seed


# ---------------------------------------------------------------------------
# Service-level context
# ---------------------------------------------------------------------------


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def cache():
    return RecordingCache()


@pytest.fixture
def make_ctx(session, storage, cache):
    def _make(user_id: Optional[uuid.UUID], selected: Optional[uuid.UUID] = None) -> RequestContext:
        user = SessionUser(id=user_id, email=f"{user_id}@example.com") if user_id else None
        return RequestContext(
            session=session,
            user=user,
            selection=InMemoryOrgSelectionStore(str(selected) if selected else None),
            cache=cache,
            storage=storage,
        )

    return _make


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
async def client(session_factory, seed, storage, cache):
    async def _session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_route_cache] = lambda: cache
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_for():
    """Authorization headers carrying a valid access token for a user id."""

    def _headers(user_id: uuid.UUID) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id, f'{user_id}@example.com')}"}

    return _headers
