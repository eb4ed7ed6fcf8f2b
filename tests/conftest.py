"""Shared fixtures: SQLite stores, API clients, users and tokens."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import Base, enable_sqlite_foreign_keys, get_db
from app.main import app
from app.models.idea import Idea
from app.models.invite_code import InviteCode
from app.models.user import User
from app.services.auth import issue_token


# ===========================================
# DATABASE
# ===========================================


async def _prepare(engine):
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def _sessions(engine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def engine():
    """In-memory store; every session shares one connection."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await _prepare(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def file_engine(tmp_path):
    """File-backed store; each session gets its own connection."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ideas.db'}",
        connect_args={"timeout": 30},
    )
    await _prepare(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine) -> async_sessionmaker:
    return _sessions(engine)


@pytest_asyncio.fixture
async def file_session_factory(file_engine) -> async_sessionmaker:
    return _sessions(file_engine)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ===========================================
# HTTP CLIENT
# ===========================================


@asynccontextmanager
async def _client_for(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async test client for the FastAPI app, bound to the in-memory store."""
    async with _client_for(session_factory) as ac:
        yield ac


@pytest_asyncio.fixture
async def file_client(file_session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async test client bound to the file-backed store, for concurrent requests."""
    async with _client_for(file_session_factory) as ac:
        yield ac


# ===========================================
# FACTORIES
# ===========================================


@pytest.fixture
def store():
    """Persist one ORM object through ``session_factory`` and return it refreshed."""

    async def _store(session_factory, obj):
        async with session_factory() as session:
            session.add(obj)
            await session.commit()
            await session.refresh(obj)
            return obj

    return _store


@pytest_asyncio.fixture
async def make_user(session_factory, store):
    async def _make(email: str, is_admin: bool = False) -> User:
        return await store(session_factory, User(email=email, is_admin=is_admin))

    return _make


@pytest_asyncio.fixture
async def make_invite(session_factory, store):
    async def _make(code: str, created_by: int | None = None, is_active: bool = True) -> InviteCode:
        return await store(
            session_factory, InviteCode(code=code, created_by=created_by, is_active=is_active)
        )

    return _make


@pytest_asyncio.fixture
async def make_idea(session_factory, store):
    async def _make(user: User, title: str = "Idea", description: str = "Details",
                    parent_idea_id: int | None = None) -> Idea:
        idea = Idea(
            title=title,
            description=description,
            created_by=user.id,
            parent_idea_id=parent_idea_id,
        )
        return await store(session_factory, idea)

    return _make


@pytest_asyncio.fixture
async def user(make_user) -> User:
    return await make_user("member@example.com")


@pytest_asyncio.fixture
async def admin(make_user) -> User:
    return await make_user("admin@example.com", is_admin=True)


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {issue_token(user)}"}


@pytest_asyncio.fixture
async def auth_headers(user) -> dict:
    return bearer(user)


@pytest_asyncio.fixture
async def admin_headers(admin) -> dict:
    return bearer(admin)


@pytest.fixture
def headers_for():
    """Build an Authorization header for any user."""
    return bearer
