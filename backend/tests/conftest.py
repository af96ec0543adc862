"""Pytest fixtures: a fresh in-memory SQLite database per test."""

import os

# Settings are read at import time; give the app what it needs before importing it.
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("VOTE_TOKEN_PASSPHRASE", "test-vote-passphrase")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timezone

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from newsboard.core.limiter import limiter
from newsboard.db.base import Base
from newsboard.db.session import get_db
from newsboard.models import Entry, EntryKind, User
from newsboard.services.auth import create_access_token, hash_password

PASSWORD = "correct-horse"


@pytest_asyncio.fixture
async def engine():
    """One shared connection so every session sees the same in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def add_user(session_factory):
    """Insert a user and return it."""

    async def _add(username: str, is_admin: bool = False, active: bool = True) -> User:
        async with session_factory() as s:
            user = User(
                username=username,
                password_hash=hash_password(PASSWORD),
                active=active,
                is_admin=is_admin,
                created_at=datetime.now(timezone.utc),
            )
            s.add(user)
            await s.commit()
            return user

    return _add


@pytest.fixture
def add_entry(session_factory):
    """Insert a submission (or a comment when ``parent_id`` is given) and return it."""

    async def _add(
        author: User,
        title: str = "an entry",
        parent_id: int | None = None,
        created_at: datetime | None = None,
        kind: EntryKind | None = None,
    ) -> Entry:
        if kind is None:
            kind = EntryKind.COMMENT if parent_id else EntryKind.SUBMISSION
        async with session_factory() as s:
            entry = Entry(
                kind=kind.value,
                title=title if kind is EntryKind.SUBMISSION else "",
                url="",
                body=f"body of {title}",
                created_at=created_at or datetime.now(timezone.utc),
                author_id=author.id,
                parent_id=parent_id,
            )
            s.add(entry)
            await s.commit()
            return entry

    return _add


@pytest.fixture
def password():
    """Password of every user made by ``add_user``."""
    return PASSWORD


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def login():
    return auth_headers


@pytest_asyncio.fixture
async def client(session_factory):
    """ASGI client against the app with its database swapped for the test one."""
    from newsboard.main import app

    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    limiter.enabled = False
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
    limiter.enabled = True
