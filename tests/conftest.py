"""
Pytest fixtures for scrapbook backend tests.

Storage is a throwaway SQLite file per test (aiosqlite), created from the
ORM metadata with foreign keys enabled so cascades behave as on PostgreSQL.
HTTP tests run the ASGI app in-process through httpx; the Firebase identity
check is replaced by a resolver that reads the user id from the
``X-Test-User`` header (defaulting to the owner).
"""

import os

# Must be set before the app's settings are first read
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DEV_MODE", "false")

from dataclasses import dataclass, field
from uuid import UUID

import httpx
import pytest
import pytest_asyncio
from fastapi import Depends, Header, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scrapbook_api.api.deps import get_current_user
from scrapbook_api.main import app
from scrapbook_api.models import Base, Page, PageElement, Scrapbook, Song, User
from scrapbook_api.models.database import create_engine_for, get_db


@dataclass
class SeededBook:
    """Ids of a scrapbook owned by ``owner_id`` with one page holding two elements."""

    owner_id: UUID
    other_id: UUID
    scrapbook_id: UUID
    page_id: UUID
    element_ids: list[UUID] = field(default_factory=list)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'scrapbook_test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    """Session handed to services under test."""
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def users(session_maker) -> tuple[User, User]:
    """(owner, other) users."""
    async with session_maker() as session:
        owner = User(firebase_uid="uid-owner", email="owner@example.com", name="Owner")
        other = User(firebase_uid="uid-other", email="other@example.com", name="Other")
        session.add_all([owner, other])
        await session.commit()
        return owner, other


@pytest_asyncio.fixture
async def seeded(session_maker, users) -> SeededBook:
    """Scrapbook p1 from the layout scenario: a text element (z=0) and a photo (z=5)."""
    owner, other = users
    async with session_maker() as session:
        scrapbook = Scrapbook(
            user_id=owner.id, title="Summer 2024", theme_category="travel", is_private=True
        )
        session.add(scrapbook)
        await session.flush()

        page = Page(scrapbook_id=scrapbook.id, page_order=0, background_color="#000000")
        session.add(page)
        await session.flush()

        text = PageElement(
            page_id=page.id,
            type="text",
            x_pos=5.0,
            y_pos=5.0,
            z_index=0,
            properties={"content": "Day one", "font": "Caveat"},
        )
        photo = PageElement(
            page_id=page.id,
            type="photo",
            x_pos=40.0,
            y_pos=60.0,
            rotation=-3.5,
            scale=0.8,
            z_index=5,
            properties={"imageUrl": "https://cdn.example.com/beach.jpg"},
        )
        session.add_all([text, photo])
        await session.commit()

        return SeededBook(
            owner_id=owner.id,
            other_id=other.id,
            scrapbook_id=scrapbook.id,
            page_id=page.id,
            element_ids=[text.id, photo.id],
        )


@pytest_asyncio.fixture
async def songs(session_maker) -> list[Song]:
    async with session_maker() as session:
        catalog = [
            Song(
                title="Island in the Sun",
                artist="Weezer",
                file_url="https://cdn.example.com/island.mp3",
                duration_seconds=200,
            ),
            Song(
                title="Here Comes the Sun",
                artist="The Beatles",
                file_url="https://cdn.example.com/sun.mp3",
                duration_seconds=185,
            ),
            Song(
                title="Holocene",
                artist="Bon Iver",
                file_url="https://cdn.example.com/holocene.mp3",
                duration_seconds=337,
            ),
        ]
        session.add_all(catalog)
        await session.commit()
        return catalog


@pytest_asyncio.fixture
async def client(session_maker, users):
    """HTTP client against the app with test storage and header-driven identity."""
    owner, _ = users

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_current_user(
        db: AsyncSession = Depends(get_db),
        x_test_user: str | None = Header(None),
    ) -> User:
        user = await db.get(User, UUID(x_test_user) if x_test_user else owner.id)
        if user is None:
            raise HTTPException(status_code=401, detail="Authentication required")
        return user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_current_user
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def read_elements(session_maker):
    """Async reader for a page's elements through a fresh session (insertion order)."""

    async def _read(page_id: UUID) -> list[PageElement]:
        async with session_maker() as session:
            result = await session.execute(
                select(PageElement)
                .where(PageElement.page_id == page_id)
                .order_by(PageElement.created_at)
            )
            return list(result.scalars().all())

    return _read


@pytest.fixture
def read_page(session_maker):
    async def _read(page_id: UUID) -> Page | None:
        async with session_maker() as session:
            return await session.get(Page, page_id)

    return _read
