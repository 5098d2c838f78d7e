"""
Scorecard — Shared pytest Fixtures & Configuration

Provides common fixtures for all test modules:
- In-memory SQLite engine / session factory with the cards table
- Dictionaries without the curated player list (exercises the name-shape path)
- Listing builders
- Async test support via pytest-asyncio
"""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.engine.dictionaries import SEED_DICTIONARIES, Dictionaries
from src.engine.name_overrides import EMPTY_OVERRIDES, NameOverrides
from src.models import Base
from src.scraper import ScrapedListing


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

pytest_plugins = ("pytest_asyncio",)


# Seed vocabulary minus the curated player names: forces extraction through
# the removal + name-shape path instead of the known-player shortcut.
NO_PLAYERS: Dictionaries = SEED_DICTIONARIES.model_copy(update={"players": frozenset()})


@pytest.fixture
def no_players() -> Dictionaries:
    return NO_PLAYERS


@pytest.fixture
def no_overrides() -> NameOverrides:
    return EMPTY_OVERRIDES


# ---------------------------------------------------------------------------
# Database Fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator:
    """
    In-memory SQLite engine with every table created.

    StaticPool keeps the single in-memory database alive across sessions.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Listing Builders
# ---------------------------------------------------------------------------


def make_listing(title: str, item_url: str | None = None, price: str | None = "25.00") -> ScrapedListing:
    return ScrapedListing(
        title=title,
        price=price,
        soldDate="2024-05-01",
        condition="Graded",
        itemUrl=item_url,
    )


@pytest.fixture
def listing_factory():
    return make_listing
