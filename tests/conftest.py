"""Shared fixtures and fake collaborators for the CourseReel test suite."""

import random

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from coursereel.core.config import Settings
from coursereel.core.errors import ContentSynthesisError, StockMediaError
from coursereel.db.base import Base
from coursereel.schemas.generation import Topic
from coursereel.services.stock_assets import StockAsset


# ---------------------------------------------------------------------------
# Database: fresh in-memory SQLite per test
# ---------------------------------------------------------------------------

@pytest.fixture()
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db(engine):
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with session_factory() as session:
        yield session


@pytest.fixture()
def settings():
    return Settings(_env_file=None, anthropic_api_key="", pexels_api_key="", elevenlabs_api_key="")


@pytest.fixture()
def rng():
    return random.Random(1234)


# ---------------------------------------------------------------------------
# Fake external services
# ---------------------------------------------------------------------------

class FakeContentClient:
    """Stands in for ContentSynthesisClient.

    ``handler(prompt)`` returns the parsed payload or raises. Without a handler
    every call fails, which drives the fallback paths.
    """

    def __init__(self, handler=None):
        self.handler = handler
        self.prompts = []

    async def complete_json(self, prompt, *, max_tokens=1000, timeout=30.0, temperature=None):
        self.prompts.append(prompt)
        if self.handler is None:
            raise ContentSynthesisError("generative service unavailable")
        return self.handler(prompt)


class FakeStockClient:
    """Stands in for PexelsClient: the same ranked page for every query."""

    def __init__(self, page_size=10, fail=False):
        self.page_size = page_size
        self.fail = fail
        self.calls = []

    async def search(self, keywords, media_type, per_page=10):
        self.calls.append((keywords, media_type, per_page))
        if self.fail:
            raise StockMediaError("stock service unavailable")
        return [
            StockAsset(
                id=f"{media_type}-{n}",
                url=f"https://stock.test/{media_type}/{n}",
                media_type=media_type,
                thumbnail=f"https://stock.test/{media_type}/{n}/thumb",
            )
            for n in range(1, min(per_page, self.page_size) + 1)
        ]


@pytest.fixture()
def content_client():
    return FakeContentClient()


@pytest.fixture()
def make_content_client():
    return FakeContentClient


@pytest.fixture()
def stock_client():
    return FakeStockClient()


@pytest.fixture()
def make_stock_client():
    return FakeStockClient


@pytest.fixture()
def topics():
    return [
        Topic(name="Hazard Awareness", subtopics=["Spotting Hazards", "Reporting", "Signage"]),
        Topic(name="Protective Equipment", subtopics=["Choosing PPE", "Inspection", "Storage"]),
        Topic(name="Emergency Response", subtopics=["Evacuation", "First Aid", "Drills"]),
        Topic(name="Culture", subtopics=["Speaking Up", "Near Misses", "Leadership"]),
    ]
