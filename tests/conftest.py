"""Pytest configuration and shared fixtures."""

from decimal import Decimal
from typing import Dict, Optional, Union

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from wishlist_tracker.models.base import Base
from wishlist_tracker.schemas.product import ScrapedProduct
from wishlist_tracker.schemas.wishlist import WishlistItemCreate
from wishlist_tracker.services.wishlist_service import WishlistService


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


# ============================================================================
# DATABASE
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create an in-memory SQLite database for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory bound to the in-memory database."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_db(session_factory):
    """A single session on the in-memory database."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_item(session_factory):
    """Create a wishlist item committed in its own session."""

    async def _make_item(**overrides):
        data = {
            "title": "Linen Shirt",
            "brand": "ZARA",
            "price": Decimal("100.00"),
            "currency": "$",
            "url": "https://www.zara.com/us/en/linen-shirt-p01.html",
            "images": ["https://static.zara.net/linen.jpg"],
        }
        data.update(overrides)
        async with session_factory() as db:
            return await WishlistService(db).create_item(WishlistItemCreate(**data))

    return _make_item


# ============================================================================
# SCRAPER DOUBLES
# ============================================================================

def make_scraped(
    price: Union[str, Decimal] = "100.00",
    in_stock: bool = True,
    url: str = "https://www.zara.com/us/en/linen-shirt-p01.html",
    **overrides,
) -> ScrapedProduct:
    """Build a ScrapedProduct with sensible defaults."""
    data = {
        "title": "Linen Shirt",
        "price": Decimal(str(price)),
        "currency": "$",
        "images": [],
        "brand": "ZARA",
        "in_stock": in_stock,
        "url": url,
    }
    data.update(overrides)
    return ScrapedProduct(**data)


class FakeScraper:
    """Returns canned results per URL; exceptions are raised."""

    def __init__(self, results: Optional[Dict[str, object]] = None, default=None):
        self.results = results or {}
        self.default = default
        self.calls = []

    async def scrape(self, url: str) -> ScrapedProduct:
        self.calls.append(url)
        outcome = self.results.get(url, self.default)
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome is None:
            raise AssertionError(f"No canned result for {url}")
        return outcome


@pytest.fixture
def fake_scraper():
    return FakeScraper()
