"""
Pytest configuration and shared fixtures for the catalog sync tests.
"""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("CATALOG_SYNC_ON_STARTUP", "false")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import logging
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from backend.src.core.database import Base
from backend.src.models.product import Product


# ============================================================================
# DATABASE FIXTURES
# ============================================================================

@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test."""
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
    """Session maker bound to the test engine."""
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    """Database session for a single test."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_products(db):
    """Insert ``count`` products directly with strictly increasing timestamps."""

    async def _make(count, start=0, shopify_ids=False, base_time=None):
        base_time = base_time or datetime(2025, 1, 1, 12, 0, 0)
        records = []
        for index in range(start, start + count):
            stamp = base_time + timedelta(minutes=index)
            records.append(
                Product(
                    shopify_product_id=1_000 + index if shopify_ids else None,
                    title=f"Product {index}",
                    handle=f"product-{index}",
                    price=Decimal("10.00") + index,
                    product_type="Activewear",
                    variants=[],
                    created_at=stamp,
                    updated_at=stamp,
                )
            )
        db.add_all(records)
        await db.commit()
        return records

    return _make


# ============================================================================
# FEED FIXTURES
# ============================================================================

def build_feed_product(index, price=None):
    """One Shopify-style feed entry."""
    return {
        "id": 1_000 + index,
        "title": f"Product {index}",
        "handle": f"product-{index}",
        "product_type": "Activewear",
        "variants": [
            {
                "id": 10_000 + index,
                "title": f"Variant {index}",
                "price": str(299 + index) if price is None else price,
                "sku": f"SKU-{index}",
                "available": True,
            }
        ],
    }


@pytest.fixture
def feed_product():
    """Factory for a single feed entry."""
    return build_feed_product


@pytest.fixture
def build_feed():
    """Factory for feed documents with ``total`` products."""

    def _build(total, start=0):
        return {"products": [build_feed_product(i) for i in range(start, start + total)]}

    return _build


# ============================================================================
# UTILITY FIXTURES
# ============================================================================

@pytest.fixture
def capture_logs(caplog):
    """Capture log output for testing."""
    caplog.set_level(logging.DEBUG)
    return caplog
