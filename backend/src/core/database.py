"""
Database configuration and session management.
"""

from typing import Any, AsyncGenerator, Dict
from urllib.parse import parse_qs, urlparse, urlunparse

from sqlalchemy import event, pool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from backend.src.core.config import settings

# Base class for ORM models
Base = declarative_base()


def build_async_url(database_url: str) -> tuple[str, Dict[str, Any]]:
    """
    Convert a plain PostgreSQL URL into an asyncpg URL plus connect args.

    Non-PostgreSQL URLs (e.g. ``sqlite+aiosqlite://``) are returned unchanged.

    Args:
        database_url: Configured database URL

    Returns:
        Tuple of (async URL, connect_args)
    """
    if not database_url.startswith(("postgresql://", "postgres://")):
        return database_url, {}

    parsed = urlparse(database_url)
    query_params = parse_qs(parsed.query)

    # asyncpg takes ssl as a connect argument, not a query parameter
    connect_args: Dict[str, Any] = {}
    if "sslmode" in query_params:
        sslmode = query_params["sslmode"][0]
        if sslmode in ("require", "prefer", "allow"):
            connect_args["ssl"] = True
        elif sslmode == "disable":
            connect_args["ssl"] = False

    clean_url = urlunparse(parsed._replace(scheme="postgresql+asyncpg", query=""))
    return clean_url, connect_args


def _engine_options(async_url: str, connect_args: Dict[str, Any]) -> Dict[str, Any]:
    """Pool options for the async engine; only PostgreSQL gets a sized pool."""
    options: Dict[str, Any] = {"echo": settings.DEBUG}
    if async_url.startswith("postgresql+asyncpg://"):
        options.update(
            poolclass=pool.AsyncAdaptedQueuePool,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,
            pool_recycle=3600,
            connect_args=connect_args,
        )
    return options


async_url, connect_args = build_async_url(settings.DATABASE_URL)

# Asynchronous engine for API operations and catalog sync
async_engine = create_async_engine(async_url, **_engine_options(async_url, connect_args))

AsyncSessionLocal = async_sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# Database session dependency for FastAPI
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    Yields:
        AsyncSession: SQLAlchemy async session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


if async_engine.dialect.name == "postgresql":

    @event.listens_for(async_engine.sync_engine, "connect")
    def set_postgresql_pragmas(dbapi_conn, connection_record):
        """Set PostgreSQL connection pragmas."""
        cursor = dbapi_conn.cursor()

        # Set statement timeout (30 seconds)
        cursor.execute("SET statement_timeout = 30000")

        cursor.close()


async def init_db() -> None:
    """
    Create missing database tables.

    Schema migrations are out of scope; this only runs ``create_all``.
    """
    # Register models on Base.metadata
    from backend.src.models import product  # noqa: F401

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await async_engine.dispose()
