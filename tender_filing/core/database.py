"""Async engine, per-request session dependency and startup helpers."""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from tender_filing.core.config import settings
from tender_filing.utils.logging import get_logger

LOGGER = get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db.pool_size,
    max_overflow=settings.db.max_overflow,
    echo=settings.db.echo,
    pool_pre_ping=True,
    # PgBouncer cannot share prepared statements
    connect_args={"statement_cache_size": 0},
)

async_session_maker = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with async_session_maker() as session:
        yield session


class DatabaseClient:
    """Schema creation and connectivity checks for the shared engine."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def create_tables(self) -> None:
        """Create tables that don't exist yet; existing tables are left alone."""
        # Registers the mapped classes on Base.metadata
        from tender_filing.database import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        LOGGER.info("Database tables created/verified successfully")

    async def health_check(self) -> dict:
        """Run ``SELECT 1`` and report the outcome; never raises."""
        try:
            async with self.engine.connect() as conn:
                await conn.scalar(text("SELECT 1"))
        except Exception as e:
            LOGGER.error("Database health check failed", extra={"error": str(e)})
            return {"status": "unhealthy", "connected": False, "error": str(e)}

        return {"status": "healthy", "connected": True, "database": "postgresql"}


db_client = DatabaseClient(engine)


async def init_database(create_tables: bool = True) -> None:
    """Verify connectivity and optionally create missing tables.

    Raises:
        Exception: Whatever the driver raised when the database is unreachable
    """
    LOGGER.info("Initializing database connection...")
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))

    if create_tables:
        await db_client.create_tables()
    LOGGER.info("Database initialization completed")


async def close_database() -> None:
    """Dispose of the connection pool."""
    await engine.dispose()
    LOGGER.info("Database connection closed")
