"""
Database session management for SQLAlchemy with async support.
"""
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
import logging

from logviewer.config import settings

logger = logging.getLogger(__name__)

# Create async engine
engine = create_async_engine(settings.async_database_url, **settings.get_engine_kwargs())

# Create session maker
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function to get database session.

    The service only reads, so the session is rolled back on exit.

    Yields:
        AsyncSession: Database session
    """
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()


async def init_db():
    """
    Initialize database - create all tables.
    Only use in development or for local fixtures; the telemetry
    tables are owned by the logging pipeline in production.
    """
    from logviewer.database.models import Base

    async with engine.begin() as conn:
        logger.info("Creating database tables...")
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")


async def close_db():
    """
    Close database connections.
    Call during application shutdown.
    """
    logger.info("Closing database connections...")
    await engine.dispose()
    logger.info("Database connections closed")
