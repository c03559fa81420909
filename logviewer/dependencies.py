"""
FastAPI dependency injection utilities.
Provides database sessions, the clock, the log store and the query service.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from logviewer.config import settings
from logviewer.core.time_window import Clock, utc_now
from logviewer.database.session import get_db
from logviewer.repositories.log_repository import LogRepository, LogStore
from logviewer.services.log_query_service import LogQueryService


def get_clock() -> Clock:
    """
    Dependency returning the clock used for recency windows.

    Override in tests to pin ``now``:
        app.dependency_overrides[get_clock] = lambda: fixed_clock
    """
    return utc_now


async def get_log_store(db: AsyncSession = Depends(get_db)) -> LogStore:
    """
    Dependency to get the log store for the current request.

    Args:
        db: Database session

    Returns:
        LogStore backed by SQLAlchemy
    """
    return LogRepository(db, timeout_seconds=settings.STORE_TIMEOUT_SECONDS)


async def get_query_service(
    store: LogStore = Depends(get_log_store),
    clock: Clock = Depends(get_clock)
) -> LogQueryService:
    """
    Dependency to get the log query service.

    Example:
        @router.get("/recent")
        async def recent(service: LogQueryService = Depends(get_query_service)):
            ...
    """
    return LogQueryService(store, clock=clock)
