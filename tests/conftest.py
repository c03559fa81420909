"""
Pytest configuration and shared fixtures.
"""
import pytest
from datetime import datetime, timezone
from typing import AsyncGenerator, List

from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from logviewer.core.planner import QueryPlan
from logviewer.core.records import ErrorLogRecord, TraceLogRecord
from logviewer.database.models import Base
from logviewer.dependencies import get_clock, get_log_store
from logviewer.main import app


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

FIXED_NOW = datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


class FixedClock:
    """Clock that always returns the same instant and counts calls."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now
        self.calls = 0

    def __call__(self) -> datetime:
        self.calls += 1
        return self.now


class RecordingStore:
    """In-memory LogStore that records every plan it receives."""

    def __init__(self, records: List = None, total: int = 0, error: Exception = None):
        self.records = records or []
        self.total = total
        self.error = error
        self.plans: List[QueryPlan] = []
        self.count_plans: List[QueryPlan] = []

    async def execute(self, plan: QueryPlan):
        self.plans.append(plan)
        if self.error:
            raise self.error
        return self.records[:plan.limit]

    async def count(self, plan: QueryPlan) -> int:
        self.count_plans.append(plan)
        if self.error:
            raise self.error
        return self.total

    @property
    def last_plan(self) -> QueryPlan:
        return self.plans[-1]


@pytest.fixture
def fixed_clock() -> FixedClock:
    """Clock pinned to FIXED_NOW."""
    return FixedClock()


@pytest.fixture
def recording_store() -> RecordingStore:
    """Empty recording store."""
    return RecordingStore()


@pytest.fixture
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def test_client(recording_store, fixed_clock):
    """Create test client backed by the recording store and the fixed clock."""
    app.dependency_overrides[get_log_store] = lambda: recording_store
    app.dependency_overrides[get_clock] = lambda: fixed_clock

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


# Test data factories
class TestDataFactory:
    """Factory for creating test data."""

    __test__ = False

    @staticmethod
    def trace_record(record_id: int = 1, created_at: datetime = FIXED_NOW, **payload) -> TraceLogRecord:
        """Create a trace log record."""
        base_payload = {"appName": "launcher", "logType": "debug"}
        base_payload.update(payload)
        return TraceLogRecord(id=record_id, created_at=created_at, payload=base_payload)

    @staticmethod
    def error_record(record_id: int = 1, created_at: datetime = FIXED_NOW, **kwargs) -> ErrorLogRecord:
        """Create an error log record."""
        base_data = {
            "profile": "dev",
            "app_name": "vlmsapi",
            "err_cd": "ERRSOCK004",
            "exception": "SocketException",
            "message": "socket disconnected",
            "user_id": "u-1001",
        }
        base_data.update(kwargs)
        return ErrorLogRecord(id=record_id, created_at=created_at, **base_data)


@pytest.fixture
def test_data_factory():
    """Test data factory fixture."""
    return TestDataFactory


# Pytest configuration
def pytest_collection_modifyitems(config, items):
    """Add markers based on test file location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
