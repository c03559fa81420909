"""
Unit tests for LogRepository against an in-memory SQLite database.
"""
import asyncio
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.exc import OperationalError

from logviewer.core.exceptions import StoreTimeout, StoreUnavailable
from logviewer.core.filters import Filter
from logviewer.core.planner import QueryPlanner
from logviewer.core.records import ErrorLogRecord, LogKind, TraceLogRecord
from logviewer.core.time_window import TimeWindow
from logviewer.database.models import RefinedErrorLog, TraceLog
from logviewer.repositories.log_repository import LogRepository
from logviewer.services.log_query_service import LogQueryService

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)
WINDOW = TimeWindow(NOW - timedelta(hours=1), NOW)


def minutes_ago(minutes: int) -> datetime:
    return NOW - timedelta(minutes=minutes)


def make_plan(kind: LogKind = LogKind.TRACE, limit: int = 100, window: TimeWindow = WINDOW, **filter_kwargs):
    return QueryPlanner().plan(Filter(**filter_kwargs), window, limit, kind=kind)


@pytest.fixture
async def trace_rows(test_session):
    """Seed trace logs covering every filterable payload key."""
    rows = [
        TraceLog(id=1, created_at=minutes_ago(5), log_payload={
            "appName": "launcher", "logType": "debug", "uuid": "abc-001", "profile": "dev"}),
        TraceLog(id=2, created_at=minutes_ago(5), log_payload={
            "appName": "launcher", "logType": "ack", "uuid": "abd-002", "profile": "DEV"}),
        TraceLog(id=3, created_at=minutes_ago(1), log_payload={
            "appName": "vlmsapi", "logType": "event", "evtCd": "EVT001", "profile": "prod"}),
        TraceLog(id=4, created_at=minutes_ago(2), log_payload={
            "appName": "vlmsapi", "logType": "event", "evtCd": "E1"}),
        TraceLog(id=5, created_at=minutes_ago(3), log_payload={
            "appName": "launcher", "logType": "debug", "uuid": "ab%c_9"}),
        TraceLog(id=6, created_at=minutes_ago(4), log_payload={
            "appName": "launcher", "logType": "debug", "uuid": "abXcY9"}),
        # Outside the one hour window
        TraceLog(id=7, created_at=minutes_ago(90), log_payload={
            "appName": "launcher", "logType": "debug", "uuid": "abc-003"}),
    ]
    test_session.add_all(rows)
    await test_session.commit()
    return rows


@pytest.fixture
async def error_rows(test_session):
    """Seed refined error logs."""
    rows = [
        RefinedErrorLog(id=1, created_at=minutes_ago(10), profile="dev", app_name="vlmsapi",
                        err_cd="ERRSOCK004", exception="SocketException"),
        RefinedErrorLog(id=2, created_at=minutes_ago(20), profile="prod", app_name="vlmsapi",
                        err_cd="ERRDB001", exception="SQLException"),
        RefinedErrorLog(id=3, created_at=minutes_ago(30), profile="dev", app_name="launcher",
                        err_cd="ERRNET002", exception="TimeoutException"),
        RefinedErrorLog(id=4, created_at=minutes_ago(120), profile="dev", app_name="vlmsapi",
                        err_cd="ERROLD", exception="OldException"),
    ]
    test_session.add_all(rows)
    await test_session.commit()
    return rows


@pytest.mark.unit
class TestLogRepositoryTraceLogs:
    """Test cases for trace and user log queries."""

    @pytest.mark.asyncio
    async def test_window_only_returns_newest_first_with_id_ties(self, test_session, trace_rows):
        repository = LogRepository(test_session)

        records = await repository.execute(make_plan())

        assert [r.id for r in records] == [3, 4, 5, 6, 1, 2]
        assert all(isinstance(r, TraceLogRecord) for r in records)

    @pytest.mark.asyncio
    async def test_records_are_utc_aware(self, test_session, trace_rows):
        repository = LogRepository(test_session)

        records = await repository.execute(make_plan())

        assert records[0].created_at == minutes_ago(1)
        assert records[0].created_at.tzinfo == timezone.utc

    @pytest.mark.asyncio
    async def test_limit_truncates_result(self, test_session, trace_rows):
        repository = LogRepository(test_session)

        records = await repository.execute(make_plan(limit=2))

        assert [r.id for r in records] == [3, 4]

    @pytest.mark.asyncio
    async def test_window_bounds_are_inclusive(self, test_session, trace_rows):
        repository = LogRepository(test_session)
        window = TimeWindow(minutes_ago(2), minutes_ago(1))

        records = await repository.execute(make_plan(window=window))

        assert [r.id for r in records] == [3, 4]

    @pytest.mark.asyncio
    async def test_event_mode_requires_event_code_of_min_length(self, test_session, trace_rows):
        repository = LogRepository(test_session)

        records = await repository.execute(make_plan(require_evt_cd=True, app_name="launcher"))

        assert [r.id for r in records] == [3]
        assert records[0].evt_cd == "EVT001"

    @pytest.mark.asyncio
    async def test_app_name_and_log_type(self, test_session, trace_rows):
        repository = LogRepository(test_session)

        records = await repository.execute(make_plan(app_name="launcher", log_type="ack"))

        assert [r.id for r in records] == [2]

    @pytest.mark.asyncio
    async def test_app_name_only(self, test_session, trace_rows):
        repository = LogRepository(test_session)

        records = await repository.execute(make_plan(app_name="vlmsapi"))

        assert [r.id for r in records] == [3, 4]

    @pytest.mark.asyncio
    async def test_log_type_only(self, test_session, trace_rows):
        repository = LogRepository(test_session)

        records = await repository.execute(make_plan(log_type="debug"))

        assert [r.id for r in records] == [5, 6, 1]

    @pytest.mark.asyncio
    async def test_uuid_prefix(self, test_session, trace_rows):
        repository = LogRepository(test_session)

        records = await repository.execute(make_plan(uuid_prefix="abc", require_uuid=True))

        assert [r.id for r in records] == [1]

    @pytest.mark.asyncio
    async def test_uuid_prefix_wildcards_match_literally(self, test_session, trace_rows):
        repository = LogRepository(test_session)

        records = await repository.execute(make_plan(uuid_prefix="ab%c_", require_uuid=True))

        assert [r.id for r in records] == [5]

    @pytest.mark.asyncio
    async def test_uuid_prefix_and_log_type(self, test_session, trace_rows):
        repository = LogRepository(test_session)

        records = await repository.execute(
            make_plan(uuid_prefix="ab", require_uuid=True, log_type="ack")
        )

        assert [r.id for r in records] == [2]

    @pytest.mark.asyncio
    async def test_profile_match_ignores_case(self, test_session, trace_rows):
        repository = LogRepository(test_session)

        records = await repository.execute(make_plan(profile="dev"))

        assert [r.id for r in records] == [1, 2]

    @pytest.mark.asyncio
    async def test_user_logs_only_include_records_with_uuid(self, test_session, trace_rows):
        repository = LogRepository(test_session)

        records = await repository.execute(make_plan(kind=LogKind.USER))

        assert [r.id for r in records] == [5, 6, 1, 2]

    @pytest.mark.asyncio
    async def test_user_logs_with_log_type(self, test_session, trace_rows):
        repository = LogRepository(test_session)

        records = await repository.execute(make_plan(kind=LogKind.USER, log_type="debug"))

        assert [r.id for r in records] == [5, 6, 1]

    @pytest.mark.asyncio
    async def test_count_ignores_limit(self, test_session, trace_rows):
        repository = LogRepository(test_session)

        total = await repository.count(make_plan(limit=1))

        assert total == 6

    @pytest.mark.asyncio
    async def test_empty_window_returns_empty_list(self, test_session, trace_rows):
        repository = LogRepository(test_session)
        window = TimeWindow(NOW + timedelta(hours=1), NOW + timedelta(hours=2))

        records = await repository.execute(make_plan(window=window))

        assert records == []


@pytest.mark.unit
class TestLogRepositoryErrorLogs:
    """Test cases for error log queries."""

    @pytest.mark.asyncio
    async def test_window_only(self, test_session, error_rows):
        repository = LogRepository(test_session)

        records = await repository.execute(make_plan(kind=LogKind.ERROR))

        assert [r.id for r in records] == [1, 2, 3]
        assert all(isinstance(r, ErrorLogRecord) for r in records)
        assert records[0].err_cd == "ERRSOCK004"

    @pytest.mark.asyncio
    async def test_profile_and_app_name(self, test_session, error_rows):
        repository = LogRepository(test_session)

        records = await repository.execute(make_plan(kind=LogKind.ERROR, profile="dev", app_name="vlmsapi"))

        assert [r.id for r in records] == [1]

    @pytest.mark.asyncio
    async def test_profile_only(self, test_session, error_rows):
        repository = LogRepository(test_session)

        records = await repository.execute(make_plan(kind=LogKind.ERROR, profile="dev"))

        assert [r.id for r in records] == [1, 3]

    @pytest.mark.asyncio
    async def test_count(self, test_session, error_rows):
        repository = LogRepository(test_session)

        total = await repository.count(make_plan(kind=LogKind.ERROR, app_name="vlmsapi"))

        assert total == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("log_type", ["event", "debug"])
    async def test_trace_only_filters_are_ignored_for_error_logs(self, test_session, error_rows, fixed_clock, log_type):
        service = LogQueryService(LogRepository(test_session), clock=fixed_clock)

        records = await service.query_by_recency(
            LogKind.ERROR, 60, app_name="vlmsapi", log_type=log_type, uuid="abc"
        )

        assert [r.id for r in records] == [1, 2]


@pytest.mark.unit
class TestLogRepositoryFailures:
    """Store failures are mapped onto the error taxonomy."""

    @pytest.mark.asyncio
    async def test_operational_error_maps_to_store_unavailable(self):
        db = MagicMock()
        db.execute = AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("connection refused")))
        repository = LogRepository(db)

        with pytest.raises(StoreUnavailable) as exc_info:
            await repository.execute(make_plan())

        assert exc_info.value.retryable is True
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_socket_error_maps_to_store_unavailable(self):
        db = MagicMock()
        db.execute = AsyncMock(side_effect=ConnectionRefusedError())
        repository = LogRepository(db)

        with pytest.raises(StoreUnavailable):
            await repository.count(make_plan())

    @pytest.mark.asyncio
    async def test_slow_query_maps_to_store_timeout(self):
        async def slow_execute(statement):
            await asyncio.sleep(1)

        db = MagicMock()
        db.execute = slow_execute
        repository = LogRepository(db, timeout_seconds=0.01)

        with pytest.raises(StoreTimeout) as exc_info:
            await repository.execute(make_plan())

        assert exc_info.value.timeout_seconds == 0.01
        assert exc_info.value.status_code == 504
