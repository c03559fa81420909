"""
Log Repository - Executes query plans against the telemetry tables.
"""
from typing import Any, Callable, Dict, List, Protocol, Type
import asyncio
import logging

from sqlalchemy import and_, func, select
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from logviewer.core.exceptions import StoreTimeout, StoreUnavailable
from logviewer.core.planner import (
    AppNameAndLogTypePredicate,
    AppNamePredicate,
    EventCodePredicate,
    LogTypePredicate,
    Predicate,
    QueryPlan,
    UuidPrefixAndLogTypePredicate,
    UuidPrefixPredicate,
    WindowOnlyPredicate,
)
from logviewer.core.records import ErrorLogRecord, LogKind, LogRecord, TraceLogRecord
from logviewer.database.models import RefinedErrorLog, TraceLog

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class LogStore(Protocol):
    """
    Store port consumed by the query service.

    ``execute`` returns at most ``plan.limit`` records ordered by
    ``created_at`` descending, ties broken by ascending id, or raises;
    it never returns a partial result. ``count`` ignores the limit.
    """

    async def execute(self, plan: QueryPlan) -> List[LogRecord]:
        ...

    async def count(self, plan: QueryPlan) -> int:
        ...


class _Attributes:
    """SQL expressions for the filterable attributes of one log kind."""

    def __init__(self, model, record_type: Type, **columns: ColumnElement):
        self.model = model
        self.record_type = record_type
        self.columns = columns

    def __getitem__(self, name: str) -> ColumnElement:
        try:
            return self.columns[name]
        except KeyError:
            raise ValueError(
                f"{self.model.__tablename__} cannot be filtered by {name}"
            ) from None


def _payload_text(key: str) -> ColumnElement:
    # ->> on PostgreSQL, JSON_EXTRACT on SQLite
    return TraceLog.log_payload[key].as_string()


_TRACE_ATTRIBUTES = _Attributes(
    TraceLog,
    TraceLogRecord,
    app_name=_payload_text("appName"),
    log_type=_payload_text("logType"),
    uuid=_payload_text("uuid"),
    evt_cd=_payload_text("evtCd"),
    profile=_payload_text("profile"),
)

_ERROR_ATTRIBUTES = _Attributes(
    RefinedErrorLog,
    ErrorLogRecord,
    app_name=RefinedErrorLog.app_name,
    profile=RefinedErrorLog.profile,
)

ATTRIBUTES_BY_KIND: Dict[LogKind, _Attributes] = {
    LogKind.ERROR: _ERROR_ATTRIBUTES,
    LogKind.TRACE: _TRACE_ATTRIBUTES,
    LogKind.USER: _TRACE_ATTRIBUTES,
}


def _uuid_prefix(attrs: _Attributes, prefix: str) -> ColumnElement:
    # autoescape makes % and _ in the caller's text match literally
    return attrs["uuid"].startswith(prefix, autoescape=True)


PREDICATE_BUILDERS: Dict[type, Callable[[Any, _Attributes], List[ColumnElement]]] = {
    EventCodePredicate: lambda p, a: [
        a["evt_cd"].isnot(None),
        func.length(a["evt_cd"]) >= p.min_length,
    ],
    UuidPrefixAndLogTypePredicate: lambda p, a: [
        _uuid_prefix(a, p.uuid_prefix),
        a["log_type"] == p.log_type,
    ],
    UuidPrefixPredicate: lambda p, a: [_uuid_prefix(a, p.uuid_prefix)],
    AppNameAndLogTypePredicate: lambda p, a: [
        a["app_name"] == p.app_name,
        a["log_type"] == p.log_type,
    ],
    AppNamePredicate: lambda p, a: [a["app_name"] == p.app_name],
    LogTypePredicate: lambda p, a: [a["log_type"] == p.log_type],
    WindowOnlyPredicate: lambda p, a: [],
}


def build_where_clause(plan: QueryPlan) -> ColumnElement:
    """
    Translate a plan into a single WHERE expression.

    Args:
        plan: Query plan

    Returns:
        SQLAlchemy boolean expression
    """
    attrs = ATTRIBUTES_BY_KIND[plan.kind]
    model = attrs.model

    clauses = [
        model.created_at >= plan.window.start,
        model.created_at <= plan.window.end,
    ]

    # User logs only ever see trace records tied to a user
    if plan.kind is LogKind.USER:
        clauses.append(attrs["uuid"].isnot(None))

    clauses.extend(_predicate_clauses(plan.predicate, attrs))

    if plan.profile is not None:
        if plan.kind is LogKind.ERROR:
            clauses.append(attrs["profile"] == plan.profile)
        else:
            clauses.append(func.lower(attrs["profile"]) == plan.profile.lower())

    return and_(*clauses)


def _predicate_clauses(predicate: Predicate, attrs: _Attributes) -> List[ColumnElement]:
    try:
        build = PREDICATE_BUILDERS[type(predicate)]
    except KeyError:
        raise ValueError(f"Unknown predicate {predicate!r}") from None
    return build(predicate, attrs)


def build_select(plan: QueryPlan):
    """SELECT statement for ``plan``: newest first, ties by id, limited."""
    model = ATTRIBUTES_BY_KIND[plan.kind].model
    return (
        select(model)
        .where(build_where_clause(plan))
        .order_by(model.created_at.desc(), model.id.asc())
        .limit(plan.limit)
    )


def build_count(plan: QueryPlan):
    """COUNT statement for ``plan``; the limit does not apply."""
    model = ATTRIBUTES_BY_KIND[plan.kind].model
    return select(func.count(model.id)).where(build_where_clause(plan))


class LogRepository:
    """SQLAlchemy implementation of the LogStore port."""

    def __init__(self, db: AsyncSession, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        """Initialize repository with database session."""
        self.db = db
        self.timeout_seconds = timeout_seconds

    async def execute(self, plan: QueryPlan) -> List[LogRecord]:
        """
        Fetch the records selected by a query plan.

        Args:
            plan: Query plan

        Returns:
            List of ErrorLogRecord or TraceLogRecord, newest first

        Raises:
            StoreUnavailable: Database unreachable
            StoreTimeout: Query exceeded the timeout
        """
        record_type = ATTRIBUTES_BY_KIND[plan.kind].record_type
        result = await self._run(build_select(plan))
        return [record_type.from_row(row) for row in result.scalars().all()]

    async def count(self, plan: QueryPlan) -> int:
        """
        Count the records matching a query plan, ignoring its limit.

        Args:
            plan: Query plan

        Returns:
            Number of matching records
        """
        result = await self._run(build_count(plan))
        return result.scalar_one()

    async def _run(self, statement):
        try:
            return await asyncio.wait_for(self.db.execute(statement), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(f"Log store query timed out after {self.timeout_seconds}s")
            raise StoreTimeout(self.timeout_seconds)
        except (OperationalError, InterfaceError, OSError) as e:
            logger.error(f"Log store unavailable: {e}")
            raise StoreUnavailable(f"Log store unavailable: {e.__class__.__name__}") from e
