"""
Log Query Service - Orchestrates filter normalization, window and limit
resolution, planning, and the single store call.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging
import time

from logviewer.config import ALL_FILTER_FIELDS, KindPolicy, settings
from logviewer.core.filters import FilterNormalizer, filter_normalizer
from logviewer.core.logging_config import performance_logger
from logviewer.core.exceptions import InvalidWindow
from logviewer.core.planner import QueryPlan, QueryPlanner
from logviewer.core.records import LogKind, LogRecord
from logviewer.core.time_window import Clock, TimeWindowResolver, utc_now
from logviewer.repositories.log_repository import LogStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogQueryParams:
    """Raw, possibly absent request parameters."""
    kind: LogKind
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    minutes: Optional[int] = None
    profile: Any = None
    app_name: Any = None
    log_type: Any = None
    uuid: Any = None
    limit: Optional[int] = None


class LogQueryService:
    """Service for filtered log retrieval."""

    def __init__(
        self,
        store: LogStore,
        clock: Clock = utc_now,
        policies: Optional[Dict[LogKind, KindPolicy]] = None,
        normalizer: Optional[FilterNormalizer] = None,
        planner: Optional[QueryPlanner] = None,
        default_recency_minutes: Optional[int] = None
    ):
        """Initialize service with a store and an injectable clock."""
        self.store = store
        self.policies = policies if policies is not None else settings.get_query_policies()
        self.normalizer = normalizer or filter_normalizer
        self.planner = planner or QueryPlanner(event_code_min_length=settings.EVENT_CODE_MIN_LENGTH)
        self.window_resolver = TimeWindowResolver(
            clock=clock,
            default_minutes=(
                settings.DEFAULT_RECENCY_MINUTES if default_recency_minutes is None else default_recency_minutes
            )
        )

    def build_plan(self, params: LogQueryParams) -> QueryPlan:
        """
        Validate request parameters and build a query plan.

        Args:
            params: Raw request parameters

        Returns:
            QueryPlan

        Raises:
            InvalidWindow: Inverted range or non-positive recency
            UnsupportedRecencyValue: Minutes outside the kind's allowed set
            UnsupportedLimitValue: Enumerated-mode limit not allowed
        """
        policy = self.policies[params.kind]

        raw_filters = {name: getattr(params, name) for name in ALL_FILTER_FIELDS}
        ignored = sorted(
            name for name, value in raw_filters.items()
            if value is not None and name not in policy.filter_fields
        )
        if ignored:
            logger.debug(f"Ignoring filters {ignored} for {params.kind.value} query")
        query_filter = self.normalizer.normalize(
            **{name: value for name, value in raw_filters.items() if name in policy.filter_fields}
        )
        window = self.window_resolver.resolve(
            explicit_start=params.start_date,
            explicit_end=params.end_date,
            recency_minutes=params.minutes,
            allowed_recency=policy.allowed_recency
        )
        limit = policy.limit_policy.apply(params.limit)

        return self.planner.plan(query_filter, window, limit, kind=params.kind)

    async def execute(self, params: LogQueryParams) -> List[LogRecord]:
        """
        Run a filtered log query.

        Args:
            params: Raw request parameters

        Returns:
            Records in store order (newest first)
        """
        plan = self.build_plan(params)

        started = time.perf_counter()
        records = await self.store.execute(plan)
        duration_ms = (time.perf_counter() - started) * 1000

        performance_logger.log_query_performance(
            kind=plan.kind.value,
            predicate=plan.predicate.name,
            duration_ms=round(duration_ms, 2),
            rows_returned=len(records),
            limit=plan.limit,
            window_minutes=plan.window.duration.total_seconds() / 60
        )
        logger.info(f"Retrieved {len(records)} {plan.kind.value} records ({plan.predicate.name})")
        return records

    async def count(self, params: LogQueryParams) -> int:
        """
        Count the records a query would match, ignoring the limit.

        Args:
            params: Raw request parameters

        Returns:
            Total number of matching records
        """
        plan = self.build_plan(params)
        total = await self.store.count(plan)
        logger.info(f"Counted {total} {plan.kind.value} records ({plan.predicate.name})")
        return total

    async def query_by_range(
        self,
        kind: LogKind,
        start_date: Optional[datetime],
        end_date: Optional[datetime],
        **filters: Any
    ) -> List[LogRecord]:
        """Query an explicit ``[start_date, end_date]`` range."""
        return await self.execute(self._range_params(kind, start_date, end_date, filters))

    async def query_by_recency(
        self,
        kind: LogKind,
        minutes: Optional[int] = None,
        **filters: Any
    ) -> List[LogRecord]:
        """Query the last ``minutes`` minutes (default window when None)."""
        return await self.execute(LogQueryParams(kind=kind, minutes=minutes, **filters))

    async def count_by_range(
        self,
        kind: LogKind,
        start_date: Optional[datetime],
        end_date: Optional[datetime],
        **filters: Any
    ) -> int:
        return await self.count(self._range_params(kind, start_date, end_date, filters))

    async def count_by_recency(self, kind: LogKind, minutes: Optional[int] = None, **filters: Any) -> int:
        return await self.count(LogQueryParams(kind=kind, minutes=minutes, **filters))

    @staticmethod
    def _range_params(
        kind: LogKind,
        start_date: Optional[datetime],
        end_date: Optional[datetime],
        filters: Dict[str, Any]
    ) -> LogQueryParams:
        if start_date is None or end_date is None:
            raise InvalidWindow("Range queries require both startDate and endDate")
        return LogQueryParams(kind=kind, start_date=start_date, end_date=end_date, **filters)
