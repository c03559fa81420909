"""
QueryPlanner - Selects the most specific predicate for a filter.

Payload attributes cannot all be indexed uniformly, so instead of AND-ing every
optional filter the planner picks one predicate shape from an ordered list of
rules. The first rule that matches wins.
"""
from dataclasses import dataclass
from typing import Callable, ClassVar, List, Optional, Tuple, Union
import logging

from logviewer.core.filters import Filter
from logviewer.core.records import LogKind
from logviewer.core.time_window import TimeWindow

logger = logging.getLogger(__name__)

EVENT_CODE_MIN_LENGTH = 3
ORDER_BY = ("created_at desc", "id asc")


# Predicate variants
# ------------------

@dataclass(frozen=True)
class EventCodePredicate:
    """Records carrying an event code of at least ``min_length`` characters."""
    name: ClassVar[str] = "event_code"
    min_length: int = EVENT_CODE_MIN_LENGTH


@dataclass(frozen=True)
class UuidPrefixAndLogTypePredicate:
    name: ClassVar[str] = "uuid_prefix_and_log_type"
    uuid_prefix: str
    log_type: str


@dataclass(frozen=True)
class UuidPrefixPredicate:
    name: ClassVar[str] = "uuid_prefix"
    uuid_prefix: str


@dataclass(frozen=True)
class AppNameAndLogTypePredicate:
    name: ClassVar[str] = "app_name_and_log_type"
    app_name: str
    log_type: str


@dataclass(frozen=True)
class AppNamePredicate:
    name: ClassVar[str] = "app_name"
    app_name: str


@dataclass(frozen=True)
class LogTypePredicate:
    name: ClassVar[str] = "log_type"
    log_type: str


@dataclass(frozen=True)
class WindowOnlyPredicate:
    name: ClassVar[str] = "window_only"


Predicate = Union[
    EventCodePredicate,
    UuidPrefixAndLogTypePredicate,
    UuidPrefixPredicate,
    AppNameAndLogTypePredicate,
    AppNamePredicate,
    LogTypePredicate,
    WindowOnlyPredicate,
]


@dataclass(frozen=True)
class QueryPlan:
    """Resolved query handed to the store. Built once per request."""
    kind: LogKind
    window: TimeWindow
    filter: Filter
    limit: int
    predicate: Predicate
    order_by: Tuple[str, ...] = ORDER_BY

    @property
    def profile(self) -> Optional[str]:
        """Profile narrowing; event-code plans ignore every attribute filter."""
        if isinstance(self.predicate, EventCodePredicate):
            return None
        return self.filter.profile


Rule = Tuple[Callable[[Filter], bool], Callable[[Filter, int], Predicate]]

# Ordered by specificity, evaluated top-down
RULES: List[Rule] = [
    (
        lambda f: f.require_evt_cd,
        lambda f, n: EventCodePredicate(min_length=n),
    ),
    (
        lambda f: f.require_uuid and f.log_type is not None,
        lambda f, n: UuidPrefixAndLogTypePredicate(f.uuid_prefix, f.log_type),
    ),
    (
        lambda f: f.require_uuid,
        lambda f, n: UuidPrefixPredicate(f.uuid_prefix),
    ),
    (
        lambda f: f.app_name is not None and f.log_type is not None,
        lambda f, n: AppNameAndLogTypePredicate(f.app_name, f.log_type),
    ),
    (
        lambda f: f.app_name is not None,
        lambda f, n: AppNamePredicate(f.app_name),
    ),
    (
        lambda f: f.log_type is not None,
        lambda f, n: LogTypePredicate(f.log_type),
    ),
    (
        lambda f: True,
        lambda f, n: WindowOnlyPredicate(),
    ),
]


class QueryPlanner:
    """Pure planner; never touches storage."""

    def __init__(self, event_code_min_length: int = EVENT_CODE_MIN_LENGTH, rules: Optional[List[Rule]] = None):
        self.event_code_min_length = event_code_min_length
        self.rules = rules if rules is not None else RULES

    def select_predicate(self, query_filter: Filter) -> Predicate:
        """Return the predicate of the first rule matching ``query_filter``."""
        for matches, build in self.rules:
            if matches(query_filter):
                return build(query_filter, self.event_code_min_length)
        raise ValueError(f"No predicate rule matches {query_filter}")

    def plan(
        self,
        query_filter: Filter,
        window: TimeWindow,
        limit: int,
        kind: LogKind = LogKind.TRACE
    ) -> QueryPlan:
        """
        Build a query plan.

        Args:
            query_filter: Normalized filter
            window: Resolved time window
            limit: Effective result count
            kind: Log kind the plan targets

        Returns:
            QueryPlan
        """
        predicate = self.select_predicate(query_filter)
        logger.debug(f"Planned {kind.value} query with predicate {predicate.name}")
        return QueryPlan(
            kind=kind,
            window=window,
            filter=query_filter,
            limit=limit,
            predicate=predicate,
        )
