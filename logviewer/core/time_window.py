"""
TimeWindowResolver - Resolves an explicit range or a recency value into a window.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional

from logviewer.core.exceptions import InvalidWindow, UnsupportedRecencyValue
from logviewer.core.records import ensure_utc

Clock = Callable[[], datetime]

DEFAULT_RECENCY_MINUTES = 10


def utc_now() -> datetime:
    """System clock returning an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TimeWindow:
    """Closed interval ``[start, end]`` in UTC."""
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start > self.end:
            raise InvalidWindow(
                f"Window start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


class TimeWindowResolver:
    """Resolve request time parameters using an injected clock."""

    def __init__(self, clock: Clock = utc_now, default_minutes: int = DEFAULT_RECENCY_MINUTES):
        self.clock = clock
        self.default_minutes = default_minutes

    def resolve(
        self,
        explicit_start: Optional[datetime] = None,
        explicit_end: Optional[datetime] = None,
        recency_minutes: Optional[int] = None,
        allowed_recency: Optional[Iterable[int]] = None
    ) -> TimeWindow:
        """
        Resolve a single time window.

        An explicit range wins when both bounds are given. Otherwise the
        recency value (or the default) is applied backwards from ``now``.

        Args:
            explicit_start: Range start
            explicit_end: Range end
            recency_minutes: Minutes back from now
            allowed_recency: Discrete set of accepted minute values, if restricted

        Returns:
            TimeWindow

        Raises:
            InvalidWindow: Inverted range, or recency that is non-positive or out of range
            UnsupportedRecencyValue: Recency outside the allowed set
        """
        if explicit_start is not None and explicit_end is not None:
            return TimeWindow(ensure_utc(explicit_start), ensure_utc(explicit_end))

        minutes = self.default_minutes if recency_minutes is None else recency_minutes

        if allowed_recency is not None:
            allowed = frozenset(allowed_recency)
            if minutes not in allowed:
                raise UnsupportedRecencyValue(minutes, allowed)
        elif minutes <= 0:
            raise InvalidWindow(f"Recency window must be positive, got {minutes} minutes")

        now = ensure_utc(self.clock())
        try:
            start = now - timedelta(minutes=minutes)
        except OverflowError:
            raise InvalidWindow(f"Recency window of {minutes} minutes is out of range") from None
        return TimeWindow(start, now)
