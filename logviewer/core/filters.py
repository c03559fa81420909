"""
FilterNormalizer - Turns raw request parameters into a canonical Filter.
"""
from dataclasses import dataclass
from typing import Any, Optional

ALL_SENTINEL = "all"
EVENT_LOG_TYPE = "event"


@dataclass(frozen=True)
class Filter:
    """Canonical attribute filter. Absent fields are ``None``, never ``"all"``."""
    profile: Optional[str] = None
    app_name: Optional[str] = None
    log_type: Optional[str] = None
    uuid_prefix: Optional[str] = None
    require_evt_cd: bool = False
    require_uuid: bool = False

    @property
    def is_empty(self) -> bool:
        """True when no attribute narrows the query."""
        return self == EMPTY_FILTER


EMPTY_FILTER = Filter()


class FilterNormalizer:
    """
    Normalize optional free-text filters.

    Features:
    - "all" (any case), blank and missing values mean "no filter"
    - logType "event" switches to event-code mode instead of equality
    - uuid is kept as a literal prefix; the store escapes wildcards
    - never raises: anything unusable becomes "no filter"
    """

    def __init__(self, all_sentinel: str = ALL_SENTINEL, event_log_type: str = EVENT_LOG_TYPE):
        self.all_sentinel = all_sentinel.lower()
        self.event_log_type = event_log_type.lower()

    def normalize(
        self,
        profile: Any = None,
        app_name: Any = None,
        log_type: Any = None,
        uuid: Any = None
    ) -> Filter:
        """
        Build a Filter from raw request values.

        Args:
            profile: Raw profile filter
            app_name: Raw application name filter
            log_type: Raw log category filter, or "event"
            uuid: Raw user identifier prefix

        Returns:
            Normalized Filter
        """
        log_type_value = self._clean(log_type)
        require_evt_cd = False
        if log_type_value is not None and log_type_value.lower() == self.event_log_type:
            require_evt_cd = True
            log_type_value = None

        uuid_value = self._clean(uuid)

        return Filter(
            profile=self._clean(profile),
            app_name=self._clean(app_name),
            log_type=log_type_value,
            uuid_prefix=uuid_value,
            require_evt_cd=require_evt_cd,
            require_uuid=uuid_value is not None,
        )

    def _clean(self, value: Any) -> Optional[str]:
        if not isinstance(value, str):
            return None
        value = value.strip()
        if not value or value.lower() == self.all_sentinel:
            return None
        return value


filter_normalizer = FilterNormalizer()
