"""
LimitPolicy - Result count validation.

Two modes coexist and each call site picks one explicitly:
clamp mode silently caps the value, enumerated mode rejects anything
outside a fixed set.
"""
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, Optional

from logviewer.core.exceptions import UnsupportedLimitValue

DEFAULT_LIMIT = 100
DEFAULT_HARD_CAP = 1000


class LimitMode(str, Enum):
    """Limit validation mode."""
    CLAMP = "clamp"
    ENUMERATED = "enumerated"


@dataclass(frozen=True, init=False)
class LimitPolicy:
    """Declared limit rules for one endpoint class."""
    mode: LimitMode
    default_limit: int
    hard_cap: Optional[int]
    allowed: Optional[FrozenSet[int]]

    def __init__(
        self,
        mode: LimitMode,
        default_limit: int = DEFAULT_LIMIT,
        hard_cap: Optional[int] = None,
        allowed: Optional[Iterable[int]] = None
    ):
        if mode is LimitMode.CLAMP and hard_cap is None:
            hard_cap = DEFAULT_HARD_CAP
        if mode is LimitMode.ENUMERATED and not allowed:
            raise ValueError("Enumerated limit policy requires an allowed set")

        object.__setattr__(self, "mode", mode)
        object.__setattr__(self, "default_limit", default_limit)
        object.__setattr__(self, "hard_cap", hard_cap if mode is LimitMode.CLAMP else None)
        object.__setattr__(self, "allowed", frozenset(allowed) if mode is LimitMode.ENUMERATED else None)

    @classmethod
    def clamp(cls, default_limit: int = DEFAULT_LIMIT, hard_cap: int = DEFAULT_HARD_CAP) -> "LimitPolicy":
        return cls(LimitMode.CLAMP, default_limit, hard_cap=hard_cap)

    @classmethod
    def enumerated(cls, allowed: Iterable[int], default_limit: int = DEFAULT_LIMIT) -> "LimitPolicy":
        return cls(LimitMode.ENUMERATED, default_limit, allowed=allowed)

    def apply(self, requested: Optional[int]) -> int:
        """
        Resolve the effective result count.

        Args:
            requested: Caller-supplied limit, or None

        Returns:
            Effective limit

        Raises:
            UnsupportedLimitValue: Enumerated mode and value not allowed
        """
        if self.mode is LimitMode.ENUMERATED:
            return apply_limit(requested, self.default_limit, allowed=self.allowed)
        return apply_limit(requested, self.default_limit, hard_cap=self.hard_cap)


def apply_limit(
    requested: Optional[int],
    default_limit: int = DEFAULT_LIMIT,
    hard_cap: Optional[int] = DEFAULT_HARD_CAP,
    allowed: Optional[Iterable[int]] = None
) -> int:
    """
    Apply a limit policy.

    With ``allowed`` the value must be one of the set; otherwise it is
    clamped into ``[1, hard_cap]``.
    """
    limit = default_limit if requested is None else requested

    if allowed is not None:
        allowed = frozenset(allowed)
        if limit not in allowed:
            raise UnsupportedLimitValue(limit, allowed)
        return limit

    if hard_cap is not None and limit > hard_cap:
        return hard_cap
    return max(limit, 1)
