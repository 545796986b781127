"""Partial profit booking level (T1)."""

from __future__ import annotations

from typing import Sequence, Tuple

from ..config import T1_MAX_BELOW_TARGET_PCT, T1_MIN_ABOVE_ENTRY_PCT
from ..schemas import Family, MarketSnapshot
from .ticks import DEFAULT_TICK, is_num, round_to_tick

_PREFERENCES: dict[str, Sequence[Tuple[str, str]]] = {
    "daily": (("weekly_r1", "weekly_r1"), ("daily_r1", "daily_r1")),
    "weekly": (("daily_r1", "daily_r1"),),
}


def resolve_partial_booking(
    entry: float,
    target2: float,
    snapshot: MarketSnapshot,
    *,
    family: Family = "daily",
    tick: float = DEFAULT_TICK,
) -> Tuple[float, str]:
    """Return ``(target1, basis)``.

    A pivot qualifies only when it sits strictly inside
    ``(entry × 1.02, target2 × 0.95)``; otherwise the midpoint of entry and T2
    is used, so this never fails.
    """

    lower = entry * T1_MIN_ABOVE_ENTRY_PCT
    upper = target2 * T1_MAX_BELOW_TARGET_PCT
    for attr, basis in _PREFERENCES.get(family, _PREFERENCES["daily"]):
        level = getattr(snapshot, attr, None)
        if is_num(level) and lower < level < upper:
            return round_to_tick(level, tick), basis
    midpoint = entry + (target2 - entry) * 0.5
    return round_to_tick(midpoint, tick), "midpoint"


__all__ = ["resolve_partial_booking"]
