"""Shared invariant checks for accepted trade levels."""

from __future__ import annotations

from typing import Optional

from ..schemas import TradeLevels
from .guardrails import GuardrailLimits
from .ticks import round2

_EPS = 1e-9


class LevelsInvariantError(ValueError):
    """Raised when accepted levels violate ordering, risk or reward invariants."""


def assert_invariants(levels: TradeLevels, limits: Optional[GuardrailLimits] = None) -> None:
    limits = limits or GuardrailLimits()

    entry = float(levels.entry)
    stop = float(levels.stop)
    target1 = float(levels.target1)
    target2 = float(levels.target2)

    if entry <= 0 or stop <= 0 or target2 <= 0:
        raise LevelsInvariantError("non_positive_price")
    if stop >= entry:
        raise LevelsInvariantError("stop_not_below_entry")
    if target2 <= entry:
        raise LevelsInvariantError("target2_not_above_entry")
    if not entry < target1 < target2:
        raise LevelsInvariantError("target1_outside_entry_target2")
    if levels.target3 is not None and levels.target3 <= target2:
        raise LevelsInvariantError("target3_not_above_target2")

    low, high = levels.entry_range
    if low > high:
        raise LevelsInvariantError("entry_range_inverted")

    if not limits.min_risk_pct - _EPS <= levels.risk_percent <= limits.max_risk_pct + _EPS:
        raise LevelsInvariantError("risk_percent_out_of_bounds")
    if not limits.min_reward_pct - _EPS <= levels.reward_percent <= limits.max_reward_pct + _EPS:
        raise LevelsInvariantError("reward_percent_out_of_bounds")

    rr = (target2 - entry) / (entry - stop)
    if rr < limits.min_rr - _EPS:
        raise LevelsInvariantError("rr_too_low")
    if round2(rr) != levels.risk_reward:
        raise LevelsInvariantError("rr_mismatch")


__all__ = ["assert_invariants", "LevelsInvariantError"]
