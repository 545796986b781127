"""Level engine: tick rounding, target ladders, guardrails and calculators."""

from .guardrails import GuardrailLimits, GuardrailPass, apply_guardrails
from .invariants import LevelsInvariantError, assert_invariants
from .partial import resolve_partial_booking
from .router import calculate_trading_levels, calculate_weekly_trading_levels, coerce_snapshot
from .strategies import DAILY_CALCULATORS, StrategyLevels
from .targets import (
    TargetPick,
    find_pullback_target,
    find_structural_target,
    find_weekly_breakout_targets,
    find_weekly_pullback_targets,
)
from .ticks import floor_to_tick, round_to_tick
from .time_rules import resolve_time_rules
from .weekly import WEEKLY_CALCULATORS

__all__ = [
    "DAILY_CALCULATORS",
    "GuardrailLimits",
    "GuardrailPass",
    "LevelsInvariantError",
    "StrategyLevels",
    "TargetPick",
    "WEEKLY_CALCULATORS",
    "apply_guardrails",
    "assert_invariants",
    "calculate_trading_levels",
    "calculate_weekly_trading_levels",
    "coerce_snapshot",
    "find_pullback_target",
    "find_structural_target",
    "find_weekly_breakout_targets",
    "find_weekly_pullback_targets",
    "floor_to_tick",
    "resolve_partial_booking",
    "resolve_time_rules",
    "round_to_tick",
]
