"""Holding-window policy per setup archetype and entry style."""

from __future__ import annotations

from ..schemas import EntryType, Family, TimeRules

BREAKOUT_52W_RULES = TimeRules(
    entry_confirmation="close_above",
    entry_window_days=3,
    max_hold_days=5,
    week_end_rule="trail_or_exit",
)

CLOSE_CONFIRMED_RULES = TimeRules(
    entry_confirmation="close_above",
    entry_window_days=2,
    max_hold_days=5,
    week_end_rule="exit_if_no_t1",
)

LIMIT_FILL_RULES = TimeRules(
    entry_confirmation="touch",
    entry_window_days=4,
    max_hold_days=5,
    week_end_rule="hold_if_above_entry",
)

DEFAULT_RULES = TimeRules(
    entry_confirmation="close_above",
    entry_window_days=3,
    max_hold_days=5,
    week_end_rule="exit_if_no_t1",
)


def resolve_time_rules(archetype: str, entry_type: EntryType | str, *, family: Family = "daily") -> TimeRules:
    """Map a setup label (``52w_breakout``, ``pullback``, ...) and entry type to its time rules.

    52-week breakouts get the patient confirmation window and trail into the
    weekend. Limit pullbacks fill on touch and may only be held over the
    weekend while above entry. Close-confirmed daily entries get two days and
    exit at week end without T1. Weekly pullbacks use the three-day default.
    """

    label = (archetype or "").strip().lower()
    if label == "52w_breakout":
        return BREAKOUT_52W_RULES
    if family == "weekly":
        return DEFAULT_RULES
    if entry_type == "limit":
        return LIMIT_FILL_RULES
    if entry_type == "buy_above":
        return CLOSE_CONFIRMED_RULES
    return DEFAULT_RULES


__all__ = [
    "BREAKOUT_52W_RULES",
    "CLOSE_CONFIRMED_RULES",
    "DEFAULT_RULES",
    "LIMIT_FILL_RULES",
    "resolve_time_rules",
]
