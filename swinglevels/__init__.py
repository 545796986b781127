"""Deterministic swing-trade level engine."""

from .levels import calculate_trading_levels, calculate_weekly_trading_levels
from .schemas import Archetype, MarketSnapshot, RejectionResult, TimeRules, TradeLevels

__all__ = [
    "Archetype",
    "MarketSnapshot",
    "RejectionResult",
    "TimeRules",
    "TradeLevels",
    "calculate_trading_levels",
    "calculate_weekly_trading_levels",
]
