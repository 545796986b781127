"""Weekly (percentage-buffered) calculators for longer-horizon picks.

Offsets are fixed percentages of price; ATR is not used for entry, stop or
targets.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from ..config import (
    WEEKLY_BREAKOUT_ENTRY_PCT,
    WEEKLY_BREAKOUT_RANGE_PCT,
    WEEKLY_MAX_STOP_PCT,
    WEEKLY_PULLBACK_ENTRY_PCT,
    WEEKLY_PULLBACK_RANGE_PCT,
    WEEKLY_STOP_BUFFER_PCT,
)
from ..schemas import Archetype, MarketSnapshot, RejectionResult
from .strategies import Calculator, CalculatorParams, StrategyLevels
from .targets import find_weekly_breakout_targets, find_weekly_pullback_targets
from .ticks import positive, round2, round_to_tick

logger = logging.getLogger(__name__)


def calculate_weekly_breakout_levels(
    snapshot: MarketSnapshot, params: CalculatorParams = CalculatorParams()
) -> StrategyLevels | RejectionResult:
    """52-week breakout: entry 0.5% above the Friday high, stop under EMA20 / weekly S1."""

    high, ema20 = snapshot.high, snapshot.ema20
    if not positive(high):
        return RejectionResult.missing("Friday high required for A+ momentum entry")
    if not positive(ema20):
        return RejectionResult.missing("EMA20 required for A+ momentum stop")

    entry = round_to_tick(high * WEEKLY_BREAKOUT_ENTRY_PCT, params.tick)
    stop_base = max(ema20, snapshot.weekly_s1) if positive(snapshot.weekly_s1) else ema20
    stop = round_to_tick(stop_base * WEEKLY_STOP_BUFFER_PCT, params.tick)

    adjustments: List[str] = []
    max_stop = round_to_tick(entry * WEEKLY_MAX_STOP_PCT, params.tick)
    if stop < max_stop:
        adjustments.append(
            f"Stop tightened from {round2(stop)} to {round2(max_stop)} (max 1.5% below entry)"
        )
        logger.debug("weekly stop tightened", extra={"stop_raw": round2(stop), "stop": max_stop})
        stop = max_stop

    targets = find_weekly_breakout_targets(entry, snapshot, tick=params.tick)
    distance = (snapshot.close - ema20) / ema20 * 100 if positive(snapshot.close) else 0.0

    return StrategyLevels(
        mode="A_PLUS_MOMENTUM",
        archetype="52w_breakout",
        entry=entry,
        entry_range=(entry, round_to_tick(entry * WEEKLY_BREAKOUT_RANGE_PCT, params.tick)),
        stop=stop,
        targets=targets,
        entry_type="buy_above",
        entry_basis="52w_high_pct",
        adjustments=tuple(adjustments),
        reason=(
            f"A+ Momentum (52W Breakout): Entry at Friday high x1.005 = {round2(entry)}, "
            f"Stop at max(EMA20, S1) x0.997 = {round2(stop)}, {round2(distance)}% above EMA20. "
            f"T2: {targets.target2_basis} = {round2(targets.target2)}"
        ),
    )


def calculate_weekly_pullback_levels(
    snapshot: MarketSnapshot, params: CalculatorParams = CalculatorParams()
) -> StrategyLevels | RejectionResult:
    """EMA20 retest: always the conservative buy-above entry, no limit mode."""

    high, ema20 = snapshot.high, snapshot.ema20
    if not positive(high):
        return RejectionResult.missing("Friday high required for pullback entry")
    if not positive(ema20):
        return RejectionResult.missing("EMA20 required for pullback stop")

    entry = round_to_tick(high * WEEKLY_PULLBACK_ENTRY_PCT, params.tick)
    stop_base = max(snapshot.low, ema20) if positive(snapshot.low) else ema20
    stop = round_to_tick(stop_base * WEEKLY_STOP_BUFFER_PCT, params.tick)

    targets = find_weekly_pullback_targets(entry, snapshot, tick=params.tick)
    if isinstance(targets, RejectionResult):
        return targets

    return StrategyLevels(
        mode="PULLBACK_CONSERVATIVE",
        archetype="pullback",
        entry=entry,
        entry_range=(entry, round_to_tick(entry * WEEKLY_PULLBACK_RANGE_PCT, params.tick)),
        stop=stop,
        targets=targets,
        entry_type="buy_above",
        entry_basis="friday_high_pct",
        reason=(
            f"Pullback (EMA20 Retest): Entry at Friday high x1.001 = {round2(entry)}, "
            f"Stop at max(Friday low, EMA20) x0.997 = {round2(stop)}. "
            f"T2: {targets.target2_basis} = {round2(targets.target2)}"
        ),
    )


WEEKLY_CALCULATORS: Dict[Archetype, Calculator] = {
    Archetype.A_PLUS_MOMENTUM: calculate_weekly_breakout_levels,
    Archetype.BREAKOUT_52W: calculate_weekly_breakout_levels,
    Archetype.PULLBACK: calculate_weekly_pullback_levels,
}


__all__ = [
    "WEEKLY_CALCULATORS",
    "calculate_weekly_breakout_levels",
    "calculate_weekly_pullback_levels",
]
