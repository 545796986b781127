"""Daily (ATR-buffered) entry/stop calculators, one per scan archetype.

The entry strategy matches *why* the stock was flagged:

* breakout - coiled near the 20-day high; buy above resistance.
* pullback - retest of EMA20 in an uptrend; limit at EMA20 when the pullback
  is healthy, otherwise wait for a bounce above the last high.
* momentum - already running above EMA20; continuation above the last high.
* consolidation_breakout - tight range near highs; buy above the range.
* a_plus_momentum - fresh 52-week-high breakout.

Every calculator returns :class:`StrategyLevels` (tick-rounded entry/stop plus
the structural targets) or a :class:`RejectionResult`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Tuple

from ..config import (
    A_PLUS_EMA_STOP_ATR,
    A_PLUS_ENTRY_ATR,
    A_PLUS_MAX_STOP_ATR,
    BREAKOUT_ENTRY_ATR,
    BREAKOUT_STOP_ATR,
    BREAKOUT_ZONE_FLOOR,
    CONSOLIDATION_ENTRY_ATR,
    CONSOLIDATION_RANGE_ATR,
    CONSOLIDATION_STOP_ATR,
    ENTRY_RANGE_ATR,
    MOMENTUM_EMA_STOP_ATR,
    MOMENTUM_ENTRY_ATR,
    MOMENTUM_MAX_STOP_ATR,
    MOMENTUM_NEAR_HIGH_PCT,
    PULLBACK_ENTRY_ATR,
    PULLBACK_HEALTHY_DISTANCE_ATR,
    PULLBACK_MAX_DIP_PCT,
    PULLBACK_MAX_VOLUME_RATIO,
    PULLBACK_MIN_RSI,
    PULLBACK_STOP_ATR,
)
from ..schemas import Archetype, EntryType, MarketSnapshot, RejectionResult
from .targets import (
    ATR_EXTENSION_BASIS,
    PULLBACK_MIN_RR,
    STRUCTURAL_MIN_RR,
    TargetPick,
    find_pullback_target,
    find_structural_target,
)
from .ticks import DEFAULT_TICK, is_num, positive, round2, round_to_tick

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyLevels:
    """Raw setup produced by a calculator, before guardrails."""

    mode: str
    archetype: str
    entry: float
    entry_range: Tuple[float, float]
    stop: float
    targets: TargetPick
    entry_type: EntryType
    reason: str
    entry_basis: Optional[str] = None
    adjustments: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CalculatorParams:
    tick: float = DEFAULT_TICK
    structural_min_rr: float = STRUCTURAL_MIN_RR
    pullback_min_rr: float = PULLBACK_MIN_RR


Calculator = Callable[[MarketSnapshot, CalculatorParams], "StrategyLevels | RejectionResult"]


def _stop_not_below(entry: float, stop: float) -> RejectionResult:
    return RejectionResult(
        reason=f"Stop ({round2(stop)}) must be below entry ({round2(entry)})",
        kind="economic",
    )


def _pct_above(value: Optional[float], base: Optional[float]) -> float:
    if not positive(base) or not is_num(value):
        return 0.0
    return (value - base) / base * 100


def _target_note(targets: TargetPick) -> str:
    return f"T2: {targets.target2_basis} = {round2(targets.target2)}"


# ---------------------------------------------------------------------------
# Breakout
# ---------------------------------------------------------------------------


def calculate_breakout_levels(
    snapshot: MarketSnapshot, params: CalculatorParams = CalculatorParams()
) -> StrategyLevels | RejectionResult:
    """Buy above the 20-day high (or last high) with a 0.2 ATR confirmation buffer."""

    atr = snapshot.atr
    ema20 = snapshot.ema20
    resistance = snapshot.high_20d if positive(snapshot.high_20d) else snapshot.high
    if not positive(resistance):
        return RejectionResult.missing("No resistance level available for breakout")

    entry = round_to_tick(resistance + BREAKOUT_ENTRY_ATR * atr, params.tick)
    # Failed-breakout protection: whichever of EMA20 / breakout zone is tighter.
    stop_base = max(ema20, resistance * BREAKOUT_ZONE_FLOOR)
    stop = round_to_tick(stop_base - BREAKOUT_STOP_ATR * atr, params.tick)
    if stop >= entry:
        return _stop_not_below(entry, stop)

    targets = find_structural_target(
        entry, entry - stop, snapshot, min_rr=params.structural_min_rr, tick=params.tick
    )
    if isinstance(targets, RejectionResult):
        return targets

    return StrategyLevels(
        mode="BREAKOUT",
        archetype="breakout",
        entry=entry,
        entry_range=(entry, round_to_tick(entry + ENTRY_RANGE_ATR * atr, params.tick)),
        stop=stop,
        targets=targets,
        entry_type="buy_above",
        entry_basis="resistance_atr_buffer",
        reason=(
            f"Breakout setup: Price coiled near {round2(resistance)} with volume. "
            f"Entry triggers above resistance for confirmation. {_target_note(targets)}"
        ),
    )


# ---------------------------------------------------------------------------
# Pullback
# ---------------------------------------------------------------------------


def _volume_ratio(snapshot: MarketSnapshot) -> float:
    if is_num(snapshot.volume) and positive(snapshot.avg_volume20):
        return snapshot.volume / snapshot.avg_volume20
    return 1.0


def _conservative_reason(distance_atr: float, rsi: Optional[float], close: float, ema20: float, volume_ratio: float) -> str:
    reasons: List[str] = []
    if distance_atr > PULLBACK_HEALTHY_DISTANCE_ATR:
        reasons.append(f"Price {round2(distance_atr)} ATR from EMA20 (not holding cleanly)")
    if is_num(rsi) and rsi < PULLBACK_MIN_RSI:
        reasons.append(f"RSI {round2(rsi)} shows weak momentum")
    if close < ema20:
        reasons.append("Closed below EMA20 support")
    if volume_ratio >= PULLBACK_MAX_VOLUME_RATIO:
        reasons.append(f"High volume ({round2(volume_ratio)}x avg) selling pressure")
    if not reasons:
        reasons.append("Pullback needs confirmation")
    return "Conservative entry: " + ". ".join(reasons) + ". Entry triggers above the last session high for safety."


def is_healthy_pullback(snapshot: MarketSnapshot) -> bool:
    """All four conditions must hold for the aggressive (limit at EMA20) entry."""

    atr, ema20, close = snapshot.atr, snapshot.ema20, snapshot.close
    distance_atr = abs(close - ema20) / atr
    rsi_ok = not is_num(snapshot.rsi) or snapshot.rsi >= PULLBACK_MIN_RSI
    return (
        distance_atr <= PULLBACK_HEALTHY_DISTANCE_ATR
        and _volume_ratio(snapshot) < PULLBACK_MAX_VOLUME_RATIO
        and close >= ema20
        and rsi_ok
    )


def calculate_pullback_levels(
    snapshot: MarketSnapshot, params: CalculatorParams = CalculatorParams()
) -> StrategyLevels | RejectionResult:
    """Pick aggressive (limit at EMA20) or conservative (buy above last high) entry."""

    atr, ema20, close = snapshot.atr, snapshot.ema20, snapshot.close
    stop = round_to_tick(ema20 - PULLBACK_STOP_ATR * atr, params.tick)

    entry_type: EntryType
    if is_healthy_pullback(snapshot):
        dip = min(PULLBACK_ENTRY_ATR * atr, ema20 * PULLBACK_MAX_DIP_PCT)
        entry = round_to_tick(ema20 - dip, params.tick)
        entry_range = (
            round_to_tick(ema20 - ENTRY_RANGE_ATR * atr, params.tick),
            round_to_tick(ema20 + ENTRY_RANGE_ATR * atr, params.tick),
        )
        entry_type = "limit"
        mode = "PULLBACK_AGGRESSIVE"
        entry_basis = "ema20_limit"
        reason = (
            "Healthy pullback: Price respecting EMA20, RSI cooled, low volume. "
            "Safe to buy the dip with limit order."
        )
    else:
        if not positive(snapshot.high):
            return RejectionResult.missing("Last session high required for conservative pullback entry")
        entry = round_to_tick(snapshot.high + PULLBACK_ENTRY_ATR * atr, params.tick)
        entry_range = (entry, round_to_tick(entry + ENTRY_RANGE_ATR * atr, params.tick))
        entry_type = "buy_above"
        mode = "PULLBACK_CONSERVATIVE"
        entry_basis = "last_high_atr_buffer"
        reason = _conservative_reason(abs(close - ema20) / atr, snapshot.rsi, close, ema20, _volume_ratio(snapshot))

    if stop >= entry:
        return _stop_not_below(entry, stop)

    targets = find_pullback_target(entry, entry - stop, snapshot, min_rr=params.pullback_min_rr, tick=params.tick)
    if isinstance(targets, RejectionResult):
        return targets

    return StrategyLevels(
        mode=mode,
        archetype="pullback",
        entry=entry,
        entry_range=entry_range,
        stop=stop,
        targets=targets,
        entry_type=entry_type,
        entry_basis=entry_basis,
        reason=f"{reason} {_target_note(targets)}",
    )


# ---------------------------------------------------------------------------
# Momentum
# ---------------------------------------------------------------------------


def calculate_momentum_levels(
    snapshot: MarketSnapshot, params: CalculatorParams = CalculatorParams()
) -> StrategyLevels | RejectionResult:
    """Continuation entry above the last high.

    A close within 2% of the 20-day high is a breakout in disguise: the
    breakout calculator is used and its result relabelled.
    """

    atr, ema20, close, high = snapshot.atr, snapshot.ema20, snapshot.close, snapshot.high
    if not positive(high):
        return RejectionResult.missing("Last session high required for momentum entry")

    if positive(snapshot.high_20d) and close >= snapshot.high_20d * MOMENTUM_NEAR_HIGH_PCT:
        breakout = calculate_breakout_levels(snapshot, params)
        if isinstance(breakout, StrategyLevels):
            return replace(
                breakout,
                mode="MOMENTUM_NEAR_BREAKOUT",
                reason="Momentum stock near 20D high - treating as breakout. " + breakout.reason,
            )
        return breakout

    entry = round_to_tick(high + MOMENTUM_ENTRY_ATR * atr, params.tick)
    # EMA20 loss ends the trend, capped at 1.2 ATR for high-ATR names.
    stop = round_to_tick(
        max(ema20 - MOMENTUM_EMA_STOP_ATR * atr, entry - MOMENTUM_MAX_STOP_ATR * atr),
        params.tick,
    )
    if stop >= entry:
        return _stop_not_below(entry, stop)

    targets = find_structural_target(
        entry, entry - stop, snapshot, min_rr=params.structural_min_rr, tick=params.tick
    )
    if isinstance(targets, RejectionResult):
        return targets

    return StrategyLevels(
        mode="MOMENTUM",
        archetype="trend-follow",
        entry=entry,
        entry_range=(entry, round_to_tick(entry + ENTRY_RANGE_ATR * atr, params.tick)),
        stop=stop,
        targets=targets,
        entry_type="buy_above",
        entry_basis="last_high_atr_buffer",
        reason=(
            f"Momentum continuation: Stock running {round2(_pct_above(close, ema20))}% above EMA20. "
            f"Entry above last high ({round2(high)}) confirms continued buying. {_target_note(targets)}"
        ),
    )


# ---------------------------------------------------------------------------
# Consolidation breakout
# ---------------------------------------------------------------------------


def calculate_consolidation_levels(
    snapshot: MarketSnapshot, params: CalculatorParams = CalculatorParams()
) -> StrategyLevels | RejectionResult:
    """Buy just above a tight range; stop below the range low."""

    atr, high, low = snapshot.atr, snapshot.high, snapshot.low
    if not positive(high) or not positive(low):
        return RejectionResult.missing("Last session high/low required for consolidation entry")

    has_10d_range = (
        positive(snapshot.high_10d) and positive(snapshot.low_10d) and snapshot.high_10d > snapshot.low_10d
    )
    range_low = min(snapshot.low_10d, low) if has_10d_range else low

    entry = round_to_tick(high + CONSOLIDATION_ENTRY_ATR * atr, params.tick)
    stop = round_to_tick(range_low - CONSOLIDATION_STOP_ATR * atr, params.tick)
    if stop >= entry:
        return _stop_not_below(entry, stop)

    targets = find_structural_target(
        entry, entry - stop, snapshot, min_rr=params.structural_min_rr, tick=params.tick
    )
    if isinstance(targets, RejectionResult):
        return targets

    return StrategyLevels(
        mode="CONSOLIDATION_BREAKOUT",
        archetype="breakout",
        entry=entry,
        entry_range=(entry, round_to_tick(entry + CONSOLIDATION_RANGE_ATR * atr, params.tick)),
        stop=stop,
        targets=targets,
        entry_type="buy_above",
        entry_basis="range_high_atr_buffer",
        reason=(
            f"Consolidation breakout: Tight range ({round2((high - low) / high * 100)}%) near highs "
            f"signals energy buildup. Stop below range low {round2(range_low)}. {_target_note(targets)}"
        ),
    )


# ---------------------------------------------------------------------------
# A+ momentum (52-week-high breakout)
# ---------------------------------------------------------------------------


def calculate_a_plus_momentum_levels(
    snapshot: MarketSnapshot, params: CalculatorParams = CalculatorParams()
) -> StrategyLevels | RejectionResult:
    """Entry above the breakout level (52-week high or last high, whichever is higher)."""

    atr, ema20, close, high = snapshot.atr, snapshot.ema20, snapshot.close, snapshot.high
    if not positive(high):
        return RejectionResult.missing("Last session high required for A+ momentum entry")

    anchor = max(high, snapshot.high_52w) if positive(snapshot.high_52w) else high
    entry = round_to_tick(anchor + A_PLUS_ENTRY_ATR * atr, params.tick)
    stop = round_to_tick(
        max(ema20 - A_PLUS_EMA_STOP_ATR * atr, entry - A_PLUS_MAX_STOP_ATR * atr),
        params.tick,
    )
    if stop >= entry:
        return _stop_not_below(entry, stop)

    targets = find_structural_target(
        entry, entry - stop, snapshot, min_rr=params.structural_min_rr, tick=params.tick
    )
    if isinstance(targets, RejectionResult):
        return targets

    rr = (targets.target2 - entry) / (entry - stop)
    if targets.target2_basis == ATR_EXTENSION_BASIS:
        target_note = (
            "52W HIGH BREAKOUT: No overhead resistance. "
            f"T2 at 2.5 ATR ({round2(targets.target2)}), R:R {round(rr, 1)}:1"
        )
    else:
        target_note = f"{_target_note(targets)}, R:R {round(rr, 1)}:1"

    return StrategyLevels(
        mode="A_PLUS_MOMENTUM",
        archetype="52w_breakout",
        entry=entry,
        entry_range=(entry, round_to_tick(entry + ENTRY_RANGE_ATR * atr, params.tick)),
        stop=stop,
        targets=targets,
        entry_type="buy_above",
        entry_basis="52w_high_atr_buffer",
        reason=(
            f"A+ Momentum (52W Breakout): Stock {round2(_pct_above(close, ema20))}% above EMA20. "
            f"Entry above {round2(anchor)} confirms breakout holds. {target_note}"
        ),
    )


DAILY_CALCULATORS: Dict[Archetype, Calculator] = {
    Archetype.BREAKOUT: calculate_breakout_levels,
    Archetype.PULLBACK: calculate_pullback_levels,
    Archetype.MOMENTUM: calculate_momentum_levels,
    Archetype.CONSOLIDATION_BREAKOUT: calculate_consolidation_levels,
    Archetype.A_PLUS_MOMENTUM: calculate_a_plus_momentum_levels,
    Archetype.BREAKOUT_52W: calculate_a_plus_momentum_levels,
}


__all__ = [
    "Calculator",
    "CalculatorParams",
    "DAILY_CALCULATORS",
    "StrategyLevels",
    "calculate_a_plus_momentum_levels",
    "calculate_breakout_levels",
    "calculate_consolidation_levels",
    "calculate_momentum_levels",
    "calculate_pullback_levels",
    "is_healthy_pullback",
]
