"""Structural target ladders for the daily and weekly rule families.

Each resolver walks an ordered list of resistance levels and picks the first
one that qualifies as the main target (T2). The next qualifying level above it
becomes the extension target (T3). The daily ladders additionally require every
rung to clear a minimum reward-to-risk ratio; the weekly ladders only require
the level to sit above entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..config import (
    ATR_EXTENSION_T2,
    ATR_EXTENSION_T3,
    NEAR_52W_HIGH_PCT,
    WEEKLY_T2_FALLBACK_PCT,
    WEEKLY_T3_FALLBACK_PCT,
)
from ..schemas import MarketSnapshot, RejectionResult
from .ticks import DEFAULT_TICK, is_num, positive, round2, round_to_tick

logger = logging.getLogger(__name__)

STRUCTURAL_MIN_RR = 1.5
PULLBACK_MIN_RR = 1.2

ATR_EXTENSION_BASIS = "atr_extension_52w_breakout"
ATR_EXTENSION_T3_BASIS = "atr_extension_4x"

# (snapshot attribute, basis label), in priority order.
STRUCTURAL_LADDER: Tuple[Tuple[str, str], ...] = (
    ("weekly_r1", "weekly_r1"),
    ("weekly_r2", "weekly_r2"),
    ("high_52w", "52w_high"),
)

PULLBACK_LADDER: Tuple[Tuple[str, str], ...] = (
    ("daily_r1", "daily_r1"),
    ("daily_r2", "daily_r2"),
    ("weekly_r1", "weekly_r1"),
    ("weekly_r2", "weekly_r2"),
    ("high_52w", "52w_high"),
)

WEEKLY_BREAKOUT_LADDER: Tuple[Tuple[str, str], ...] = (
    ("weekly_r1", "weekly_r1"),
    ("weekly_r2", "weekly_r2"),
)

WEEKLY_PULLBACK_LADDER: Tuple[Tuple[str, str], ...] = (
    ("high_20d", "high_20d"),
    ("weekly_r1", "weekly_r1"),
    ("weekly_r2", "weekly_r2"),
)

WEEKLY_PULLBACK_T3_LADDER: Tuple[Tuple[str, str], ...] = (
    ("weekly_r1", "weekly_r1"),
    ("weekly_r2", "weekly_r2"),
    ("high_52w", "52w_high"),
)


@dataclass(frozen=True)
class TargetPick:
    """Main target (T2) and optional extension target (T3) with their bases."""

    target2: float
    target2_basis: str
    target3: Optional[float] = None
    target3_basis: Optional[str] = None


def _levels(snapshot: MarketSnapshot, ladder: Sequence[Tuple[str, str]]) -> List[Tuple[float, str]]:
    nodes: List[Tuple[float, str]] = []
    for attr, basis in ladder:
        value = getattr(snapshot, attr, None)
        if positive(value):
            nodes.append((float(value), basis))
    return nodes


def _rr(candidate: float, entry: float, risk: float) -> float:
    return (candidate - entry) / risk


def _clears(candidate: float, entry: float, risk: float, min_rr: float) -> bool:
    return candidate > entry and _rr(candidate, entry, risk) >= min_rr


def _next_above(
    nodes: Sequence[Tuple[float, str]],
    target2: float,
    used: str,
) -> Tuple[Optional[float], Optional[str]]:
    for price, basis in nodes:
        if basis == used:
            continue
        if price > target2:
            return price, basis
    return None, None


def _extension_pick(
    price: float,
    basis: str,
    t3: Optional[float],
    t3_basis: Optional[str],
    tick: float,
) -> TargetPick:
    """T2 at ``price``; T3 only when it still sits above T2 after tick rounding."""

    target2 = round_to_tick(price, tick)
    target3 = round_to_tick(t3, tick) if t3 is not None else None
    if target3 is None or target3 <= target2:
        target3, t3_basis = None, None
    return TargetPick(target2=target2, target2_basis=basis, target3=target3, target3_basis=t3_basis)


def _walk_ladder(
    entry: float,
    risk: float,
    nodes: Sequence[Tuple[float, str]],
    min_rr: float,
    tick: float,
) -> Optional[TargetPick]:
    for price, basis in nodes:
        if not _clears(price, entry, risk, min_rr):
            logger.debug(
                "ladder rung skipped",
                extra={"basis": basis, "level": round2(price), "rr": round2(_rr(price, entry, risk))},
            )
            continue
        t3, t3_basis = _next_above(nodes, price, basis)
        return TargetPick(
            target2=round_to_tick(price, tick),
            target2_basis=basis,
            target3=round_to_tick(t3, tick) if t3 is not None else None,
            target3_basis=t3_basis,
        )
    return None


def _no_target(entry: float, min_rr: float, labels: str) -> RejectionResult:
    return RejectionResult(
        reason=(
            f"No structural target clears {min_rr}:1 R:R above entry {round2(entry)} "
            f"({labels} all below entry or too close)"
        ),
        kind="economic",
        no_data=False,
    )


def find_structural_target(
    entry: float,
    risk: float,
    snapshot: MarketSnapshot,
    *,
    min_rr: float = STRUCTURAL_MIN_RR,
    tick: float = DEFAULT_TICK,
) -> TargetPick | RejectionResult:
    """Resolve T2/T3 for the daily breakout-style archetypes.

    Priority: 52-week breakout ATR extension (entry at/near a fresh 52-week
    high) → weekly R1 → weekly R2 → 52-week high → reject.
    """

    atr = snapshot.atr if positive(snapshot.atr) else None
    nodes = _levels(snapshot, STRUCTURAL_LADDER)
    if not nodes and atr is None:
        return RejectionResult(
            reason="No structural levels available (weekly R1/R2, 52W high and ATR all missing)",
            kind="no_data",
            no_data=True,
        )
    if not is_num(risk) or risk <= 0:
        return RejectionResult(
            reason=f"Invalid risk ({risk}) for target resolution",
            kind="economic",
            no_data=False,
        )

    high_52w = snapshot.high_52w
    at_52w_high = positive(high_52w) and entry >= high_52w * NEAR_52W_HIGH_PCT - 1e-9
    if at_52w_high and atr is not None:
        pivots = [node for node in nodes if node[1] in {"weekly_r1", "weekly_r2"}]
        for price, basis in pivots:
            if _clears(price, entry, risk, min_rr):
                t3, t3_basis = _next_above(nodes, price, basis)
                if t3 is None:
                    t3, t3_basis = entry + ATR_EXTENSION_T3 * atr, ATR_EXTENSION_T3_BASIS
                return _extension_pick(price, basis, t3, t3_basis, tick)
        logger.debug(
            "52w breakout without overhead pivots, using ATR extension",
            extra={"entry": round2(entry), "high_52w": round2(high_52w), "atr": round2(atr)},
        )
        return TargetPick(
            target2=round_to_tick(entry + ATR_EXTENSION_T2 * atr, tick),
            target2_basis=ATR_EXTENSION_BASIS,
            target3=round_to_tick(entry + ATR_EXTENSION_T3 * atr, tick),
            target3_basis=ATR_EXTENSION_T3_BASIS,
        )

    pick = _walk_ladder(entry, risk, nodes, min_rr, tick)
    if pick is not None:
        return pick
    return _no_target(entry, min_rr, "weekly R1, weekly R2, 52W high")


def find_pullback_target(
    entry: float,
    risk: float,
    snapshot: MarketSnapshot,
    *,
    min_rr: float = PULLBACK_MIN_RR,
    tick: float = DEFAULT_TICK,
) -> TargetPick | RejectionResult:
    """Resolve T2/T3 for daily pullbacks: daily R1 → daily R2 → weekly R1 → weekly R2 → 52W high."""

    nodes = _levels(snapshot, PULLBACK_LADDER)
    if not nodes:
        return RejectionResult(
            reason="No structural levels available (daily R1/R2, weekly R1/R2, 52W high all missing)",
            kind="no_data",
            no_data=True,
        )
    if not is_num(risk) or risk <= 0:
        return RejectionResult(
            reason=f"Invalid risk ({risk}) for target resolution",
            kind="economic",
            no_data=False,
        )
    pick = _walk_ladder(entry, risk, nodes, min_rr, tick)
    if pick is not None:
        return pick
    return _no_target(entry, min_rr, "daily R1/R2, weekly R1/R2, 52W high")


def find_weekly_breakout_targets(
    entry: float,
    snapshot: MarketSnapshot,
    *,
    tick: float = DEFAULT_TICK,
) -> TargetPick:
    """Weekly 52W-breakout ladder: weekly R1 → weekly R2 → entry × 1.03. Never rejects."""

    nodes = _levels(snapshot, WEEKLY_BREAKOUT_LADDER)
    for price, basis in nodes:
        if price <= entry:
            continue
        t3, t3_basis = _next_above(nodes, price, basis)
        if t3 is None:
            t3, t3_basis = entry * WEEKLY_T3_FALLBACK_PCT, "pct_5_extension"
        return _extension_pick(price, basis, t3, t3_basis, tick)
    logger.debug("no weekly pivot above entry, using 3% fallback", extra={"entry": round2(entry)})
    return TargetPick(
        target2=round_to_tick(entry * WEEKLY_T2_FALLBACK_PCT, tick),
        target2_basis="pct_3_fallback",
        target3=round_to_tick(entry * WEEKLY_T3_FALLBACK_PCT, tick),
        target3_basis="pct_5_extension",
    )


def find_weekly_pullback_targets(
    entry: float,
    snapshot: MarketSnapshot,
    *,
    tick: float = DEFAULT_TICK,
) -> TargetPick | RejectionResult:
    """Weekly pullback ladder: 20D high → weekly R1 → weekly R2 → reject."""

    nodes = _levels(snapshot, WEEKLY_PULLBACK_LADDER)
    if not nodes:
        return RejectionResult(
            reason="Pullback REJECTED: no structural levels available (high20D, Weekly R1, Weekly R2 all missing)",
            kind="no_data",
            no_data=True,
        )
    for price, basis in nodes:
        if price <= entry:
            continue
        t3, t3_basis = _next_above(_levels(snapshot, WEEKLY_PULLBACK_T3_LADDER), price, basis)
        return TargetPick(
            target2=round_to_tick(price, tick),
            target2_basis=basis,
            target3=round_to_tick(t3, tick) if t3 is not None else None,
            target3_basis=t3_basis,
        )
    return RejectionResult(
        reason=(
            "Pullback REJECTED: No viable structural target above entry "
            "(high20D, Weekly R1, Weekly R2 all below entry or missing)"
        ),
        kind="economic",
        no_data=False,
    )


__all__ = [
    "ATR_EXTENSION_BASIS",
    "PULLBACK_MIN_RR",
    "STRUCTURAL_MIN_RR",
    "TargetPick",
    "find_pullback_target",
    "find_structural_target",
    "find_weekly_breakout_targets",
    "find_weekly_pullback_targets",
]
