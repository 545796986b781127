"""Entry points: dispatch an (archetype, snapshot) pair and assemble the result.

Flow: calculator (entry/stop + structural targets) -> guardrails (pass, cap
or reject) -> partial booking + time rules -> :class:`TradeLevels`. Any stage
may short-circuit with a :class:`RejectionResult`; business rejections are
returned, never raised.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from ..config import Settings, get_settings
from ..logging_setup import symbol_context
from ..schemas import Archetype, Family, LevelsResult, MarketSnapshot, RejectionResult, TradeLevels, parse_archetype
from ..telemetry import record_accepted, record_rejected
from .guardrails import GuardrailLimits, apply_guardrails
from .invariants import assert_invariants
from .partial import resolve_partial_booking
from .strategies import DAILY_CALCULATORS, CalculatorParams, StrategyLevels
from .ticks import positive
from .time_rules import resolve_time_rules
from .weekly import WEEKLY_CALCULATORS

logger = logging.getLogger(__name__)


def coerce_snapshot(snapshot: Any) -> MarketSnapshot:
    """Accept a :class:`MarketSnapshot` or a plain mapping (camelCase or snake_case keys)."""

    if isinstance(snapshot, MarketSnapshot):
        return snapshot
    if snapshot is None:
        raise TypeError("snapshot is required")
    if not isinstance(snapshot, Mapping):
        raise TypeError(f"snapshot must be a MarketSnapshot or mapping, got {type(snapshot).__name__}")
    return MarketSnapshot.model_validate(dict(snapshot))


def _params(settings: Settings) -> CalculatorParams:
    return CalculatorParams(
        tick=settings.tick_size,
        structural_min_rr=settings.structural_min_rr,
        pullback_min_rr=settings.pullback_min_rr,
    )


def _reject(family: Family, result: RejectionResult, scan_type: Any) -> RejectionResult:
    record_rejected(family, result.kind)
    logger.debug(
        "levels rejected",
        extra={"family": family, "scan_type": str(scan_type), "kind": result.kind, "reason": result.reason},
    )
    return result


def _validate_daily(snapshot: MarketSnapshot) -> Optional[RejectionResult]:
    if not positive(snapshot.atr):
        return RejectionResult.missing("ATR missing or invalid")
    if not positive(snapshot.ema20):
        return RejectionResult.missing("EMA20 missing or invalid")
    if not positive(snapshot.close):
        return RejectionResult.missing("Last close missing or invalid")
    return None


def _validate_weekly(snapshot: MarketSnapshot) -> Optional[RejectionResult]:
    if not positive(snapshot.ema20):
        return RejectionResult.missing("EMA20 missing or invalid")
    if not positive(snapshot.close):
        return RejectionResult.missing("Friday close missing or invalid")
    return None


def _finalize(
    family: Family,
    archetype: Archetype,
    snapshot: MarketSnapshot,
    setup: StrategyLevels | RejectionResult,
    settings: Settings,
) -> LevelsResult:
    if isinstance(setup, RejectionResult):
        return _reject(family, setup, archetype.value)

    limits = GuardrailLimits.from_settings(settings)
    guarded = apply_guardrails(
        setup.entry,
        setup.stop,
        setup.targets.target2,
        snapshot.atr,
        archetype.value,
        limits=limits,
    )
    if isinstance(guarded, RejectionResult):
        annotated = guarded.model_copy(
            update={"scan_type": archetype.value, "mode": setup.mode, "original_reason": setup.reason}
        )
        return _reject(family, annotated, archetype.value)

    target1, target1_basis = resolve_partial_booking(
        guarded.entry, guarded.target2, snapshot, family=family, tick=limits.tick
    )
    target3, target3_basis = setup.targets.target3, setup.targets.target3_basis
    if target3 is not None and target3 <= guarded.target2:
        target3, target3_basis = None, None
    levels = TradeLevels(
        family=family,
        scan_type=archetype.value,
        mode=setup.mode,
        archetype=setup.archetype,
        entry=guarded.entry,
        entry_basis=setup.entry_basis,
        entry_range=setup.entry_range,
        stop=guarded.stop,
        target1=target1,
        target1_basis=target1_basis,
        target2=guarded.target2,
        target2_basis=setup.targets.target2_basis,
        target3=target3,
        target3_basis=target3_basis,
        daily_r1_check=snapshot.daily_r1 if positive(snapshot.daily_r1) else None,
        entry_type=setup.entry_type,
        risk_reward=guarded.risk_reward,
        risk_percent=guarded.risk_percent,
        reward_percent=guarded.reward_percent,
        time_rules=resolve_time_rules(setup.archetype, setup.entry_type, family=family),
        reason=setup.reason,
        adjustments=[*setup.adjustments, *guarded.adjustments],
    )
    if settings.verify_invariants:
        assert_invariants(levels, limits)

    record_accepted(family, levels.archetype, levels.target2_basis, guarded.capped)
    logger.debug(
        "levels accepted",
        extra={
            "family": family,
            "scan_type": archetype.value,
            "mode": levels.mode,
            "entry": levels.entry,
            "stop": levels.stop,
            "target1": levels.target1,
            "target2": levels.target2,
            "rr": levels.risk_reward,
        },
    )
    return levels


def calculate_trading_levels(archetype: Archetype | str, snapshot: MarketSnapshot | Mapping[str, Any]) -> LevelsResult:
    """Daily (ATR-buffered) levels for ``archetype``.

    Raises ``TypeError`` only for a missing or non-mapping snapshot; every
    other failure comes back as a :class:`RejectionResult`.
    """

    snap = coerce_snapshot(snapshot)
    settings = get_settings()
    with symbol_context(snap.symbol):
        missing = _validate_daily(snap)
        if missing is not None:
            return _reject("daily", missing, archetype)

        parsed = parse_archetype(archetype)
        calculator = DAILY_CALCULATORS.get(parsed) if parsed is not None else None
        if calculator is None:
            return _reject("daily", RejectionResult.unknown_archetype(archetype), archetype)

        setup = calculator(snap, _params(settings))
        return _finalize("daily", parsed, snap, setup, settings)


def calculate_weekly_trading_levels(
    archetype: Archetype | str, snapshot: MarketSnapshot | Mapping[str, Any]
) -> LevelsResult:
    """Weekly (percentage-buffered) levels.

    ``a_plus_momentum``/``52w_breakout`` and ``pullback`` use the weekly
    formulas; the other daily archetypes fall through to
    :func:`calculate_trading_levels`.
    """

    snap = coerce_snapshot(snapshot)
    settings = get_settings()
    with symbol_context(snap.symbol):
        missing = _validate_weekly(snap)
        if missing is not None:
            return _reject("weekly", missing, archetype)

        parsed = parse_archetype(archetype)
        if parsed is None:
            return _reject("weekly", RejectionResult.unknown_archetype(archetype), archetype)

        calculator = WEEKLY_CALCULATORS.get(parsed)
        if calculator is None:
            logger.debug("no weekly formula, using daily family", extra={"scan_type": parsed.value})
            return calculate_trading_levels(parsed, snap)

        setup = calculator(snap, _params(settings))
        return _finalize("weekly", parsed, snap, setup, settings)


__all__ = ["calculate_trading_levels", "calculate_weekly_trading_levels", "coerce_snapshot"]
