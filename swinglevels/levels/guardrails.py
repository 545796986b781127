"""Final numeric gate on entry/stop/target.

The guards reject bad setups rather than moving the stop: widening or
tightening a stop would break the structural logic that produced it. The one
non-fatal correction is capping an overshooting main target.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..config import Settings, get_settings
from ..schemas import RejectionResult
from .ticks import DEFAULT_TICK, floor_to_tick, is_num, round2, round_to_tick

logger = logging.getLogger(__name__)

SUGGESTED_TARGET_RR = 1.5


@dataclass(frozen=True)
class GuardrailLimits:
    """Risk/reward thresholds (percent of entry, R multiples)."""

    max_risk_pct: float = 8.0
    min_risk_pct: float = 0.5
    min_reward_pct: float = 2.0
    max_reward_pct: float = 15.0
    min_rr: float = 1.2
    tick: float = DEFAULT_TICK

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "GuardrailLimits":
        settings = settings or get_settings()
        return cls(
            max_risk_pct=settings.max_risk_pct,
            min_risk_pct=settings.min_risk_pct,
            min_reward_pct=settings.min_reward_pct,
            max_reward_pct=settings.max_reward_pct,
            min_rr=settings.min_rr,
            tick=settings.tick_size,
        )


@dataclass(frozen=True)
class GuardrailPass:
    entry: float
    stop: float
    target2: float
    risk_reward: float
    risk_percent: float
    reward_percent: float
    adjustments: List[str] = field(default_factory=list)

    @property
    def capped(self) -> bool:
        return bool(self.adjustments)


def _finite(*values: Any) -> bool:
    return all(is_num(value) for value in values)


def apply_guardrails(
    entry: Any,
    stop: Any,
    target2: Any,
    atr: Any = None,
    archetype: str | None = None,
    *,
    limits: Optional[GuardrailLimits] = None,
) -> GuardrailPass | RejectionResult:
    """Validate a long setup; return the (possibly capped) levels or a rejection."""

    limits = limits or GuardrailLimits.from_settings()

    if not _finite(entry, stop, target2):
        return RejectionResult(reason="Invalid levels calculated (missing values)", kind="economic")
    if entry <= 0 or stop <= 0 or target2 <= 0:
        return RejectionResult(reason="Invalid levels calculated (zero or negative values)", kind="economic")

    if stop >= entry:
        return RejectionResult(
            reason=f"Stop ({round2(stop)}) must be below entry ({round2(entry)})",
            kind="economic",
        )
    if target2 <= entry:
        return RejectionResult(
            reason=f"Target ({round2(target2)}) must be above entry ({round2(entry)})",
            kind="economic",
        )

    risk = entry - stop
    risk_pct = risk / entry * 100
    if risk_pct > limits.max_risk_pct:
        return RejectionResult(
            reason=(
                f"Risk too high: {round2(risk_pct)}% (max {limits.max_risk_pct}%). "
                "Either reduce position size or skip this setup."
            ),
            kind="economic",
            risk_percent=round2(risk_pct),
            suggested_action="skip_or_reduce_size",
        )
    if risk_pct < limits.min_risk_pct:
        return RejectionResult(
            reason=(
                f"Risk too small: {round2(risk_pct)}% (min {limits.min_risk_pct}%). "
                "Stop is too close to entry - likely to trigger on noise."
            ),
            kind="economic",
            risk_percent=round2(risk_pct),
            suggested_action="widen_stop_or_skip",
        )

    reward_pct = (target2 - entry) / entry * 100
    if reward_pct < limits.min_reward_pct:
        return RejectionResult(
            reason=(
                f"Target too close: {round2(reward_pct)}% (min {limits.min_reward_pct}%). "
                "Not worth the swing trade effort."
            ),
            kind="economic",
            reward_percent=round2(reward_pct),
            suggested_action="skip_this_setup",
        )

    adjustments: List[str] = []
    final_target = float(target2)
    if reward_pct > limits.max_reward_pct:
        final_target = floor_to_tick(entry * (1 + limits.max_reward_pct / 100), limits.tick)
        adjustments.append(
            f"Target capped from {round2(reward_pct)}% to {limits.max_reward_pct}% (realistic for swing)"
        )
        logger.info(
            "target capped",
            extra={
                "archetype": archetype,
                "entry": round2(entry),
                "target_raw": round2(target2),
                "target_capped": final_target,
            },
        )

    reward = final_target - entry
    risk_reward = reward / risk
    if risk_reward < limits.min_rr:
        needed = entry + risk * SUGGESTED_TARGET_RR
        return RejectionResult(
            reason=(
                f"R:R too low: {round2(risk_reward)}:1 (min {limits.min_rr}:1). "
                f"Risk {round2(risk_pct)}% vs Reward {round2(reward / entry * 100)}%"
            ),
            kind="economic",
            current_rr=round2(risk_reward),
            suggested_target=round_to_tick(needed, limits.tick),
            suggested_action=f"Need target >= {round2(needed)} for viable trade",
            risk_percent=round2(risk_pct),
            reward_percent=round2(reward / entry * 100),
        )

    return GuardrailPass(
        entry=float(entry),
        stop=float(stop),
        target2=final_target,
        risk_reward=round2(risk_reward),
        risk_percent=round2(risk_pct),
        reward_percent=round2(reward / entry * 100),
        adjustments=adjustments,
    )


__all__ = ["GuardrailLimits", "GuardrailPass", "SUGGESTED_TARGET_RR", "apply_guardrails"]
