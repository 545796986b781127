"""Tick-size quantisation and small numeric guards shared by the engine."""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Any

DEFAULT_TICK = 0.05


def is_num(value: Any) -> bool:
    """True for finite real numbers (bools excluded)."""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def positive(value: Any) -> bool:
    return is_num(value) and value > 0


@lru_cache(maxsize=32)
def _tick_decimals(tick: float) -> int:
    try:
        exponent = Decimal(str(tick)).normalize().as_tuple().exponent
    except InvalidOperation:
        return 2
    if not isinstance(exponent, int):
        return 2
    return max(0, -exponent)


def _valid_tick(tick: Any) -> float:
    if positive(tick):
        return float(tick)
    return DEFAULT_TICK


def round_to_tick(price: Any, tick: float = DEFAULT_TICK) -> float:
    """Round ``price`` half-up to the nearest multiple of ``tick``.

    Non-numeric input returns ``0.0``.
    """

    if not is_num(price):
        return 0.0
    step = _valid_tick(tick)
    steps = math.floor(float(price) / step + 0.5)
    return round(steps * step, _tick_decimals(step))


def floor_to_tick(price: Any, tick: float = DEFAULT_TICK) -> float:
    """Round ``price`` down to a tick multiple (used for caps that must not be exceeded)."""

    if not is_num(price):
        return 0.0
    step = _valid_tick(tick)
    steps = math.floor(float(price) / step + 1e-9)
    return round(steps * step, _tick_decimals(step))


def round2(value: float) -> float:
    return round(float(value), 2)


__all__ = ["DEFAULT_TICK", "floor_to_tick", "is_num", "positive", "round2", "round_to_tick"]
