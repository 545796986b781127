from __future__ import annotations

from typing import Any, Dict

from swinglevels.schemas import MarketSnapshot


def mtartech_bag(**overrides: Any) -> Dict[str, Any]:
    """Plain camelCase data bag for a fresh 52-week-high breakout (MTARTECH, Friday close)."""

    bag: Dict[str, Any] = {
        "symbol": "MTARTECH",
        "ema20": 2585.0,
        "atr": 139.8,
        "fridayHigh": 2961.0,
        "fridayLow": 2880.0,
        "fridayClose": 2931.5,
        "high52W": 3078.0,
        "weeklyR1": 2622.4,
        "weeklyR2": 2844.6,
        "dailyR1": 2781.3,
    }
    bag.update(overrides)
    return bag


def make_snapshot(**fields: Any) -> MarketSnapshot:
    """Snapshot with sane defaults for a stock trading around 100."""

    base: Dict[str, Any] = {
        "symbol": "TEST",
        "open": 98.0,
        "high": 99.0,
        "low": 97.5,
        "close": 98.5,
        "volume": 900_000,
        "avg_volume20": 1_000_000,
        "ema20": 96.0,
        "ema50": 92.0,
        "atr": 2.0,
        "rsi": 58.0,
        "high_20d": 100.0,
        "high_52w": 130.0,
        "weekly_r1": 110.0,
        "weekly_r2": 115.0,
    }
    base.update(fields)
    return MarketSnapshot.model_validate(base)


__all__ = ["make_snapshot", "mtartech_bag"]
