"""Build a :class:`MarketSnapshot` from OHLCV bars.

The builder only derives indicators from frames the caller already holds; it
never fetches data. Bars are expected oldest first with ``open``, ``high``,
``low``, ``close`` and ``volume`` columns (case-insensitive).
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Optional

import pandas as pd

from .calculations import atr, classic_pivots, ema, rsi, sma
from .schemas import MarketSnapshot

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("open", "high", "low", "close", "volume")
BARS_PER_YEAR = 252


def _normalise(bars: pd.DataFrame) -> pd.DataFrame:
    if not isinstance(bars, pd.DataFrame):
        raise TypeError("bars must be a pandas DataFrame")
    frame = bars.rename(columns=lambda col: str(col).strip().lower())
    missing = [col for col in REQUIRED_COLUMNS if col not in frame.columns]
    if missing:
        raise ValueError(f"bars missing columns: {', '.join(missing)}")
    frame = frame[list(REQUIRED_COLUMNS)].apply(pd.to_numeric, errors="coerce")
    return frame.dropna(subset=["high", "low", "close"])


def _last(series: pd.Series, min_bars: int) -> Optional[float]:
    if len(series) < min_bars:
        return None
    value = series.iloc[-1]
    if value is None or pd.isna(value):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def resample_weekly(daily: pd.DataFrame) -> pd.DataFrame:
    """Aggregate daily bars into Friday-anchored weekly bars."""

    if not isinstance(daily.index, pd.DatetimeIndex):
        raise ValueError("weekly resampling requires a DatetimeIndex")
    weekly = daily.resample("W-FRI").agg(
        {"open": "first", "high": "max", "low": "min", "close": "last", "volume": "sum"}
    )
    return weekly.dropna(subset=["high", "low", "close"])


def _completed_weekly_bar(daily: pd.DataFrame, weekly_bars: Optional[pd.DataFrame]) -> Optional[pd.Series]:
    if weekly_bars is not None:
        weekly = _normalise(weekly_bars)
        return weekly.iloc[-1] if len(weekly) else None
    if not isinstance(daily.index, pd.DatetimeIndex):
        logger.debug("daily bars lack a DatetimeIndex, weekly pivots skipped")
        return None
    weekly = resample_weekly(daily)
    if weekly.empty:
        return None
    # The last bucket is still forming unless the data reaches its Friday label.
    if weekly.index[-1] > daily.index[-1]:
        weekly = weekly.iloc[:-1]
    return weekly.iloc[-1] if len(weekly) else None


def _pivot_fields(prefix: str, bar: Optional[pd.Series]) -> Dict[str, Any]:
    if bar is None:
        return {}
    levels = classic_pivots(float(bar["high"]), float(bar["low"]), float(bar["close"]))
    return {
        f"{prefix}_pivot": levels["pivot"],
        f"{prefix}_r1": levels["r1"],
        f"{prefix}_r2": levels["r2"],
        f"{prefix}_s1": levels["s1"],
    }


def build_snapshot(
    daily_bars: pd.DataFrame,
    weekly_bars: Optional[pd.DataFrame] = None,
    *,
    symbol: Optional[str] = None,
) -> MarketSnapshot:
    """Derive the indicator bag for the session after the last daily bar.

    Args:
        daily_bars: Daily OHLCV bars, oldest first.
        weekly_bars: Optional weekly bars; when omitted they are resampled
            from ``daily_bars`` (``W-FRI``), which then needs a DatetimeIndex.
        symbol: Ticker attached to the snapshot for log context.

    Returns:
        A :class:`MarketSnapshot`. Indicators without enough history are
        ``None``; the 52-week high uses whatever history is available up to
        252 bars.
    """

    daily = _normalise(daily_bars)
    if daily.empty:
        raise ValueError("daily_bars is empty")

    high, low, close, volume = daily["high"], daily["low"], daily["close"], daily["volume"]
    last = daily.iloc[-1]

    fields: Dict[str, Any] = {
        "symbol": symbol,
        "open": last["open"],
        "high": last["high"],
        "low": last["low"],
        "close": last["close"],
        "volume": last["volume"],
        "avg_volume20": _last(sma(volume, 20), 20),
        "ema20": _last(ema(close, 20), 20),
        "ema50": _last(ema(close, 50), 50),
        "sma200": _last(sma(close, 200), 200),
        "atr": _last(atr(high, low, close, 14), 15),
        "rsi": _last(rsi(close, 14), 15),
        "high_10d": _last(high.rolling(10).max(), 10),
        "low_10d": _last(low.rolling(10).min(), 10),
        "high_20d": _last(high.rolling(20).max(), 20),
        "high_52w": float(high.tail(BARS_PER_YEAR).max()),
    }
    # Pivots for the next session come from the last completed bar.
    fields.update(_pivot_fields("daily", last))
    fields.update(_pivot_fields("weekly", _completed_weekly_bar(daily, weekly_bars)))

    snapshot = MarketSnapshot.model_validate(fields)
    logger.debug(
        "snapshot built",
        extra={"bars": len(daily), "close": snapshot.close, "atr": snapshot.atr, "ema20": snapshot.ema20},
    )
    return snapshot


__all__ = ["build_snapshot", "resample_weekly"]
