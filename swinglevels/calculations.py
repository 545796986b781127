"""Indicator calculations feeding the market snapshot.

This module implements the indicators the level engine consumes: Exponential
and Simple Moving Averages, Average True Range (ATR), Relative Strength Index
(RSI) and classic floor-trader pivots.  These functions operate on pandas
Series objects.
"""

from __future__ import annotations

from typing import Dict

import numpy as np
import pandas as pd


def ema(series: pd.Series, period: int) -> pd.Series:
    """Compute the Exponential Moving Average (EMA) of a series.

    Args:
        series: A pandas Series of values.
        period: The lookback period for the EMA.

    Returns:
        A pandas Series containing the EMA values.
    """
    return series.ewm(span=period, adjust=False).mean()


def sma(series: pd.Series, period: int) -> pd.Series:
    """Simple moving average; ``NaN`` until ``period`` values are available."""
    return series.rolling(window=period, min_periods=period).mean()


def true_range(high: pd.Series, low: pd.Series, close: pd.Series) -> pd.Series:
    prev_close = close.shift(1)
    tr1 = (high - low).abs()
    tr2 = (high - prev_close).abs()
    tr3 = (low - prev_close).abs()
    return pd.concat([tr1, tr2, tr3], axis=1).max(axis=1)


def atr(high: pd.Series, low: pd.Series, close: pd.Series, period: int = 14) -> pd.Series:
    """Compute the Average True Range (ATR).

    ATR is calculated as the exponential moving average of the True Range.

    Args:
        high: Series of high prices.
        low: Series of low prices.
        close: Series of closing prices.
        period: Lookback period. Default is 14.

    Returns:
        A pandas Series of ATR values.
    """
    return ema(true_range(high, low, close), period)


def rsi(close: pd.Series, period: int = 14) -> pd.Series:
    """Compute the Relative Strength Index using Wilder smoothing.

    Args:
        close: Series of closing prices.
        period: Lookback period (default 14).

    Returns:
        A pandas Series bounded to ``[0, 100]``; the first ``period`` values
        are ``NaN``.
    """
    delta = close.diff()
    gains = delta.clip(lower=0.0)
    losses = (-delta).clip(lower=0.0)
    alpha = 1.0 / period
    avg_gain = gains.ewm(alpha=alpha, adjust=False, min_periods=period).mean()
    avg_loss = losses.ewm(alpha=alpha, adjust=False, min_periods=period).mean()
    rs = avg_gain / avg_loss.replace(0.0, np.nan)
    result = 100 - 100 / (1 + rs)
    # No losses in the window: RSI pins at 100.
    result = result.where(~((avg_loss == 0) & avg_gain.notna()), 100.0)
    return result


def classic_pivots(high: float, low: float, close: float) -> Dict[str, float]:
    """Classic floor-trader pivots from one period's high/low/close.

    Returns:
        A dict with ``pivot``, ``r1``, ``r2``, ``s1`` and ``s2``.
    """
    pivot = (high + low + close) / 3
    return {
        "pivot": pivot,
        "r1": 2 * pivot - low,
        "r2": pivot + (high - low),
        "s1": 2 * pivot - high,
        "s2": pivot - (high - low),
    }


__all__ = ["atr", "classic_pivots", "ema", "rsi", "sma", "true_range"]
