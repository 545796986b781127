from _helpers import make_snapshot, mtartech_bag

from swinglevels.levels.strategies import (
    StrategyLevels,
    calculate_a_plus_momentum_levels,
    calculate_breakout_levels,
    calculate_consolidation_levels,
    calculate_momentum_levels,
    calculate_pullback_levels,
    is_healthy_pullback,
)
from swinglevels.schemas import MarketSnapshot, RejectionResult


def test_breakout_buys_above_20d_high():
    levels = calculate_breakout_levels(make_snapshot())
    assert isinstance(levels, StrategyLevels)
    assert levels.entry == 100.4
    # max(ema20 96, 97% of 100) - 0.1 ATR
    assert levels.stop == 96.8
    assert levels.entry_range == (100.4, 101.0)
    assert levels.entry_type == "buy_above"
    assert levels.mode == "BREAKOUT"
    assert levels.archetype == "breakout"
    assert levels.targets.target2 == 110.0
    assert levels.targets.target2_basis == "weekly_r1"
    assert levels.targets.target3 == 115.0


def test_breakout_without_20d_high_uses_last_high():
    levels = calculate_breakout_levels(make_snapshot(high_20d=None))
    assert levels.entry == 99.4


def test_breakout_stop_above_entry_rejects():
    result = calculate_breakout_levels(make_snapshot(ema20=120.0))
    assert isinstance(result, RejectionResult)
    assert "must be below entry" in result.reason
    assert result.kind == "economic"


def test_momentum_near_20d_high_delegates_to_breakout():
    snap = make_snapshot()
    breakout = calculate_breakout_levels(snap)
    momentum = calculate_momentum_levels(snap)
    assert momentum.mode == "MOMENTUM_NEAR_BREAKOUT"
    assert momentum.reason.startswith("Momentum stock near 20D high - treating as breakout. ")
    assert momentum.reason.endswith(breakout.reason)
    assert (momentum.entry, momentum.stop, momentum.targets) == (breakout.entry, breakout.stop, breakout.targets)
    assert momentum.archetype == "breakout"


def test_momentum_continuation_above_last_high():
    snap = make_snapshot(high=101.0, close=100.0, ema20=95.0, high_20d=110.0, weekly_r1=108.0, weekly_r2=112.0)
    levels = calculate_momentum_levels(snap)
    assert levels.mode == "MOMENTUM"
    assert levels.archetype == "trend-follow"
    assert levels.entry == 101.3
    # 1.2 ATR cap is tighter than EMA20 - 0.1 ATR
    assert levels.stop == 98.9
    assert levels.targets.target2_basis == "weekly_r1"


def test_consolidation_uses_10d_range_low():
    snap = make_snapshot(high=100.0, low=98.0, close=99.5, ema20=97.0, high_10d=101.0, low_10d=97.0)
    levels = calculate_consolidation_levels(snap)
    assert levels.mode == "CONSOLIDATION_BREAKOUT"
    assert levels.archetype == "breakout"
    assert levels.entry == 100.2
    assert levels.stop == 96.8
    assert levels.entry_range == (100.2, 100.6)


def test_consolidation_without_range_uses_last_low():
    snap = make_snapshot(high=100.0, low=98.0, close=99.5, ema20=97.0)
    levels = calculate_consolidation_levels(snap)
    assert levels.stop == 97.8


def test_a_plus_momentum_anchors_on_52w_high():
    snap = MarketSnapshot.model_validate(mtartech_bag())
    levels = calculate_a_plus_momentum_levels(snap)
    assert levels.entry == 3098.95
    assert levels.stop == 2889.25
    assert levels.entry_range == (3098.95, 3140.9)
    assert levels.targets.target2 == 3448.45
    assert levels.targets.target2_basis == "atr_extension_52w_breakout"
    assert levels.targets.target3 == 3658.15
    assert levels.archetype == "52w_breakout"
    assert "52W HIGH BREAKOUT" in levels.reason


def test_healthy_pullback_is_limit_at_ema20():
    snap = make_snapshot(
        ema20=100.0, close=100.5, high=101.5, volume=800_000, rsi=55.0, daily_r1=104.0, high_52w=140.0
    )
    assert is_healthy_pullback(snap)
    levels = calculate_pullback_levels(snap)
    assert levels.entry_type == "limit"
    assert levels.mode == "PULLBACK_AGGRESSIVE"
    assert levels.entry == 99.8
    assert levels.stop == 98.8
    assert levels.entry_range == (99.4, 100.6)
    assert levels.targets.target2_basis == "daily_r1"


def test_weak_pullback_waits_for_bounce():
    snap = make_snapshot(
        ema20=100.0, close=99.0, high=101.5, rsi=40.0, daily_r1=104.0, daily_r2=106.0, high_52w=140.0
    )
    assert not is_healthy_pullback(snap)
    levels = calculate_pullback_levels(snap)
    assert levels.entry_type == "buy_above"
    assert levels.mode == "PULLBACK_CONSERVATIVE"
    assert levels.entry == 101.7
    assert levels.stop == 98.8
    assert levels.targets.target2_basis == "daily_r2"
    assert "Closed below EMA20" in levels.reason
    assert "RSI 40.0" in levels.reason


def test_heavy_volume_blocks_aggressive_entry():
    snap = make_snapshot(ema20=100.0, close=100.5, high=101.5, volume=1_500_000, daily_r1=106.0)
    assert not is_healthy_pullback(snap)


def test_missing_rsi_does_not_block_aggressive_entry():
    snap = make_snapshot(ema20=100.0, close=100.5, high=101.5, volume=800_000, rsi=None, daily_r1=104.0)
    assert is_healthy_pullback(snap)
