import pytest

from swinglevels.levels.targets import (
    TargetPick,
    find_pullback_target,
    find_structural_target,
    find_weekly_breakout_targets,
    find_weekly_pullback_targets,
)
from swinglevels.schemas import MarketSnapshot, RejectionResult


def _snap(**fields):
    return MarketSnapshot(**fields)


def test_weekly_r1_wins_when_it_clears_rr():
    snap = _snap(atr=2.0, weekly_r1=104.0, weekly_r2=120.0, high_52w=200.0)
    pick = find_structural_target(100.0, 2.0, snap)
    assert isinstance(pick, TargetPick)
    assert pick.target2 == 104.0
    assert pick.target2_basis == "weekly_r1"
    assert pick.target3 == 120.0
    assert pick.target3_basis == "weekly_r2"


def test_weekly_r1_too_close_falls_to_r2():
    snap = _snap(atr=2.0, weekly_r1=102.0, weekly_r2=105.0, high_52w=200.0)
    pick = find_structural_target(100.0, 2.0, snap)
    assert pick.target2 == 105.0
    assert pick.target2_basis == "weekly_r2"
    assert pick.target3 == 200.0


def test_52w_high_is_last_rung():
    snap = _snap(atr=2.0, weekly_r1=95.0, weekly_r2=98.0, high_52w=110.0)
    pick = find_structural_target(100.0, 2.0, snap)
    assert pick.target2_basis == "52w_high"
    assert pick.target3 is None


def test_no_level_clears_rr_rejects_without_no_data():
    snap = _snap(atr=2.0, weekly_r1=95.0, weekly_r2=101.0, high_52w=102.0)
    result = find_structural_target(100.0, 2.0, snap)
    assert isinstance(result, RejectionResult)
    assert result.kind == "economic"
    assert result.no_data is False


def test_no_levels_and_no_atr_is_no_data():
    result = find_structural_target(100.0, 2.0, _snap())
    assert isinstance(result, RejectionResult)
    assert result.no_data is True
    assert result.kind == "no_data"


def test_entry_at_52w_threshold_uses_atr_extension():
    snap = _snap(atr=10.0, high_52w=1000.0)
    pick = find_structural_target(995.0, 10.0, snap)
    assert pick.target2 == 1020.0
    assert pick.target2_basis == "atr_extension_52w_breakout"
    assert pick.target3 == 1035.0
    assert pick.target3_basis == "atr_extension_4x"


def test_entry_one_tick_below_threshold_skips_atr_extension():
    snap = _snap(atr=10.0, high_52w=1000.0)
    result = find_structural_target(994.95, 10.0, snap)
    assert isinstance(result, RejectionResult)
    assert result.no_data is False


def test_52w_branch_prefers_weekly_pivot_above_entry():
    snap = _snap(atr=20.0, high_52w=1000.0, weekly_r1=1040.0)
    pick = find_structural_target(1000.0, 20.0, snap)
    assert pick.target2 == 1040.0
    assert pick.target2_basis == "weekly_r1"
    assert pick.target3 == 1080.0
    assert pick.target3_basis == "atr_extension_4x"


def test_weekly_r1_wins_regardless_of_other_levels():
    for r2, high_52w in [(101.0, 300.0), (500.0, 104.5), (None, None)]:
        snap = _snap(atr=2.0, weekly_r1=104.0, weekly_r2=r2, high_52w=high_52w)
        pick = find_structural_target(100.0, 2.0, snap)
        assert pick.target2_basis == "weekly_r1"


def test_invalid_risk_rejects():
    snap = _snap(atr=2.0, weekly_r1=104.0)
    result = find_structural_target(100.0, 0.0, snap)
    assert isinstance(result, RejectionResult)
    assert result.kind == "economic"


def test_pullback_ladder_prefers_daily_r1():
    snap = _snap(daily_r1=103.0, daily_r2=106.0, weekly_r1=104.0)
    pick = find_pullback_target(100.0, 2.0, snap)
    assert pick.target2 == 103.0
    assert pick.target2_basis == "daily_r1"
    assert pick.target3 == 106.0


def test_pullback_ladder_uses_lower_rr_bar():
    snap = _snap(daily_r1=102.4)
    pick = find_pullback_target(100.0, 2.0, snap)
    assert pick.target2_basis == "daily_r1"
    rejected = find_pullback_target(100.0, 2.0, snap, min_rr=1.5)
    assert isinstance(rejected, RejectionResult)


def test_pullback_ladder_without_levels_is_no_data():
    result = find_pullback_target(100.0, 2.0, _snap(atr=2.0))
    assert result.no_data is True


def test_weekly_breakout_falls_back_to_three_percent():
    pick = find_weekly_breakout_targets(100.0, _snap(weekly_r1=95.0, weekly_r2=99.0))
    assert pick.target2 == 103.0
    assert pick.target2_basis == "pct_3_fallback"
    assert pick.target3 == 105.0
    assert pick.target3_basis == "pct_5_extension"


def test_weekly_breakout_uses_r2_as_extension():
    pick = find_weekly_breakout_targets(100.0, _snap(weekly_r1=110.0, weekly_r2=120.0))
    assert (pick.target2, pick.target2_basis) == (110.0, "weekly_r1")
    assert (pick.target3, pick.target3_basis) == (120.0, "weekly_r2")

    only_r1 = find_weekly_breakout_targets(100.0, _snap(weekly_r1=104.0))
    assert (only_r1.target3, only_r1.target3_basis) == (105.0, "pct_5_extension")


def test_weekly_breakout_drops_extension_below_far_r1():
    pick = find_weekly_breakout_targets(100.0, _snap(weekly_r1=110.0))
    assert pick.target2 == 110.0
    assert pick.target3 is None
    assert pick.target3_basis is None


def test_52w_branch_drops_atr_extension_below_pivot():
    snap = _snap(atr=10.0, high_52w=1000.0, weekly_r1=1050.0)
    pick = find_structural_target(1000.0, 20.0, snap)
    assert (pick.target2, pick.target2_basis) == (1050.0, "weekly_r1")
    assert pick.target3 is None


def test_weekly_pullback_walks_20d_high_then_pivots():
    snap = _snap(high_20d=99.0, weekly_r1=106.0, weekly_r2=110.0, high_52w=120.0)
    pick = find_weekly_pullback_targets(100.0, snap)
    assert (pick.target2, pick.target2_basis) == (106.0, "weekly_r1")
    assert (pick.target3, pick.target3_basis) == (110.0, "weekly_r2")


def test_weekly_pullback_rejects_when_nothing_above_entry():
    result = find_weekly_pullback_targets(100.0, _snap(high_20d=99.0, weekly_r1=98.0))
    assert isinstance(result, RejectionResult)
    assert result.no_data is False
    assert "REJECTED" in result.reason


def test_weekly_pullback_without_levels_is_no_data():
    result = find_weekly_pullback_targets(100.0, _snap())
    assert result.no_data is True


@pytest.mark.parametrize("entry", [50.0, 100.0, 150.0])
def test_weekly_breakout_never_rejects(entry):
    pick = find_weekly_breakout_targets(entry, _snap())
    assert pick.target2 > entry
