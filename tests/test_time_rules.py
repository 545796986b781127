import pytest

from swinglevels.levels.time_rules import resolve_time_rules


def test_52w_breakout_gets_patient_confirmation():
    rules = resolve_time_rules("52w_breakout", "buy_above")
    assert rules.to_payload() == {
        "entryConfirmation": "close_above",
        "entryWindowDays": 3,
        "maxHoldDays": 5,
        "weekEndRule": "trail_or_exit",
        "t1BookingPct": 50,
        "postT1Stop": "move_to_entry",
    }
    assert resolve_time_rules("52w_breakout", "buy_above", family="weekly") == rules


def test_limit_pullback_fills_on_touch():
    rules = resolve_time_rules("pullback", "limit")
    assert rules.entry_confirmation == "touch"
    assert rules.entry_window_days == 4
    assert rules.week_end_rule == "hold_if_above_entry"


@pytest.mark.parametrize("label", ["breakout", "trend-follow", "pullback"])
def test_close_confirmed_daily_entries_are_short(label):
    rules = resolve_time_rules(label, "buy_above")
    assert rules.entry_confirmation == "close_above"
    assert rules.entry_window_days == 2
    assert rules.week_end_rule == "exit_if_no_t1"


def test_weekly_pullback_uses_default_window():
    rules = resolve_time_rules("pullback", "buy_above", family="weekly")
    assert rules.entry_window_days == 3
    assert rules.week_end_rule == "exit_if_no_t1"
    assert rules.t1_booking_pct == 50
    assert rules.post_t1_stop == "move_to_entry"
