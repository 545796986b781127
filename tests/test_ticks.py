import math

import pytest

from swinglevels.levels.ticks import floor_to_tick, is_num, positive, round_to_tick


@pytest.mark.parametrize(
    "price, expected",
    [
        (3098.97, 3098.95),
        (101.03, 101.05),
        (101.02, 101.0),
        (3140.89, 3140.9),
        (0.0, 0.0),
    ],
)
def test_round_to_tick_nearest_multiple(price, expected):
    assert round_to_tick(price) == expected


def test_round_to_tick_custom_tick():
    assert round_to_tick(10.04, 0.1) == 10.0
    assert round_to_tick(10.5, 1) == 11.0
    assert round_to_tick(1234.56, 0.01) == 1234.56


@pytest.mark.parametrize("bad", [None, "abc", math.nan, math.inf, True])
def test_round_to_tick_non_numeric_returns_zero(bad):
    assert round_to_tick(bad) == 0.0


def test_round_to_tick_invalid_tick_falls_back_to_default():
    assert round_to_tick(101.03, 0) == 101.05


def test_floor_to_tick_never_rounds_up():
    assert floor_to_tick(115.049) == 115.0
    assert floor_to_tick(115.05) == 115.05
    assert floor_to_tick(100.4 * 1.15) == 115.45


def test_numeric_guards():
    assert is_num(1)
    assert is_num(2.5)
    assert not is_num(True)
    assert not is_num(float("nan"))
    assert not is_num("3")
    assert positive(0.01)
    assert not positive(0)
    assert not positive(None)
