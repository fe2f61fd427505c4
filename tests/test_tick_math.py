"""
Tick math: sqrt ratios, quotes at a tick and mean-tick rounding.
"""

import pytest
from hypothesis import given, strategies as st

from core.services.tick_math import (
    MAX_TICK,
    MAX_UINT128,
    MIN_TICK,
    get_quote_at_tick,
    get_sqrt_ratio_at_tick,
    mean_tick_from_cumulatives,
    mul_div,
)
from tests.fakes import USDC, WETH


def test_sqrt_ratio_reference_values():
    """Tick 0 and both tick bounds match the canonical constants."""
    assert get_sqrt_ratio_at_tick(0) == 1 << 96
    assert get_sqrt_ratio_at_tick(MIN_TICK) == 4295128739
    assert get_sqrt_ratio_at_tick(MAX_TICK) == 1461446703485210103287273052203988822378723970342


def test_sqrt_ratio_rejects_out_of_range_ticks():
    with pytest.raises(ValueError):
        get_sqrt_ratio_at_tick(MAX_TICK + 1)
    with pytest.raises(ValueError):
        get_sqrt_ratio_at_tick(MIN_TICK - 1)


@given(st.integers(min_value=MIN_TICK, max_value=MAX_TICK - 1))
def test_sqrt_ratio_is_strictly_increasing(tick):
    assert get_sqrt_ratio_at_tick(tick) < get_sqrt_ratio_at_tick(tick + 1)


def test_quote_at_tick_zero_is_identity():
    assert get_quote_at_tick(0, 10**18, WETH, USDC) == 10**18
    assert get_quote_at_tick(0, 10**18, USDC, WETH) == 10**18


def test_quote_direction_follows_token_order():
    """At a positive tick token0 (lower address) is worth more than token1."""
    amount = 10**18
    forward = get_quote_at_tick(1, amount, WETH, USDC)
    backward = get_quote_at_tick(1, amount, USDC, WETH)

    assert forward > amount > backward
    assert abs(forward - amount * 1.0001) / amount < 1e-9
    assert abs(backward - amount / 1.0001) / amount < 1e-9


def test_quote_uses_wide_branch_for_large_ticks():
    """Above uint128 sqrt ratios the quote goes through the 128-bit ratio path."""
    tick = 500_000
    assert get_sqrt_ratio_at_tick(tick) > MAX_UINT128
    out = get_quote_at_tick(tick, 1000, WETH, USDC)
    assert out > 1000 * 10**21


def test_quote_rejects_amounts_wider_than_uint128():
    with pytest.raises(ValueError):
        get_quote_at_tick(0, MAX_UINT128 + 1, WETH, USDC)


def test_mean_tick_rounds_toward_negative_infinity():
    assert mean_tick_from_cumulatives(0, 7, 2) == 3
    assert mean_tick_from_cumulatives(0, -7, 2) == -4
    assert mean_tick_from_cumulatives(100, 100 - 1800 * 12, 1800) == -12


def test_mean_tick_requires_positive_period():
    with pytest.raises(ValueError):
        mean_tick_from_cumulatives(0, 10, 0)


def test_mul_div_rounding():
    assert mul_div(7, 3, 2) == 10
    assert mul_div(7, 3, 2, round_up=True) == 11
    assert mul_div(6, 3, 2, round_up=True) == 9
    with pytest.raises(ValueError):
        mul_div(1, 1, 0)
