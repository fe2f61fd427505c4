"""
Exact integer tick math for TWAP quotes.

Ports the concentrated-liquidity TickMath / OracleLibrary routines needed to
turn an arithmetic mean tick into an amount, bit for bit, so that a quote
computed here matches the one the pool's periphery contracts would return.
"""

from __future__ import annotations

MIN_TICK = -887272
MAX_TICK = 887272

MAX_UINT128 = (1 << 128) - 1
MAX_UINT256 = (1 << 256) - 1

# (bit, multiplier) pairs applied to the Q128.128 ratio for |tick|
_TICK_MULTIPLIERS = (
    (0x2, 0xFFF97272373D413259A46990580E213A),
    (0x4, 0xFFF2E50F5F656932EF12357CF3C7FDCC),
    (0x8, 0xFFE5CACA7E10E4E61C3624EAA0941CD0),
    (0x10, 0xFFCB9843D60F6159C9DB58835C926644),
    (0x20, 0xFF973B41FA98C081472E6896DFB254C0),
    (0x40, 0xFF2EA16466C96A3843EC78B326B52861),
    (0x80, 0xFE5DEE046A99A2A811C461F1969C3053),
    (0x100, 0xFCBE86C7900A88AEDCFFC83B479AA3A4),
    (0x200, 0xF987A7253AC413176F2B074CF7815E54),
    (0x400, 0xF3392B0822B70005940C7A398E4B70F3),
    (0x800, 0xE7159475A2C29B7443B29C7FA6E889D9),
    (0x1000, 0xD097F3BDFD2022B8845AD8F792AA5825),
    (0x2000, 0xA9F746462D870FDF8A65DC1F90E061E5),
    (0x4000, 0x70D869A156D2A1B890BB3DF62BAF32F7),
    (0x8000, 0x31BE135F97D08FD981231505542FCFA6),
    (0x10000, 0x9AA508B5B7A84E1C677DE54F3E99BC9),
    (0x20000, 0x5D6AF8DEDB81196699C329225EE604),
    (0x40000, 0x2216E584F5FA1EA926041BEDFE98),
    (0x80000, 0x48A170391F7DC42444E8FA2),
)


def mul_div(a: int, b: int, denominator: int, round_up: bool = False) -> int:
    """
    Calculate (a * b) / denominator with full precision.

    Python integers never overflow, so this only centralizes the rounding
    direction: floor by default, ceiling when round_up is set.
    """
    if denominator == 0:
        raise ValueError("Division by zero")

    result = a * b
    if round_up:
        return (result + denominator - 1) // denominator
    return result // denominator


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """
    sqrt(1.0001^tick) as a Q64.96 fixed-point number, rounded up.

    Raises:
        ValueError: if tick is outside [MIN_TICK, MAX_TICK].
    """
    if tick < MIN_TICK or tick > MAX_TICK:
        raise ValueError(f"Tick {tick} out of bounds [{MIN_TICK}, {MAX_TICK}]")

    abs_tick = abs(tick)
    ratio = 0xFFFCB933BD6FAD37AA2D162D1A594001 if abs_tick & 0x1 else 1 << 128
    for bit, multiplier in _TICK_MULTIPLIERS:
        if abs_tick & bit:
            ratio = (ratio * multiplier) >> 128

    if tick > 0:
        ratio = MAX_UINT256 // ratio

    # Q128.128 -> Q128.96, rounding up
    return (ratio >> 32) + (0 if ratio % (1 << 32) == 0 else 1)


def get_quote_at_tick(tick: int, base_amount: int, base_token: str, quote_token: str) -> int:
    """
    Amount of quote_token received for base_amount of base_token at `tick`.

    Token ordering follows the pool convention: the numerically lower
    address is token0 and the tick prices token0 in units of token1.
    """
    if base_amount < 0 or base_amount > MAX_UINT128:
        raise ValueError("base_amount must fit in uint128")

    sqrt_ratio_x96 = get_sqrt_ratio_at_tick(tick)
    base_is_token0 = int(base_token, 16) < int(quote_token, 16)

    # square in full precision when it cannot exceed 256 bits
    if sqrt_ratio_x96 <= MAX_UINT128:
        ratio_x192 = sqrt_ratio_x96 * sqrt_ratio_x96
        if base_is_token0:
            return mul_div(ratio_x192, base_amount, 1 << 192)
        return mul_div(1 << 192, base_amount, ratio_x192)

    ratio_x128 = mul_div(sqrt_ratio_x96, sqrt_ratio_x96, 1 << 64)
    if base_is_token0:
        return mul_div(ratio_x128, base_amount, 1 << 128)
    return mul_div(1 << 128, base_amount, ratio_x128)


def mean_tick_from_cumulatives(tick_cumulative_start: int, tick_cumulative_end: int, period: int) -> int:
    """
    Arithmetic mean tick over `period`, rounded toward negative infinity.
    """
    if period <= 0:
        raise ValueError("period must be positive")
    return (int(tick_cumulative_end) - int(tick_cumulative_start)) // int(period)
