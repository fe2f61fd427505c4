from __future__ import annotations

from enum import IntEnum


class FeeTier(IntEnum):
    """
    Fee tiers accepted by the concentrated-liquidity exchange.

    Values are expressed in hundredths of a basis point (3000 = 0.30%),
    the same unit the pools and the router use on-chain.
    """

    LOWEST = 100
    LOW = 500
    MEDIUM = 3000
    HIGH = 10000

    @classmethod
    def is_valid(cls, fee: object) -> bool:
        # floats and bools are rejected, not truncated
        if isinstance(fee, bool) or not isinstance(fee, int):
            return False
        return fee in cls._value2member_map_
