from __future__ import annotations

from enum import StrEnum

# (multiplier in percent, flat extra gas)
_PADDING = {
    "default": (100, 0),
    "buffered": (125, 10_000),
    "aggressive": (150, 25_000),
}


class GasStrategy(StrEnum):
    """
    How much headroom TxService adds on top of eth_estimateGas.

    Swaps through the exchange router use BUFFERED: multihop paths can cross
    extra ticks between estimation and inclusion.
    """

    DEFAULT = "default"
    BUFFERED = "buffered"
    AGGRESSIVE = "aggressive"

    def pad(self, estimate: int) -> int:
        pct, extra = _PADDING[self.value]
        return int(estimate) * pct // 100 + extra
