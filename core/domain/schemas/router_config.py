from __future__ import annotations

from dataclasses import asdict, dataclass

BPS_DENOMINATOR = 10_000


@dataclass
class BufferConfig:
    """
    Mutable router configuration read by every swap that derives its bound.

    period: oracle averaging window in seconds; 0 means the oracle default.
    buffer_bps: basis points subtracted from (exact-in) or added to
        (exact-out) an oracle-derived quote.
    paused: gates every swap entry point.
    """

    period: int = 0
    buffer_bps: int = 100
    paused: bool = False

    def as_dict(self) -> dict:
        return asdict(self)
