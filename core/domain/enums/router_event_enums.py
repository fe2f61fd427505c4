from __future__ import annotations

from enum import StrEnum


class RouterEventKind(StrEnum):
    """
    Kinds of events emitted by state-changing router entry points.
    """

    PAIR_REGISTERED = "pair_registered"
    PAIR_UNREGISTERED = "pair_unregistered"
    PERIOD_UPDATED = "period_updated"
    BUFFER_UPDATED = "buffer_updated"
    PAUSED = "paused"
    UNPAUSED = "unpaused"
    SWAP_EXECUTED = "swap_executed"
