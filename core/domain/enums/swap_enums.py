from __future__ import annotations

from enum import StrEnum


class SwapKind(StrEnum):
    """
    Swap entry point selector.

    Single-hop variants carry exactly two tokens and one fee; multihop
    variants carry any path of two or more tokens.
    """

    SINGLE_EXACT_IN = "single_exact_in"
    SINGLE_EXACT_OUT = "single_exact_out"
    MULTI_EXACT_IN = "multi_exact_in"
    MULTI_EXACT_OUT = "multi_exact_out"

    @property
    def is_exact_in(self) -> bool:
        return self in (SwapKind.SINGLE_EXACT_IN, SwapKind.MULTI_EXACT_IN)

    @property
    def is_single(self) -> bool:
        return self in (SwapKind.SINGLE_EXACT_IN, SwapKind.SINGLE_EXACT_OUT)


class SwapPhase(StrEnum):
    """
    Phases a single swap call moves through, in order.

    ABORTED is terminal and reachable from any phase.
    """

    VALIDATING = "validating"
    FUNDING_IN = "funding_in"
    APPROVING = "approving"
    EXECUTING = "executing"
    SETTLING = "settling"
    REFUNDING = "refunding"
    DONE = "done"
    ABORTED = "aborted"
