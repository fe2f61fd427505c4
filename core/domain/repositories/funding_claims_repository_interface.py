from __future__ import annotations

from typing import Protocol


class FundingClaimsRepositoryInterface(Protocol):
    """
    Ledger of native funding transfers already spent by a swap.
    """

    def ensure_indexes(self) -> None:
        ...

    def claim(self, *, tx_hash: str, caller: str, amount: int) -> bool:
        """Record the claim; False when `tx_hash` was claimed before."""
        ...
