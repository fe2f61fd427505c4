from __future__ import annotations

from abc import ABC, abstractmethod

from core.domain.schemas.onchain_types import PoolInfo


class OracleBackend(ABC):
    """
    Raw TWAP observation source.

    The router never samples tick accumulators itself; it only consumes the
    arithmetic mean tick over a window and the amount implied by a tick.
    """

    @abstractmethod
    def mean_tick(self, pool: str, period: int) -> int:
        raise NotImplementedError

    @abstractmethod
    def quote_at_tick(self, tick: int, amount: int, token_in: str, token_out: str) -> int:
        raise NotImplementedError

    @abstractmethod
    def pool_info(self, pool: str) -> PoolInfo:
        raise NotImplementedError

    @abstractmethod
    def token_decimals(self, token: str) -> int:
        raise NotImplementedError
