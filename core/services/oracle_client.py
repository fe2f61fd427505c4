from __future__ import annotations

import logging

from core.domain.gateways.oracle_backend_interface import OracleBackend
from core.domain.schemas.onchain_types import OracleQuote
from core.services.exceptions import (
    AmountTooLargeError,
    InvalidInputError,
    OraclePeriodInvalidError,
    PairNotFoundError,
)
from core.services.normalize import _norm_lower, is_zero_address
from core.services.pair_registry import PairRegistry
from core.services.tick_math import MAX_UINT128

logger = logging.getLogger(__name__)

# Largest amount the oracle accepts as quote input.
ORACLE_MAX_AMOUNT = MAX_UINT128


def ensure_oracle_amount(amount: int) -> int:
    amount = int(amount)
    if amount > ORACLE_MAX_AMOUNT:
        raise AmountTooLargeError(amount, ORACLE_MAX_AMOUNT)
    return amount


class OracleClient:
    """
    TWAP quotes for trusted pairs.

    A quote is the amount of token_out obtainable for amount_in of token_in
    at the arithmetic mean tick over the averaging window. It lags the spot
    price by design and is only ever used to bound swaps, never to price them.
    """

    def __init__(
        self,
        registry: PairRegistry,
        backend: OracleBackend,
        *,
        default_period: int = 1800,
        max_period: int = 86400,
    ) -> None:
        if default_period <= 0 or default_period > max_period:
            raise ValueError("default_period must lie in (0, max_period]")
        self.registry = registry
        self.backend = backend
        self.default_period = int(default_period)
        self.max_period = int(max_period)

    def resolve_period(self, period: int) -> int:
        period = int(period)
        if period == 0:
            return self.default_period
        if period < 0 or period > self.max_period:
            raise OraclePeriodInvalidError(period, self.max_period)
        return period

    def quote(self, token_in: str, token_out: str, amount_in: int, fee: int, period: int = 0) -> OracleQuote:
        token_in = _norm_lower(token_in)
        token_out = _norm_lower(token_out)
        if is_zero_address(token_in) or is_zero_address(token_out):
            raise InvalidInputError("Oracle tokens must not be zero address.")
        if token_in == token_out:
            raise InvalidInputError("Oracle tokens must differ.")
        if int(amount_in) <= 0:
            raise InvalidInputError("Oracle amount must be positive.")
        amount_in = ensure_oracle_amount(amount_in)

        window = self.resolve_period(period)

        pair = self.registry.get_pair(token_in, token_out, fee)
        if pair is None:
            raise PairNotFoundError(token_in, token_out, int(fee))

        tick = self.backend.mean_tick(pair.pool, window)
        amount_out = int(self.backend.quote_at_tick(tick, amount_in, token_in, token_out))
        decimals = int(self.backend.token_decimals(token_out))

        logger.debug(
            "TWAP quote %s -> %s fee=%s window=%ss tick=%s: %s -> %s",
            token_in, token_out, fee, window, tick, amount_in, amount_out,
        )
        return OracleQuote(amount_out=amount_out, decimals=decimals)
