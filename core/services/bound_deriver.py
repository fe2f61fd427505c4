"""
Slippage bounds derived from chained TWAP quotes.

Exact-input bounds walk the path forward and subtract the buffer; exact-output
bounds walk it backward with reverse-direction quotes and add the buffer. In
both cases the buffer is applied exactly once, to the final chained amount,
so a multihop bound never compounds the buffer per hop.
"""

from __future__ import annotations

import logging
from typing import Sequence

from core.domain.schemas.router_config import BPS_DENOMINATOR, BufferConfig
from core.services.exceptions import InvalidInputError, LengthMismatchError
from core.services.oracle_client import OracleClient, ensure_oracle_amount
from core.services.tick_math import mul_div

logger = logging.getLogger(__name__)


def apply_buffer(amount: int, buffer_bps: int, *, increase: bool) -> int:
    """
    floor(amount * (10000 -/+ buffer_bps) / 10000).

    Both directions round down: on the maximum-input side this only trims a
    fraction of a unit off the buffer and never moves the bound below the
    unbuffered quote.
    """
    if buffer_bps < 0 or buffer_bps > BPS_DENOMINATOR:
        raise InvalidInputError(f"buffer_bps out of range: {buffer_bps}")
    factor = BPS_DENOMINATOR + buffer_bps if increase else BPS_DENOMINATOR - buffer_bps
    return mul_div(int(amount), factor, BPS_DENOMINATOR)


def _check_path(tokens: Sequence[str], fees: Sequence[int]) -> None:
    if len(tokens) < 2:
        raise InvalidInputError("A path needs at least two tokens.")
    if len(fees) != len(tokens) - 1:
        raise LengthMismatchError(len(tokens), len(fees))


class BoundDeriver:
    def __init__(self, oracle: OracleClient, config: BufferConfig) -> None:
        self.oracle = oracle
        self.config = config

    def estimate_output(self, tokens: Sequence[str], fees: Sequence[int], amount_in: int) -> int:
        """Unbuffered oracle estimate of the path output, hops left to right."""
        _check_path(tokens, fees)
        amount = int(amount_in)
        for i, fee in enumerate(fees):
            amount = ensure_oracle_amount(amount)
            amount = self.oracle.quote(tokens[i], tokens[i + 1], amount, fee, self.config.period).amount_out
        return amount

    def estimate_input(self, tokens: Sequence[str], fees: Sequence[int], amount_out: int) -> int:
        """
        Unbuffered oracle estimate of the path input, hops right to left.

        Each hop is quoted in the reverse direction (output token priced in
        input token) at the amount chained so far.
        """
        _check_path(tokens, fees)
        amount = int(amount_out)
        for i in range(len(fees) - 1, -1, -1):
            amount = ensure_oracle_amount(amount)
            amount = self.oracle.quote(tokens[i + 1], tokens[i], amount, fees[i], self.config.period).amount_out
        return amount

    def min_output(self, tokens: Sequence[str], fees: Sequence[int], amount_in: int) -> int:
        estimate = self.estimate_output(tokens, fees, amount_in)
        bound = apply_buffer(estimate, self.config.buffer_bps, increase=False)
        logger.debug("Derived minimum output %s from estimate %s (buffer=%sbps)", bound, estimate, self.config.buffer_bps)
        return bound

    def max_input(self, tokens: Sequence[str], fees: Sequence[int], amount_out: int) -> int:
        estimate = self.estimate_input(tokens, fees, amount_out)
        bound = apply_buffer(estimate, self.config.buffer_bps, increase=True)
        logger.debug("Derived maximum input %s from estimate %s (buffer=%sbps)", bound, estimate, self.config.buffer_bps)
        return bound
