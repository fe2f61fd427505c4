from __future__ import annotations

from typing import NamedTuple

from pydantic import BaseModel


class PoolInfo(BaseModel):
    """Token/fee metadata a pool reports about itself."""

    token0: str
    token1: str
    fee: int


class OracleQuote(NamedTuple):
    """TWAP quote: amount of token_out (base units) and token_out decimals."""

    amount_out: int
    decimals: int


class SwapFill(NamedTuple):
    """
    What an executed swap actually moved, read from the mined transaction:
    input spent from the router and output delivered to the recipient.
    """

    amount_in: int
    amount_out: int
