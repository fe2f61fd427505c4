from __future__ import annotations

import logging
from functools import lru_cache

from web3 import Web3
from web3.contract import Contract

from core.domain.gateways.oracle_backend_interface import OracleBackend
from core.domain.schemas.onchain_types import PoolInfo
from core.services.tick_math import get_quote_at_tick, mean_tick_from_cumulatives

logger = logging.getLogger(__name__)


ABI_V3_POOL = [
    {"name": "token0", "inputs": [], "outputs": [{"type": "address"}], "stateMutability": "view", "type": "function"},
    {"name": "token1", "inputs": [], "outputs": [{"type": "address"}], "stateMutability": "view", "type": "function"},
    {"name": "fee", "inputs": [], "outputs": [{"type": "uint24"}], "stateMutability": "view", "type": "function"},
    {
        "name": "observe",
        "inputs": [{"name": "secondsAgos", "type": "uint32[]"}],
        "outputs": [
            {"name": "tickCumulatives", "type": "int56[]"},
            {"name": "secondsPerLiquidityCumulativeX128s", "type": "uint160[]"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
]

ABI_ERC20_DECIMALS = [
    {"name": "decimals", "inputs": [], "outputs": [{"type": "uint8"}], "stateMutability": "view", "type": "function"},
]


class UniswapV3OracleBackend(OracleBackend):
    """
    TWAP reads straight from Uniswap v3 style pools.

    The mean tick comes from `observe([period, 0])`; amounts are computed
    locally with the exact periphery tick math instead of an extra RPC.
    """

    def __init__(self, w3: Web3):
        self.w3 = w3

    def pool_contract(self, pool: str) -> Contract:
        return self.w3.eth.contract(address=Web3.to_checksum_address(pool), abi=ABI_V3_POOL)

    def mean_tick(self, pool: str, period: int) -> int:
        tick_cums, _ = self.pool_contract(pool).functions.observe([int(period), 0]).call()
        tick = mean_tick_from_cumulatives(int(tick_cums[0]), int(tick_cums[1]), int(period))
        logger.debug("observe pool=%s window=%ss mean_tick=%s", pool, period, tick)
        return tick

    def quote_at_tick(self, tick: int, amount: int, token_in: str, token_out: str) -> int:
        return get_quote_at_tick(int(tick), int(amount), token_in, token_out)

    def pool_info(self, pool: str) -> PoolInfo:
        pc = self.pool_contract(pool)
        return PoolInfo(
            token0=pc.functions.token0().call(),
            token1=pc.functions.token1().call(),
            fee=int(pc.functions.fee().call()),
        )

    def token_decimals(self, token: str) -> int:
        return _decimals(self.w3, Web3.to_checksum_address(token))


@lru_cache(maxsize=1024)
def _decimals(w3: Web3, token: str) -> int:
    return int(w3.eth.contract(address=token, abi=ABI_ERC20_DECIMALS).functions.decimals().call())
