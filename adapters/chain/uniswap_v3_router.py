from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from web3 import Web3
from web3.contract import Contract
from web3.logs import DISCARD

from core.domain.enums.tx_enums import GasStrategy
from core.domain.gateways.execution_engine_interface import ExecutionEngine
from core.domain.schemas.onchain_types import SwapFill
from core.services.normalize import _norm_lower
from core.services.path_codec import PathCodec
from core.services.tx_service import TxService

logger = logging.getLogger(__name__)


def _single_params(name: str) -> dict:
    return {
        "name": "params",
        "type": "tuple",
        "components": [
            {"name": "tokenIn", "type": "address"},
            {"name": "tokenOut", "type": "address"},
            {"name": "fee", "type": "uint24"},
            {"name": "recipient", "type": "address"},
            {"name": "deadline", "type": "uint256"},
            {"name": name, "type": "uint256"},
            {"name": "amountOutMinimum" if name == "amountIn" else "amountInMaximum", "type": "uint256"},
            {"name": "sqrtPriceLimitX96", "type": "uint160"},
        ],
    }


def _path_params(name: str) -> dict:
    return {
        "name": "params",
        "type": "tuple",
        "components": [
            {"name": "path", "type": "bytes"},
            {"name": "recipient", "type": "address"},
            {"name": "deadline", "type": "uint256"},
            {"name": name, "type": "uint256"},
            {"name": "amountOutMinimum" if name == "amountIn" else "amountInMaximum", "type": "uint256"},
        ],
    }


ABI_SWAP_ROUTER = [
    {
        "name": "exactInputSingle",
        "inputs": [_single_params("amountIn")],
        "outputs": [{"name": "amountOut", "type": "uint256"}],
        "stateMutability": "payable",
        "type": "function",
    },
    {
        "name": "exactOutputSingle",
        "inputs": [_single_params("amountOut")],
        "outputs": [{"name": "amountIn", "type": "uint256"}],
        "stateMutability": "payable",
        "type": "function",
    },
    {
        "name": "exactInput",
        "inputs": [_path_params("amountIn")],
        "outputs": [{"name": "amountOut", "type": "uint256"}],
        "stateMutability": "payable",
        "type": "function",
    },
    {
        "name": "exactOutput",
        "inputs": [_path_params("amountOut")],
        "outputs": [{"name": "amountIn", "type": "uint256"}],
        "stateMutability": "payable",
        "type": "function",
    },
]

ABI_TRANSFER_EVENT = [
    {
        "name": "Transfer",
        "inputs": [
            {"indexed": True, "name": "from", "type": "address"},
            {"indexed": True, "name": "to", "type": "address"},
            {"indexed": False, "name": "value", "type": "uint256"},
        ],
        "anonymous": False,
        "type": "event",
    },
]


def fill_from_transfers(
    transfers: Iterable[Mapping[str, Any]], *, token_in: str, token_out: str, holder: str, recipient: str
) -> SwapFill:
    """
    Sums decoded ERC20 Transfer events of one swap transaction into a fill:
    token_in leaving the holder is the input spent, token_out reaching the
    recipient is the output delivered.
    """
    token_in, token_out = _norm_lower(token_in), _norm_lower(token_out)
    holder, recipient = _norm_lower(holder), _norm_lower(recipient)

    amount_in = 0
    amount_out = 0
    for ev in transfers:
        token = _norm_lower(ev["address"])
        args = ev["args"]
        if token == token_in and _norm_lower(args["from"]) == holder:
            amount_in += int(args["value"])
        if token == token_out and _norm_lower(args["to"]) == recipient:
            amount_out += int(args["value"])
    return SwapFill(amount_in=amount_in, amount_out=amount_out)


class UniswapV3RouterEngine(ExecutionEngine):
    """
    Uniswap v3 SwapRouter driven by the router account.

    Each call is simulated first as a pre-flight, then broadcast; the fill is
    read back from the Transfer logs of the mined receipt. The router
    contract itself reverts when the bound is not met.
    """

    def __init__(self, txs: TxService, *, router_address: str, gas_strategy: GasStrategy = GasStrategy.BUFFERED):
        if not router_address:
            raise ValueError("SWAP_ROUTER_ADDRESS is required")
        self.txs = txs
        self.router_address = Web3.to_checksum_address(router_address)
        self.gas_strategy = gas_strategy
        self.contract: Contract = txs.w3.eth.contract(address=self.router_address, abi=ABI_SWAP_ROUTER)
        self.transfer_event = txs.w3.eth.contract(abi=ABI_TRANSFER_EVENT).events.Transfer()

    @property
    def address(self) -> str:
        return self.router_address

    def _run(self, fn, *, token_in: str, token_out: str, recipient: str) -> SwapFill:
        simulated = int(self.txs.call(fn))
        res, rcpt = self.txs.transact(fn, gas_strategy=self.gas_strategy)

        transfers = self.transfer_event.process_receipt(rcpt, errors=DISCARD)
        fill = fill_from_transfers(
            transfers, token_in=token_in, token_out=token_out, holder=self.txs.sender_address(), recipient=recipient
        )
        logger.info(
            "%s in=%s out=%s simulated=%s tx=%s",
            fn.fn_name, fill.amount_in, fill.amount_out, simulated, res.get("tx_hash"),
        )
        return fill

    def exact_input_single(self, *, token_in, token_out, fee, amount_in, amount_out_minimum, recipient, deadline) -> SwapFill:
        fn = self.contract.functions.exactInputSingle((
            Web3.to_checksum_address(token_in),
            Web3.to_checksum_address(token_out),
            int(fee),
            Web3.to_checksum_address(recipient),
            int(deadline),
            int(amount_in),
            int(amount_out_minimum),
            0,
        ))
        return self._run(fn, token_in=token_in, token_out=token_out, recipient=recipient)

    def exact_output_single(self, *, token_in, token_out, fee, amount_out, amount_in_maximum, recipient, deadline) -> SwapFill:
        fn = self.contract.functions.exactOutputSingle((
            Web3.to_checksum_address(token_in),
            Web3.to_checksum_address(token_out),
            int(fee),
            Web3.to_checksum_address(recipient),
            int(deadline),
            int(amount_out),
            int(amount_in_maximum),
            0,
        ))
        return self._run(fn, token_in=token_in, token_out=token_out, recipient=recipient)

    def exact_input(self, *, path, amount_in, amount_out_minimum, recipient, deadline) -> SwapFill:
        tokens, _ = PathCodec.decode(bytes(path))
        fn = self.contract.functions.exactInput((
            bytes(path),
            Web3.to_checksum_address(recipient),
            int(deadline),
            int(amount_in),
            int(amount_out_minimum),
        ))
        return self._run(fn, token_in=tokens[0], token_out=tokens[-1], recipient=recipient)

    def exact_output(self, *, path, amount_out, amount_in_maximum, recipient, deadline) -> SwapFill:
        # reversed path: output token first
        tokens, _ = PathCodec.decode(bytes(path))
        fn = self.contract.functions.exactOutput((
            bytes(path),
            Web3.to_checksum_address(recipient),
            int(deadline),
            int(amount_out),
            int(amount_in_maximum),
        ))
        return self._run(fn, token_in=tokens[-1], token_out=tokens[0], recipient=recipient)
