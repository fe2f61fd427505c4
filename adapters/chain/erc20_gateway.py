from __future__ import annotations

import logging
from typing import Optional

from web3 import Web3
from web3.contract import Contract
from web3.exceptions import TransactionNotFound

from core.domain.gateways.token_gateway_interface import TokenGateway
from core.domain.repositories.funding_claims_repository_interface import FundingClaimsRepositoryInterface
from core.services.exceptions import NativeFundingError
from core.services.normalize import _norm_lower
from core.services.tx_service import TxService

logger = logging.getLogger(__name__)


ABI_ERC20 = [
    {
        "name": "transfer",
        "inputs": [{"name": "to", "type": "address"}, {"name": "amount", "type": "uint256"}],
        "outputs": [{"type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "name": "transferFrom",
        "inputs": [
            {"name": "from", "type": "address"},
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "name": "approve",
        "inputs": [{"name": "spender", "type": "address"}, {"name": "amount", "type": "uint256"}],
        "outputs": [{"type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

ABI_WETH9 = ABI_ERC20 + [
    {"name": "deposit", "inputs": [], "outputs": [], "stateMutability": "payable", "type": "function"},
    {
        "name": "withdraw",
        "inputs": [{"name": "wad", "type": "uint256"}],
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


class Erc20TokenGateway(TokenGateway):
    """
    ERC20 / WETH9 primitives executed from the router account (the TxService
    signer).

    Native input is paid by the caller in a separate plain transfer to that
    account; `claim_native` checks the mined transfer and records its hash so
    the same payment cannot fund two swaps.
    """

    def __init__(self, txs: TxService, *, wrapped_native: str, claims: FundingClaimsRepositoryInterface):
        if not wrapped_native:
            raise ValueError("WRAPPED_NATIVE_ADDRESS is required")
        self.txs = txs
        self.claims = claims
        self._wrapped_native = Web3.to_checksum_address(wrapped_native)
        self.weth: Contract = txs.w3.eth.contract(address=self._wrapped_native, abi=ABI_WETH9)

    @property
    def holder(self) -> str:
        return self.txs.sender_address()

    @property
    def wrapped_native(self) -> str:
        return self._wrapped_native.lower()

    def erc20(self, token: str) -> Contract:
        return self.txs.w3.eth.contract(address=Web3.to_checksum_address(token), abi=ABI_ERC20)

    def transfer_from(self, token: str, owner: str, amount: int) -> None:
        fn = self.erc20(token).functions.transferFrom(
            Web3.to_checksum_address(owner), Web3.to_checksum_address(self.holder), int(amount)
        )
        self.txs.send(fn)

    def transfer(self, token: str, recipient: str, amount: int) -> None:
        self.txs.send(self.erc20(token).functions.transfer(Web3.to_checksum_address(recipient), int(amount)))

    def approve(self, token: str, spender: str, amount: int) -> None:
        self.txs.send(self.erc20(token).functions.approve(Web3.to_checksum_address(spender), int(amount)))
        logger.debug("approve %s spender=%s amount=%s", token, spender, amount)

    def claim_native(self, caller: str, amount: int, funding_tx: Optional[str]) -> None:
        if not funding_tx:
            raise NativeFundingError("Native input requires the hash of the funding transfer.")

        details = {"funding_tx": funding_tx, "caller": _norm_lower(caller)}
        try:
            tx = self.txs.w3.eth.get_transaction(funding_tx)
            rcpt = self.txs.w3.eth.get_transaction_receipt(funding_tx)
        except TransactionNotFound as exc:
            raise NativeFundingError("Funding transfer is not mined.", details=details) from exc

        if int(rcpt.get("status", 0)) != 1:
            raise NativeFundingError("Funding transfer reverted.", details=details)
        if _norm_lower(tx.get("from")) != _norm_lower(caller):
            raise NativeFundingError("Funding transfer was not sent by the caller.", details=details)
        if _norm_lower(tx.get("to")) != _norm_lower(self.holder):
            raise NativeFundingError("Funding transfer was not sent to the router.", details=details)
        if int(tx.get("value", 0)) != int(amount):
            raise NativeFundingError(
                "Funding transfer value does not match the swap amount.",
                details={**details, "value": str(int(tx.get("value", 0))), "amount": str(int(amount))},
            )

        if not self.claims.claim(tx_hash=_norm_lower(funding_tx), caller=_norm_lower(caller), amount=int(amount)):
            raise NativeFundingError("Funding transfer was already used.", details=details)
        logger.info("Claimed native funding %s of %s from %s", funding_tx, amount, caller)

    def wrap(self, amount: int) -> None:
        self.txs.send(self.weth.functions.deposit(), value=int(amount))

    def unwrap(self, amount: int) -> None:
        self.txs.send(self.weth.functions.withdraw(int(amount)))

    def send_native(self, recipient: str, amount: int) -> None:
        self.txs.send_native(recipient, int(amount))
