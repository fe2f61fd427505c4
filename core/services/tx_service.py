from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, Optional, Tuple

from eth_account import Account
from web3 import Web3
from web3.contract.contract import ContractFunction

from config import get_settings
from core.domain.enums.tx_enums import GasStrategy
from core.services.exceptions import TransactionBudgetExceededError, TransactionRevertedError
from core.services.utils import receipt_summary, to_json_safe
from core.services.web3_cache import get_web3

logger = logging.getLogger(__name__)


@dataclass
class _BudgetBlock:
    max_gas_usd: Optional[float]
    eth_usd_hint: Optional[float]
    usd_estimated_upper_bound: Optional[float]
    budget_exceeded: bool

    def as_dict(self) -> dict:
        return {
            "max_gas_usd": self.max_gas_usd,
            "eth_usd_hint": self.eth_usd_hint,
            "usd_estimated_upper_bound": self.usd_estimated_upper_bound,
            "budget_exceeded": self.budget_exceeded,
        }


class TxService:
    """
    Transaction sender for the router account.

    Every swap leg (pulls, approvals, wraps, router calls, payouts) is a
    transaction signed by the router key. This service:
    - simulates a call to read its return value before broadcasting;
    - builds, signs and broadcasts the call with a gas padding strategy;
    - enforces an optional gas budget in USD;
    - waits for the receipt and raises on revert.
    """

    def __init__(
        self,
        rpc_url: str | None = None,
        *,
        w3: Optional[Web3] = None,
        private_key: Optional[str] = None,
        max_gas_usd: Optional[float] = None,
        eth_usd_hint: Optional[float] = None,
    ):
        s = get_settings()
        self.w3 = w3 if w3 is not None else get_web3(rpc_url or s.RPC_URL_DEFAULT)
        self.pk = private_key or s.PRIVATE_KEY
        self.account = Account.from_key(self.pk)
        # defaults for every send; None disables the USD budget
        self.max_gas_usd = max_gas_usd
        self.eth_usd_hint = eth_usd_hint

    def sender_address(self) -> str:
        return self.account.address

    # ---------- internal helpers ----------

    def _next_nonce(self) -> int:
        return self.w3.eth.get_transaction_count(self.account.address, "pending")

    def _estimate_with_strategy(self, tx: dict, strategy: GasStrategy) -> int:
        """
        estimateGas(tx) padded by strategy; 300k when the node cannot estimate.
        """
        try:
            base_estimate = int(self.w3.eth.estimate_gas(tx))
        except Exception as exc:
            logger.warning("estimate_gas failed (%s); using static gas limit", exc)
            base_estimate = 300_000

        return GasStrategy(strategy).pad(base_estimate)

    def _finalize_fee_fields(self, tx: dict) -> dict:
        if "maxFeePerGas" in tx or "maxPriorityFeePerGas" in tx:
            return tx
        if "gasPrice" not in tx:
            tx["gasPrice"] = self.w3.eth.gas_price
        return tx

    def _budget_check(
        self,
        *,
        gas_limit: int,
        gas_price_wei: int,
        max_gas_usd: Optional[float],
        eth_usd_hint: Optional[float],
    ) -> _BudgetBlock:
        budget = _BudgetBlock(
            max_gas_usd=max_gas_usd,
            eth_usd_hint=eth_usd_hint,
            usd_estimated_upper_bound=None,
            budget_exceeded=False,
        )

        if max_gas_usd is None:
            return budget

        if eth_usd_hint is None or eth_usd_hint <= 0:
            raise TransactionBudgetExceededError(
                est_gas_limit=int(gas_limit),
                gas_price_wei=int(gas_price_wei),
                eth_usd=0.0,
                usd_estimated=0.0,
                usd_budget=float(max_gas_usd),
            )

        gas_cost_eth = (Decimal(gas_limit) * Decimal(gas_price_wei)) / Decimal(10**18)
        gas_cost_usd = float(gas_cost_eth * Decimal(eth_usd_hint))
        budget.usd_estimated_upper_bound = gas_cost_usd

        if gas_cost_usd > float(max_gas_usd):
            budget.budget_exceeded = True
            raise TransactionBudgetExceededError(
                est_gas_limit=int(gas_limit),
                gas_price_wei=int(gas_price_wei),
                eth_usd=float(eth_usd_hint),
                usd_estimated=float(gas_cost_usd),
                usd_budget=float(max_gas_usd),
            )

        return budget

    def _response(self, *, tx_hash: str, receipt: Optional[dict], gas_limit: int, gas_price_wei: int, budget: _BudgetBlock) -> dict:
        summary = receipt_summary(receipt)
        gas_used = summary["gas_used"]
        eff_price_wei = summary["effective_price_wei"]

        cost_eth = None
        if gas_used and eff_price_wei:
            cost_eth = float((Decimal(gas_used) * Decimal(eff_price_wei)) / Decimal(10**18))

        return to_json_safe(
            {
                "tx_hash": tx_hash,
                "status": summary["status"],
                "block_number": summary["block_number"],
                "logs": summary["logs"],
                "gas": {
                    "limit": int(gas_limit),
                    "used": gas_used,
                    "price_wei": int(gas_price_wei),
                    "effective_price_wei": eff_price_wei,
                    "cost_eth": cost_eth,
                },
                "budget": budget.as_dict(),
                "ts": datetime.now(UTC).isoformat(),
            }
        )

    # ---------- public API ----------

    def call(self, fn: ContractFunction, *, value: int = 0) -> Any:
        """
        eth_call from the router account; returns the decoded return value.
        """
        return fn.call({"from": self.account.address, "value": int(value or 0)})

    def send(
        self,
        fn: ContractFunction,
        *,
        value: int = 0,
        gas_limit: Optional[int] = None,
        gas_strategy: GasStrategy = GasStrategy.BUFFERED,
        max_gas_usd: Optional[float] = None,
        eth_usd_hint: Optional[float] = None,
    ) -> dict:
        """
        Broadcasts a contract call and waits until it is mined.

        Raises:
            TransactionBudgetExceededError: before sending, when the padded
                gas cost exceeds max_gas_usd (eth_usd_hint is then required).
            TransactionRevertedError: after mining, when status == 0.
        """
        response, _ = self.transact(
            fn,
            value=value,
            gas_limit=gas_limit,
            gas_strategy=gas_strategy,
            max_gas_usd=max_gas_usd,
            eth_usd_hint=eth_usd_hint,
        )
        return response

    def transact(
        self,
        fn: ContractFunction,
        *,
        value: int = 0,
        gas_limit: Optional[int] = None,
        gas_strategy: GasStrategy = GasStrategy.BUFFERED,
        max_gas_usd: Optional[float] = None,
        eth_usd_hint: Optional[float] = None,
    ) -> Tuple[dict, Any]:
        """
        Same as send, but also returns the raw receipt so callers can decode
        its logs. Budget arguments default to the service-wide ones.
        """
        tx = fn.build_transaction(
            {
                "from": self.account.address,
                "nonce": self._next_nonce(),
                "value": int(value or 0),
            }
        )

        final_gas_limit = int(gas_limit) if gas_limit is not None else self._estimate_with_strategy(tx, gas_strategy)
        tx["gas"] = final_gas_limit

        tx = self._finalize_fee_fields(tx)
        gas_price_wei = int(tx.get("gasPrice", 0))

        budget = self._budget_check(
            gas_limit=final_gas_limit,
            gas_price_wei=gas_price_wei,
            max_gas_usd=self.max_gas_usd if max_gas_usd is None else max_gas_usd,
            eth_usd_hint=self.eth_usd_hint if eth_usd_hint is None else eth_usd_hint,
        )

        signed = self.w3.eth.account.sign_transaction(tx, self.pk)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction).hex()
        logger.debug("Broadcast %s tx=%s gas=%s", fn.fn_name, tx_hash, final_gas_limit)

        raw_receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash)
        rcpt = dict(raw_receipt)
        if int(rcpt.get("status", 0)) == 0:
            raise TransactionRevertedError(
                tx_hash=tx_hash,
                receipt=to_json_safe(rcpt),
                msg=f"{fn.fn_name} reverted (status=0)",
                budget_block=budget.as_dict(),
            )

        response = self._response(
            tx_hash=tx_hash,
            receipt=rcpt,
            gas_limit=final_gas_limit,
            gas_price_wei=gas_price_wei,
            budget=budget,
        )
        return response, raw_receipt

    def send_native(self, recipient: str, amount: int, *, gas_strategy: GasStrategy = GasStrategy.DEFAULT) -> dict:
        """Plain value transfer from the router account."""
        tx = {
            "from": self.account.address,
            "to": Web3.to_checksum_address(recipient),
            "nonce": self._next_nonce(),
            "value": int(amount),
        }
        tx["gas"] = self._estimate_with_strategy(tx, gas_strategy)
        tx = self._finalize_fee_fields(tx)
        budget = self._budget_check(gas_limit=tx["gas"], gas_price_wei=int(tx.get("gasPrice", 0)), max_gas_usd=self.max_gas_usd, eth_usd_hint=self.eth_usd_hint)

        signed = self.w3.eth.account.sign_transaction(tx, self.pk)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction).hex()
        rcpt = dict(self.w3.eth.wait_for_transaction_receipt(tx_hash))
        if int(rcpt.get("status", 0)) == 0:
            raise TransactionRevertedError(
                tx_hash=tx_hash,
                receipt=to_json_safe(rcpt),
                msg="Native transfer reverted (status=0)",
                budget_block=budget.as_dict(),
            )
        return self._response(tx_hash=tx_hash, receipt=rcpt, gas_limit=tx["gas"], gas_price_wei=int(tx.get("gasPrice", 0)), budget=budget)
