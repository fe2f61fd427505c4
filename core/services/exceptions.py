"""
Error taxonomy for the swap router.

Every failure surfaces synchronously to the caller and aborts the whole
call. HTTP views translate these into status codes; nothing here is retried.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SwapRouterError(Exception):
    """Base class for every router-level failure."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class InvalidInputError(SwapRouterError):
    """Malformed request: equal tokens, zero amount, bad fee tier, elapsed deadline..."""


class LengthMismatchError(InvalidInputError):
    """Fee sequence length is not exactly one less than the token sequence length."""

    def __init__(self, tokens: int, fees: int):
        super().__init__(
            f"Expected {max(tokens - 1, 0)} fees for {tokens} tokens, got {fees}.",
            details={"tokens": tokens, "fees": fees},
        )


class PairNotTrustedError(SwapRouterError):
    """A hop of the requested path is not an active trusted pair."""

    def __init__(self, token_a: str, token_b: str, fee: int):
        super().__init__(
            f"Pair {token_a}/{token_b} fee={fee} is not trusted.",
            details={"token_a": token_a, "token_b": token_b, "fee": fee},
        )


class PairNotFoundError(SwapRouterError):
    """Oracle query against a missing or inactive pair."""

    def __init__(self, token_a: str, token_b: str, fee: int):
        super().__init__(
            f"No active pair for {token_a}/{token_b} fee={fee}.",
            details={"token_a": token_a, "token_b": token_b, "fee": fee},
        )


class AmountTooLargeError(SwapRouterError):
    """Amount does not fit the oracle's unsigned 128-bit input width."""

    def __init__(self, amount: int, limit: int):
        super().__init__(
            f"Amount {amount} exceeds oracle input width (max {limit}).",
            details={"amount": str(amount), "limit": str(limit)},
        )


class OraclePeriodInvalidError(SwapRouterError):
    """Averaging window outside (0, max_period]."""

    def __init__(self, period: int, max_period: int):
        super().__init__(
            f"Oracle period {period}s is outside (0, {max_period}].",
            details={"period": period, "max_period": max_period},
        )


class ValueMismatchError(SwapRouterError):
    """Attached native value differs from the amount the call requires."""

    def __init__(self, expected: int, attached: int):
        super().__init__(
            f"Attached native value {attached} does not match required {expected}.",
            details={"expected": str(expected), "attached": str(attached)},
        )


class NativeFundingError(SwapRouterError):
    """Declared native value is not backed by a mined, unclaimed transfer from the caller to the router."""


class SlippageExceededError(SwapRouterError):
    """Realized amount violates the derived or explicit bound."""

    def __init__(self, realized: int, bound: int, exact_in: bool):
        side = "output below minimum" if exact_in else "input above maximum"
        super().__init__(
            f"Slippage exceeded: {side} (realized={realized}, bound={bound}).",
            details={"realized": str(realized), "bound": str(bound), "exact_in": exact_in},
        )


class UnauthorizedError(SwapRouterError):
    """Capability check failed for the caller."""


class PausedError(SwapRouterError):
    """Swap entry point called while the router is paused."""


class AlreadyRegisteredError(SwapRouterError):
    """The canonical pair already has an active registry entry."""


class NotRegisteredError(SwapRouterError):
    """No active registry entry exists for the canonical pair."""


class PoolMismatchError(SwapRouterError):
    """The pool's own token/fee metadata does not match the pair being registered."""


class ReentrancyError(SwapRouterError):
    """A state-changing entry point was entered while another call is in flight."""


class TransactionRevertedError(Exception):
    """
    Raised after a transaction was mined with status == 0.
    """

    def __init__(
        self,
        *,
        tx_hash: str,
        receipt: Optional[dict] = None,
        msg: str = "Transaction reverted",
        budget_block: Optional[dict] = None,
    ):
        super().__init__(msg)
        self.tx_hash = tx_hash
        self.receipt = receipt or {}
        self.budget_block = budget_block or {}


class TransactionBudgetExceededError(Exception):
    """
    Raised BEFORE broadcasting when the predicted gas cost exceeds the USD budget.
    """

    def __init__(
        self,
        *,
        est_gas_limit: int,
        gas_price_wei: int,
        eth_usd: float,
        usd_estimated: float,
        usd_budget: float,
    ):
        super().__init__(
            f"Gas budget exceeded: estimated ${usd_estimated:.4f} > budget ${usd_budget:.4f}"
        )
        self.est_gas_limit = est_gas_limit
        self.gas_price_wei = gas_price_wei
        self.eth_usd = eth_usd
        self.usd_estimated = usd_estimated
        self.usd_budget = usd_budget
