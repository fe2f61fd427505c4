from __future__ import annotations

from abc import ABC, abstractmethod

from core.domain.schemas.onchain_types import SwapFill


class ExecutionEngine(ABC):
    """
    Concentrated-liquidity swap executor.

    Every method returns the SwapFill of the executed trade: the input actually
    spent from the router and the output actually delivered to `recipient`.
    Implementations must fail when the bound cannot be satisfied and never
    spend more than a stated maximum input.
    """

    @property
    @abstractmethod
    def address(self) -> str:
        """Spender address the router approves before executing."""
        raise NotImplementedError

    @abstractmethod
    def exact_input_single(
        self, *, token_in: str, token_out: str, fee: int, amount_in: int, amount_out_minimum: int, recipient: str, deadline: int
    ) -> SwapFill:
        raise NotImplementedError

    @abstractmethod
    def exact_output_single(
        self, *, token_in: str, token_out: str, fee: int, amount_out: int, amount_in_maximum: int, recipient: str, deadline: int
    ) -> SwapFill:
        raise NotImplementedError

    @abstractmethod
    def exact_input(self, *, path: bytes, amount_in: int, amount_out_minimum: int, recipient: str, deadline: int) -> SwapFill:
        raise NotImplementedError

    @abstractmethod
    def exact_output(self, *, path: bytes, amount_out: int, amount_in_maximum: int, recipient: str, deadline: int) -> SwapFill:
        raise NotImplementedError
