from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from core.services.exceptions import LengthMismatchError
from core.use_cases.swap_router_usecase import SwapRouterUseCase, get_swap_router


@dataclass
class PairQuoteUseCase:
    """
    Public, read-only views of the router: pair support, TWAP quotes and the
    bound a swap over a given path would be derived with.
    """

    router: SwapRouterUseCase

    @classmethod
    def from_settings(cls) -> "PairQuoteUseCase":
        return cls(router=get_swap_router())

    def is_supported(self, *, token_a: str, token_b: str, fee: int) -> dict:
        supported = self.router.is_supported(token_a, token_b, fee)
        return {
            "ok": True,
            "message": "OK",
            "data": {"token_a": token_a.lower(), "token_b": token_b.lower(), "fee": int(fee), "supported": supported},
        }

    def quote(self, *, token_in: str, token_out: str, amount_in: int, fee: int, period: int = 0) -> dict:
        q = self.router.quote(token_in, token_out, int(amount_in), int(fee), int(period))
        return {
            "ok": True,
            "message": "OK",
            "data": {
                "token_in": token_in.lower(),
                "token_out": token_out.lower(),
                "fee": int(fee),
                "amount_in": str(amount_in),
                "amount_out": str(q.amount_out),
                "decimals": q.decimals,
            },
        }

    def estimate_path(self, *, tokens: Sequence[str], fees: Sequence[int], amount: int, exact_in: bool) -> dict:
        if len(fees) != len(tokens) - 1:
            raise LengthMismatchError(len(tokens), len(fees))

        estimate, bound = self.router.estimate(tokens, [int(f) for f in fees], int(amount), exact_in=exact_in)
        cfg = self.router.get_config()
        return {
            "ok": True,
            "message": "OK",
            "data": {
                "tokens": [t.lower() for t in tokens],
                "fees": [int(f) for f in fees],
                "exact_in": exact_in,
                "amount": str(amount),
                "estimate": str(estimate),
                "bound": str(bound),
                "buffer_bps": cfg["buffer_bps"],
                "period": cfg["period"],
            },
        }
