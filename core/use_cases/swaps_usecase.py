from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from core.domain.schemas.swap_inputs import AUTO_BOUND, CallContext, SwapRequest
from core.use_cases.swap_router_usecase import SwapRouterUseCase, get_swap_router


@dataclass
class SwapsUseCase:
    """
    Swap entry points on behalf of an authenticated wallet.

    A bound of 0 lets the router derive it from the TWAP oracle.
    """

    router: SwapRouterUseCase

    @classmethod
    def from_settings(cls) -> "SwapsUseCase":
        return cls(router=get_swap_router())

    def _run(self, *, caller: str, value: int, funding_tx: Optional[str], request: SwapRequest) -> dict:
        ctx = CallContext(caller=caller, value=int(value or 0), funding_tx=funding_tx)
        res = self.router.swap(ctx, request)
        return {"ok": True, "message": "Swap executed.", "data": res.as_dict()}

    def exact_input_single(
        self, *, caller: str, token_in: str, token_out: str, fee: int, amount_in: int,
        deadline: int, amount_out_minimum: int = AUTO_BOUND, value: int = 0, funding_tx: Optional[str] = None,
    ) -> dict:
        return self._run(caller=caller, value=value, funding_tx=funding_tx, request=SwapRequest.exact_input_single(
            token_in=token_in, token_out=token_out, fee=int(fee), amount_in=int(amount_in),
            amount_out_minimum=int(amount_out_minimum), deadline=int(deadline),
        ))

    def exact_output_single(
        self, *, caller: str, token_in: str, token_out: str, fee: int, amount_out: int,
        deadline: int, amount_in_maximum: int = AUTO_BOUND, value: int = 0, funding_tx: Optional[str] = None,
    ) -> dict:
        return self._run(caller=caller, value=value, funding_tx=funding_tx, request=SwapRequest.exact_output_single(
            token_in=token_in, token_out=token_out, fee=int(fee), amount_out=int(amount_out),
            amount_in_maximum=int(amount_in_maximum), deadline=int(deadline),
        ))

    def exact_input(
        self, *, caller: str, tokens: Sequence[str], fees: Sequence[int], amount_in: int,
        deadline: int, amount_out_minimum: int = AUTO_BOUND, value: int = 0, funding_tx: Optional[str] = None,
    ) -> dict:
        return self._run(caller=caller, value=value, funding_tx=funding_tx, request=SwapRequest.exact_input(
            tokens=tokens, fees=[int(f) for f in fees], amount_in=int(amount_in),
            amount_out_minimum=int(amount_out_minimum), deadline=int(deadline),
        ))

    def exact_output(
        self, *, caller: str, tokens: Sequence[str], fees: Sequence[int], amount_out: int,
        deadline: int, amount_in_maximum: int = AUTO_BOUND, value: int = 0, funding_tx: Optional[str] = None,
    ) -> dict:
        return self._run(caller=caller, value=value, funding_tx=funding_tx, request=SwapRequest.exact_output(
            tokens=tokens, fees=[int(f) for f in fees], amount_out=int(amount_out),
            amount_in_maximum=int(amount_in_maximum), deadline=int(deadline),
        ))
