from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from core.domain.entities.router_event_entity import RouterEvent
from core.domain.enums.swap_enums import SwapKind

# Bound sentinel: derive the bound from the TWAP oracle.
AUTO_BOUND = 0


@dataclass(frozen=True)
class CallContext:
    """
    Who is calling and how much native value is attached to the call.

    `funding_tx` identifies the transfer that delivered `value` to the router;
    native input is only accepted against it.
    """

    caller: str
    value: int = 0
    funding_tx: Optional[str] = None


@dataclass(frozen=True)
class SwapRequest:
    """
    One swap call.

    `amount` is the known side (input for exact-in, output for exact-out) and
    `bound` the other side (minimum output / maximum input). A bound of
    AUTO_BOUND asks the router to derive it from the oracle.
    """

    kind: SwapKind
    tokens: Tuple[str, ...]
    fees: Tuple[int, ...]
    amount: int
    bound: int
    deadline: int

    @property
    def token_in(self) -> str:
        return self.tokens[0]

    @property
    def token_out(self) -> str:
        return self.tokens[-1]

    @classmethod
    def exact_input_single(
        cls, *, token_in: str, token_out: str, fee: int, amount_in: int, amount_out_minimum: int, deadline: int
    ) -> "SwapRequest":
        return cls(SwapKind.SINGLE_EXACT_IN, (token_in, token_out), (fee,), amount_in, amount_out_minimum, deadline)

    @classmethod
    def exact_output_single(
        cls, *, token_in: str, token_out: str, fee: int, amount_out: int, amount_in_maximum: int, deadline: int
    ) -> "SwapRequest":
        return cls(SwapKind.SINGLE_EXACT_OUT, (token_in, token_out), (fee,), amount_out, amount_in_maximum, deadline)

    @classmethod
    def exact_input(
        cls, *, tokens: Sequence[str], fees: Sequence[int], amount_in: int, amount_out_minimum: int, deadline: int
    ) -> "SwapRequest":
        return cls(SwapKind.MULTI_EXACT_IN, tuple(tokens), tuple(fees), amount_in, amount_out_minimum, deadline)

    @classmethod
    def exact_output(
        cls, *, tokens: Sequence[str], fees: Sequence[int], amount_out: int, amount_in_maximum: int, deadline: int
    ) -> "SwapRequest":
        return cls(SwapKind.MULTI_EXACT_OUT, tuple(tokens), tuple(fees), amount_out, amount_in_maximum, deadline)


@dataclass
class SwapResult:
    """
    Settled outcome of a swap call.
    """

    kind: SwapKind
    amount_in: int
    amount_out: int
    bound: int
    bound_derived: bool
    refunded: int = 0
    events: List[RouterEvent] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "kind": str(self.kind),
            "amount_in": str(self.amount_in),
            "amount_out": str(self.amount_out),
            "bound": str(self.bound),
            "bound_derived": self.bound_derived,
            "refunded": str(self.refunded),
            "events": [e.as_dict() for e in self.events],
        }
