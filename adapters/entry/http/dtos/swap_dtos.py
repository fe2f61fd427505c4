from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from adapters.entry.http.dtos.address_fields import validate_addr, validate_tx_hash

_BOUND_HELP = "0 derives the bound from the TWAP oracle"


class _SwapBase(BaseModel):
    deadline: int = Field(..., ge=0, description="Unix timestamp; the swap fails once it has passed")
    value: int = Field(default=0, ge=0, description="Native amount (wei) paid to the router for this swap")
    funding_tx_hash: Optional[str] = Field(
        default=None, description="Hash of the mined transfer that paid `value` to the router; required when value > 0"
    )

    @field_validator("funding_tx_hash")
    @classmethod
    def _tx_hash(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else validate_tx_hash(v)

    @model_validator(mode="after")
    def _funding(self) -> "_SwapBase":
        if self.value > 0 and not self.funding_tx_hash:
            raise ValueError("funding_tx_hash is required when value > 0.")
        return self


class _SingleHop(_SwapBase):
    token_in: str
    token_out: str
    fee: int

    @field_validator("token_in", "token_out")
    @classmethod
    def _addr(cls, v: str) -> str:
        return validate_addr(v)


class _MultiHop(_SwapBase):
    tokens: List[str] = Field(..., min_length=2)
    fees: List[int] = Field(..., min_length=1)

    @field_validator("tokens")
    @classmethod
    def _addrs(cls, v: List[str]) -> List[str]:
        return [validate_addr(t) for t in v]

    @model_validator(mode="after")
    def _lengths(self) -> "_MultiHop":
        if len(self.fees) != len(self.tokens) - 1:
            raise ValueError(f"Expected {len(self.tokens) - 1} fees for {len(self.tokens)} tokens, got {len(self.fees)}.")
        return self


class ExactInputSingleRequest(_SingleHop):
    amount_in: int = Field(..., gt=0)
    amount_out_minimum: int = Field(default=0, ge=0, description=_BOUND_HELP)


class ExactOutputSingleRequest(_SingleHop):
    amount_out: int = Field(..., gt=0)
    amount_in_maximum: int = Field(default=0, ge=0, description=_BOUND_HELP)


class ExactInputRequest(_MultiHop):
    amount_in: int = Field(..., gt=0)
    amount_out_minimum: int = Field(default=0, ge=0, description=_BOUND_HELP)


class ExactOutputRequest(_MultiHop):
    amount_out: int = Field(..., gt=0)
    amount_in_maximum: int = Field(default=0, ge=0, description=_BOUND_HELP)
