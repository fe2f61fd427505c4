from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from adapters.entry.http.dtos.address_fields import validate_addr
from core.domain.enums.fee_tier_enums import FeeTier


class _PairKey(BaseModel):
    token_a: str = Field(..., description="Either token of the pair; order does not matter")
    token_b: str
    fee: int = Field(..., description="Fee tier in hundredths of a bip (100, 500, 3000, 10000)")

    @field_validator("token_a", "token_b")
    @classmethod
    def _addr_token(cls, v: str) -> str:
        return validate_addr(v)

    @field_validator("fee")
    @classmethod
    def _fee_tier(cls, v: int) -> int:
        if not FeeTier.is_valid(v):
            raise ValueError(f"Unsupported fee tier: {v}")
        return int(v)


class RegisterPairRequest(_PairKey):
    pool: str = Field(..., description="Concentrated-liquidity pool serving this pair and fee")

    @field_validator("pool")
    @classmethod
    def _addr_pool(cls, v: str) -> str:
        return validate_addr(v)


class UnregisterPairRequest(_PairKey):
    pass
