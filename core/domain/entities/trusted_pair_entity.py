from __future__ import annotations

from pydantic import ConfigDict, Field, model_validator

from core.domain.entities.base_entity import MongoEntity


class TrustedPairEntity(MongoEntity):
    """
    Mongo document (collection: trusted_pairs).

    One record per registration of a (token_low, token_high, fee) venue.
    Unregistering flips `active` to False; documents are never deleted, so
    re-registering the same pair creates a new active record next to the
    historical ones.
    """

    pair_id: str = Field(..., description="keccak256(token_low, token_high, fee) as 0x-hex")

    token_low: str
    token_high: str

    pool: str
    fee: int

    active: bool = True
    registered_by: str = ""
    unregistered_by: str = ""

    model_config = ConfigDict(extra="allow", use_enum_values=True)

    @model_validator(mode="after")
    def _canonical_order(self) -> "TrustedPairEntity":
        if int(self.token_low, 16) >= int(self.token_high, 16):
            raise ValueError("token_low must be strictly lower than token_high.")
        return self

    def as_dict(self) -> dict:
        return {
            "pair_id": self.pair_id,
            "token_low": self.token_low,
            "token_high": self.token_high,
            "pool": self.pool,
            "fee": self.fee,
            "active": self.active,
            "created_at": self.created_at_iso,
            "updated_at": self.updated_at_iso,
        }
