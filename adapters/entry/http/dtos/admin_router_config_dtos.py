from __future__ import annotations

from pydantic import BaseModel, Field

from core.domain.schemas.router_config import BPS_DENOMINATOR


class SetPeriodRequest(BaseModel):
    period: int = Field(..., ge=0, description="TWAP window in seconds; 0 selects the default window")


class SetBufferRequest(BaseModel):
    buffer_bps: int = Field(..., ge=0, le=BPS_DENOMINATOR)
