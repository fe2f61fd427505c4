from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from adapters.entry.http.views.errors import to_http_exception

from core.use_cases.pair_quote_usecase import PairQuoteUseCase


router = APIRouter(prefix="/pairs", tags=["pairs"])


def get_use_case() -> PairQuoteUseCase:
    return PairQuoteUseCase.from_settings()


@router.get("/supported")
async def is_pair_supported(
    token_a: str = Query(...),
    token_b: str = Query(...),
    fee: int = Query(...),
    use_case: PairQuoteUseCase = Depends(get_use_case),
):
    try:
        return use_case.is_supported(token_a=token_a, token_b=token_b, fee=fee)
    except Exception as exc:
        raise to_http_exception(exc, "check pair") from exc


@router.get("/quote")
async def quote_pair(
    token_in: str = Query(...),
    token_out: str = Query(...),
    amount_in: int = Query(..., gt=0),
    fee: int = Query(...),
    period: int = Query(0, ge=0, description="TWAP window in seconds; 0 uses the default window"),
    use_case: PairQuoteUseCase = Depends(get_use_case),
):
    try:
        return use_case.quote(token_in=token_in, token_out=token_out, amount_in=amount_in, fee=fee, period=period)
    except Exception as exc:
        raise to_http_exception(exc, "quote pair") from exc


@router.get("/estimate")
async def estimate_path(
    tokens: List[str] = Query(..., description="Path tokens in swap order (repeat the parameter)"),
    fees: List[int] = Query(..., description="One fee tier per hop"),
    amount: int = Query(..., gt=0, description="Input amount for exact_in, output amount otherwise"),
    exact_in: bool = Query(True),
    use_case: PairQuoteUseCase = Depends(get_use_case),
):
    try:
        return use_case.estimate_path(tokens=tokens, fees=fees, amount=amount, exact_in=exact_in)
    except Exception as exc:
        raise to_http_exception(exc, "estimate path") from exc
