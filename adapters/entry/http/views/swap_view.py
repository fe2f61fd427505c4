from __future__ import annotations

from fastapi import APIRouter, Depends

from adapters.entry.http.dtos.swap_dtos import (
    ExactInputRequest,
    ExactInputSingleRequest,
    ExactOutputRequest,
    ExactOutputSingleRequest,
)
from adapters.entry.http.views.admin.admin_auth import WalletPrincipal, require_wallet
from adapters.entry.http.views.errors import to_http_exception

from core.use_cases.swaps_usecase import SwapsUseCase


router = APIRouter(prefix="/swaps", tags=["swaps"])


def get_use_case() -> SwapsUseCase:
    return SwapsUseCase.from_settings()


@router.post("/exact-input-single")
async def swap_exact_input_single(
    body: ExactInputSingleRequest,
    principal: WalletPrincipal = Depends(require_wallet),
    use_case: SwapsUseCase = Depends(get_use_case),
):
    try:
        return use_case.exact_input_single(
            caller=principal.wallet_address,
            token_in=body.token_in,
            token_out=body.token_out,
            fee=body.fee,
            amount_in=body.amount_in,
            amount_out_minimum=body.amount_out_minimum,
            deadline=body.deadline,
            value=body.value,
            funding_tx=body.funding_tx_hash,
        )
    except Exception as exc:
        raise to_http_exception(exc, "swap exact input single") from exc


@router.post("/exact-output-single")
async def swap_exact_output_single(
    body: ExactOutputSingleRequest,
    principal: WalletPrincipal = Depends(require_wallet),
    use_case: SwapsUseCase = Depends(get_use_case),
):
    try:
        return use_case.exact_output_single(
            caller=principal.wallet_address,
            token_in=body.token_in,
            token_out=body.token_out,
            fee=body.fee,
            amount_out=body.amount_out,
            amount_in_maximum=body.amount_in_maximum,
            deadline=body.deadline,
            value=body.value,
            funding_tx=body.funding_tx_hash,
        )
    except Exception as exc:
        raise to_http_exception(exc, "swap exact output single") from exc


@router.post("/exact-input")
async def swap_exact_input(
    body: ExactInputRequest,
    principal: WalletPrincipal = Depends(require_wallet),
    use_case: SwapsUseCase = Depends(get_use_case),
):
    try:
        return use_case.exact_input(
            caller=principal.wallet_address,
            tokens=body.tokens,
            fees=body.fees,
            amount_in=body.amount_in,
            amount_out_minimum=body.amount_out_minimum,
            deadline=body.deadline,
            value=body.value,
            funding_tx=body.funding_tx_hash,
        )
    except Exception as exc:
        raise to_http_exception(exc, "swap exact input") from exc


@router.post("/exact-output")
async def swap_exact_output(
    body: ExactOutputRequest,
    principal: WalletPrincipal = Depends(require_wallet),
    use_case: SwapsUseCase = Depends(get_use_case),
):
    try:
        return use_case.exact_output(
            caller=principal.wallet_address,
            tokens=body.tokens,
            fees=body.fees,
            amount_out=body.amount_out,
            amount_in_maximum=body.amount_in_maximum,
            deadline=body.deadline,
            value=body.value,
            funding_tx=body.funding_tx_hash,
        )
    except Exception as exc:
        raise to_http_exception(exc, "swap exact output") from exc
