from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from adapters.entry.http.dtos.admin_pair_registry_dtos import RegisterPairRequest, UnregisterPairRequest
from adapters.entry.http.views.admin.admin_auth import WalletPrincipal, require_admin
from adapters.entry.http.views.errors import to_http_exception

from core.use_cases.admin_pair_registry_usecase import AdminPairRegistryUseCase


router = APIRouter(prefix="/admin", tags=["admin"])


def get_use_case() -> AdminPairRegistryUseCase:
    return AdminPairRegistryUseCase.from_settings()


@router.post("/pairs/register")
async def register_pair(
    body: RegisterPairRequest,
    admin: WalletPrincipal = Depends(require_admin),
    use_case: AdminPairRegistryUseCase = Depends(get_use_case),
):
    try:
        return use_case.register_pair(
            caller=admin.wallet_address,
            token_a=body.token_a,
            token_b=body.token_b,
            pool=body.pool,
            fee=body.fee,
        )
    except Exception as exc:
        raise to_http_exception(exc, "register pair") from exc


@router.post("/pairs/unregister")
async def unregister_pair(
    body: UnregisterPairRequest,
    admin: WalletPrincipal = Depends(require_admin),
    use_case: AdminPairRegistryUseCase = Depends(get_use_case),
):
    try:
        return use_case.unregister_pair(
            caller=admin.wallet_address,
            token_a=body.token_a,
            token_b=body.token_b,
            fee=body.fee,
        )
    except Exception as exc:
        raise to_http_exception(exc, "unregister pair") from exc


@router.get("/pairs")
async def list_pairs(
    include_inactive: bool = Query(False, description="Include unregistered (historical) records"),
    limit: int = Query(500, ge=1, le=5000),
    admin: WalletPrincipal = Depends(require_admin),
    use_case: AdminPairRegistryUseCase = Depends(get_use_case),
):
    try:
        return use_case.list_pairs(include_inactive=include_inactive, limit=limit)
    except Exception as exc:
        raise to_http_exception(exc, "list pairs") from exc


@router.get("/pairs/history")
async def pair_history(
    token_a: str = Query(...),
    token_b: str = Query(...),
    fee: int = Query(...),
    limit: int = Query(100, ge=1, le=1000),
    admin: WalletPrincipal = Depends(require_admin),
    use_case: AdminPairRegistryUseCase = Depends(get_use_case),
):
    try:
        return use_case.pair_history(token_a=token_a, token_b=token_b, fee=fee, limit=limit)
    except Exception as exc:
        raise to_http_exception(exc, "load pair history") from exc
