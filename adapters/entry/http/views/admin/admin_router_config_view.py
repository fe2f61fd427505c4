from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from adapters.entry.http.dtos.admin_router_config_dtos import SetBufferRequest, SetPeriodRequest
from adapters.entry.http.views.admin.admin_auth import WalletPrincipal, require_admin, require_wallet
from adapters.entry.http.views.errors import to_http_exception

from core.use_cases.admin_router_config_usecase import AdminRouterConfigUseCase


router = APIRouter(prefix="/admin/router", tags=["admin"])


def get_use_case() -> AdminRouterConfigUseCase:
    return AdminRouterConfigUseCase.from_settings()


@router.get("/config")
async def get_router_config(
    admin: WalletPrincipal = Depends(require_admin),
    use_case: AdminRouterConfigUseCase = Depends(get_use_case),
):
    try:
        return use_case.get_config()
    except Exception as exc:
        raise to_http_exception(exc, "load router config") from exc


@router.post("/period")
async def set_period(
    body: SetPeriodRequest,
    admin: WalletPrincipal = Depends(require_admin),
    use_case: AdminRouterConfigUseCase = Depends(get_use_case),
):
    try:
        return use_case.set_period(caller=admin.wallet_address, period=body.period)
    except Exception as exc:
        raise to_http_exception(exc, "set period") from exc


@router.post("/buffer")
async def set_buffer(
    body: SetBufferRequest,
    admin: WalletPrincipal = Depends(require_admin),
    use_case: AdminRouterConfigUseCase = Depends(get_use_case),
):
    try:
        return use_case.set_buffer_bps(caller=admin.wallet_address, buffer_bps=body.buffer_bps)
    except Exception as exc:
        raise to_http_exception(exc, "set buffer") from exc


# pausers need not be admins; the router checks the pauser role itself
@router.post("/pause")
async def pause_router(
    principal: WalletPrincipal = Depends(require_wallet),
    use_case: AdminRouterConfigUseCase = Depends(get_use_case),
):
    try:
        return use_case.pause(caller=principal.wallet_address)
    except Exception as exc:
        raise to_http_exception(exc, "pause router") from exc


@router.post("/unpause")
async def unpause_router(
    principal: WalletPrincipal = Depends(require_wallet),
    use_case: AdminRouterConfigUseCase = Depends(get_use_case),
):
    try:
        return use_case.unpause(caller=principal.wallet_address)
    except Exception as exc:
        raise to_http_exception(exc, "unpause router") from exc


@router.get("/events")
async def list_router_events(
    kind: Optional[str] = Query(None, description="Filter by event kind (e.g. swap_executed)"),
    key: Optional[str] = Query(None, description="Filter by pair id or caller address"),
    limit: int = Query(500, ge=1, le=5000),
    admin: WalletPrincipal = Depends(require_admin),
    use_case: AdminRouterConfigUseCase = Depends(get_use_case),
):
    try:
        return use_case.list_events(kind=kind, key=key, limit=limit)
    except Exception as exc:
        raise to_http_exception(exc, "list router events") from exc
