from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.use_cases.swap_router_usecase import SwapRouterUseCase, get_swap_router


@dataclass
class AdminRouterConfigUseCase:
    """
    Admin/pauser operations over the router configuration: averaging period,
    slippage buffer and the pause switch.
    """

    router: SwapRouterUseCase

    @classmethod
    def from_settings(cls) -> "AdminRouterConfigUseCase":
        return cls(router=get_swap_router())

    def _response(self, message: str, events) -> dict:
        return {
            "ok": True,
            "message": message,
            "data": {**self.router.get_config(), "events": [e.as_dict() for e in events]},
        }

    def get_config(self) -> dict:
        return {"ok": True, "message": "OK", "data": self.router.get_config()}

    def set_period(self, *, caller: str, period: int) -> dict:
        return self._response("TWAP period updated.", self.router.set_period(caller, int(period)))

    def set_buffer_bps(self, *, caller: str, buffer_bps: int) -> dict:
        return self._response("Buffer updated.", self.router.set_buffer_bps(caller, int(buffer_bps)))

    def pause(self, *, caller: str) -> dict:
        return self._response("Router paused.", self.router.pause(caller))

    def unpause(self, *, caller: str) -> dict:
        return self._response("Router unpaused.", self.router.unpause(caller))

    def list_events(self, *, kind: Optional[str] = None, key: Optional[str] = None, limit: int = 500) -> dict:
        rows = self.router.recent_events(kind=kind, key=key, limit=int(limit))
        return {"ok": True, "message": "OK", "data": [r.as_dict() for r in rows]}
