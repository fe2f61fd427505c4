from __future__ import annotations

from dataclasses import dataclass

from core.use_cases.swap_router_usecase import SwapRouterUseCase, get_swap_router


@dataclass
class AdminPairRegistryUseCase:
    """
    Admin-only management of the trusted-pair registry.
    """

    router: SwapRouterUseCase

    @classmethod
    def from_settings(cls) -> "AdminPairRegistryUseCase":
        return cls(router=get_swap_router())

    def register_pair(self, *, caller: str, token_a: str, token_b: str, pool: str, fee: int) -> dict:
        pair, events = self.router.register_pair(caller, token_a, token_b, pool, fee)
        return {
            "ok": True,
            "message": "Pair registered.",
            "data": {**pair.as_dict(), "events": [e.as_dict() for e in events]},
        }

    def unregister_pair(self, *, caller: str, token_a: str, token_b: str, fee: int) -> dict:
        pair, events = self.router.unregister_pair(caller, token_a, token_b, fee)
        return {
            "ok": True,
            "message": "Pair unregistered.",
            "data": {**pair.as_dict(), "events": [e.as_dict() for e in events]},
        }

    def list_pairs(self, *, include_inactive: bool = False, limit: int = 500) -> dict:
        rows = self.router.list_pairs(include_inactive=include_inactive, limit=int(limit))
        return {"ok": True, "message": "OK", "data": [r.as_dict() for r in rows]}

    def pair_history(self, *, token_a: str, token_b: str, fee: int, limit: int = 100) -> dict:
        rows = self.router.pair_history(token_a, token_b, fee, limit=int(limit))
        return {"ok": True, "message": "OK", "data": [r.as_dict() for r in rows]}
