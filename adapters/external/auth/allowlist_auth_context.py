from __future__ import annotations

from typing import Iterable

from core.domain.gateways.auth_context_interface import AuthContext
from core.domain.schemas.router_config import BufferConfig


class AllowlistAuthContext(AuthContext):
    """
    Role checks against the configured wallet allowlists. The pause flag
    lives on the router's BufferConfig.
    """

    def __init__(self, *, admins: Iterable[str], pausers: Iterable[str], config: BufferConfig):
        self.admins = {a.strip().lower() for a in admins if a and a.strip()}
        self.pausers = {p.strip().lower() for p in pausers if p and p.strip()}
        self.config = config

    def is_admin(self, caller: str) -> bool:
        return (caller or "").strip().lower() in self.admins

    def is_pauser(self, caller: str) -> bool:
        return (caller or "").strip().lower() in self.pausers

    def is_paused(self) -> bool:
        return bool(self.config.paused)

    def set_paused(self, paused: bool) -> None:
        self.config.paused = bool(paused)
