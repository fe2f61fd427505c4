from __future__ import annotations

from abc import ABC, abstractmethod


class AuthContext(ABC):
    """
    Capability checks consulted by the router's entry points.
    """

    @abstractmethod
    def is_admin(self, caller: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_pauser(self, caller: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_paused(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def set_paused(self, paused: bool) -> None:
        raise NotImplementedError
