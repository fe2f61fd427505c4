from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class TokenGateway(ABC):
    """
    Fungible-token and native-asset primitives, seen from the router's own
    account (`holder`).
    """

    @property
    @abstractmethod
    def holder(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def wrapped_native(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def transfer_from(self, token: str, owner: str, amount: int) -> None:
        """Pull `amount` of `token` from `owner` into the holder account."""
        raise NotImplementedError

    @abstractmethod
    def transfer(self, token: str, recipient: str, amount: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def approve(self, token: str, spender: str, amount: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def claim_native(self, caller: str, amount: int, funding_tx: Optional[str]) -> None:
        """
        Confirm that `funding_tx` moved exactly `amount` of native value from
        `caller` to the holder account, and consume it.

        Raises NativeFundingError when the transfer is missing, does not match,
        or was already claimed.
        """
        raise NotImplementedError

    @abstractmethod
    def wrap(self, amount: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def unwrap(self, amount: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def send_native(self, recipient: str, amount: int) -> None:
        raise NotImplementedError
