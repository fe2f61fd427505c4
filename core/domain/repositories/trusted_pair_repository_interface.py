from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from core.domain.entities.trusted_pair_entity import TrustedPairEntity


class TrustedPairRepository(ABC):
    @abstractmethod
    def get_active(self, *, pair_id: str) -> Optional[TrustedPairEntity]:
        raise NotImplementedError

    @abstractmethod
    def insert(self, entity: TrustedPairEntity) -> None:
        raise NotImplementedError

    @abstractmethod
    def deactivate(self, *, pair_id: str, by: str = "") -> int:
        raise NotImplementedError

    @abstractmethod
    def list_pairs(self, *, include_inactive: bool = False, limit: int = 500) -> Sequence[TrustedPairEntity]:
        raise NotImplementedError

    @abstractmethod
    def history(self, *, pair_id: str, limit: int = 100) -> Sequence[TrustedPairEntity]:
        raise NotImplementedError

    @abstractmethod
    def ensure_indexes(self) -> None:
        raise NotImplementedError
