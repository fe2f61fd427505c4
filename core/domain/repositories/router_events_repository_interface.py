from __future__ import annotations

from typing import List, Optional, Protocol

from core.domain.entities.router_event_entity import RouterEvent


class RouterEventsRepositoryInterface(Protocol):
    """
    Abstraction for router event persistence / observation.
    """

    def ensure_indexes(self) -> None:
        ...

    def append_event(self, event: RouterEvent) -> None:
        ...

    def get_recent_events(self, kind: Optional[str] = None, key: Optional[str] = None, limit: int = 500) -> List[RouterEvent]:
        ...
