# domain/entities/router_event_entity.py
from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass
class RouterEvent:
    """
    Domain entity representing one event emitted by a state-changing
    router entry point.

    Events are returned to the caller of the entry point and forwarded to the
    configured events repository, which stores them as separate documents in
    the `router_events` collection.

    Attributes:
        kind: Event kind (see RouterEventKind).
        key: Identifier the event is keyed by (pair id, caller address...).
        payload: JSON-serializable dictionary with the resolved parameters.
        ts: Integer timestamp in seconds.
        ts_iso: ISO-8601 string representation of the timestamp.
        id: Optional MongoDB internal identifier (_id).
    """

    kind: str
    key: str
    payload: Dict[str, Any] = field(default_factory=dict)
    ts: int = 0
    ts_iso: str = ""
    id: Optional[Any] = None

    @classmethod
    def create(cls, kind: str, key: str, payload: Dict[str, Any]) -> "RouterEvent":
        now_s = int(time.time())
        now_iso = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        return cls(kind=str(kind), key=key, payload=dict(payload or {}), ts=now_s, ts_iso=now_iso)

    @classmethod
    def from_mongo(cls, doc: Dict[str, Any]) -> "RouterEvent":
        if not doc:
            raise ValueError("Cannot build RouterEvent from empty document")

        return cls(
            id=doc.get("_id"),
            kind=doc["kind"],
            key=doc["key"],
            ts=int(doc.get("ts", 0)),
            ts_iso=str(doc.get("ts_iso", "")),
            payload=doc.get("payload") or {},
        )

    def to_mongo(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            "kind": self.kind,
            "key": self.key,
            "ts": self.ts,
            "ts_iso": self.ts_iso,
            "payload": self.payload,
        }
        if self.id is not None:
            doc["_id"] = self.id
        return doc

    def as_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "key": self.key, "ts": self.ts_iso, "payload": self.payload}
