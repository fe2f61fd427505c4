# core/domain/entities/base_entity.py
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict

E = TypeVar("E", bound="MongoEntity")


def stamp() -> Dict[str, Any]:
    """Current time as the (ms, ISO-8601 UTC) pair every router document carries."""
    now = time.time()
    iso = datetime.fromtimestamp(now, tz=timezone.utc).isoformat().replace("+00:00", "Z")
    return {"ms": int(now * 1000), "iso": iso}


class MongoEntity(BaseModel):
    """
    Pydantic base for documents the router persists.

    `_id` is exposed as `id`; `created_at*` are set once on insert and
    `updated_at*` on every write.
    """

    id: Optional[str] = None

    created_at: Optional[int] = None
    created_at_iso: Optional[str] = None
    updated_at: Optional[int] = None
    updated_at_iso: Optional[str] = None

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    @classmethod
    def from_mongo(cls: Type[E], doc: Optional[dict[str, Any]]) -> Optional[E]:
        if not doc:
            return None
        data = {k: v for k, v in doc.items() if k != "_id"}
        if "_id" in doc:
            data["id"] = str(doc["_id"])
        return cls.model_validate(data)

    def to_mongo(self) -> dict[str, Any]:
        data = self.model_dump(mode="python", exclude_none=True, exclude={"id"})
        if self.id is not None:
            data["_id"] = self.id
        return data

    @staticmethod
    def update_stamp() -> dict[str, Any]:
        """`$set` fields for a write that bypasses the entity."""
        now = stamp()
        return {"updated_at": now["ms"], "updated_at_iso": now["iso"]}

    def touch_for_insert(self: E) -> E:
        now = stamp()
        if self.created_at is None:
            self.created_at, self.created_at_iso = now["ms"], now["iso"]
        self.updated_at, self.updated_at_iso = now["ms"], now["iso"]
        return self

    def touch_for_update(self: E) -> E:
        now = stamp()
        self.updated_at, self.updated_at_iso = now["ms"], now["iso"]
        return self
