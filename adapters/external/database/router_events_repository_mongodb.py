# adapters/external/database/router_events_repository_mongodb.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pymongo.collection import Collection
from pymongo.database import Database
from .helper_repo import sanitize_for_mongo

from adapters.external.database.mongo_client import get_mongo_db
from core.domain.entities.router_event_entity import RouterEvent
from core.domain.repositories.router_events_repository_interface import RouterEventsRepositoryInterface


class RouterEventsRepositoryMongoDB(RouterEventsRepositoryInterface):
    """
    Repository responsible for storing and querying router events.

    Each event is stored as a separate document in the 'router_events'
    collection and mapped to a `RouterEvent` entity.
    """

    COLLECTION_NAME = "router_events"

    def __init__(self, db: Optional[Database] = None) -> None:
        """
        Initialize the repository.

        Args:
            db: Optional MongoDB database instance. If omitted, the default
                database is obtained via get_mongo_db().
        """
        self._db: Database = db if db is not None else get_mongo_db()
        self._collection: Collection = self._db[self.COLLECTION_NAME]

    @property
    def collection(self) -> Collection:
        return self._collection

    def ensure_indexes(self) -> None:
        """
        - (kind, ts desc) for per-operation feeds.
        - (key, ts desc) for the history of one pair or one caller.
        """
        self._collection.create_index([("kind", 1), ("ts", -1)], name="ix_router_events_kind_ts_desc")
        self._collection.create_index([("key", 1), ("ts", -1)], name="ix_router_events_key_ts_desc")

    def append_event(self, event: RouterEvent) -> None:
        """
        Insert one event document. Amounts above int64 are stored as strings.
        """
        doc = sanitize_for_mongo(event.to_mongo())
        self._collection.insert_one(doc)

    def get_recent_events(
        self,
        kind: Optional[str] = None,
        key: Optional[str] = None,
        limit: int = 500,
    ) -> List[RouterEvent]:
        """
        Most recent events first, optionally filtered by kind and/or key.
        """
        query: Dict[str, Any] = {}
        if kind is not None:
            query["kind"] = kind
        if key is not None:
            query["key"] = key.lower()

        cursor = self._collection.find(query).sort("ts", -1).limit(int(limit))
        return [RouterEvent.from_mongo(doc) for doc in cursor]
