from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from pymongo.collection import Collection
from pymongo.database import Database

from adapters.external.database.helper_repo import sanitize_for_mongo
from adapters.external.database.mongo_client import get_mongo_db

from core.domain.entities.base_entity import MongoEntity
from core.domain.entities.trusted_pair_entity import TrustedPairEntity
from core.domain.repositories.trusted_pair_repository_interface import TrustedPairRepository

from core.services.normalize import _norm_lower


class TrustedPairRepositoryMongoDB(TrustedPairRepository):
    """
    Trusted pairs live in `trusted_pairs`. At most one document per pair_id is
    active at a time (partial unique index); inactive documents are history.
    """

    COLLECTION_NAME = "trusted_pairs"

    def __init__(self, db: Optional[Database] = None) -> None:
        self._db: Database = db if db is not None else get_mongo_db()
        self._collection: Collection = self._db[self.COLLECTION_NAME]
        self.ensure_indexes()

    @property
    def collection(self) -> Collection:
        return self._collection

    def ensure_indexes(self) -> None:
        self._collection.create_index(
            [("pair_id", 1)],
            unique=True,
            name="ux_trusted_pairs_pair_id_active",
            partialFilterExpression={"active": True},
        )
        self._collection.create_index([("pair_id", 1), ("created_at", -1)], name="ix_trusted_pairs_pair_id_created_at_desc")
        self._collection.create_index([("active", 1), ("created_at", -1)], name="ix_trusted_pairs_active_created_at_desc")
        self._collection.create_index([("pool", 1)], name="ix_trusted_pairs_pool")

    def get_active(self, *, pair_id: str) -> Optional[TrustedPairEntity]:
        doc = self._collection.find_one({"pair_id": _norm_lower(pair_id), "active": True})
        return TrustedPairEntity.from_mongo(doc)

    def insert(self, entity: TrustedPairEntity) -> None:
        entity = entity.touch_for_insert()
        doc = sanitize_for_mongo(entity.to_mongo())

        for k in ("pair_id", "token_low", "token_high", "pool", "registered_by"):
            if isinstance(doc.get(k), str):
                doc[k] = _norm_lower(doc.get(k))

        self._collection.insert_one(doc)

    def deactivate(self, *, pair_id: str, by: str = "") -> int:
        update: Dict[str, Any] = {
            "active": False,
            "unregistered_by": _norm_lower(by),
            **MongoEntity.update_stamp(),
        }
        res = self._collection.update_one({"pair_id": _norm_lower(pair_id), "active": True}, {"$set": update})
        return int(res.modified_count)

    def list_pairs(self, *, include_inactive: bool = False, limit: int = 500) -> Sequence[TrustedPairEntity]:
        query: Dict[str, Any] = {} if include_inactive else {"active": True}
        cursor = self._collection.find(query, sort=[("created_at", -1)]).limit(int(limit))
        return [TrustedPairEntity.from_mongo(d) for d in cursor if d]

    def history(self, *, pair_id: str, limit: int = 100) -> Sequence[TrustedPairEntity]:
        cursor = self._collection.find({"pair_id": _norm_lower(pair_id)}, sort=[("created_at", -1)]).limit(int(limit))
        return [TrustedPairEntity.from_mongo(d) for d in cursor if d]
