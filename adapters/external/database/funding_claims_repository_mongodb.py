# adapters/external/database/funding_claims_repository_mongodb.py
from __future__ import annotations

import logging
from typing import Optional

from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from adapters.external.database.mongo_client import get_mongo_db
from core.domain.entities.base_entity import stamp
from core.domain.repositories.funding_claims_repository_interface import FundingClaimsRepositoryInterface

logger = logging.getLogger(__name__)


class FundingClaimsRepositoryMongoDB(FundingClaimsRepositoryInterface):
    """
    `native_funding_claims`: one document per funding transaction spent by a
    swap. The unique index on `tx_hash` makes a claim first-writer-wins across
    API processes.
    """

    COLLECTION_NAME = "native_funding_claims"

    def __init__(self, db: Optional[Database] = None) -> None:
        self._db: Database = db if db is not None else get_mongo_db()
        self._collection: Collection = self._db[self.COLLECTION_NAME]

    def ensure_indexes(self) -> None:
        self._collection.create_index([("tx_hash", 1)], name="ux_native_funding_claims_tx_hash", unique=True)
        self._collection.create_index([("caller", 1), ("created_at", -1)], name="ix_native_funding_claims_caller")

    def claim(self, *, tx_hash: str, caller: str, amount: int) -> bool:
        now = stamp()
        doc = {
            "tx_hash": tx_hash.lower(),
            "caller": caller.lower(),
            "amount": str(int(amount)),
            "created_at": now["ms"],
            "created_at_iso": now["iso"],
        }
        try:
            self._collection.insert_one(doc)
        except DuplicateKeyError:
            logger.warning("Funding tx %s already claimed (caller=%s)", tx_hash, caller)
            return False
        return True
