# adapters/external/database/mongo_client.py

from __future__ import annotations

import logging
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database

from config import get_settings

logger = logging.getLogger(__name__)

_client: Optional[MongoClient] = None
_db: Optional[Database] = None


def get_mongo_client() -> MongoClient:
    """
    Lazily-created MongoClient shared by every repository (MONGO_URI).
    """
    global _client
    if _client is None:
        uri = get_settings().MONGO_URI
        if not uri:
            raise RuntimeError("MONGO_URI is not configured; the router cannot reach its registry store.")
        _client = MongoClient(uri, serverSelectionTimeoutMS=5_000)
    return _client


def get_mongo_db() -> Database:
    """
    Router database (MONGO_DB) holding `trusted_pairs` and `router_events`.
    """
    global _db
    if _db is None:
        db_name = get_settings().MONGO_DB
        if not db_name:
            raise RuntimeError("MONGO_DB is not configured; the router cannot select its database.")
        _db = get_mongo_client()[db_name]
    return _db


def close_mongo_client() -> None:
    global _client, _db
    if _client is not None:
        logger.info("Closing MongoDB client")
        _client.close()
    _client = None
    _db = None
