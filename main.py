# main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adapters.external.database.funding_claims_repository_mongodb import FundingClaimsRepositoryMongoDB
from adapters.external.database.mongo_client import close_mongo_client
from adapters.external.database.router_events_repository_mongodb import RouterEventsRepositoryMongoDB
from adapters.external.database.trusted_pair_repository_mongodb import TrustedPairRepositoryMongoDB
from adapters.entry.http.views.admin.admin_pair_registry_view import router as admin_pair_registry_router
from adapters.entry.http.views.admin.admin_router_config_view import router as admin_router_config_router
from adapters.entry.http.views.pair_quote_view import router as pair_quote_router
from adapters.entry.http.views.swap_view import router as swap_router
from config import get_settings
from core.services import logging_config
from core.services.web3_cache import clear_web3_cache

logger = logging.getLogger(__name__)


def init_mongo_indexes() -> None:
    """
    Make sure the `trusted_pairs`, `router_events` and `native_funding_claims`
    indexes exist before serving any request.
    """
    # trusted pairs: __init__ already ensures its own indexes
    TrustedPairRepositoryMongoDB()

    events_repo = RouterEventsRepositoryMongoDB()
    events_repo.ensure_indexes()

    FundingClaimsRepositoryMongoDB().ensure_indexes()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: MongoDB indexes. Shutdown: release the shared Mongo and Web3 clients.
    """
    init_mongo_indexes()
    logger.info("TWAP router API ready (env=%s)", get_settings().ENV)
    yield
    close_mongo_client()
    clear_web3_cache()


def create_app() -> FastAPI:
    """
    Application factory for the TWAP Swap Router API.
    """
    logging_config.setup(get_settings().LOG_LEVEL)

    app = FastAPI(
        title="TWAP Swap Router API",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(admin_pair_registry_router, prefix="/api")
    app.include_router(admin_router_config_router, prefix="/api")
    app.include_router(pair_quote_router, prefix="/api")
    app.include_router(swap_router, prefix="/api")

    return app


app = create_app()
