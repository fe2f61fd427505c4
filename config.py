import os
from dotenv import load_dotenv
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

load_dotenv()


def _parse_csv(value: str, *, lower: bool = False) -> List[str]:
    if not value:
        return []
    items = [x.strip() for x in value.split(",")]
    items = [x for x in items if x]
    if lower:
        items = [x.lower() for x in items]
    return items


def _parse_int(value: str | None, default: int) -> int:
    value = (value or "").strip()
    if not value:
        return default
    return int(value)


def _parse_float(value: str | None) -> Optional[float]:
    value = (value or "").strip()
    if not value:
        return None
    return float(value)


@dataclass
class Settings:
    # MongoDB
    MONGO_URI: str
    MONGO_DB: str

    # signing / chain
    RPC_URL_DEFAULT: str
    PRIVATE_KEY: str

    # exchange wiring
    SWAP_ROUTER_ADDRESS: str
    WRAPPED_NATIVE_ADDRESS: str

    # ---- Admin / Privy Auth ----
    PRIVY_APP_ID: str
    PRIVY_APP_SECRET: str
    PRIVY_JWKS_URL: str

    # TWAP oracle (seconds)
    TWAP_DEFAULT_PERIOD: int = 1800
    TWAP_MAX_PERIOD: int = 86400
    TWAP_PERIOD: int = 0

    # slippage buffer applied to oracle-derived bounds
    BUFFER_BPS: int = 100

    # gas budget per router transaction; unset disables the check
    MAX_GAS_USD: Optional[float] = None
    ETH_USD_HINT: Optional[float] = None

    # generic
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    ADMIN_WALLETS: List[str] = field(default_factory=list)
    PAUSER_WALLETS: List[str] = field(default_factory=list)


@lru_cache()
def get_settings() -> Settings:
    admins = _parse_csv(os.getenv("ADMIN_WALLETS", ""), lower=True)
    # admins may always pause unless a dedicated pauser list is configured
    pausers = _parse_csv(os.getenv("PAUSER_WALLETS", ""), lower=True) or list(admins)

    return Settings(
        # Core chain
        PRIVATE_KEY=os.getenv("PRIVATE_KEY", ""),
        RPC_URL_DEFAULT=os.getenv("RPC_URL_DEFAULT", ""),

        # Mongo
        MONGO_URI=os.getenv("MONGO_URI", "mongodb://mongo-router:27017/twap_router"),
        MONGO_DB=os.getenv("MONGO_DB", "twap_router"),

        # Contracts
        SWAP_ROUTER_ADDRESS=os.getenv("SWAP_ROUTER_ADDRESS", ""),
        WRAPPED_NATIVE_ADDRESS=os.getenv("WRAPPED_NATIVE_ADDRESS", "0x4200000000000000000000000000000000000006"),

        # Admin / Privy Auth
        PRIVY_APP_ID=os.getenv("PRIVY_APP_ID", ""),
        PRIVY_JWKS_URL=os.getenv("PRIVY_JWKS_URL", "https://auth.privy.io/api/v1/apps/jwks"),
        PRIVY_APP_SECRET=os.getenv("PRIVY_APP_SECRET", ""),
        ADMIN_WALLETS=admins,
        PAUSER_WALLETS=pausers,

        # Oracle / bounds
        TWAP_DEFAULT_PERIOD=_parse_int(os.getenv("TWAP_DEFAULT_PERIOD"), 1800),
        TWAP_MAX_PERIOD=_parse_int(os.getenv("TWAP_MAX_PERIOD"), 86400),
        TWAP_PERIOD=_parse_int(os.getenv("TWAP_PERIOD"), 0),
        BUFFER_BPS=_parse_int(os.getenv("BUFFER_BPS"), 100),

        # Gas budget
        MAX_GAS_USD=_parse_float(os.getenv("MAX_GAS_USD")),
        ETH_USD_HINT=_parse_float(os.getenv("ETH_USD_HINT")),

        ENV=os.getenv("ENV", "dev"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )
