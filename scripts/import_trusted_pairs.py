# scripts/import_trusted_pairs.py

"""
Bulk-register trusted pairs from a JSON file into MongoDB.

Usage (from project root):

    python -m scripts.import_trusted_pairs pairs.json [--by 0xoperator] [--dry-run]

The file holds a list of objects:

    [
      {"token_a": "0x...", "token_b": "0x...", "pool": "0x...", "fee": 500},
      ...
    ]

Every entry goes through the same checks as the admin endpoint: valid fee
tier, distinct non-zero tokens, and pool metadata (token0, token1, fee)
read on-chain must match the pair. Pairs that are already registered are
skipped, so the script can be re-run safely.

Collections used:

- `trusted_pairs`: one document per registration
- `router_events`: one PAIR_REGISTERED event per inserted pair
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

from config import get_settings
from core.services.exceptions import AlreadyRegisteredError, SwapRouterError
from core.services.pair_registry import PairRegistry

logger = logging.getLogger("import_trusted_pairs")


def load_rows(path: Path) -> List[Dict[str, Any]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of pairs")
    return data


def import_pairs(registry: PairRegistry, rows: List[Dict[str, Any]], *, by: str = "", dry_run: bool = False) -> Tuple[int, int, int]:
    """
    Register each row; returns (inserted, skipped, failed).
    """
    inserted = skipped = failed = 0

    for i, row in enumerate(rows):
        try:
            token_a = str(row["token_a"])
            token_b = str(row["token_b"])
            pool = str(row["pool"])
            if isinstance(row["fee"], float) and not row["fee"].is_integer():
                raise ValueError(f"fractional fee {row['fee']}")
            fee = int(row["fee"])
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Row %d is malformed (%s): %r", i, exc, row)
            failed += 1
            continue

        if dry_run:
            supported = registry.is_supported(token_a, token_b, fee)
            logger.info("[dry-run] %s/%s fee=%s pool=%s already_registered=%s", token_a, token_b, fee, pool, supported)
            if supported:
                skipped += 1
            else:
                inserted += 1
            continue

        try:
            registry.register(token_a, token_b, pool, fee, by=by)
            inserted += 1
        except AlreadyRegisteredError:
            logger.info("Row %d: %s/%s fee=%s already registered, skipping.", i, token_a, token_b, fee)
            skipped += 1
        except SwapRouterError as exc:
            logger.error("Row %d: %s/%s fee=%s rejected: %s", i, token_a, token_b, fee, exc)
            failed += 1

    return inserted, skipped, failed


def main() -> None:
    parser = argparse.ArgumentParser(description="Import trusted pairs from a JSON file into MongoDB.")
    parser.add_argument("file", type=Path, help="JSON file with a list of {token_a, token_b, pool, fee}")
    parser.add_argument("--by", default="", help="Operator address recorded as registered_by")
    parser.add_argument("--dry-run", action="store_true", help="Only report what would be registered")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    from adapters.chain.uniswap_v3_oracle import UniswapV3OracleBackend
    from adapters.external.database.router_events_repository_mongodb import RouterEventsRepositoryMongoDB
    from adapters.external.database.trusted_pair_repository_mongodb import TrustedPairRepositoryMongoDB
    from core.services.web3_cache import get_web3

    settings = get_settings()
    if not settings.RPC_URL_DEFAULT:
        raise RuntimeError("RPC_URL_DEFAULT is not configured; pool metadata cannot be verified.")

    events_repo = RouterEventsRepositoryMongoDB()
    events_repo.ensure_indexes()

    registry = PairRegistry(
        TrustedPairRepositoryMongoDB(),
        UniswapV3OracleBackend(get_web3(settings.RPC_URL_DEFAULT)),
        on_event=events_repo.append_event,
    )

    rows = load_rows(args.file)
    logger.info("Loaded %d pair(s) from %s", len(rows), args.file)

    inserted, skipped, failed = import_pairs(registry, rows, by=args.by, dry_run=args.dry_run)

    logger.info("==== Import summary ====")
    logger.info("trusted_pairs: inserted=%d skipped=%d failed=%d", inserted, skipped, failed)


if __name__ == "__main__":
    main()
