"""
Registry of trusted (token, token, fee) venues.

Pairs are keyed by an order-independent identifier, so registering A/B also
trusts B/A. Entries are never physically removed: unregistering flips the
active flag and leaves the document as audit history.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from web3 import Web3

from core.domain.entities.router_event_entity import RouterEvent
from core.domain.entities.trusted_pair_entity import TrustedPairEntity
from core.domain.enums.fee_tier_enums import FeeTier
from core.domain.enums.router_event_enums import RouterEventKind
from core.domain.gateways.oracle_backend_interface import OracleBackend
from core.domain.repositories.trusted_pair_repository_interface import TrustedPairRepository
from core.services.exceptions import (
    AlreadyRegisteredError,
    InvalidInputError,
    NotRegisteredError,
    PoolMismatchError,
)
from core.services.normalize import _norm_lower, is_zero_address, norm_token, sort_tokens

logger = logging.getLogger(__name__)

EventCallback = Callable[[RouterEvent], None]


def compute_pair_id(token_low: str, token_high: str, fee: int) -> str:
    """
    keccak256(abi.encodePacked(address token_low, address token_high, uint24 fee)).
    """
    digest = Web3.solidity_keccak(
        ["address", "address", "uint24"],
        [Web3.to_checksum_address(token_low), Web3.to_checksum_address(token_high), int(fee)],
    )
    return Web3.to_hex(digest)


def canonical_key(token_a: str, token_b: str, fee: int) -> tuple[str, str, str]:
    """
    Returns (token_low, token_high, pair_id) for two tokens in any order.
    """
    token_low, token_high = sort_tokens(token_a, token_b)
    return token_low, token_high, compute_pair_id(token_low, token_high, fee)


class PairRegistry:
    def __init__(
        self,
        repo: TrustedPairRepository,
        backend: OracleBackend,
        on_event: Optional[EventCallback] = None,
    ) -> None:
        self.repo = repo
        self.backend = backend
        self.on_event = on_event

    def _emit(self, kind: RouterEventKind, key: str, payload: dict) -> None:
        if self.on_event is not None:
            self.on_event(RouterEvent.create(kind, key, payload))

    def _validate_pair(self, token_a: str, token_b: str, fee: int) -> tuple[str, str]:
        try:
            a = norm_token(token_a)
            b = norm_token(token_b)
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc
        if is_zero_address(a) or is_zero_address(b):
            raise InvalidInputError("Token must not be zero address.")
        if a == b:
            raise InvalidInputError("token_a and token_b cannot be the same.")
        if not FeeTier.is_valid(fee):
            raise InvalidInputError(f"Unsupported fee tier: {fee}", details={"fee": fee})
        return a, b

    def register(self, token_a: str, token_b: str, pool: str, fee: int, *, by: str = "") -> TrustedPairEntity:
        a, b = self._validate_pair(token_a, token_b, fee)
        try:
            pool = norm_token(pool)
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc
        if is_zero_address(pool):
            raise InvalidInputError("pool must not be zero address.")

        token_low, token_high, pair_id = canonical_key(a, b, fee)

        if self.repo.get_active(pair_id=pair_id):
            raise AlreadyRegisteredError(
                f"Pair {token_low}/{token_high} fee={fee} is already registered.",
                details={"pair_id": pair_id},
            )

        info = self.backend.pool_info(pool)
        if (
            _norm_lower(info.token0) != token_low
            or _norm_lower(info.token1) != token_high
            or int(info.fee) != int(fee)
        ):
            raise PoolMismatchError(
                "Pool metadata does not match the pair being registered.",
                details={
                    "pool": pool,
                    "expected": {"token0": token_low, "token1": token_high, "fee": int(fee)},
                    "actual": {"token0": info.token0, "token1": info.token1, "fee": int(info.fee)},
                },
            )

        ent = TrustedPairEntity(
            pair_id=pair_id,
            token_low=token_low,
            token_high=token_high,
            pool=pool,
            fee=int(fee),
            active=True,
            registered_by=_norm_lower(by),
        )
        self.repo.insert(ent)

        logger.info("Registered pair %s (%s/%s fee=%s pool=%s)", pair_id, token_low, token_high, fee, pool)
        self._emit(
            RouterEventKind.PAIR_REGISTERED,
            pair_id,
            {"token_low": token_low, "token_high": token_high, "pool": pool, "fee": int(fee), "by": _norm_lower(by)},
        )
        return ent

    def unregister(self, token_a: str, token_b: str, fee: int, *, by: str = "") -> TrustedPairEntity:
        a, b = self._validate_pair(token_a, token_b, fee)
        token_low, token_high, pair_id = canonical_key(a, b, fee)

        current = self.repo.get_active(pair_id=pair_id)
        if not current:
            raise NotRegisteredError(
                f"Pair {token_low}/{token_high} fee={fee} is not registered.",
                details={"pair_id": pair_id},
            )

        self.repo.deactivate(pair_id=pair_id, by=_norm_lower(by))
        current.active = False

        logger.info("Unregistered pair %s (%s/%s fee=%s)", pair_id, token_low, token_high, fee)
        self._emit(
            RouterEventKind.PAIR_UNREGISTERED,
            pair_id,
            {"token_low": token_low, "token_high": token_high, "pool": current.pool, "fee": int(fee), "by": _norm_lower(by)},
        )
        return current

    def get_pair(self, token_a: str, token_b: str, fee: int) -> Optional[TrustedPairEntity]:
        try:
            a, b = self._validate_pair(token_a, token_b, fee)
        except InvalidInputError:
            return None
        _, _, pair_id = canonical_key(a, b, fee)
        return self.repo.get_active(pair_id=pair_id)

    def is_supported(self, token_a: str, token_b: str, fee: int) -> bool:
        return self.get_pair(token_a, token_b, fee) is not None

    def list_pairs(self, *, include_inactive: bool = False, limit: int = 500) -> Sequence[TrustedPairEntity]:
        return self.repo.list_pairs(include_inactive=include_inactive, limit=int(limit))

    def history(self, token_a: str, token_b: str, fee: int, *, limit: int = 100) -> Sequence[TrustedPairEntity]:
        a, b = self._validate_pair(token_a, token_b, fee)
        _, _, pair_id = canonical_key(a, b, fee)
        return self.repo.history(pair_id=pair_id, limit=int(limit))
