"""
TWAP-guarded swap router.

Entry point for the four swap variants (single/multihop x exact-in/exact-out)
and for the admin operations that mutate the shared router state (trusted
pairs, averaging period, buffer, pause flag).

A swap call runs strictly in order:

    VALIDATING -> FUNDING_IN -> APPROVING -> EXECUTING -> SETTLING
    -> REFUNDING (exact-out only) -> DONE

and moves to ABORTED on the first failure. Nothing is custodied before
validation passes, and the engine's spending approval is reset to zero after
every execution attempt. All-or-nothing rollback of balances is delegated to
the `atomic` scope supplied by the host; without one, a call that fails after
funding hands the unspent input and any undelivered output back to the caller.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, ContextManager, Iterator, List, Optional, Sequence, Tuple

from core.domain.entities.router_event_entity import RouterEvent
from core.domain.entities.trusted_pair_entity import TrustedPairEntity
from core.domain.enums.fee_tier_enums import FeeTier
from core.domain.enums.router_event_enums import RouterEventKind
from core.domain.enums.swap_enums import SwapKind, SwapPhase
from core.domain.gateways.auth_context_interface import AuthContext
from core.domain.gateways.execution_engine_interface import ExecutionEngine
from core.domain.gateways.oracle_backend_interface import OracleBackend
from core.domain.gateways.token_gateway_interface import TokenGateway
from core.domain.repositories.router_events_repository_interface import RouterEventsRepositoryInterface
from core.domain.repositories.trusted_pair_repository_interface import TrustedPairRepository
from core.domain.schemas.onchain_types import OracleQuote, SwapFill
from core.domain.schemas.router_config import BPS_DENOMINATOR, BufferConfig
from core.domain.schemas.swap_inputs import AUTO_BOUND, CallContext, SwapRequest, SwapResult
from core.services.bound_deriver import BoundDeriver
from core.services.exceptions import (
    InvalidInputError,
    LengthMismatchError,
    OraclePeriodInvalidError,
    PairNotTrustedError,
    PausedError,
    ReentrancyError,
    SlippageExceededError,
    UnauthorizedError,
)
from core.services.fund_custodian import FundCustodian
from core.services.normalize import _norm_lower, is_native, is_zero_address, norm_token, to_wrapped
from core.services.oracle_client import OracleClient
from core.services.pair_registry import PairRegistry
from core.services.path_codec import PathCodec

logger = logging.getLogger(__name__)


@dataclass
class _SwapCall:
    request: SwapRequest
    caller: str
    phase: SwapPhase = SwapPhase.VALIDATING
    fill: Optional[SwapFill] = None
    history: List[SwapPhase] = field(default_factory=lambda: [SwapPhase.VALIDATING])

    def advance(self, phase: SwapPhase) -> None:
        logger.debug("swap %s caller=%s: %s -> %s", self.request.kind, self.caller, self.phase, phase)
        self.phase = phase
        self.history.append(phase)


class SwapRouterUseCase:
    def __init__(
        self,
        *,
        pair_repo: TrustedPairRepository,
        backend: OracleBackend,
        engine: ExecutionEngine,
        gateway: TokenGateway,
        auth: AuthContext,
        config: BufferConfig,
        events_repo: Optional[RouterEventsRepositoryInterface] = None,
        default_period: int = 1800,
        max_period: int = 86400,
        clock: Callable[[], float] = time.time,
        atomic: Callable[[], ContextManager] = nullcontext,
    ) -> None:
        self.config = config
        self.auth = auth
        self.engine = engine
        self.gateway = gateway
        self.events_repo = events_repo
        self.max_period = int(max_period)
        self.clock = clock
        self.atomic = atomic

        self.registry = PairRegistry(pair_repo, backend, on_event=self._record)
        self.oracle = OracleClient(self.registry, backend, default_period=default_period, max_period=max_period)
        self.bounds = BoundDeriver(self.oracle, config)
        self.codec = PathCodec(gateway.wrapped_native)

        self._lock = threading.RLock()
        self._entered = False
        self._pending: List[RouterEvent] = []

        self.last_call_phases: List[SwapPhase] = []

    @classmethod
    def from_settings(cls) -> "SwapRouterUseCase":
        from adapters.chain.erc20_gateway import Erc20TokenGateway
        from adapters.chain.uniswap_v3_oracle import UniswapV3OracleBackend
        from adapters.chain.uniswap_v3_router import UniswapV3RouterEngine
        from adapters.external.auth.allowlist_auth_context import AllowlistAuthContext
        from adapters.external.database.funding_claims_repository_mongodb import FundingClaimsRepositoryMongoDB
        from adapters.external.database.router_events_repository_mongodb import RouterEventsRepositoryMongoDB
        from adapters.external.database.trusted_pair_repository_mongodb import TrustedPairRepositoryMongoDB
        from config import get_settings
        from core.services.tx_service import TxService
        from core.services.web3_cache import get_web3

        s = get_settings()
        txs = TxService(s.RPC_URL_DEFAULT, max_gas_usd=s.MAX_GAS_USD, eth_usd_hint=s.ETH_USD_HINT)

        pair_repo = TrustedPairRepositoryMongoDB()
        events_repo = RouterEventsRepositoryMongoDB()
        claims_repo = FundingClaimsRepositoryMongoDB()
        for repo in (events_repo, claims_repo):
            try:
                repo.ensure_indexes()
            except Exception:
                logger.exception("Could not ensure indexes for %s", type(repo).__name__)

        config = BufferConfig(period=s.TWAP_PERIOD, buffer_bps=s.BUFFER_BPS)

        return cls(
            pair_repo=pair_repo,
            backend=UniswapV3OracleBackend(get_web3(s.RPC_URL_DEFAULT)),
            engine=UniswapV3RouterEngine(txs, router_address=s.SWAP_ROUTER_ADDRESS),
            gateway=Erc20TokenGateway(txs, wrapped_native=s.WRAPPED_NATIVE_ADDRESS, claims=claims_repo),
            auth=AllowlistAuthContext(admins=s.ADMIN_WALLETS, pausers=s.PAUSER_WALLETS, config=config),
            config=config,
            events_repo=events_repo,
            default_period=s.TWAP_DEFAULT_PERIOD,
            max_period=s.TWAP_MAX_PERIOD,
        )

    # ---------- call guard / events ----------

    @contextmanager
    def _non_reentrant(self) -> Iterator[List[RouterEvent]]:
        """
        Serializes state-changing calls and rejects nested entry.

        Yields the list collecting the events of this call; they are published
        only when the call completes without error.
        """
        with self._lock:
            if self._entered:
                raise ReentrancyError("Router call already in progress.")
            self._entered = True
            self._pending = []
            try:
                yield self._pending
                events = list(self._pending)
            finally:
                self._entered = False
                self._pending = []
        self._publish(events)

    def _record(self, event: RouterEvent) -> None:
        self._pending.append(event)

    def _emit(self, kind: RouterEventKind, key: str, payload: dict) -> None:
        self._record(RouterEvent.create(kind, key, payload))

    def _publish(self, events: Sequence[RouterEvent]) -> None:
        if self.events_repo is None:
            return
        for event in events:
            try:
                self.events_repo.append_event(event)
            except Exception:
                logger.exception("Failed to persist router event %s key=%s", event.kind, event.key)

    def _require_admin(self, caller: str) -> None:
        if not self.auth.is_admin(_norm_lower(caller)):
            raise UnauthorizedError("Caller is not an admin.", details={"caller": _norm_lower(caller)})

    def _require_pauser(self, caller: str) -> None:
        if not self.auth.is_pauser(_norm_lower(caller)):
            raise UnauthorizedError("Caller is not a pauser.", details={"caller": _norm_lower(caller)})

    # ---------- admin: registry ----------

    def register_pair(self, caller: str, token_a: str, token_b: str, pool: str, fee: int) -> Tuple[TrustedPairEntity, List[RouterEvent]]:
        with self._non_reentrant() as events:
            self._require_admin(caller)
            wn = self.gateway.wrapped_native
            pair = self.registry.register(to_wrapped(token_a, wn), to_wrapped(token_b, wn), pool, fee, by=caller)
            emitted = list(events)
        return pair, emitted

    def unregister_pair(self, caller: str, token_a: str, token_b: str, fee: int) -> Tuple[TrustedPairEntity, List[RouterEvent]]:
        with self._non_reentrant() as events:
            self._require_admin(caller)
            wn = self.gateway.wrapped_native
            pair = self.registry.unregister(to_wrapped(token_a, wn), to_wrapped(token_b, wn), fee, by=caller)
            emitted = list(events)
        return pair, emitted

    # ---------- admin: configuration ----------

    def set_period(self, caller: str, period: int) -> List[RouterEvent]:
        with self._non_reentrant() as events:
            self._require_admin(caller)
            period = int(period)
            if period < 0 or period > self.max_period:
                raise OraclePeriodInvalidError(period, self.max_period)
            previous = self.config.period
            self.config.period = period
            logger.info("TWAP period updated %ss -> %ss by %s", previous, period, _norm_lower(caller))
            self._emit(RouterEventKind.PERIOD_UPDATED, _norm_lower(caller), {"previous": previous, "period": period})
            emitted = list(events)
        return emitted

    def set_buffer_bps(self, caller: str, buffer_bps: int) -> List[RouterEvent]:
        with self._non_reentrant() as events:
            self._require_admin(caller)
            buffer_bps = int(buffer_bps)
            if buffer_bps < 0 or buffer_bps > BPS_DENOMINATOR:
                raise InvalidInputError(
                    f"buffer_bps must lie in [0, {BPS_DENOMINATOR}]", details={"buffer_bps": buffer_bps}
                )
            previous = self.config.buffer_bps
            self.config.buffer_bps = buffer_bps
            logger.info("Buffer updated %sbps -> %sbps by %s", previous, buffer_bps, _norm_lower(caller))
            self._emit(RouterEventKind.BUFFER_UPDATED, _norm_lower(caller), {"previous": previous, "buffer_bps": buffer_bps})
            emitted = list(events)
        return emitted

    def pause(self, caller: str) -> List[RouterEvent]:
        with self._non_reentrant() as events:
            self._require_pauser(caller)
            self.auth.set_paused(True)
            logger.warning("Router paused by %s", _norm_lower(caller))
            self._emit(RouterEventKind.PAUSED, _norm_lower(caller), {"paused": True})
            emitted = list(events)
        return emitted

    def unpause(self, caller: str) -> List[RouterEvent]:
        with self._non_reentrant() as events:
            self._require_pauser(caller)
            self.auth.set_paused(False)
            logger.warning("Router unpaused by %s", _norm_lower(caller))
            self._emit(RouterEventKind.UNPAUSED, _norm_lower(caller), {"paused": False})
            emitted = list(events)
        return emitted

    def get_config(self) -> dict:
        with self._lock:
            data = self.config.as_dict()
            data["paused"] = self.auth.is_paused()
            data["default_period"] = self.oracle.default_period
            data["max_period"] = self.max_period
            return data

    # ---------- reads ----------

    def is_supported(self, token_a: str, token_b: str, fee: int) -> bool:
        with self._lock:
            wn = self.gateway.wrapped_native
            return self.registry.is_supported(to_wrapped(token_a, wn), to_wrapped(token_b, wn), fee)

    def quote(self, token_in: str, token_out: str, amount_in: int, fee: int, period: int = 0) -> OracleQuote:
        with self._lock:
            wn = self.gateway.wrapped_native
            return self.oracle.quote(to_wrapped(token_in, wn), to_wrapped(token_out, wn), amount_in, fee, period)

    def estimate(self, tokens: Sequence[str], fees: Sequence[int], amount: int, *, exact_in: bool) -> Tuple[int, int]:
        """
        Oracle estimate and derived bound for a path, without swapping.

        Returns (estimate, bound): for exact_in the expected output and the
        minimum output, otherwise the expected input and the maximum input.
        """
        with self._lock:
            wrapped = [to_wrapped(t, self.gateway.wrapped_native) for t in tokens]
            if exact_in:
                return self.bounds.estimate_output(wrapped, fees, amount), self.bounds.min_output(wrapped, fees, amount)
            return self.bounds.estimate_input(wrapped, fees, amount), self.bounds.max_input(wrapped, fees, amount)

    def list_pairs(self, *, include_inactive: bool = False, limit: int = 500) -> Sequence[TrustedPairEntity]:
        with self._lock:
            return self.registry.list_pairs(include_inactive=include_inactive, limit=limit)

    def pair_history(self, token_a: str, token_b: str, fee: int, *, limit: int = 100) -> Sequence[TrustedPairEntity]:
        with self._lock:
            wn = self.gateway.wrapped_native
            return self.registry.history(to_wrapped(token_a, wn), to_wrapped(token_b, wn), fee, limit=limit)

    def recent_events(self, *, kind: Optional[str] = None, key: Optional[str] = None, limit: int = 500) -> List[RouterEvent]:
        if self.events_repo is None:
            return []
        return self.events_repo.get_recent_events(kind=kind, key=key, limit=int(limit))

    # ---------- swaps ----------

    def exact_input_single(
        self, ctx: CallContext, *, token_in: str, token_out: str, fee: int, amount_in: int, deadline: int, amount_out_minimum: int = AUTO_BOUND
    ) -> SwapResult:
        return self.swap(ctx, SwapRequest.exact_input_single(
            token_in=token_in, token_out=token_out, fee=fee, amount_in=amount_in,
            amount_out_minimum=amount_out_minimum, deadline=deadline,
        ))

    def exact_output_single(
        self, ctx: CallContext, *, token_in: str, token_out: str, fee: int, amount_out: int, deadline: int, amount_in_maximum: int = AUTO_BOUND
    ) -> SwapResult:
        return self.swap(ctx, SwapRequest.exact_output_single(
            token_in=token_in, token_out=token_out, fee=fee, amount_out=amount_out,
            amount_in_maximum=amount_in_maximum, deadline=deadline,
        ))

    def exact_input(
        self, ctx: CallContext, *, tokens: Sequence[str], fees: Sequence[int], amount_in: int, deadline: int, amount_out_minimum: int = AUTO_BOUND
    ) -> SwapResult:
        return self.swap(ctx, SwapRequest.exact_input(
            tokens=tokens, fees=fees, amount_in=amount_in, amount_out_minimum=amount_out_minimum, deadline=deadline,
        ))

    def exact_output(
        self, ctx: CallContext, *, tokens: Sequence[str], fees: Sequence[int], amount_out: int, deadline: int, amount_in_maximum: int = AUTO_BOUND
    ) -> SwapResult:
        return self.swap(ctx, SwapRequest.exact_output(
            tokens=tokens, fees=fees, amount_out=amount_out, amount_in_maximum=amount_in_maximum, deadline=deadline,
        ))

    def swap(self, ctx: CallContext, request: SwapRequest) -> SwapResult:
        call = _SwapCall(request=request, caller=_norm_lower(ctx.caller))
        try:
            with self._non_reentrant():
                if self.auth.is_paused():
                    raise PausedError("Router is paused.")
                tokens, wrapped = self._validate(request)
                with self.atomic():
                    result = self._run(call, ctx, tokens, wrapped)
                call.advance(SwapPhase.DONE)
                self._emit(RouterEventKind.SWAP_EXECUTED, call.caller, {
                    "kind": str(request.kind),
                    "tokens": list(tokens),
                    "fees": [int(f) for f in request.fees],
                    "amount_in": str(result.amount_in),
                    "amount_out": str(result.amount_out),
                    "bound": str(result.bound),
                    "bound_derived": result.bound_derived,
                    "refunded": str(result.refunded),
                    "deadline": int(request.deadline),
                })
                result.events = list(self._pending)
        except Exception as exc:
            aborted_at = call.phase
            call.advance(SwapPhase.ABORTED)
            logger.warning("swap %s aborted during %s: %s", request.kind, aborted_at, exc)
            raise
        finally:
            self.last_call_phases = list(call.history)
        return result

    def _validate(self, request: SwapRequest) -> Tuple[List[str], List[str]]:
        tokens, fees = request.tokens, request.fees

        if len(tokens) < 2:
            raise InvalidInputError("A swap needs at least two tokens.")
        if len(fees) != len(tokens) - 1:
            raise LengthMismatchError(len(tokens), len(fees))
        if request.kind.is_single and len(tokens) != 2:
            raise InvalidInputError("Single-hop swaps take exactly two tokens.")

        normalized: List[str] = []
        for i, token in enumerate(tokens):
            try:
                token = norm_token(token)
            except ValueError as exc:
                raise InvalidInputError(str(exc)) from exc
            if is_zero_address(token):
                raise InvalidInputError("Token must not be zero address.")
            if is_native(token) and 0 < i < len(tokens) - 1:
                raise InvalidInputError("The native asset may only appear at the ends of a path.")
            normalized.append(token)

        wrapped = [to_wrapped(t, self.gateway.wrapped_native) for t in normalized]
        for i in range(len(wrapped) - 1):
            if wrapped[i] == wrapped[i + 1]:
                raise InvalidInputError("Adjacent tokens of a path must differ.", details={"hop": i})

        if int(request.amount) <= 0:
            raise InvalidInputError("Amount must be positive.")
        if int(request.bound) < 0:
            raise InvalidInputError("Bound must not be negative.")
        if int(request.deadline) < int(self.clock()):
            raise InvalidInputError("Transaction too old: deadline elapsed.", details={"deadline": int(request.deadline)})

        for i, fee in enumerate(fees):
            if not FeeTier.is_valid(fee):
                raise InvalidInputError(f"Unsupported fee tier: {fee}", details={"hop": i})
            if not self.registry.is_supported(wrapped[i], wrapped[i + 1], fee):
                raise PairNotTrustedError(wrapped[i], wrapped[i + 1], int(fee))

        return normalized, wrapped

    def _run(self, call: _SwapCall, ctx: CallContext, tokens: List[str], wrapped: List[str]) -> SwapResult:
        request = call.request
        fees = [int(f) for f in request.fees]
        exact_in = request.kind.is_exact_in
        amount = int(request.amount)
        custodian = FundCustodian(self.gateway)
        spender = self.engine.address
        recipient = custodian.holder

        call.advance(SwapPhase.FUNDING_IN)
        bound_derived = int(request.bound) == AUTO_BOUND
        if not bound_derived:
            bound = int(request.bound)
        elif exact_in:
            bound = self.bounds.min_output(wrapped, fees, amount)
        else:
            bound = self.bounds.max_input(wrapped, fees, amount)

        pulled = amount if exact_in else bound
        custodian.take_funds(call.caller, tokens[0], pulled, ctx.value, ctx.funding_tx)

        try:
            return self._execute_and_settle(call, custodian, tokens, wrapped, fees, amount, bound, bound_derived, pulled, spender, recipient)
        except Exception:
            self._compensate(call, custodian, tokens)
            raise

    def _execute_and_settle(
        self,
        call: _SwapCall,
        custodian: FundCustodian,
        tokens: List[str],
        wrapped: List[str],
        fees: List[int],
        amount: int,
        bound: int,
        bound_derived: bool,
        pulled: int,
        spender: str,
        recipient: str,
    ) -> SwapResult:
        request = call.request
        exact_in = request.kind.is_exact_in

        call.advance(SwapPhase.APPROVING)
        custodian.approve_spender(tokens[0], spender, pulled)

        call.advance(SwapPhase.EXECUTING)
        try:
            call.fill = self._execute(request.kind, tokens, wrapped, fees, amount, bound, recipient, int(request.deadline))
        finally:
            custodian.revoke_spender(tokens[0], spender)
        fill = call.fill

        call.advance(SwapPhase.SETTLING)
        if exact_in:
            realized = fill.amount_out
            if realized < bound:
                raise SlippageExceededError(realized=realized, bound=bound, exact_in=True)
            custodian.send_funds(tokens[-1], call.caller, realized)
            return SwapResult(request.kind, amount_in=fill.amount_in, amount_out=realized, bound=bound, bound_derived=bound_derived)

        realized = fill.amount_in
        if fill.amount_out < amount:
            raise SlippageExceededError(realized=fill.amount_out, bound=amount, exact_in=True)
        if realized > bound:
            raise SlippageExceededError(realized=realized, bound=bound, exact_in=False)
        custodian.send_funds(tokens[-1], call.caller, amount)

        refund = pulled - realized
        if refund > 0:
            call.advance(SwapPhase.REFUNDING)
            custodian.refund(tokens[0], call.caller, refund)

        return SwapResult(
            request.kind, amount_in=realized, amount_out=amount, bound=bound,
            bound_derived=bound_derived, refunded=custodian.ledger.refunded,
        )

    def _compensate(self, call: _SwapCall, custodian: FundCustodian, tokens: List[str]) -> None:
        """
        Hands back whatever the failed call left on the router account.

        The caller gets the unspent input in the form it was paid in, plus any
        output the engine delivered that was not yet paid out. Inside an
        `atomic` scope the rollback discards these transfers again.
        """
        ledger = custodian.ledger
        consumed = call.fill.amount_in if call.fill is not None else 0
        received = call.fill.amount_out if call.fill is not None else 0
        unspent = ledger.pulled - consumed - ledger.refunded
        unpaid = received - ledger.paid_out
        try:
            custodian.refund(tokens[0], call.caller, unspent)
            custodian.send_funds(tokens[-1], call.caller, unpaid)
        except Exception:
            logger.exception(
                "Compensation failed for %s: unspent=%s unpaid=%s ledger=%s",
                call.caller, unspent, unpaid, ledger.as_dict(),
            )
            return
        if unspent > 0 or unpaid > 0:
            logger.warning(
                "Returned unspent=%s of %s and unpaid=%s of %s to %s after failure in %s",
                unspent, tokens[0], unpaid, tokens[-1], call.caller, call.phase,
            )

    def _execute(
        self,
        kind: SwapKind,
        tokens: List[str],
        wrapped: List[str],
        fees: List[int],
        amount: int,
        bound: int,
        recipient: str,
        deadline: int,
    ) -> SwapFill:
        if kind == SwapKind.SINGLE_EXACT_IN:
            fill = self.engine.exact_input_single(
                token_in=wrapped[0], token_out=wrapped[1], fee=fees[0], amount_in=amount,
                amount_out_minimum=bound, recipient=recipient, deadline=deadline,
            )
        elif kind == SwapKind.SINGLE_EXACT_OUT:
            fill = self.engine.exact_output_single(
                token_in=wrapped[0], token_out=wrapped[1], fee=fees[0], amount_out=amount,
                amount_in_maximum=bound, recipient=recipient, deadline=deadline,
            )
        elif kind == SwapKind.MULTI_EXACT_IN:
            fill = self.engine.exact_input(
                path=self.codec.build_forward(tokens, fees), amount_in=amount,
                amount_out_minimum=bound, recipient=recipient, deadline=deadline,
            )
        else:
            fill = self.engine.exact_output(
                path=self.codec.build_reversed(tokens, fees), amount_out=amount,
                amount_in_maximum=bound, recipient=recipient, deadline=deadline,
            )
        return SwapFill(amount_in=int(fill.amount_in), amount_out=int(fill.amount_out))


@lru_cache(maxsize=1)
def get_swap_router() -> SwapRouterUseCase:
    """Process-wide router; every use case shares its lock and configuration."""
    return SwapRouterUseCase.from_settings()
