from types import SimpleNamespace

import pytest

from adapters.external.auth.allowlist_auth_context import AllowlistAuthContext
from core.domain.schemas.router_config import BufferConfig
from core.use_cases.swap_router_usecase import SwapRouterUseCase

from tests.fakes import (
    ADMIN,
    DAI,
    PAUSER,
    POOL_DAI_USDC,
    POOL_WETH_DAI,
    POOL_WETH_USDC,
    POOL_WETH_USDC_ALT,
    USDC,
    WETH,
    FixedRateEngine,
    FixedRateOracleBackend,
    InMemoryRouterEventsRepository,
    InMemoryTrustedPairRepository,
    LedgerTokenGateway,
    _pool_info,
)

NOW = 1_700_000_000


class FrozenClock:
    def __init__(self, now: int = NOW):
        self.now = now

    def __call__(self) -> float:
        return float(self.now)


def default_rates():
    """Directed 1:1000 rates along WETH -> DAI -> USDC and WETH -> USDC."""
    return {
        (WETH, USDC): (1000, 1),
        (USDC, WETH): (1, 1000),
        (WETH, DAI): (1000, 1),
        (DAI, WETH): (1, 1000),
        (DAI, USDC): (1000, 1),
        (USDC, DAI): (1, 1000),
    }


def default_pools():
    return {
        POOL_WETH_USDC: _pool_info(WETH, USDC, 3000),
        POOL_WETH_USDC_ALT: _pool_info(WETH, USDC, 3000),
        POOL_WETH_DAI: _pool_info(WETH, DAI, 3000),
        POOL_DAI_USDC: _pool_info(DAI, USDC, 500),
    }


def make_router(*, pair_repo, backend, engine, ledger, events_repo, clock, config, atomic=True):
    kwargs = {"atomic": ledger.atomic} if atomic else {}
    return SwapRouterUseCase(
        pair_repo=pair_repo,
        backend=backend,
        engine=engine,
        gateway=ledger,
        auth=AllowlistAuthContext(admins=[ADMIN], pausers=[PAUSER], config=config),
        config=config,
        events_repo=events_repo,
        clock=clock,
        **kwargs,
    )


def trust_default_pairs(router):
    router.register_pair(ADMIN, WETH, USDC, POOL_WETH_USDC, 3000)
    router.register_pair(ADMIN, WETH, DAI, POOL_WETH_DAI, 3000)
    router.register_pair(ADMIN, DAI, USDC, POOL_DAI_USDC, 500)
    return router


def build_bench(*, atomic=True, buffer_bps=100):
    """Fresh ledger, engine and trusted router outside of pytest fixtures (for hypothesis)."""
    rates = default_rates()
    ledger = LedgerTokenGateway()
    engine = FixedRateEngine(ledger, rates)
    backend = FixedRateOracleBackend(rates, default_pools(), decimals={USDC: 6})
    config = BufferConfig(period=0, buffer_bps=buffer_bps)
    router = make_router(
        pair_repo=InMemoryTrustedPairRepository(),
        backend=backend,
        engine=engine,
        ledger=ledger,
        events_repo=InMemoryRouterEventsRepository(),
        clock=FrozenClock(),
        config=config,
        atomic=atomic,
    )
    return SimpleNamespace(router=trust_default_pairs(router), ledger=ledger, engine=engine, backend=backend, config=config)


@pytest.fixture
def rates():
    return default_rates()


@pytest.fixture
def backend(rates):
    return FixedRateOracleBackend(rates, default_pools(), decimals={USDC: 6})


@pytest.fixture
def ledger():
    return LedgerTokenGateway()


@pytest.fixture
def engine(ledger, rates):
    return FixedRateEngine(ledger, rates)


@pytest.fixture
def pair_repo():
    return InMemoryTrustedPairRepository()


@pytest.fixture
def events_repo():
    return InMemoryRouterEventsRepository()


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def config():
    return BufferConfig(period=0, buffer_bps=100)


@pytest.fixture
def router(pair_repo, backend, engine, ledger, events_repo, clock, config):
    return make_router(
        pair_repo=pair_repo, backend=backend, engine=engine, ledger=ledger,
        events_repo=events_repo, clock=clock, config=config,
    )


@pytest.fixture
def trusted_router(router):
    """Router with WETH/USDC (3000), WETH/DAI (3000) and DAI/USDC (500) registered."""
    return trust_default_pairs(router)


@pytest.fixture
def unguarded_router(pair_repo, backend, engine, ledger, events_repo, clock, config):
    """Trusted router without an `atomic` scope, as wired against a live chain."""
    router = make_router(
        pair_repo=pair_repo, backend=backend, engine=engine, ledger=ledger,
        events_repo=events_repo, clock=clock, config=config, atomic=False,
    )
    return trust_default_pairs(router)
