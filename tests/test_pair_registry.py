"""
Trusted-pair registry: canonical keys, registration lifecycle and events.
"""

import pytest
from hypothesis import given, strategies as st

from core.domain.enums.router_event_enums import RouterEventKind
from core.services.exceptions import (
    AlreadyRegisteredError,
    InvalidInputError,
    NotRegisteredError,
    PoolMismatchError,
)
from core.services.pair_registry import PairRegistry, canonical_key, compute_pair_id
from tests.fakes import (
    DAI,
    POOL_WETH_DAI,
    POOL_WETH_USDC,
    POOL_WETH_USDC_ALT,
    USDC,
    WETH,
    InMemoryTrustedPairRepository,
)

addresses = st.integers(min_value=1, max_value=(1 << 160) - 1).map(lambda n: "0x" + format(n, "040x"))


@pytest.fixture
def emitted():
    return []


@pytest.fixture
def registry(backend, emitted):
    return PairRegistry(InMemoryTrustedPairRepository(), backend, on_event=emitted.append)


class TestCanonicalKey:
    @given(addresses, addresses, st.sampled_from([100, 500, 3000, 10000]))
    def test_pair_id_is_order_independent(self, a, b, fee):
        assert canonical_key(a, b, fee) == canonical_key(b, a, fee)

    def test_low_token_sorts_numerically(self):
        low, high, _ = canonical_key(USDC, WETH, 3000)
        assert (low, high) == (WETH, USDC)

    def test_pair_id_depends_on_fee(self):
        assert compute_pair_id(WETH, USDC, 500) != compute_pair_id(WETH, USDC, 3000)

    def test_pair_id_is_hex_digest(self):
        pair_id = compute_pair_id(WETH, USDC, 3000)
        assert pair_id.startswith("0x") and len(pair_id) == 66


class TestRegister:
    def test_register_makes_both_orders_supported(self, registry, emitted):
        registry.register(USDC, WETH, POOL_WETH_USDC, 3000, by="0xabc")

        assert registry.is_supported(WETH, USDC, 3000)
        assert registry.is_supported(USDC, WETH, 3000)
        assert not registry.is_supported(WETH, USDC, 500)

        assert [e.kind for e in emitted] == [RouterEventKind.PAIR_REGISTERED]
        assert emitted[0].payload["pool"] == POOL_WETH_USDC

    def test_register_twice_is_rejected(self, registry):
        registry.register(WETH, USDC, POOL_WETH_USDC, 3000)
        with pytest.raises(AlreadyRegisteredError):
            registry.register(USDC, WETH, POOL_WETH_USDC_ALT, 3000)

    def test_pool_must_serve_the_pair(self, registry):
        with pytest.raises(PoolMismatchError):
            registry.register(WETH, USDC, POOL_WETH_DAI, 3000)

    def test_pool_fee_must_match(self, registry):
        with pytest.raises(PoolMismatchError):
            registry.register(WETH, USDC, POOL_WETH_USDC, 500)

    @pytest.mark.parametrize(
        "token_a,token_b,fee",
        [
            (WETH, WETH, 3000),
            ("0x0000000000000000000000000000000000000000", USDC, 3000),
            ("not-an-address", USDC, 3000),
            (WETH, USDC, 2500),
            (WETH, USDC, 3000.7),
            (WETH, USDC, True),
        ],
    )
    def test_invalid_pairs_are_rejected(self, registry, token_a, token_b, fee):
        with pytest.raises(InvalidInputError):
            registry.register(token_a, token_b, POOL_WETH_USDC, fee)

    def test_zero_pool_is_rejected(self, registry):
        with pytest.raises(InvalidInputError):
            registry.register(WETH, USDC, "0x0000000000000000000000000000000000000000", 3000)


class TestUnregister:
    def test_unregister_keeps_history(self, registry, emitted):
        registry.register(WETH, USDC, POOL_WETH_USDC, 3000)
        removed = registry.unregister(USDC, WETH, 3000, by="0xabc")

        assert removed.active is False
        assert not registry.is_supported(WETH, USDC, 3000)
        assert [h.active for h in registry.history(WETH, USDC, 3000)] == [False]
        assert emitted[-1].kind == RouterEventKind.PAIR_UNREGISTERED

    def test_unregister_unknown_pair(self, registry):
        with pytest.raises(NotRegisteredError):
            registry.unregister(WETH, DAI, 3000)

    def test_reregister_with_new_pool(self, registry):
        """Unregister then register again with another pool: supported immediately."""
        registry.register(WETH, USDC, POOL_WETH_USDC, 3000)
        registry.unregister(WETH, USDC, 3000)
        registry.register(WETH, USDC, POOL_WETH_USDC_ALT, 3000)

        assert registry.is_supported(WETH, USDC, 3000)
        assert registry.get_pair(USDC, WETH, 3000).pool == POOL_WETH_USDC_ALT
        assert len(registry.history(WETH, USDC, 3000)) == 2
        assert len(registry.list_pairs()) == 1
        assert len(registry.list_pairs(include_inactive=True)) == 2


def test_get_pair_returns_none_for_invalid_input(registry):
    assert registry.get_pair("bogus", USDC, 3000) is None
    assert registry.is_supported(WETH, WETH, 3000) is False
