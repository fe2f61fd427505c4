"""
Bound derivation from chained TWAP quotes.
"""

import pytest
from hypothesis import given, strategies as st

from core.domain.schemas.router_config import BufferConfig
from core.services.bound_deriver import BoundDeriver, apply_buffer
from core.services.exceptions import AmountTooLargeError, InvalidInputError, LengthMismatchError
from core.services.oracle_client import OracleClient
from core.services.pair_registry import PairRegistry
from tests.fakes import (
    DAI,
    POOL_DAI_USDC,
    POOL_WETH_DAI,
    POOL_WETH_USDC,
    USDC,
    WETH,
    InMemoryTrustedPairRepository,
)


@pytest.fixture
def deriver(backend, config):
    registry = PairRegistry(InMemoryTrustedPairRepository(), backend)
    registry.register(WETH, USDC, POOL_WETH_USDC, 3000)
    registry.register(WETH, DAI, POOL_WETH_DAI, 3000)
    registry.register(DAI, USDC, POOL_DAI_USDC, 500)
    return BoundDeriver(OracleClient(registry, backend), config)


class TestApplyBuffer:
    def test_reference_values(self):
        assert apply_buffer(1000, 100, increase=False) == 990
        assert apply_buffer(1000, 100, increase=True) == 1010
        assert apply_buffer(1000, 0, increase=False) == 1000
        assert apply_buffer(1000, 10_000, increase=False) == 0

    def test_rounds_down_in_both_directions(self):
        assert apply_buffer(999, 100, increase=False) == 989
        assert apply_buffer(999, 100, increase=True) == 1008

    @pytest.mark.parametrize("bps", [-1, 10_001])
    def test_out_of_range_buffer(self, bps):
        with pytest.raises(InvalidInputError):
            apply_buffer(1000, bps, increase=False)

    @given(st.integers(min_value=0, max_value=10**30), st.integers(min_value=0, max_value=9_999))
    def test_buffer_is_monotone(self, amount, bps):
        assert apply_buffer(amount, bps + 1, increase=False) <= apply_buffer(amount, bps, increase=False)
        assert apply_buffer(amount, bps + 1, increase=True) >= apply_buffer(amount, bps, increase=True)
        assert apply_buffer(amount, bps, increase=False) <= amount <= apply_buffer(amount, bps, increase=True)


class TestSingleHop:
    def test_min_output_for_one_to_thousand_quote(self, deriver):
        """1:1000 quote with a 100 bps buffer yields a minimum of 990."""
        assert deriver.min_output([WETH, USDC], [3000], 1) == 990
        assert deriver.min_output([WETH, USDC], [3000], 10**18) == 990 * 10**18

    def test_max_input_uses_reverse_quote(self, deriver, backend):
        assert deriver.max_input([WETH, USDC], [3000], 1_000_000) == 1010
        assert backend.quote_calls == [(1_000_000, USDC, WETH)]

    def test_buffer_follows_config(self, deriver, config):
        config.buffer_bps = 250
        assert deriver.min_output([WETH, USDC], [3000], 1) == 975


class TestMultiHop:
    def test_buffer_is_applied_once_on_the_chain(self, deriver):
        """Two 1:1000 hops: estimate 1,000,000 and minimum 990,000, never 980,100."""
        path = [WETH, DAI, USDC]
        assert deriver.estimate_output(path, [3000, 500], 1) == 1_000_000
        assert deriver.min_output(path, [3000, 500], 1) == 990_000

    def test_exact_output_chain_walks_backwards(self, deriver, backend):
        path = [WETH, DAI, USDC]
        assert deriver.estimate_input(path, [3000, 500], 1_000_000) == 1
        assert deriver.max_input(path, [3000, 500], 10**12) == 1_010_000
        assert [(t_in, t_out) for _, t_in, t_out in backend.quote_calls[-2:]] == [(USDC, DAI), (DAI, WETH)]

    def test_period_follows_config(self, deriver, backend, config):
        config.period = 900
        deriver.min_output([WETH, DAI, USDC], [3000, 500], 1)
        assert [p for _, p in backend.mean_tick_calls] == [900, 900]


class TestPathShape:
    def test_length_mismatch(self, deriver):
        with pytest.raises(LengthMismatchError):
            deriver.min_output([WETH, DAI, USDC], [3000], 1)

    def test_single_token_path(self, deriver):
        with pytest.raises(InvalidInputError):
            deriver.min_output([WETH], [], 1)

    def test_intermediate_amount_must_fit_oracle_width(self, deriver):
        """A hop output too large for the next oracle call fails the derivation."""
        with pytest.raises(AmountTooLargeError):
            deriver.min_output([WETH, DAI, USDC], [3000, 500], (1 << 128) - 1)


def test_standalone_config_default():
    assert BufferConfig().buffer_bps == 100
