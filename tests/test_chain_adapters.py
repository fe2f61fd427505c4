"""
Chain adapters against offline web3: fills decoded from receipt Transfer logs,
and native funding transfers checked before they are claimed.
"""

from types import SimpleNamespace

import pytest
from hexbytes import HexBytes
from web3 import Web3
from web3.datastructures import AttributeDict
from web3.exceptions import TransactionNotFound

from adapters.chain.erc20_gateway import Erc20TokenGateway
from adapters.chain.uniswap_v3_router import UniswapV3RouterEngine, fill_from_transfers
from core.domain.schemas.onchain_types import SwapFill
from core.services.exceptions import NativeFundingError
from core.services.path_codec import PathCodec
from tests.fakes import (
    ALICE,
    DAI,
    ENGINE,
    POOL_DAI_USDC,
    POOL_WETH_DAI,
    POOL_WETH_USDC,
    ROUTER,
    USDC,
    WETH,
    InMemoryFundingClaimsRepository,
)

TRANSFER_TOPIC = Web3.keccak(text="Transfer(address,address,uint256)")
SWAP_TOPIC = Web3.keccak(text="Swap(address,address,int256,int256,uint160,uint128,int24)")


def _topic(addr: str) -> HexBytes:
    return HexBytes(b"\x00" * 12 + bytes.fromhex(addr[2:]))


def _log(index: int, token: str, topics, data: bytes) -> AttributeDict:
    return AttributeDict({
        "address": Web3.to_checksum_address(token),
        "topics": topics,
        "data": HexBytes(data),
        "blockHash": HexBytes(b"\x22" * 32),
        "blockNumber": 7,
        "logIndex": index,
        "transactionHash": HexBytes(b"\x11" * 32),
        "transactionIndex": 0,
        "removed": False,
    })


def transfer_log(index: int, token: str, src: str, dst: str, value: int) -> AttributeDict:
    return _log(index, token, [TRANSFER_TOPIC, _topic(src), _topic(dst)], value.to_bytes(32, "big"))


def transfer_event(token: str, src: str, dst: str, value: int) -> dict:
    return {"address": token, "args": {"from": src, "to": dst, "value": value}}


class TestFillFromTransfers:
    def test_sums_only_the_router_legs(self):
        events = [
            transfer_event(WETH, ROUTER, POOL_WETH_DAI, 7),
            transfer_event(DAI, POOL_WETH_DAI, POOL_DAI_USDC, 6_900),
            transfer_event(USDC, POOL_DAI_USDC, ROUTER, 6_800_000),
            # unrelated movement of the output token
            transfer_event(USDC, POOL_DAI_USDC, ALICE, 1),
        ]

        fill = fill_from_transfers(events, token_in=WETH, token_out=USDC, holder=ROUTER, recipient=ROUTER)
        assert fill == SwapFill(amount_in=7, amount_out=6_800_000)

    def test_checksummed_addresses_match(self):
        events = [transfer_event(Web3.to_checksum_address(WETH), Web3.to_checksum_address(ROUTER), POOL_WETH_USDC, 3)]
        fill = fill_from_transfers(events, token_in=WETH, token_out=USDC, holder=ROUTER, recipient=ROUTER)
        assert fill == SwapFill(amount_in=3, amount_out=0)


class RecordingTxs:
    """TxService double: simulation returns `simulated`, every send mines `receipt`."""

    def __init__(self, receipt, *, simulated: int):
        self.w3 = Web3()
        self.receipt = receipt
        self.simulated = simulated
        self.sent = []

    def sender_address(self) -> str:
        return Web3.to_checksum_address(ROUTER)

    def call(self, fn, *, value=0):
        return self.simulated

    def transact(self, fn, **kwargs):
        self.sent.append(fn.fn_name)
        return {"tx_hash": "0x" + "11" * 32}, self.receipt


class TestRouterEngineFill:
    def test_exact_input_reads_mined_output_not_simulation(self):
        receipt = {"logs": [
            transfer_log(0, WETH, ROUTER, POOL_WETH_USDC, 1_000),
            transfer_log(1, USDC, POOL_WETH_USDC, ROUTER, 2_990_000),
            _log(2, POOL_WETH_USDC, [SWAP_TOPIC, _topic(ENGINE), _topic(ROUTER)], b"\x00" * 160),
        ]}
        txs = RecordingTxs(receipt, simulated=3_000_000)
        engine = UniswapV3RouterEngine(txs, router_address=ENGINE)

        fill = engine.exact_input_single(
            token_in=WETH, token_out=USDC, fee=3000, amount_in=1_000,
            amount_out_minimum=2_900_000, recipient=ROUTER, deadline=1,
        )

        assert fill == SwapFill(amount_in=1_000, amount_out=2_990_000)
        assert txs.sent == ["exactInputSingle"]

    def test_exact_output_reads_input_from_reversed_path(self):
        receipt = {"logs": [
            transfer_log(0, USDC, POOL_DAI_USDC, ROUTER, 10**12),
            transfer_log(1, DAI, POOL_WETH_DAI, POOL_DAI_USDC, 10**9),
            transfer_log(2, WETH, ROUTER, POOL_WETH_DAI, 1_004_000),
        ]}
        txs = RecordingTxs(receipt, simulated=1_000_000)
        engine = UniswapV3RouterEngine(txs, router_address=ENGINE)
        path = PathCodec(WETH).build_reversed([WETH, DAI, USDC], [3000, 500])

        fill = engine.exact_output(
            path=path, amount_out=10**12, amount_in_maximum=1_010_000, recipient=ROUTER, deadline=1,
        )

        assert fill == SwapFill(amount_in=1_004_000, amount_out=10**12)
        assert txs.sent == ["exactOutput"]


class FakeEth:
    def __init__(self):
        self.mined = {}

    def contract(self, **kwargs):
        return SimpleNamespace(address=kwargs.get("address"), functions=SimpleNamespace())

    def get_transaction(self, tx_hash):
        if tx_hash not in self.mined:
            raise TransactionNotFound(f"Transaction {tx_hash} not found")
        return self.mined[tx_hash][0]

    def get_transaction_receipt(self, tx_hash):
        if tx_hash not in self.mined:
            raise TransactionNotFound(f"Transaction {tx_hash} not found")
        return self.mined[tx_hash][1]

    def mine(self, tx_hash, *, sender=ALICE, to=ROUTER, value=5, status=1):
        tx = AttributeDict({
            "from": Web3.to_checksum_address(sender),
            "to": Web3.to_checksum_address(to),
            "value": value,
        })
        self.mined[tx_hash] = (tx, AttributeDict({"status": status}))


FUNDING_TX = "0x" + "ab" * 32


@pytest.fixture
def eth():
    return FakeEth()


@pytest.fixture
def claims():
    return InMemoryFundingClaimsRepository()


@pytest.fixture
def gateway(eth, claims):
    txs = SimpleNamespace(w3=SimpleNamespace(eth=eth), sender_address=lambda: Web3.to_checksum_address(ROUTER))
    return Erc20TokenGateway(txs, wrapped_native=WETH, claims=claims)


class TestClaimNative:
    def test_matching_transfer_is_claimed_once(self, gateway, eth, claims):
        eth.mine(FUNDING_TX)

        gateway.claim_native(ALICE, 5, FUNDING_TX)
        assert claims.claims == {FUNDING_TX: (ALICE, 5)}

        with pytest.raises(NativeFundingError):
            gateway.claim_native(ALICE, 5, FUNDING_TX)

    @pytest.mark.parametrize(
        "mined",
        [
            {"status": 0},
            {"sender": ENGINE},
            {"to": ENGINE},
            {"value": 4},
        ],
        ids=["reverted", "other-sender", "other-recipient", "other-value"],
    )
    def test_mismatched_transfer_is_rejected(self, gateway, eth, claims, mined):
        eth.mine(FUNDING_TX, **mined)

        with pytest.raises(NativeFundingError):
            gateway.claim_native(ALICE, 5, FUNDING_TX)
        assert claims.claims == {}

    @pytest.mark.parametrize("funding_tx", [None, "", FUNDING_TX])
    def test_missing_transfer_is_rejected(self, gateway, claims, funding_tx):
        with pytest.raises(NativeFundingError):
            gateway.claim_native(ALICE, 5, funding_tx)
        assert claims.claims == {}
