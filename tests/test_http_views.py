"""
HTTP surface: routing, request validation and error-to-status mapping.

Auth dependencies and use-case factories are overridden so every view runs
against the in-memory router from conftest.
"""

import pytest
from fastapi.testclient import TestClient

from adapters.entry.http.views import pair_quote_view, swap_view
from adapters.entry.http.views.admin import admin_pair_registry_view, admin_router_config_view
from adapters.entry.http.views.admin.admin_auth import WalletPrincipal, require_admin, require_wallet
from core.use_cases.admin_pair_registry_usecase import AdminPairRegistryUseCase
from core.use_cases.admin_router_config_usecase import AdminRouterConfigUseCase
from core.use_cases.pair_quote_usecase import PairQuoteUseCase
from core.use_cases.swaps_usecase import SwapsUseCase
from main import create_app
from tests.conftest import NOW
from tests.fakes import ADMIN, ALICE, DAI, NATIVE, PAUSER, POOL_WETH_USDC, POOL_WETH_USDC_ALT, ROUTER, USDC, WETH


class Principals:
    """Mutable stand-in for the authenticated wallets of a test."""

    def __init__(self):
        self.wallet = WalletPrincipal(privy_did="did:privy:alice", wallet_address=ALICE)
        self.admin = WalletPrincipal(privy_did="did:privy:admin", wallet_address=ADMIN)


@pytest.fixture
def principals():
    return Principals()


@pytest.fixture
def app(trusted_router, principals):
    app = create_app()
    app.dependency_overrides[require_wallet] = lambda: principals.wallet
    app.dependency_overrides[require_admin] = lambda: principals.admin
    app.dependency_overrides[swap_view.get_use_case] = lambda: SwapsUseCase(router=trusted_router)
    app.dependency_overrides[pair_quote_view.get_use_case] = lambda: PairQuoteUseCase(router=trusted_router)
    app.dependency_overrides[admin_pair_registry_view.get_use_case] = lambda: AdminPairRegistryUseCase(router=trusted_router)
    app.dependency_overrides[admin_router_config_view.get_use_case] = lambda: AdminRouterConfigUseCase(router=trusted_router)
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def single_in(**overrides):
    body = {"token_in": WETH, "token_out": USDC, "fee": 3000, "amount_in": 1, "deadline": NOW}
    body.update(overrides)
    return body


class TestSwapEndpoints:
    def test_exact_input_single(self, client, ledger):
        ledger.mint(WETH, ALICE, 1)

        r = client.post("/api/swaps/exact-input-single", json=single_in())

        assert r.status_code == 200
        data = r.json()["data"]
        assert data["amount_out"] == "1000"
        assert data["bound"] == "990"
        assert data["bound_derived"] is True
        assert data["events"][0]["kind"] == "swap_executed"
        assert ledger.balance(USDC, ALICE) == 1000

    def test_exact_output_multihop(self, client, ledger):
        ledger.mint(WETH, ALICE, 1_010_000)

        r = client.post(
            "/api/swaps/exact-output",
            json={"tokens": [WETH, DAI, USDC], "fees": [3000, 500], "amount_out": 10**12, "deadline": NOW},
        )

        assert r.status_code == 200
        assert r.json()["data"]["refunded"] == "10000"

    def test_checksummed_addresses_are_accepted(self, client, ledger):
        ledger.mint(WETH, ALICE, 1)
        body = single_in(token_out="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913")

        assert client.post("/api/swaps/exact-input-single", json=body).status_code == 200

    def test_body_validation(self, client):
        assert client.post("/api/swaps/exact-input-single", json=single_in(amount_in=0)).status_code == 422
        assert client.post("/api/swaps/exact-input-single", json=single_in(token_in="0x123")).status_code == 422
        r = client.post(
            "/api/swaps/exact-input",
            json={"tokens": [WETH, DAI, USDC], "fees": [3000], "amount_in": 1, "deadline": NOW},
        )
        assert r.status_code == 422

    def test_elapsed_deadline(self, client, ledger):
        ledger.mint(WETH, ALICE, 1)
        r = client.post("/api/swaps/exact-input-single", json=single_in(deadline=NOW - 1))

        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "InvalidInputError"

    def test_untrusted_pair(self, client):
        r = client.post("/api/swaps/exact-input-single", json=single_in(fee=500))

        assert r.status_code == 404
        assert r.json()["detail"]["fee"] == 500

    def test_value_mismatch(self, client, ledger):
        ledger.mint(WETH, ALICE, 1)
        body = single_in(value=1, funding_tx_hash="0x" + "ab" * 32)
        assert client.post("/api/swaps/exact-input-single", json=body).status_code == 400

    def test_value_requires_funding_tx_hash(self, client):
        body = single_in(token_in=NATIVE, amount_in=5, value=5)
        assert client.post("/api/swaps/exact-input-single", json=body).status_code == 422

        body["funding_tx_hash"] = "0x1234"
        assert client.post("/api/swaps/exact-input-single", json=body).status_code == 422

    def test_native_input_with_funding_transfer(self, client, ledger):
        ledger.native[ALICE] = 5
        funding_tx = ledger.attach(ALICE, 5)
        body = single_in(token_in=NATIVE, amount_in=5, value=5, funding_tx_hash=funding_tx)

        assert client.post("/api/swaps/exact-input-single", json=body).status_code == 200
        assert ledger.balance(USDC, ALICE) == 5000

        r = client.post("/api/swaps/exact-input-single", json=body)
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "NativeFundingError"

    def test_unfunded_native_value(self, client, ledger):
        ledger.native[ROUTER] = 5
        body = single_in(token_in=NATIVE, amount_in=5, value=5, funding_tx_hash="0x" + "cd" * 32)

        r = client.post("/api/swaps/exact-input-single", json=body)

        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "NativeFundingError"
        assert ledger.balance(USDC, ALICE) == 0

    def test_paused(self, client, trusted_router):
        trusted_router.pause(PAUSER)
        assert client.post("/api/swaps/exact-input-single", json=single_in()).status_code == 423

    def test_slippage(self, client, ledger, engine):
        ledger.mint(WETH, ALICE, 1)
        engine.slippage_bps = 200
        engine.honor_bounds = False

        r = client.post("/api/swaps/exact-input-single", json=single_in())

        assert r.status_code == 422
        assert r.json()["detail"]["error"] == "SlippageExceededError"
        assert ledger.balance(WETH, ALICE) == 1

    def test_nested_call(self, client, ledger, engine, trusted_router):
        ledger.mint(WETH, ALICE, 1)
        engine.on_execute = lambda: trusted_router.set_buffer_bps(ADMIN, 0)

        assert client.post("/api/swaps/exact-input-single", json=single_in()).status_code == 409

    def test_missing_token(self, app, client):
        del app.dependency_overrides[require_wallet]
        assert client.post("/api/swaps/exact-input-single", json=single_in()).status_code == 401


class TestPairEndpoints:
    def test_supported(self, client):
        r = client.get("/api/pairs/supported", params={"token_a": USDC, "token_b": WETH, "fee": 3000})
        assert r.status_code == 200
        assert r.json()["data"]["supported"] is True

        r = client.get("/api/pairs/supported", params={"token_a": USDC, "token_b": WETH, "fee": 100})
        assert r.json()["data"]["supported"] is False

    def test_quote(self, client):
        r = client.get("/api/pairs/quote", params={"token_in": WETH, "token_out": USDC, "amount_in": 5, "fee": 3000})
        assert r.status_code == 200
        assert r.json()["data"]["amount_out"] == "5000"

    def test_quote_unknown_pair(self, client):
        r = client.get("/api/pairs/quote", params={"token_in": WETH, "token_out": USDC, "amount_in": 5, "fee": 500})
        assert r.status_code == 404

    def test_estimate(self, client):
        r = client.get(
            "/api/pairs/estimate",
            params={"tokens": [WETH, DAI, USDC], "fees": [3000, 500], "amount": 1},
        )
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["estimate"] == "1000000"
        assert data["bound"] == "990000"
        assert data["buffer_bps"] == 100

    def test_estimate_length_mismatch(self, client):
        r = client.get("/api/pairs/estimate", params={"tokens": [WETH, DAI, USDC], "fees": [3000], "amount": 1})
        assert r.status_code == 400


class TestAdminEndpoints:
    def test_register_and_list(self, client):
        r = client.post(
            "/api/admin/pairs/register",
            json={"token_a": USDC, "token_b": WETH, "pool": POOL_WETH_USDC_ALT, "fee": 3000},
        )
        assert r.status_code == 409

        client.post("/api/admin/pairs/unregister", json={"token_a": WETH, "token_b": USDC, "fee": 3000})
        r = client.post(
            "/api/admin/pairs/register",
            json={"token_a": USDC, "token_b": WETH, "pool": POOL_WETH_USDC_ALT, "fee": 3000},
        )
        assert r.status_code == 200
        assert r.json()["data"]["pool"] == POOL_WETH_USDC_ALT

        rows = client.get("/api/admin/pairs/history", params={"token_a": WETH, "token_b": USDC, "fee": 3000}).json()["data"]
        assert [row["pool"] for row in rows] == [POOL_WETH_USDC_ALT, POOL_WETH_USDC]

        active = client.get("/api/admin/pairs").json()["data"]
        assert len(active) == 3

    def test_unregister_unknown(self, client):
        r = client.post("/api/admin/pairs/unregister", json={"token_a": WETH, "token_b": USDC, "fee": 10000})
        assert r.status_code == 404

    def test_register_rejects_bad_fee(self, client):
        r = client.post(
            "/api/admin/pairs/register",
            json={"token_a": USDC, "token_b": WETH, "pool": POOL_WETH_USDC_ALT, "fee": 2500},
        )
        assert r.status_code == 422

    def test_non_admin_wallet(self, client, principals):
        principals.admin = WalletPrincipal(privy_did="did:privy:alice", wallet_address=ALICE)
        r = client.post("/api/admin/router/buffer", json={"buffer_bps": 50})
        assert r.status_code == 403

    def test_config_roundtrip(self, client):
        assert client.post("/api/admin/router/buffer", json={"buffer_bps": 250}).status_code == 200
        r = client.post("/api/admin/router/period", json={"period": 600})
        assert r.json()["data"]["period"] == 600

        cfg = client.get("/api/admin/router/config").json()["data"]
        assert cfg["buffer_bps"] == 250
        assert cfg["period"] == 600
        assert cfg["max_period"] == 86400

    def test_period_above_max(self, client):
        assert client.post("/api/admin/router/period", json={"period": 86401}).status_code == 400

    def test_buffer_above_denominator(self, client):
        assert client.post("/api/admin/router/buffer", json={"buffer_bps": 10_001}).status_code == 422

    def test_pause_uses_pauser_role(self, client, principals):
        assert client.post("/api/admin/router/pause").status_code == 403

        principals.wallet = WalletPrincipal(privy_did="did:privy:pauser", wallet_address=PAUSER)
        r = client.post("/api/admin/router/pause")
        assert r.status_code == 200
        assert r.json()["data"]["paused"] is True

        assert client.post("/api/admin/router/unpause").json()["data"]["paused"] is False

    def test_events(self, client):
        r = client.get("/api/admin/router/events", params={"kind": "pair_registered"})
        assert r.status_code == 200
        assert len(r.json()["data"]) == 3
