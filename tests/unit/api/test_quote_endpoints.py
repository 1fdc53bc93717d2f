"""Tests for the quote endpoints."""

import pytest
from fastapi.testclient import TestClient

from swap_router.api.main import app
from tests.helpers import SUI, USDC, USDT, WETH, make_pool_snapshot, make_quote_request
from tests.helpers.constants import DEEP_BALANCE


@pytest.fixture
def client():
    """Create a test client for the API."""
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def pools():
    return [
        make_pool_snapshot("direct", {SUI: DEEP_BALANCE, USDC: DEEP_BALANCE}, fee=0.003),
        make_pool_snapshot("sui-usdt", {SUI: DEEP_BALANCE, USDT: DEEP_BALANCE}, fee=0.003),
        make_pool_snapshot("usdt-usdc", {USDT: DEEP_BALANCE, USDC: DEEP_BALANCE}, fee=0.003),
    ]


class TestQuoteEndpoint:
    """Tests for POST /quote."""

    def test_given_in_quote(self, client, pools):
        response = client.post("/quote", json=make_quote_request(pools, SUI, USDC, 10**9))

        assert response.status_code == 200
        data = response.json()
        assert data["coinIn"]["amount"] == str(10**9)
        assert int(data["coinOut"]["amount"]) > 0
        assert data["routes"]
        assert "externalFee" not in data
        total_in = sum(int(route["coinIn"]["amount"]) for route in data["routes"])
        assert total_in == 10**9

    def test_given_out_quote(self, client, pools):
        response = client.post(
            "/quote", json=make_quote_request(pools, SUI, USDC, 10**6, mode="givenOut")
        )

        assert response.status_code == 200
        data = response.json()
        assert data["coinOut"]["amount"] == str(10**6)
        assert int(data["coinIn"]["amount"]) > 10**6
        for route in data["routes"]:
            assert route["paths"][0]["coinIn"]["type"] == SUI
            assert route["paths"][-1]["coinOut"]["type"] == USDC

    def test_short_coin_types(self, client, pools):
        response = client.post(
            "/quote", json=make_quote_request(pools, "0x2::sui::SUI", USDC, 10**9)
        )
        assert response.status_code == 200
        assert response.json()["coinIn"]["type"] == SUI

    def test_external_fee(self, client, pools):
        fee = {"recipient": "0xfee", "feePercentage": 0.01}
        plain = client.post("/quote", json=make_quote_request(pools, SUI, USDC, 10**9)).json()
        charged = client.post(
            "/quote", json=make_quote_request(pools, SUI, USDC, 10**9, externalFee=fee)
        ).json()

        assert int(charged["coinOut"]["amount"]) < int(plain["coinOut"]["amount"])
        assert charged["externalFee"] == fee

    def test_no_route_returns_empty_quote(self, client, pools):
        """No liquidity is a normal answer, not an error."""
        response = client.post("/quote", json=make_quote_request(pools, SUI, WETH, 10**9))

        assert response.status_code == 200
        assert response.json()["routes"] == []
        assert response.json()["coinOut"]["amount"] == "0"

    def test_max_route_length(self, client, pools):
        response = client.post(
            "/quote", json=make_quote_request(pools, SUI, USDC, 10**9, maxRouteLength=1)
        )
        for route in response.json()["routes"]:
            assert len(route["paths"]) == 1


class TestBatchQuoteEndpoint:
    """Tests for POST /quotes."""

    def test_one_quote_per_amount(self, client, pools):
        body = {"pools": pools, "coinIn": SUI, "coinOut": USDC, "amountsIn": ["1000", "1000000"]}

        response = client.post("/quotes", json=body)

        assert response.status_code == 200
        amounts = [quote["coinIn"]["amount"] for quote in response.json()["quotes"]]
        assert amounts == ["1000", "1000000"]

    def test_unroutable_pair(self, client, pools):
        body = {"pools": pools, "coinIn": SUI, "coinOut": WETH, "amountsIn": ["1000"]}

        response = client.post("/quotes", json=body)

        assert response.status_code == 200
        assert response.json()["quotes"] == []


class TestConfigEndpoint:
    """Tests for GET /config."""

    def test_shows_active_config(self, client):
        response = client.get("/config")

        assert response.status_code == 200
        data = response.json()
        assert data["trade_partition_count"] == 50
        assert data["cut_policy"] == "quadratic"
