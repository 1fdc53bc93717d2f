"""Tests for pool snapshot parsing."""

import pytest
from pydantic import ValidationError

from swap_router.errors import InvalidPoolError
from swap_router.models.pool import PoolSnapshot
from swap_router.pools.parsing import load_pools, lp_coin_owners, parse_pool, parse_pools
from swap_router.pools.types import PLAIN_COIN, PoolLpCoin
from tests.helpers import LP_SUI_USDC, SUI, USDC, USDT, make_pool_snapshot


def snapshot(pool_id: str, balances: dict[str, int], **kwargs) -> PoolSnapshot:
    return PoolSnapshot.model_validate(make_pool_snapshot(pool_id, balances, **kwargs))


class TestParsePool:
    """Tests for converting one snapshot entry."""

    def test_fixed_point_fields_decoded(self):
        pool = parse_pool(snapshot("p", {SUI: 100, USDC: 200}, fee=0.003, flatness=0.25))

        assert pool.id == "p"
        assert pool.balance(USDC) == 200
        assert pool.weight(SUI) == pytest.approx(0.5)
        assert pool.fees(SUI, USDC) == (pytest.approx(0.003), pytest.approx(0.003))
        assert pool.flatness == pytest.approx(0.25)

    def test_lp_metadata_kept(self):
        pool = parse_pool(snapshot("p", {SUI: 100, USDC: 200}, lp_coin_type=LP_SUI_USDC))
        assert pool.lp_coin_type == LP_SUI_USDC
        assert pool.lp_supply == 10**12

    def test_invalid_pool_raises(self):
        with pytest.raises(InvalidPoolError):
            parse_pool(snapshot("p", {SUI: 100}))


class TestCoinKinds:
    """Tests for LP coin classification."""

    def test_lp_owner_map(self):
        snapshots = [
            snapshot("lp-pool", {SUI: 100, USDC: 100}, lp_coin_type=LP_SUI_USDC),
            snapshot("plain", {SUI: 100, USDT: 100}),
        ]
        assert lp_coin_owners(snapshots) == {LP_SUI_USDC: "lp-pool"}

    def test_lp_coin_held_by_another_pool(self):
        """A pool holding another pool's LP coin sees it as that pool's LP coin."""
        pools = parse_pools(
            [
                snapshot("base", {SUI: 100, USDC: 100}, lp_coin_type=LP_SUI_USDC),
                snapshot("meta", {LP_SUI_USDC: 100, USDT: 100}),
            ]
        )
        meta = pools[1]
        assert meta.coin(LP_SUI_USDC).kind == PoolLpCoin("base")
        assert meta.coin(USDT).kind == PLAIN_COIN


class TestParsePools:
    """Tests for strict and lenient snapshot loading."""

    def test_strict_rejects_malformed_pool(self):
        snapshots = [snapshot("good", {SUI: 100, USDC: 100}), snapshot("bad", {SUI: 100})]
        with pytest.raises(InvalidPoolError):
            parse_pools(snapshots)

    def test_lenient_skips_malformed_pool(self):
        snapshots = [snapshot("good", {SUI: 100, USDC: 100}), snapshot("bad", {SUI: 100})]
        pools = parse_pools(snapshots, strict=False)
        assert [pool.id for pool in pools] == ["good"]

    def test_duplicate_id_strict(self):
        snapshots = [snapshot("p", {SUI: 100, USDC: 100}), snapshot("p", {SUI: 1, USDT: 1})]
        with pytest.raises(InvalidPoolError, match="Duplicate"):
            parse_pools(snapshots)

    def test_duplicate_id_lenient_keeps_first(self):
        snapshots = [snapshot("p", {SUI: 100, USDC: 100}), snapshot("p", {SUI: 1, USDT: 1})]
        pools = parse_pools(snapshots, strict=False)
        assert len(pools) == 1
        assert pools[0].has_coin(USDC)


class TestLoadPools:
    """Tests for loading raw snapshot data."""

    def test_load_from_dict(self):
        data = {"pools": [make_pool_snapshot("p", {SUI: 100, USDC: 100})]}
        pools = load_pools(data)
        assert [pool.id for pool in pools] == ["p"]

    def test_short_coin_types_normalized(self):
        """0x2::sui::SUI and the padded form name the same coin."""
        data = {"pools": [make_pool_snapshot("p", {"0x2::sui::SUI": 100, USDC: 100})]}
        pools = load_pools(data)
        assert pools[0].has_coin(SUI)

    def test_schema_violation(self):
        with pytest.raises(ValidationError):
            load_pools({"pools": [{"objectId": "p", "coins": {SUI: {"balance": "-1"}}}]})
