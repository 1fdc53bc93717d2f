"""Pydantic models for pool snapshots.

A snapshot is what the pool-state fetch service hands over: for every pool
its coins with raw balances and 18-decimal fixed-point weights and fees, the
flatness, and the LP coin type and supply.
"""

from pydantic import BaseModel, Field

from swap_router.models.types import CoinType, FixedPoint18, Uint128


class CoinSnapshot(BaseModel):
    """One coin of a pool as stored on chain."""

    balance: Uint128
    weight: FixedPoint18
    trade_fee_in: FixedPoint18 = Field(default="0", alias="tradeFeeIn")
    trade_fee_out: FixedPoint18 = Field(default="0", alias="tradeFeeOut")

    model_config = {"populate_by_name": True}


class PoolSnapshot(BaseModel):
    """One pool as stored on chain."""

    id: str = Field(min_length=1, alias="objectId")
    name: str | None = None
    coins: dict[CoinType, CoinSnapshot]
    flatness: FixedPoint18 = "0"
    lp_coin_type: CoinType | None = Field(default=None, alias="lpCoinType")
    lp_coin_supply: Uint128 = Field(default="0", alias="lpCoinSupply")

    model_config = {"populate_by_name": True}


class PoolsSnapshot(BaseModel):
    """A full snapshot file: every pool the router may use."""

    pools: list[PoolSnapshot] = Field(default_factory=list)

    @property
    def pool_count(self) -> int:
        return len(self.pools)
