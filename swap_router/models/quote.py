"""Pydantic models for quote requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from swap_router.models.pool import PoolSnapshot
from swap_router.models.types import CoinType, Uint128
from swap_router.routing.types import (
    CompleteTradeRoute,
    Direction,
    ExternalFee,
    TradeCoin,
    TradePath,
    TradeRoute,
)


class ExternalFeeModel(BaseModel):
    """Integrator fee taken from the final output."""

    recipient: str = Field(min_length=1)
    fee_percentage: float = Field(alias="feePercentage", ge=0, lt=1)

    model_config = {"populate_by_name": True}

    def to_domain(self) -> ExternalFee:
        return ExternalFee(recipient=self.recipient, fee_percentage=self.fee_percentage)


class QuoteRequest(BaseModel):
    """Quote one trade against the given pools."""

    pools: list[PoolSnapshot]
    coin_in: CoinType = Field(alias="coinIn")
    coin_out: CoinType = Field(alias="coinOut")
    amount: Uint128
    mode: Direction = Direction.GIVEN_IN
    max_route_length: int | None = Field(default=None, alias="maxRouteLength", ge=1)
    external_fee: ExternalFeeModel | None = Field(default=None, alias="externalFee")

    model_config = {"populate_by_name": True}

    @property
    def amount_int(self) -> int:
        return int(self.amount)


class BatchQuoteRequest(BaseModel):
    """Quote several input amounts for the same pair."""

    pools: list[PoolSnapshot]
    coin_in: CoinType = Field(alias="coinIn")
    coin_out: CoinType = Field(alias="coinOut")
    amounts_in: list[Uint128] = Field(alias="amountsIn", min_length=1)
    max_route_length: int | None = Field(default=None, alias="maxRouteLength", ge=1)
    external_fee: ExternalFeeModel | None = Field(default=None, alias="externalFee")

    model_config = {"populate_by_name": True}


class TradeCoinModel(BaseModel):
    type: str
    amount: Uint128
    fee: Uint128 = "0"

    @classmethod
    def from_domain(cls, coin: TradeCoin) -> TradeCoinModel:
        return cls(type=coin.type, amount=coin.amount, fee=coin.fee)


class TradePathModel(BaseModel):
    """One hop: what the transaction builder turns into a swap call."""

    pool_id: str = Field(alias="poolId")
    coin_in: TradeCoinModel = Field(alias="coinIn")
    coin_out: TradeCoinModel = Field(alias="coinOut")
    spot_price: float = Field(alias="spotPrice")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_domain(cls, path: TradePath) -> TradePathModel:
        return cls(
            pool_id=path.pool_id,
            coin_in=TradeCoinModel.from_domain(path.coin_in),
            coin_out=TradeCoinModel.from_domain(path.coin_out),
            spot_price=path.spot_price,
        )


class TradeRouteModel(BaseModel):
    coin_in: TradeCoinModel = Field(alias="coinIn")
    coin_out: TradeCoinModel = Field(alias="coinOut")
    spot_price: float = Field(alias="spotPrice")
    paths: list[TradePathModel]

    model_config = {"populate_by_name": True}

    @classmethod
    def from_domain(cls, route: TradeRoute) -> TradeRouteModel:
        return cls(
            coin_in=TradeCoinModel.from_domain(route.coin_in),
            coin_out=TradeCoinModel.from_domain(route.coin_out),
            spot_price=route.spot_price,
            paths=[TradePathModel.from_domain(path) for path in route.paths],
        )


class QuoteResponse(BaseModel):
    """A complete trade route.

    ``routes`` is empty when no liquidity route exists for the trade.
    """

    coin_in: TradeCoinModel = Field(alias="coinIn")
    coin_out: TradeCoinModel = Field(alias="coinOut")
    spot_price: float = Field(alias="spotPrice")
    routes: list[TradeRouteModel] = Field(default_factory=list)
    external_fee: ExternalFeeModel | None = Field(default=None, alias="externalFee")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_domain(cls, complete: CompleteTradeRoute) -> QuoteResponse:
        external_fee = None
        if complete.external_fee is not None:
            external_fee = ExternalFeeModel(
                recipient=complete.external_fee.recipient,
                fee_percentage=complete.external_fee.fee_percentage,
            )
        return cls(
            coin_in=TradeCoinModel.from_domain(complete.coin_in),
            coin_out=TradeCoinModel.from_domain(complete.coin_out),
            spot_price=complete.spot_price,
            routes=[TradeRouteModel.from_domain(route) for route in complete.routes],
            external_fee=external_fee,
        )


class BatchQuoteResponse(BaseModel):
    """One quote per requested amount (empty when nothing could be routed)."""

    quotes: list[QuoteResponse] = Field(default_factory=list)
