"""Pydantic models for pool snapshots and quote requests/responses."""

from swap_router.models.pool import CoinSnapshot, PoolSnapshot, PoolsSnapshot
from swap_router.models.quote import (
    BatchQuoteRequest,
    BatchQuoteResponse,
    ExternalFeeModel,
    QuoteRequest,
    QuoteResponse,
    TradeCoinModel,
    TradePathModel,
    TradeRouteModel,
)
from swap_router.models.types import CoinType, FixedPoint18, Uint128, normalize_coin_type

__all__ = [
    # Types
    "CoinType",
    "FixedPoint18",
    "Uint128",
    "normalize_coin_type",
    # Snapshot models
    "CoinSnapshot",
    "PoolSnapshot",
    "PoolsSnapshot",
    # Quote models
    "BatchQuoteRequest",
    "BatchQuoteResponse",
    "ExternalFeeModel",
    "QuoteRequest",
    "QuoteResponse",
    "TradeCoinModel",
    "TradePathModel",
    "TradeRouteModel",
]
