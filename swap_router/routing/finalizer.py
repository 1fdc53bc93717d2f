"""Replay a split allocation and assemble the final quote.

The splitter's per-slice state depends on the order routes won slices in.
The finalizer throws that state away and pushes each chosen route's total
allocation through a fresh copy of the original snapshot, committing routes
one after another in result order. Routes sharing a pool see each other's
impact exactly once.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import replace

from swap_router.config import DEFAULT_ROUTER_CONFIG, RouterConfig
from swap_router.errors import InvalidExternalFeeError
from swap_router.pools.types import Pool
from swap_router.routing.simulation import simulate_route_trade
from swap_router.routing.types import (
    CompleteTradeRoute,
    Direction,
    ExternalFee,
    TradeCoin,
    TradeRoute,
)


def finalize_routes(
    pools: Mapping[str, Pool],
    routes: Sequence[TradeRoute],
    direction: Direction,
    config: RouterConfig = DEFAULT_ROUTER_CONFIG,
) -> list[TradeRoute]:
    """Re-price each route's total allocation against the original snapshot.

    Args:
        pools: Original pool snapshot (not modified)
        routes: Routes with non-zero allocations, in result order
        direction: Given-in or given-out
        config: Newton bounds and pool trade bounds

    Returns:
        Routes with final per-hop amounts, fees and spot prices

    Raises:
        RouteNotViableError: If a hop cannot carry the replayed allocation
        NewtonDivergedError: If a hop's solve fails
    """
    current_pools = dict(pools)
    finalized: list[TradeRoute] = []

    for route in routes:
        trade = simulate_route_trade(
            current_pools, route.reset(), route.coin_in.amount, direction, config
        )
        current_pools = trade.pools
        finalized.append(trade.route)

    return finalized


def complete_route_from_routes(
    routes: Sequence[TradeRoute],
    coin_in: str,
    coin_out: str,
    amount: int,
    direction: Direction,
) -> CompleteTradeRoute:
    """Combine finalized routes into one quote.

    Amounts are summed and the spot price is the average of the route spot
    prices weighted by each route's share of the driving amount. For
    given-out quotes the amounts are swapped back and paths restored to
    forward order.
    """
    driving_total = sum(route.coin_in.amount for route in routes)
    result_total = sum(route.coin_out.amount for route in routes)
    spot_price = (
        sum(route.coin_in.amount / driving_total * route.spot_price for route in routes)
        if driving_total > 0
        else 0.0
    )

    complete = CompleteTradeRoute(
        coin_in=TradeCoin(coin_in, amount),
        coin_out=TradeCoin(coin_out, result_total),
        routes=tuple(routes),
        spot_price=spot_price,
    )
    if direction.is_given_out:
        return transform_given_out(complete)
    return complete


def transform_given_out(complete: CompleteTradeRoute) -> CompleteTradeRoute:
    """Swap in/out amounts at every level and restore forward path order."""
    routes = tuple(
        replace(
            route,
            coin_in=replace(route.coin_in, amount=route.coin_out.amount),
            coin_out=replace(route.coin_out, amount=route.coin_in.amount),
            paths=tuple(path.swapped_amounts() for path in reversed(route.paths)),
        )
        for route in complete.routes
    )
    return replace(
        complete,
        coin_in=replace(complete.coin_in, amount=complete.coin_out.amount),
        coin_out=replace(complete.coin_out, amount=complete.coin_in.amount),
        routes=routes,
    )


def empty_complete_route(
    coin_in: str, coin_out: str, amount: int, direction: Direction
) -> CompleteTradeRoute:
    """Quote for "no liquidity route found": no routes, nothing on the unknown side."""
    if direction.is_given_out:
        return CompleteTradeRoute(TradeCoin(coin_in, 0), TradeCoin(coin_out, amount), routes=())
    return CompleteTradeRoute(TradeCoin(coin_in, amount), TradeCoin(coin_out, 0), routes=())


def apply_external_fee(
    complete: CompleteTradeRoute,
    external_fee: ExternalFee,
    max_fee_percentage: float,
) -> CompleteTradeRoute:
    """Carve an integrator fee out of the final output amount.

    Raises:
        InvalidExternalFeeError: If the percentage is outside [0, max_fee_percentage)
    """
    validate_external_fee(external_fee, max_fee_percentage)
    fee_amount = math.ceil(external_fee.fee_percentage * complete.coin_out.amount)
    amount_out = complete.coin_out.amount - fee_amount
    return replace(
        complete,
        coin_out=replace(complete.coin_out, amount=amount_out),
        external_fee=external_fee,
    )


def validate_external_fee(external_fee: ExternalFee, max_fee_percentage: float) -> None:
    if not 0 <= external_fee.fee_percentage < max_fee_percentage:
        raise InvalidExternalFeeError(
            f"External fee {external_fee.fee_percentage} must be in [0, {max_fee_percentage})"
        )


__all__ = [
    "apply_external_fee",
    "complete_route_from_routes",
    "empty_complete_route",
    "finalize_routes",
    "transform_given_out",
    "validate_external_fee",
]
