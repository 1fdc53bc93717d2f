"""Hop-by-hop simulation of adding an amount to a route.

Shared by the splitter (one slice at a time against a running snapshot) and
the finalizer (whole allocations against the original snapshot).

A route remembers what it has already carried. To price an extra slice the
hop's pool is first rolled back by the route's own earlier trade, the hop is
re-priced for the cumulative amount, and only the difference (the marginal
amount) is applied to the running pool state. Pools are never modified in
place; every step produces new ``Pool`` values.

For given-out routes the paths arrive reversed and each hop is priced with
``quote_in_given_out``. The hop's ``coin_in.amount`` then holds the amount
that drives the hop (the desired output) and ``coin_out.amount`` the priced
input, until the finalizer swaps them back.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from swap_router.config import RouterConfig
from swap_router.errors import TradeBoundsError
from swap_router.math.cmmm import (
    check_trade_bounds,
    quote_in_given_out,
    quote_out_given_in,
    spot_price,
)
from swap_router.pools.types import Pool
from swap_router.routing.types import Direction, TradeCoin, TradePath, TradeRoute


@dataclass(frozen=True)
class RouteTrade:
    """Outcome of pushing one amount through a route.

    Attributes:
        route: Route with cumulative per-hop amounts after the trade
        pools: Pool snapshot after the trade
        marginal_amount: What this trade alone produced at the end of the
            route (output for given-in, required input for given-out)
    """

    route: TradeRoute
    pools: dict[str, Pool]
    marginal_amount: int


def simulate_route_trade(
    pools: Mapping[str, Pool],
    route: TradeRoute,
    amount: int,
    direction: Direction,
    config: RouterConfig,
) -> RouteTrade:
    """Add ``amount`` to a route and price every hop.

    Args:
        pools: Current pool snapshot (not modified)
        route: Route carrying its previously allocated amounts
        amount: Additional amount entering the first hop
        direction: Given-in or given-out
        config: Newton bounds and pool trade bounds

    Returns:
        RouteTrade with the updated route, the advanced snapshot and the
        marginal amount at the end of the route

    Raises:
        RouteNotViableError: If any hop cannot carry the cumulative amount
        NewtonDivergedError: If a hop's solve fails
    """
    updated_pools = dict(pools)
    given_out = direction.is_given_out
    current = amount
    spot_product = 1.0
    paths: list[TradePath] = []

    for path in route.paths:
        pool = updated_pools[path.pool_id]
        coin_in = path.coin_in.type
        coin_out = path.coin_out.type
        hop_spot_price = spot_price(pool, coin_in, coin_out)

        # Undo this route's own earlier trade on the hop
        if given_out:
            undo_in, undo_out = path.coin_out.amount, path.coin_in.amount
        else:
            undo_in, undo_out = path.coin_in.amount, path.coin_out.amount
        if pool.balance(coin_in) - undo_in <= 0:
            raise TradeBoundsError(f"Pool {pool.id} cannot roll back {undo_in} {coin_in}")
        before = pool.before_trade(coin_in, undo_in, coin_out, undo_out)

        total_driving = current + path.coin_in.amount
        if given_out:
            quote = quote_in_given_out(before, coin_in, coin_out, total_driving, config)
            total_result = quote.amount_in
            check_trade_bounds(
                before, coin_in, total_result, coin_out, total_driving, config.max_trade_ratio
            )
        else:
            quote = quote_out_given_in(before, coin_in, coin_out, total_driving, config)
            total_result = quote.amount_out
            check_trade_bounds(
                before, coin_in, total_driving, coin_out, total_result, config.max_trade_ratio
            )

        marginal = total_result - path.coin_out.amount
        if given_out:
            updated_pools[path.pool_id] = pool.after_trade(coin_in, marginal, coin_out, current)
        else:
            updated_pools[path.pool_id] = pool.after_trade(coin_in, current, coin_out, marginal)

        paths.append(
            TradePath(
                pool_id=path.pool_id,
                coin_in=TradeCoin(coin_in, total_driving, quote.fee_in),
                coin_out=TradeCoin(coin_out, total_result, quote.fee_out),
                spot_price=hop_spot_price,
            )
        )
        spot_product *= hop_spot_price
        current = marginal

    updated_route = TradeRoute(
        coin_in=TradeCoin(route.coin_in.type, paths[0].coin_in.amount),
        coin_out=TradeCoin(route.coin_out.type, paths[-1].coin_out.amount),
        paths=tuple(paths),
        spot_price=spot_product,
    )
    return RouteTrade(route=updated_route, pools=updated_pools, marginal_amount=current)


__all__ = ["RouteTrade", "simulate_route_trade"]
