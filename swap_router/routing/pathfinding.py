"""Route discovery over the coin graph.

Breadth-first expansion from the input coin. Every partial route is
extended through every edge out of its last coin, except through the pool
used on the hop just before (no immediate back-and-forth in one pool).
Longer cycles are allowed. Routes reaching the output coin are completed
and never extended further.
"""

from __future__ import annotations

import structlog

from swap_router.routing.graph import CoinGraph
from swap_router.routing.types import Direction, TradeCoin, TradePath, TradeRoute

logger = structlog.get_logger()


def _starting_routes(graph: CoinGraph, coin_in: str) -> list[TradeRoute]:
    routes = []
    for other, pool_ids in graph.edges_from(coin_in).items():
        for pool_id in pool_ids:
            routes.append(
                TradeRoute(
                    coin_in=TradeCoin(coin_in),
                    coin_out=TradeCoin(other),
                    paths=(TradePath(pool_id, TradeCoin(coin_in), TradeCoin(other)),),
                )
            )
    return routes


def _extend(route: TradeRoute, pool_id: str, next_coin: str) -> TradeRoute:
    last_coin = route.paths[-1].coin_out.type
    return TradeRoute(
        coin_in=route.coin_in,
        coin_out=TradeCoin(next_coin),
        paths=(*route.paths, TradePath(pool_id, TradeCoin(last_coin), TradeCoin(next_coin))),
    )


def find_routes(
    graph: CoinGraph,
    coin_in: str,
    coin_out: str,
    max_hops: int,
    direction: Direction = Direction.GIVEN_IN,
    max_routes: int | None = None,
) -> list[TradeRoute]:
    """Find every route from coin_in to coin_out within ``max_hops`` hops.

    Shorter routes come first (BFS order); within a hop count the order
    follows the graph's edge order, so results are deterministic.

    For given-out quotes each route's paths are reversed before returning,
    since the splitter evaluates those hops back to front.

    Args:
        graph: Coin graph of the pool snapshot
        coin_in: Coin being sold
        coin_out: Coin being bought
        max_hops: Maximum hops per route
        direction: Given-in or given-out
        max_routes: Stop once this many complete routes were found

    Returns:
        Complete routes. Empty when coin_in has no edges or nothing reaches
        coin_out within the hop bound.
    """
    completed: list[TradeRoute] = []
    frontier = _starting_routes(graph, coin_in)

    while frontier:
        next_frontier: list[TradeRoute] = []

        for route in frontier:
            last_path = route.paths[-1]
            last_coin = last_path.coin_out.type

            if last_coin == coin_out:
                completed.append(route)
                if max_routes is not None and len(completed) >= max_routes:
                    return _oriented(completed, direction)
                continue

            if route.hop_count >= max_hops:
                continue

            for next_coin, pool_ids in graph.edges_from(last_coin).items():
                for pool_id in pool_ids:
                    if pool_id == last_path.pool_id:
                        continue
                    next_frontier.append(_extend(route, pool_id, next_coin))

        frontier = next_frontier

    if not completed:
        logger.debug("no_routes_found", coin_in=coin_in, coin_out=coin_out, max_hops=max_hops)

    return _oriented(completed, direction)


def _oriented(routes: list[TradeRoute], direction: Direction) -> list[TradeRoute]:
    if direction.is_given_out:
        return [route.reversed() for route in routes]
    return routes


__all__ = ["find_routes"]
