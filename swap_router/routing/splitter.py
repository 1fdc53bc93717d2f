"""Split a trade across candidate routes.

The trade is cut into ``trade_partition_count`` equal slices; the remainder
of the integer division rides on the first slice. For every slice each live
route is simulated against the running pool snapshot, the routes are ranked
by what the slice would yield through them, and only the best route's trade
is committed. Losing routes keep their previous state and may win a later
slice.

After each slice the live set is cut down. Unused routes that fall outside
the kept prefix are dropped for good; routes already carrying part of the
trade always stay live.

This is a heuristic: a route that wins after losing earlier slices is priced
against a snapshot it never advanced through. The finalizer replays the
chosen allocation from the original snapshot before the quote is built.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import structlog

from swap_router.config import DEFAULT_ROUTER_CONFIG, CutPolicy, RouterConfig
from swap_router.errors import RouteNotViableError
from swap_router.pools.types import Pool
from swap_router.routing.simulation import RouteTrade, simulate_route_trade
from swap_router.routing.types import Direction, TradeRoute

logger = structlog.get_logger()


@dataclass(frozen=True)
class _Candidate:
    index: int
    trade: RouteTrade


@dataclass(frozen=True)
class SplitResult:
    """Allocation produced by the splitter.

    ``routes`` has one entry per candidate route, in candidate order; unused
    routes carry zero amounts. ``placed`` is False when some slice could not
    be carried by any live route.
    """

    routes: tuple[TradeRoute, ...]
    placed: bool

    @property
    def used_routes(self) -> list[TradeRoute]:
        return [route for route in self.routes if route.is_used]


class RouteSplitter:
    """Incremental trade splitter with route pruning.

    Usage:
        splitter = RouteSplitter(config)
        result = splitter.split(pools, routes, amount, Direction.GIVEN_IN)
    """

    def __init__(self, config: RouterConfig = DEFAULT_ROUTER_CONFIG) -> None:
        self.config = config

    def slice_amounts(self, amount: int) -> list[int]:
        """Slice sizes in evaluation order (remainder on the first slice)."""
        count = self.config.trade_partition_count
        partition, remainder = divmod(amount, count)
        return [partition + remainder if i == 0 else partition for i in range(count)]

    def split(
        self,
        pools: Mapping[str, Pool],
        routes: Sequence[TradeRoute],
        amount: int,
        direction: Direction,
    ) -> SplitResult:
        """Allocate ``amount`` across ``routes``.

        Args:
            pools: Original pool snapshot (not modified)
            routes: Candidate routes, oriented for ``direction``
            amount: Total amount driving the trade
            direction: Given-in or given-out

        Returns:
            SplitResult with per-route cumulative amounts

        Raises:
            NewtonDivergedError: If any simulated hop fails numerically
        """
        current_pools = dict(pools)
        current_routes = list(routes)
        live = list(range(len(current_routes)))
        linear_step = math.floor(
            (len(current_routes) - self.config.min_routes_to_check)
            / self.config.trade_partition_count
        )

        for slice_index, slice_amount in enumerate(self.slice_amounts(amount)):
            if slice_amount == 0:
                continue

            ranked = self._rank(current_pools, current_routes, live, slice_amount, direction)
            if not ranked:
                logger.warning(
                    "slice_not_placeable",
                    slice_index=slice_index,
                    slice_amount=slice_amount,
                    live_routes=len(live),
                )
                return SplitResult(routes=tuple(current_routes), placed=False)

            winner = ranked[0]
            kept = self._cut(ranked, current_routes, linear_step)
            live = sorted(
                {candidate.index for candidate in kept}
                | {i for i in live if current_routes[i].is_used}
                | {winner.index}
            )

            current_routes[winner.index] = winner.trade.route
            current_pools = winner.trade.pools

            logger.debug(
                "slice_committed",
                slice_index=slice_index,
                slice_amount=slice_amount,
                route_index=winner.index,
                pool_ids=winner.trade.route.pool_ids,
                marginal_amount=winner.trade.marginal_amount,
                live_routes=len(live),
            )

        return SplitResult(routes=tuple(current_routes), placed=True)

    def _rank(
        self,
        pools: Mapping[str, Pool],
        routes: list[TradeRoute],
        live: list[int],
        slice_amount: int,
        direction: Direction,
    ) -> list[_Candidate]:
        """Simulate the slice on every eligible live route, best first."""
        committed_hops = sum(route.hop_count for route in routes if route.is_used)
        candidates: list[_Candidate] = []

        for index in live:
            route = routes[index]
            if (
                not route.is_used
                and committed_hops + route.hop_count > self.config.max_pool_hops_for_complete_route
            ):
                continue
            try:
                trade = simulate_route_trade(pools, route, slice_amount, direction, self.config)
            except RouteNotViableError as err:
                logger.debug(
                    "route_skipped", route_index=index, pool_ids=route.pool_ids, reason=str(err)
                )
                continue
            candidates.append(_Candidate(index, trade))

        # Stable sort: ties keep candidate order
        if direction.is_given_out:
            candidates.sort(key=lambda candidate: candidate.trade.marginal_amount)
        else:
            candidates.sort(key=lambda candidate: -candidate.trade.marginal_amount)
        return candidates

    def _cut(
        self,
        ranked: list[_Candidate],
        routes: list[TradeRoute],
        linear_step: int,
    ) -> list[_Candidate]:
        """Shrink the ranked candidate list towards ``min_routes_to_check``."""
        total = len(ranked)
        min_routes = self.config.min_routes_to_check

        if self.config.cut_policy is CutPolicy.LINEAR:
            new_end = total - linear_step
        else:
            first_unused = next(
                (i for i, candidate in enumerate(ranked) if not routes[candidate.index].is_used),
                -1,
            )
            new_end = (max(first_unused, min_routes) + total) // 2

        new_end = max(min(new_end, total), min_routes)
        return ranked[:new_end]


def split_trade(
    pools: Mapping[str, Pool],
    routes: Sequence[TradeRoute],
    amount: int,
    direction: Direction,
    config: RouterConfig = DEFAULT_ROUTER_CONFIG,
) -> SplitResult:
    """Allocate ``amount`` across ``routes`` (see ``RouteSplitter.split``)."""
    return RouteSplitter(config).split(pools, routes, amount, direction)


__all__ = ["RouteSplitter", "SplitResult", "split_trade"]
