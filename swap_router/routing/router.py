"""Swap routing entry points.

Pipeline for one quote:

    pools -> CoinGraph -> find_routes -> RouteSplitter -> finalize_routes
          -> CompleteTradeRoute

A ``SwapRouter`` is bound to one immutable pool snapshot. It builds the coin
graph once and caches route searches, so quoting several amounts against
the same snapshot only repeats the splitting and replay.

No-liquidity outcomes (no route, or a trade the routes cannot carry) are
returned as empty quotes. Usage errors and numerical failures propagate.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import structlog

from swap_router.config import DEFAULT_ROUTER_CONFIG, RouterConfig
from swap_router.errors import (
    InvalidAmountError,
    InvalidConfigError,
    NoLiquidityError,
    RouteNotViableError,
    SameCoinError,
)
from swap_router.pools.types import CoinKind, Pool
from swap_router.routing.finalizer import (
    apply_external_fee,
    complete_route_from_routes,
    empty_complete_route,
    finalize_routes,
    validate_external_fee,
)
from swap_router.routing.graph import CoinGraph
from swap_router.routing.pathfinding import find_routes
from swap_router.routing.splitter import RouteSplitter
from swap_router.routing.types import CompleteTradeRoute, Direction, ExternalFee, TradeRoute

logger = structlog.get_logger()


class SwapRouter:
    """Quotes trades across a fixed pool snapshot.

    Args:
        pools: Pool snapshot. Must not be empty.
        config: Router configuration (defaults to DEFAULT_ROUTER_CONFIG)

    Raises:
        NoLiquidityError: If no pools are given
        InvalidPoolError: On duplicate pool ids

    Usage:
        router = SwapRouter(pools)
        quote = router.get_complete_route_given_amount_in(SUI, 10**9, USDC)
    """

    def __init__(self, pools: Iterable[Pool], config: RouterConfig = DEFAULT_ROUTER_CONFIG) -> None:
        pool_list = list(pools)
        if not pool_list:
            raise NoLiquidityError("Cannot route without pools")

        self.config = config
        self.graph = CoinGraph.from_pools(pool_list)
        self.splitter = RouteSplitter(config)
        # (coin_in, coin_out, max_route_length, direction) -> routes
        self._route_cache: dict[tuple[str, str, int, Direction], list[TradeRoute]] = {}

    @property
    def pools(self) -> dict[str, Pool]:
        return dict(self.graph.pools)

    def supported_coins(self) -> list[str]:
        """Coin types reachable through at least one pool."""
        return self.graph.coin_types

    def coin_kind(self, coin_type: str) -> CoinKind:
        return self.graph.coin_kind(coin_type)

    def find_routes(
        self,
        coin_in: str,
        coin_out: str,
        max_route_length: int | None = None,
        direction: Direction = Direction.GIVEN_IN,
    ) -> list[TradeRoute]:
        """Candidate routes for a coin pair (cached per snapshot).

        Raises:
            SameCoinError: If coin_in == coin_out
        """
        if coin_in == coin_out:
            raise SameCoinError(f"Cannot route {coin_in} to itself")
        max_hops = self._max_hops(max_route_length)

        cache_key = (coin_in, coin_out, max_hops, direction)
        routes = self._route_cache.get(cache_key)
        if routes is None:
            routes = find_routes(
                self.graph,
                coin_in,
                coin_out,
                max_hops,
                direction,
                max_routes=self.config.max_routes_to_check,
            )
            self._route_cache[cache_key] = routes
        return routes

    def get_complete_route(
        self,
        coin_in: str,
        coin_out: str,
        amount: int,
        direction: Direction = Direction.GIVEN_IN,
        *,
        max_route_length: int | None = None,
        external_fee: ExternalFee | None = None,
    ) -> CompleteTradeRoute:
        """Quote a trade.

        Args:
            coin_in: Coin being sold
            coin_out: Coin being bought
            amount: Amount of coin_in (given-in) or coin_out (given-out)
            direction: Which side ``amount`` fixes
            max_route_length: Hop bound override for this quote
            external_fee: Optional integrator fee taken from the output

        Returns:
            CompleteTradeRoute. Empty (no routes) when there is no liquidity
            route for the trade.

        Raises:
            SameCoinError: If coin_in == coin_out
            InvalidAmountError: If amount is not a positive integer
            InvalidExternalFeeError: If the fee percentage is out of range
            NewtonDivergedError: If pricing fails numerically
        """
        if coin_in == coin_out:
            raise SameCoinError(f"Cannot route {coin_in} to itself")
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmountError(f"Trade amount must be a positive integer: {amount!r}")
        if external_fee is not None:
            validate_external_fee(external_fee, self.config.max_external_fee_percentage)

        log = logger.bind(coin_in=coin_in, coin_out=coin_out, amount=amount, mode=direction.value)

        routes = self.find_routes(coin_in, coin_out, max_route_length, direction)
        if not routes:
            log.warning("no_route_found")
            return empty_complete_route(coin_in, coin_out, amount, direction)

        log.debug("routes_found", route_count=len(routes))

        split = self.splitter.split(self.graph.pools, routes, amount, direction)
        if not split.placed:
            log.warning("insufficient_liquidity", route_count=len(routes))
            return empty_complete_route(coin_in, coin_out, amount, direction)

        try:
            final_routes = finalize_routes(
                self.graph.pools, split.used_routes, direction, self.config
            )
        except RouteNotViableError as err:
            log.warning("final_replay_not_viable", reason=str(err))
            return empty_complete_route(coin_in, coin_out, amount, direction)

        complete = complete_route_from_routes(final_routes, coin_in, coin_out, amount, direction)
        if external_fee is not None:
            complete = apply_external_fee(
                complete, external_fee, self.config.max_external_fee_percentage
            )

        log.info(
            "quote_complete",
            route_count=len(complete.routes),
            amount_in=complete.coin_in.amount,
            amount_out=complete.coin_out.amount,
            spot_price=complete.spot_price,
        )
        return complete

    def get_complete_route_given_amount_in(
        self,
        coin_in: str,
        coin_in_amount: int,
        coin_out: str,
        *,
        max_route_length: int | None = None,
        external_fee: ExternalFee | None = None,
    ) -> CompleteTradeRoute:
        """Quote selling exactly ``coin_in_amount`` of coin_in."""
        return self.get_complete_route(
            coin_in,
            coin_out,
            coin_in_amount,
            Direction.GIVEN_IN,
            max_route_length=max_route_length,
            external_fee=external_fee,
        )

    def get_complete_route_given_amount_out(
        self,
        coin_in: str,
        coin_out: str,
        coin_out_amount: int,
        *,
        max_route_length: int | None = None,
        external_fee: ExternalFee | None = None,
    ) -> CompleteTradeRoute:
        """Quote buying exactly ``coin_out_amount`` of coin_out."""
        return self.get_complete_route(
            coin_in,
            coin_out,
            coin_out_amount,
            Direction.GIVEN_OUT,
            max_route_length=max_route_length,
            external_fee=external_fee,
        )

    def get_complete_routes_given_amount_ins(
        self,
        coin_in: str,
        coin_in_amounts: Sequence[int],
        coin_out: str,
        *,
        max_route_length: int | None = None,
        external_fee: ExternalFee | None = None,
    ) -> list[CompleteTradeRoute]:
        """Quote several input amounts independently against the same snapshot.

        Amounts without a liquidity route get an empty quote in their slot.
        When no amount can be routed at all the result is an empty list.
        """
        quotes = [
            self.get_complete_route_given_amount_in(
                coin_in,
                amount,
                coin_out,
                max_route_length=max_route_length,
                external_fee=external_fee,
            )
            for amount in coin_in_amounts
        ]
        if all(quote.is_empty for quote in quotes):
            return []
        return quotes

    def _max_hops(self, max_route_length: int | None) -> int:
        if max_route_length is None:
            return self.config.max_route_length
        if max_route_length < 1:
            raise InvalidConfigError(f"max_route_length must be >= 1, got {max_route_length}")
        return max_route_length


def get_complete_trade_route(
    pools: Iterable[Pool],
    coin_in: str,
    coin_out: str,
    amount: int,
    direction: Direction = Direction.GIVEN_IN,
    *,
    max_route_length: int | None = None,
    external_fee: ExternalFee | None = None,
    config: RouterConfig = DEFAULT_ROUTER_CONFIG,
) -> CompleteTradeRoute:
    """Quote one trade against a pool list (builds a fresh ``SwapRouter``).

    Raises:
        NoLiquidityError: If the pool list is empty
        SameCoinError: If coin_in == coin_out
        InvalidAmountError: If amount is not a positive integer
        NewtonDivergedError: If pricing fails numerically
    """
    router = SwapRouter(pools, config)
    return router.get_complete_route(
        coin_in,
        coin_out,
        amount,
        direction,
        max_route_length=max_route_length,
        external_fee=external_fee,
    )


__all__ = ["SwapRouter", "get_complete_trade_route"]
