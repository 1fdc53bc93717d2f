"""Type definitions for routing module."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class Direction(str, Enum):
    """Which side of the trade the caller fixes.

    Given-out quotes run through the same search/split/replay code as
    given-in quotes: paths are reversed after the search and amounts are
    swapped back once the route is assembled.
    """

    GIVEN_IN = "givenIn"
    GIVEN_OUT = "givenOut"

    @property
    def is_given_out(self) -> bool:
        return self is Direction.GIVEN_OUT


@dataclass(frozen=True)
class TradeCoin:
    """A coin type with an amount and the fee taken from it."""

    type: str
    amount: int = 0
    fee: int = 0


@dataclass(frozen=True)
class TradePath:
    """One hop of a route through a single pool."""

    pool_id: str
    coin_in: TradeCoin
    coin_out: TradeCoin
    spot_price: float = 0.0

    def swapped_amounts(self) -> TradePath:
        """Swap the amounts of coin_in and coin_out, keeping types and fees."""
        return replace(
            self,
            coin_in=replace(self.coin_in, amount=self.coin_out.amount),
            coin_out=replace(self.coin_out, amount=self.coin_in.amount),
        )


@dataclass(frozen=True)
class TradeRoute:
    """An ordered sequence of hops from coin_in to coin_out.

    Aggregate amounts mirror the first hop's input and last hop's output.
    ``spot_price`` is the product of the per-hop spot prices.
    """

    coin_in: TradeCoin
    coin_out: TradeCoin
    paths: tuple[TradePath, ...]
    spot_price: float = 0.0

    @property
    def hop_count(self) -> int:
        return len(self.paths)

    @property
    def pool_ids(self) -> tuple[str, ...]:
        return tuple(path.pool_id for path in self.paths)

    @property
    def coin_path(self) -> tuple[str, ...]:
        """Coin types visited, in path order."""
        if not self.paths:
            return ()
        return (self.paths[0].coin_in.type, *(path.coin_out.type for path in self.paths))

    @property
    def is_used(self) -> bool:
        """Whether any amount has been allocated to this route."""
        return self.coin_in.amount > 0

    def reversed(self) -> TradeRoute:
        """Same route with its path order reversed."""
        return replace(self, paths=tuple(reversed(self.paths)))

    def reset(self) -> TradeRoute:
        """Same hops with every amount, fee and price cleared."""
        return TradeRoute(
            coin_in=TradeCoin(self.coin_in.type),
            coin_out=TradeCoin(self.coin_out.type),
            paths=tuple(
                TradePath(
                    pool_id=path.pool_id,
                    coin_in=TradeCoin(path.coin_in.type),
                    coin_out=TradeCoin(path.coin_out.type),
                )
                for path in self.paths
            ),
        )


@dataclass(frozen=True)
class ExternalFee:
    """Integrator fee carved out of the final output."""

    recipient: str
    fee_percentage: float


@dataclass(frozen=True)
class CompleteTradeRoute:
    """A full quote: the chosen routes and their combined amounts.

    An empty ``routes`` tuple means no liquidity route was found; both
    amounts are then zero on the unknown side.
    """

    coin_in: TradeCoin
    coin_out: TradeCoin
    routes: tuple[TradeRoute, ...]
    spot_price: float = 0.0
    external_fee: ExternalFee | None = None

    @property
    def is_empty(self) -> bool:
        return not self.routes

    @property
    def pool_ids(self) -> set[str]:
        return {pool_id for route in self.routes for pool_id in route.pool_ids}


__all__ = [
    "CompleteTradeRoute",
    "Direction",
    "ExternalFee",
    "TradeCoin",
    "TradePath",
    "TradeRoute",
]
