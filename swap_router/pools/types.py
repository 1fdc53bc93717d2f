"""Pool state model.

A ``Pool`` is an immutable value. Simulated trades never change a pool in
place: ``after_trade`` and ``before_trade`` return new pools that share the
untouched ``CoinState`` entries with the original.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from swap_router.errors import InvalidPoolError, UnknownCoinError


@dataclass(frozen=True)
class PlainCoin:
    """An ordinary coin."""


@dataclass(frozen=True)
class PoolLpCoin:
    """The liquidity-provider coin minted by ``pool_id``."""

    pool_id: str


CoinKind = PlainCoin | PoolLpCoin

PLAIN_COIN = PlainCoin()


@dataclass(frozen=True)
class CoinState:
    """One coin held by a pool.

    Attributes:
        balance: Raw integer balance (non-negative)
        weight: Weight in (0, 1]
        trade_fee_in: Fee charged when this coin is sold into the pool.
            A value >= 1 disables trading this coin in.
        trade_fee_out: Fee charged when this coin is bought from the pool.
            A value >= 1 disables trading this coin out.
        kind: Plain coin or another pool's LP coin, decided at load time
    """

    balance: int
    weight: float
    trade_fee_in: float = 0.0
    trade_fee_out: float = 0.0
    kind: CoinKind = PLAIN_COIN

    def with_balance(self, balance: int) -> CoinState:
        return replace(self, balance=balance)


@dataclass(frozen=True)
class Pool:
    """A constant-mean liquidity pool.

    Attributes:
        id: Unique pool identifier
        coins: Coin type -> coin state (read-only view)
        flatness: Curve shape in [0, 1]. 0 is weighted-product, 1 is pure-sum.
        lp_coin_type: Coin type of the pool's LP coin, if known
        lp_supply: Total minted LP units
    """

    id: str
    coins: Mapping[str, CoinState]
    flatness: float = 0.0
    lp_coin_type: str | None = None
    lp_supply: int = 0
    _coin_types: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        coins = MappingProxyType(dict(self.coins))
        object.__setattr__(self, "coins", coins)
        object.__setattr__(self, "_coin_types", tuple(coins))

        if len(coins) < 2:
            raise InvalidPoolError(f"Pool {self.id} must hold at least 2 coins, got {len(coins)}")
        if not 0 <= self.flatness <= 1:
            raise InvalidPoolError(f"Pool {self.id} flatness must be in [0, 1]: {self.flatness}")
        if self.lp_supply < 0:
            raise InvalidPoolError(f"Pool {self.id} lp_supply cannot be negative")

        for coin_type, state in coins.items():
            if state.balance < 0:
                raise InvalidPoolError(
                    f"Pool {self.id} balance of {coin_type} cannot be negative: {state.balance}"
                )
            if not 0 < state.weight <= 1:
                raise InvalidPoolError(
                    f"Pool {self.id} weight of {coin_type} must be in (0, 1]: {state.weight}"
                )
            if state.trade_fee_in < 0 or state.trade_fee_out < 0:
                raise InvalidPoolError(f"Pool {self.id} fees of {coin_type} cannot be negative")

    @property
    def coin_types(self) -> tuple[str, ...]:
        """Coin types in snapshot order."""
        return self._coin_types

    def has_coin(self, coin_type: str) -> bool:
        return coin_type in self.coins

    def coin(self, coin_type: str) -> CoinState:
        """Look up a coin's state.

        Raises:
            UnknownCoinError: If the pool does not hold the coin
        """
        try:
            return self.coins[coin_type]
        except KeyError:
            raise UnknownCoinError(f"Pool {self.id} does not hold {coin_type}") from None

    def balance(self, coin_type: str) -> int:
        return self.coin(coin_type).balance

    def weight(self, coin_type: str) -> float:
        return self.coin(coin_type).weight

    def fees(self, coin_in: str, coin_out: str) -> tuple[float, float]:
        """Return ``(fee_in, fee_out)`` for selling coin_in and buying coin_out."""
        return self.coin(coin_in).trade_fee_in, self.coin(coin_out).trade_fee_out

    def is_pair_disabled(self, coin_in: str, coin_out: str) -> bool:
        """Check whether either side's fee disables this trading direction."""
        fee_in, fee_out = self.fees(coin_in, coin_out)
        return fee_in >= 1 or fee_out >= 1

    def copy(self) -> Pool:
        """Independent copy. Coin states are immutable and therefore shared."""
        return replace(self)

    def with_balances(self, balances: Mapping[str, int]) -> Pool:
        """Return a copy with some balances replaced."""
        coins = dict(self.coins)
        for coin_type, balance in balances.items():
            coins[coin_type] = self.coin(coin_type).with_balance(balance)
        return replace(self, coins=coins)

    def after_trade(self, coin_in: str, amount_in: int, coin_out: str, amount_out: int) -> Pool:
        """Pool state after coin_in was sold for coin_out."""
        return self.with_balances(
            {
                coin_in: self.balance(coin_in) + amount_in,
                coin_out: self.balance(coin_out) - amount_out,
            }
        )

    def before_trade(self, coin_in: str, amount_in: int, coin_out: str, amount_out: int) -> Pool:
        """Pool state before the given trade was applied (inverse of ``after_trade``)."""
        return self.after_trade(coin_in, -amount_in, coin_out, -amount_out)


__all__ = ["CoinKind", "CoinState", "PLAIN_COIN", "PlainCoin", "Pool", "PoolLpCoin"]
