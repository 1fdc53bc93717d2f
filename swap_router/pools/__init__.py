"""Pool state model.

Snapshot loading from wire models lives in ``swap_router.pools.parsing``.
"""

from .types import PLAIN_COIN, CoinKind, CoinState, PlainCoin, Pool, PoolLpCoin

__all__ = [
    "CoinKind",
    "CoinState",
    "PLAIN_COIN",
    "PlainCoin",
    "Pool",
    "PoolLpCoin",
]
