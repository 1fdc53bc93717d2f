"""Pool snapshot parsing.

Turns validated wire snapshots into ``Pool`` values: fixed-point weights,
fees and flatness become floats, and every coin is classified once as a
plain coin or as some pool's LP coin.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from swap_router.errors import InvalidPoolError
from swap_router.math.fixed_point import from_fixed
from swap_router.models.pool import PoolSnapshot, PoolsSnapshot
from swap_router.pools.types import PLAIN_COIN, CoinKind, CoinState, Pool, PoolLpCoin

logger = structlog.get_logger()


def lp_coin_owners(snapshots: Iterable[PoolSnapshot]) -> dict[str, str]:
    """Map each known LP coin type to the id of the pool that mints it."""
    return {
        snapshot.lp_coin_type: snapshot.id
        for snapshot in snapshots
        if snapshot.lp_coin_type is not None
    }


def _coin_kind(coin_type: str, lp_owners: Mapping[str, str]) -> CoinKind:
    pool_id = lp_owners.get(coin_type)
    return PoolLpCoin(pool_id) if pool_id is not None else PLAIN_COIN


def parse_pool(snapshot: PoolSnapshot, lp_owners: Mapping[str, str] | None = None) -> Pool:
    """Convert one snapshot entry into a ``Pool``.

    Args:
        snapshot: Validated pool snapshot
        lp_owners: LP coin type -> pool id, used to classify coins

    Raises:
        InvalidPoolError: If the pool violates the pool model
    """
    owners = lp_owners or {}
    coins = {
        coin_type: CoinState(
            balance=int(coin.balance),
            weight=from_fixed(int(coin.weight)),
            trade_fee_in=from_fixed(int(coin.trade_fee_in)),
            trade_fee_out=from_fixed(int(coin.trade_fee_out)),
            kind=_coin_kind(coin_type, owners),
        )
        for coin_type, coin in snapshot.coins.items()
    }
    return Pool(
        id=snapshot.id,
        coins=coins,
        flatness=from_fixed(int(snapshot.flatness)),
        lp_coin_type=snapshot.lp_coin_type,
        lp_supply=int(snapshot.lp_coin_supply),
    )


def parse_pools(snapshots: Iterable[PoolSnapshot], *, strict: bool = True) -> list[Pool]:
    """Convert snapshot entries into pools.

    Args:
        snapshots: Validated pool snapshots
        strict: Raise on the first malformed pool. When False, malformed and
            duplicate pools are skipped with a warning.

    Raises:
        InvalidPoolError: In strict mode, on a malformed or duplicate pool
    """
    snapshot_list = list(snapshots)
    owners = lp_coin_owners(snapshot_list)
    pools: list[Pool] = []
    seen: set[str] = set()

    for snapshot in snapshot_list:
        try:
            if snapshot.id in seen:
                raise InvalidPoolError(f"Duplicate pool id in snapshot: {snapshot.id}")
            pool = parse_pool(snapshot, owners)
        except InvalidPoolError as err:
            if strict:
                raise
            logger.warning("pool_skipped", pool_id=snapshot.id, reason=str(err))
            continue

        seen.add(pool.id)
        pools.append(pool)

    logger.debug("pools_parsed", pool_count=len(pools), skipped=len(snapshot_list) - len(pools))
    return pools


def load_pools(data: PoolsSnapshot | Mapping[str, Any], *, strict: bool = True) -> list[Pool]:
    """Validate raw snapshot data (e.g. a decoded JSON file) and parse it.

    Raises:
        pydantic.ValidationError: If the data does not match the snapshot schema
        InvalidPoolError: In strict mode, on a malformed or duplicate pool
    """
    snapshot = data if isinstance(data, PoolsSnapshot) else PoolsSnapshot.model_validate(data)
    return parse_pools(snapshot.pools, strict=strict)


__all__ = ["load_pools", "lp_coin_owners", "parse_pool", "parse_pools"]
