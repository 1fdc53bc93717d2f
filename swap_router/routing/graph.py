"""Coin graph for route discovery.

Nodes are coin types; the edge ``a -> b`` holds the ids of every pool in
which ``a`` can be sold for ``b``. The graph is derived from one pool
snapshot and never updated afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import structlog

from swap_router.errors import InvalidPoolError
from swap_router.pools.types import PLAIN_COIN, CoinKind, Pool

logger = structlog.get_logger()


@dataclass
class CoinNode:
    """Outgoing edges of one coin: other coin type -> pool ids (insertion ordered)."""

    coin_type: str
    edges: dict[str, list[str]] = field(default_factory=dict)

    def add_edge(self, other: str, pool_id: str) -> None:
        pool_ids = self.edges.setdefault(other, [])
        if pool_id not in pool_ids:
            pool_ids.append(pool_id)


class CoinGraph:
    """Graph of coins connected by pools.

    Edge pool ids keep snapshot order, so iteration over the graph (and
    therefore route discovery) is deterministic for a given pool list.
    """

    def __init__(self, nodes: dict[str, CoinNode], pools: Mapping[str, Pool]) -> None:
        self.nodes = nodes
        self.pools = MappingProxyType(dict(pools))

    @classmethod
    def from_pools(cls, pools: Iterable[Pool]) -> CoinGraph:
        """Build the graph from a flat pool list.

        For every pool and every ordered pair of distinct coins (a, b) it
        holds, the pool id is recorded under ``nodes[a].edges[b]``.

        Raises:
            InvalidPoolError: On duplicate pool ids
        """
        nodes: dict[str, CoinNode] = {}
        pools_by_id: dict[str, Pool] = {}

        for pool in pools:
            if pool.id in pools_by_id:
                raise InvalidPoolError(f"Duplicate pool id in snapshot: {pool.id}")
            pools_by_id[pool.id] = pool

            for coin_a in pool.coin_types:
                node = nodes.get(coin_a)
                if node is None:
                    node = nodes[coin_a] = CoinNode(coin_a)
                for coin_b in pool.coin_types:
                    if coin_a != coin_b:
                        node.add_edge(coin_b, pool.id)

        logger.info("coin_graph_built", coin_count=len(nodes), pool_count=len(pools_by_id))
        return cls(nodes, pools_by_id)

    def has_coin(self, coin_type: str) -> bool:
        return coin_type in self.nodes

    def edges_from(self, coin_type: str) -> dict[str, list[str]]:
        """Outgoing edges of a coin; empty when the coin is not in the graph."""
        node = self.nodes.get(coin_type)
        return node.edges if node is not None else {}

    def get_neighbors(self, coin_type: str) -> set[str]:
        """Coins directly tradeable with the given coin."""
        return set(self.edges_from(coin_type))

    def pool_ids_between(self, coin_a: str, coin_b: str) -> list[str]:
        return list(self.edges_from(coin_a).get(coin_b, []))

    def coin_kind(self, coin_type: str) -> CoinKind:
        """Kind recorded for the coin in whichever pool holds it first."""
        for pool_ids in self.edges_from(coin_type).values():
            for pool_id in pool_ids:
                return self.pools[pool_id].coin(coin_type).kind
        return PLAIN_COIN

    @property
    def coin_types(self) -> list[str]:
        return list(self.nodes)

    @property
    def coin_count(self) -> int:
        """Number of unique coins in the graph."""
        return len(self.nodes)


def build_graph(pools: Iterable[Pool]) -> CoinGraph:
    """Build a ``CoinGraph`` from a flat pool list (see ``CoinGraph.from_pools``)."""
    return CoinGraph.from_pools(pools)


__all__ = ["CoinGraph", "CoinNode", "build_graph"]
