"""Route discovery, trade splitting and quote assembly.

Module structure:
- router.py: SwapRouter facade and get_complete_trade_route()
- types.py: Direction, TradeCoin, TradePath, TradeRoute, CompleteTradeRoute
- graph.py: CoinGraph built from a pool snapshot
- pathfinding.py: Bounded BFS route discovery
- simulation.py: Hop-by-hop pricing of an amount along a route
- splitter.py: Incremental split of a trade across routes
- finalizer.py: Replay against the original snapshot and quote assembly
"""

from swap_router.routing.graph import CoinGraph, build_graph
from swap_router.routing.pathfinding import find_routes
from swap_router.routing.router import SwapRouter, get_complete_trade_route
from swap_router.routing.splitter import RouteSplitter, SplitResult
from swap_router.routing.types import (
    CompleteTradeRoute,
    Direction,
    ExternalFee,
    TradeCoin,
    TradePath,
    TradeRoute,
)

__all__ = [
    "CoinGraph",
    "CompleteTradeRoute",
    "Direction",
    "ExternalFee",
    "RouteSplitter",
    "SplitResult",
    "SwapRouter",
    "TradeCoin",
    "TradePath",
    "TradeRoute",
    "build_graph",
    "find_routes",
    "get_complete_trade_route",
]
