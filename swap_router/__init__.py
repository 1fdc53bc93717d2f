"""Multi-pool swap router and constant-mean market maker pricing."""

from swap_router.config import DEFAULT_ROUTER_CONFIG, CutPolicy, RouterConfig
from swap_router.pools import CoinState, Pool
from swap_router.routing import (
    CompleteTradeRoute,
    Direction,
    ExternalFee,
    SwapRouter,
    get_complete_trade_route,
)

__version__ = "0.1.0"
__all__ = [
    "CoinState",
    "CompleteTradeRoute",
    "CutPolicy",
    "DEFAULT_ROUTER_CONFIG",
    "Direction",
    "ExternalFee",
    "Pool",
    "RouterConfig",
    "SwapRouter",
    "get_complete_trade_route",
    "__version__",
]
