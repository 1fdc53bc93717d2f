"""Shared test helpers for swap router tests.

Usage:
    from tests.helpers import SUI, USDC, make_pool
"""

from tests.helpers.constants import AFSUI, LP_SUI_USDC, SUI, USDC, USDT, WETH
from tests.helpers.factories import make_coin, make_pool, make_pool_snapshot, make_quote_request

__all__ = [
    "AFSUI",
    "LP_SUI_USDC",
    "SUI",
    "USDC",
    "USDT",
    "WETH",
    "make_coin",
    "make_pool",
    "make_pool_snapshot",
    "make_quote_request",
]
