"""Numeric defaults for the swap router.

Centralizes the routing and pricing parameters. These are only defaults:
every value is carried by ``RouterConfig`` so callers and tests can override
it per invocation.
"""

# Maximum number of hops in a single route
MAX_ROUTE_LENGTH = 3

# Number of equal slices a trade is split into (plus one remainder slice)
TRADE_PARTITION_COUNT = 50

# Floor the cut step shrinks the live route set towards
MIN_ROUTES_TO_CHECK = 25

# Global hop budget across all routes that carry part of a trade
MAX_POOL_HOPS_FOR_COMPLETE_ROUTE = 9

# Newton-Raphson solver bounds
NEWTON_MAX_ATTEMPTS = 255
NEWTON_CONVERGENCE_BOUND = 1e-9

# A single hop may not move more than 30% of a pool balance
MAX_TRADE_PERCENTAGE_OF_POOL_BALANCE = 0.3
TRADE_PERCENTAGE_MARGIN_OF_ERROR = 0.001

# Integrator fee applied to the final output must stay below 50%
MAX_EXTERNAL_FEE_PERCENTAGE = 0.5

# Swap validity tolerances (relative)
INVARIANT_TOLERANCE = 1e-13
VALIDITY_TOLERANCE = 1e-6

# 18-decimal fixed point scale used on chain for weights, fees and flatness
FIXED_ONE = 10**18
