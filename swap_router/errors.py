"""Swap router error classes.

Three families are distinguished so callers can react differently:

- ``UsageError``: the caller passed something invalid. Not retryable.
- ``RouteNotViableError``: a single hop cannot carry a trade. The splitter
  treats these as "skip this route for this slice"; they only escape the
  router from single-pool quoting.
- ``NumericalError``: the invariant solver failed. Indicates bad math or bad
  pool data and is never swallowed.

No-liquidity outcomes are not errors; they are returned as empty quotes.
"""


class RouterError(Exception):
    """Base error for swap router operations."""

    pass


# Usage errors


class UsageError(RouterError):
    """Caller mistake; retrying the same call cannot succeed."""

    pass


class SameCoinError(UsageError):
    """Input and output coin are the same."""

    pass


class NoLiquidityError(UsageError):
    """The router was given an empty pool list."""

    pass


class InvalidPoolError(UsageError):
    """Pool state violates the pool model (coin count, balances, weights...)."""

    pass


class UnknownCoinError(UsageError):
    """Coin is not held by the pool being quoted."""

    pass


class InvalidAmountError(UsageError):
    """Trade amount must be a positive integer."""

    pass


class InvalidExternalFeeError(UsageError):
    """External fee percentage is outside [0, max_external_fee_percentage)."""

    pass


class InvalidConfigError(UsageError):
    """Router configuration value out of range."""

    pass


# Route-level failures, handled inside the splitter


class RouteNotViableError(RouterError):
    """A hop cannot carry the requested trade amount."""

    pass


class SwapDisabledError(RouteNotViableError):
    """Trade fee >= 1 on one side disables the pair for given-out quotes."""

    pass


class TradeBoundsError(RouteNotViableError):
    """Trade moves too large a share of a pool balance."""

    pass


class ZeroBalanceError(RouteNotViableError):
    """Coin balance must be positive for swaps."""

    pass


# Numerical failures


class NumericalError(RouterError):
    """Invariant math failed on this pool state."""

    pass


class NewtonDivergedError(NumericalError):
    """Newton-Raphson iteration for the unknown balance did not converge."""

    pass
