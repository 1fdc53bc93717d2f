"""Router configuration.

All tunables of the router live in a single frozen dataclass that is passed
explicitly to the router entry point. Nothing reads module-level state at
quote time, so tests can run the pipeline with extreme values side by side.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import asdict, dataclass
from enum import Enum

from swap_router.constants import (
    MAX_EXTERNAL_FEE_PERCENTAGE,
    MAX_POOL_HOPS_FOR_COMPLETE_ROUTE,
    MAX_ROUTE_LENGTH,
    MAX_TRADE_PERCENTAGE_OF_POOL_BALANCE,
    MIN_ROUTES_TO_CHECK,
    NEWTON_CONVERGENCE_BOUND,
    NEWTON_MAX_ATTEMPTS,
    TRADE_PARTITION_COUNT,
    TRADE_PERCENTAGE_MARGIN_OF_ERROR,
)
from swap_router.errors import InvalidConfigError

ENV_PREFIX = "SWAP_ROUTER_"


class CutPolicy(str, Enum):
    """How the splitter shrinks the live route set after each slice."""

    QUADRATIC = "quadratic"
    LINEAR = "linear"


@dataclass(frozen=True)
class RouterConfig:
    """Configuration for route search, splitting and pricing.

    Attributes:
        max_route_length: Default hop bound for the route finder (default: 3)
        trade_partition_count: Number of equal slices per trade (default: 50)
        min_routes_to_check: Floor the cut shrinks the live set towards (default: 25)
        max_pool_hops_for_complete_route: Hop budget across all routes carrying
            part of the trade (default: 9)
        cut_policy: Live set shrinking policy (default: quadratic)
        max_routes_to_check: Optional cap on the number of routes the finder
            returns. None means unlimited.
        newton_max_attempts: Iteration budget for the invariant solver
        newton_convergence_bound: Relative distance between successive
            iterates that counts as converged
        max_trade_percentage_of_pool_balance: Largest share of a pool balance
            a single hop may move
        trade_percentage_margin_of_error: Safety margin subtracted from the
            share above
        max_external_fee_percentage: Exclusive upper bound for integrator fees
    """

    max_route_length: int = MAX_ROUTE_LENGTH
    trade_partition_count: int = TRADE_PARTITION_COUNT
    min_routes_to_check: int = MIN_ROUTES_TO_CHECK
    max_pool_hops_for_complete_route: int = MAX_POOL_HOPS_FOR_COMPLETE_ROUTE
    cut_policy: CutPolicy = CutPolicy.QUADRATIC
    max_routes_to_check: int | None = None
    newton_max_attempts: int = NEWTON_MAX_ATTEMPTS
    newton_convergence_bound: float = NEWTON_CONVERGENCE_BOUND
    max_trade_percentage_of_pool_balance: float = MAX_TRADE_PERCENTAGE_OF_POOL_BALANCE
    trade_percentage_margin_of_error: float = TRADE_PERCENTAGE_MARGIN_OF_ERROR
    max_external_fee_percentage: float = MAX_EXTERNAL_FEE_PERCENTAGE

    def __post_init__(self) -> None:
        if self.max_route_length < 1:
            raise InvalidConfigError(f"max_route_length must be >= 1, got {self.max_route_length}")
        if self.trade_partition_count < 1:
            raise InvalidConfigError(
                f"trade_partition_count must be >= 1, got {self.trade_partition_count}"
            )
        if self.min_routes_to_check < 1:
            raise InvalidConfigError(
                f"min_routes_to_check must be >= 1, got {self.min_routes_to_check}"
            )
        if self.max_pool_hops_for_complete_route < 1:
            raise InvalidConfigError("max_pool_hops_for_complete_route must be >= 1")
        if self.max_routes_to_check is not None and self.max_routes_to_check < 1:
            raise InvalidConfigError("max_routes_to_check must be >= 1 when set")
        if self.newton_max_attempts < 1:
            raise InvalidConfigError("newton_max_attempts must be >= 1")
        if self.newton_convergence_bound <= 0:
            raise InvalidConfigError("newton_convergence_bound must be positive")
        if not 0 < self.max_trade_ratio <= 1:
            raise InvalidConfigError(
                "max_trade_percentage_of_pool_balance minus its margin must be in (0, 1]"
            )
        if not 0 < self.max_external_fee_percentage <= 1:
            raise InvalidConfigError("max_external_fee_percentage must be in (0, 1]")

    @property
    def max_trade_ratio(self) -> float:
        """Effective per-hop share of a pool balance, margin included."""
        return self.max_trade_percentage_of_pool_balance - self.trade_percentage_margin_of_error

    def to_dict(self) -> dict[str, object]:
        data = asdict(self)
        data["cut_policy"] = self.cut_policy.value
        return data

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> RouterConfig:
        """Build a config from ``SWAP_ROUTER_*`` environment variables.

        Unset variables keep their defaults, e.g.
        ``SWAP_ROUTER_TRADE_PARTITION_COUNT=20`` or
        ``SWAP_ROUTER_CUT_POLICY=linear``.

        Raises:
            InvalidConfigError: If a variable cannot be parsed or is out of range
        """
        env = os.environ if environ is None else environ
        overrides: dict[str, object] = {}

        for name, parse in _ENV_PARSERS.items():
            raw = env.get(ENV_PREFIX + name.upper())
            if raw is None or raw == "":
                continue
            try:
                overrides[name] = parse(raw)
            except ValueError as err:
                raise InvalidConfigError(f"Invalid {ENV_PREFIX}{name.upper()}: {raw!r}") from err

        return cls(**overrides)  # type: ignore[arg-type]


def _parse_optional_int(raw: str) -> int | None:
    if raw.lower() in ("none", "unlimited"):
        return None
    return int(raw)


_ENV_PARSERS: dict[str, Callable[[str], object]] = {
    "max_route_length": int,
    "trade_partition_count": int,
    "min_routes_to_check": int,
    "max_pool_hops_for_complete_route": int,
    "cut_policy": lambda raw: CutPolicy(raw.lower()),
    "max_routes_to_check": _parse_optional_int,
    "newton_max_attempts": int,
    "newton_convergence_bound": float,
    "max_trade_percentage_of_pool_balance": float,
    "trade_percentage_margin_of_error": float,
    "max_external_fee_percentage": float,
}


# Default configuration instance
DEFAULT_ROUTER_CONFIG = RouterConfig()
