"""Command line quoting against a pool snapshot file.

Usage:
    # Sell 1 SUI (9 decimals) for USDC
    swap-router-quote snapshot.json 0x2::sui::SUI 0x5d4b...::coin::COIN 1000000000

    # Buy exactly 5 USDC, allow up to 2 hops
    swap-router-quote snapshot.json SUI_TYPE USDC_TYPE 5000000 --mode givenOut \\
        --max-route-length 2

The snapshot file holds ``{"pools": [...]}`` in the wire format of
``swap_router.models.PoolsSnapshot``. The quote is printed to stdout as JSON;
logs go to stderr.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import structlog
from pydantic import ValidationError

from swap_router.config import RouterConfig
from swap_router.errors import NumericalError, UsageError
from swap_router.models.quote import QuoteResponse
from swap_router.models.types import normalize_coin_type
from swap_router.pools.parsing import load_pools
from swap_router.routing.router import SwapRouter
from swap_router.routing.types import Direction

logger = structlog.get_logger()


def configure_logging(level_name: str) -> None:
    """Console logging to stderr at the given level."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level_name.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Quote a swap against a pool snapshot")
    parser.add_argument("snapshot", type=Path, help="Pool snapshot JSON file")
    parser.add_argument("coin_in", help="Coin type to sell")
    parser.add_argument("coin_out", help="Coin type to buy")
    parser.add_argument(
        "amount", type=int, help="Raw amount (input for givenIn, output for givenOut)"
    )
    parser.add_argument(
        "--mode",
        choices=[direction.value for direction in Direction],
        default=Direction.GIVEN_IN.value,
        help="Which side the amount fixes (default: givenIn)",
    )
    parser.add_argument(
        "--max-route-length",
        type=int,
        default=None,
        help="Maximum hops per route (default: from configuration)",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Skip malformed pools instead of failing",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="warning",
        help="Log level (default: warning)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    if not args.snapshot.exists():
        logger.error("snapshot_not_found", path=str(args.snapshot))
        return 2

    try:
        with open(args.snapshot) as f:
            data = json.load(f)
        pools = load_pools(data, strict=not args.lenient)
        router = SwapRouter(pools, RouterConfig.from_env())
        complete = router.get_complete_route(
            normalize_coin_type(args.coin_in),
            normalize_coin_type(args.coin_out),
            args.amount,
            Direction(args.mode),
            max_route_length=args.max_route_length,
        )
    except (json.JSONDecodeError, ValidationError, ValueError, UsageError) as err:
        logger.error("invalid_input", reason=str(err))
        return 2
    except NumericalError:
        logger.exception("quote_numerical_error")
        return 3

    print(QuoteResponse.from_domain(complete).model_dump_json(by_alias=True, indent=2))
    return 0 if not complete.is_empty else 4


if __name__ == "__main__":
    sys.exit(main())
