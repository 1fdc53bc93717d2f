"""API endpoints for the quote service."""

from __future__ import annotations

import asyncio
import functools
import os
from collections.abc import Callable, Iterable
from typing import TypeVar

import structlog
from fastapi import APIRouter, Depends, HTTPException

from swap_router.config import RouterConfig
from swap_router.errors import NumericalError, UsageError
from swap_router.models.quote import (
    BatchQuoteRequest,
    BatchQuoteResponse,
    QuoteRequest,
    QuoteResponse,
)
from swap_router.pools.parsing import parse_pools
from swap_router.pools.types import Pool
from swap_router.routing.router import SwapRouter
from swap_router.routing.types import CompleteTradeRoute

logger = structlog.get_logger()

router = APIRouter()

# Seconds a single quote may spend in the executor before the request fails
QUOTE_TIMEOUT = float(os.environ.get("SWAP_ROUTER_QUOTE_TIMEOUT", "10"))

T = TypeVar("T")

RouterFactory = Callable[[Iterable[Pool], RouterConfig], SwapRouter]

COMPUTATION_ERROR = "Computation error"


def get_router_factory() -> RouterFactory:
    """Dependency provider for building routers.

    Override this in tests to inject a failing or slow router:
        app.dependency_overrides[get_router_factory] = lambda: factory
    """
    return SwapRouter


@functools.lru_cache(maxsize=1)
def get_router_config() -> RouterConfig:
    """Router configuration from ``SWAP_ROUTER_*`` environment variables."""
    return RouterConfig.from_env()


async def _run_quote(func: Callable[[], T]) -> T:
    """Run CPU-bound quoting off the event loop, bounded by QUOTE_TIMEOUT."""
    loop = asyncio.get_running_loop()
    return await asyncio.wait_for(loop.run_in_executor(None, func), timeout=QUOTE_TIMEOUT)


def _quote(
    request: QuoteRequest, router_factory: RouterFactory, config: RouterConfig
) -> CompleteTradeRoute:
    swap_router = router_factory(parse_pools(request.pools), config)
    return swap_router.get_complete_route(
        request.coin_in,
        request.coin_out,
        request.amount_int,
        request.mode,
        max_route_length=request.max_route_length,
        external_fee=request.external_fee.to_domain() if request.external_fee else None,
    )


def _batch_quote(
    request: BatchQuoteRequest, router_factory: RouterFactory, config: RouterConfig
) -> list[CompleteTradeRoute]:
    swap_router = router_factory(parse_pools(request.pools), config)
    return swap_router.get_complete_routes_given_amount_ins(
        request.coin_in,
        [int(amount) for amount in request.amounts_in],
        request.coin_out,
        max_route_length=request.max_route_length,
        external_fee=request.external_fee.to_domain() if request.external_fee else None,
    )


async def _guarded(func: Callable[[], T], **context: object) -> T:
    """Run a quote and map router errors onto HTTP errors.

    Error Handling:
        - Usage errors (bad coins, amounts, pools, fees): 400
        - Timeout: 504
        - Numerical failure or unexpected exception: 500, logged with traceback
    """
    try:
        return await _run_quote(func)
    except TimeoutError:
        logger.warning("quote_timeout", timeout_seconds=QUOTE_TIMEOUT, **context)
        raise HTTPException(status_code=504, detail="Quote timed out") from None
    except UsageError as err:
        logger.info("quote_rejected", reason=str(err), **context)
        raise HTTPException(status_code=400, detail=str(err)) from None
    except NumericalError:
        logger.exception("quote_numerical_error", **context)
        raise HTTPException(status_code=500, detail=COMPUTATION_ERROR) from None
    except Exception:
        logger.exception("quote_error", **context)
        raise HTTPException(status_code=500, detail=COMPUTATION_ERROR) from None


@router.post("/quote", response_model_exclude_none=True)
async def quote(
    request: QuoteRequest,
    router_factory: RouterFactory = Depends(get_router_factory),
    config: RouterConfig = Depends(get_router_config),
) -> QuoteResponse:
    """Quote one trade.

    Returns:
        QuoteResponse. ``routes`` is empty when there is no liquidity route,
        which the caller should present as insufficient liquidity.
    """
    context = {
        "coin_in": request.coin_in,
        "coin_out": request.coin_out,
        "amount": request.amount,
        "mode": request.mode.value,
    }
    logger.info("received_quote_request", pool_count=len(request.pools), **context)

    complete = await _guarded(
        functools.partial(_quote, request, router_factory, config), **context
    )
    logger.info(
        "returning_quote",
        route_count=len(complete.routes),
        amount_in=complete.coin_in.amount,
        amount_out=complete.coin_out.amount,
        **context,
    )
    return QuoteResponse.from_domain(complete)


@router.post("/quotes", response_model_exclude_none=True)
async def batch_quote(
    request: BatchQuoteRequest,
    router_factory: RouterFactory = Depends(get_router_factory),
    config: RouterConfig = Depends(get_router_config),
) -> BatchQuoteResponse:
    """Quote several input amounts for one coin pair."""
    context = {
        "coin_in": request.coin_in,
        "coin_out": request.coin_out,
        "amount_count": len(request.amounts_in),
    }
    logger.info("received_batch_quote_request", pool_count=len(request.pools), **context)

    completes = await _guarded(
        functools.partial(_batch_quote, request, router_factory, config), **context
    )
    return BatchQuoteResponse(quotes=[QuoteResponse.from_domain(c) for c in completes])


@router.get("/config")
async def show_config(config: RouterConfig = Depends(get_router_config)) -> dict[str, object]:
    """Active router configuration."""
    return config.to_dict()
