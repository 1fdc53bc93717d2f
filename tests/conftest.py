"""Pytest configuration and fixtures."""

import pytest
import structlog

from swap_router.pools.types import Pool
from tests.helpers import SUI, USDC, USDT, make_pool
from tests.helpers.constants import DEEP_BALANCE


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging configuration done by the code under test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def sui_usdc_pool() -> Pool:
    """Balanced constant-product SUI/USDC pool without fees."""
    return make_pool("pool-sui-usdc", {SUI: DEEP_BALANCE, USDC: DEEP_BALANCE})


@pytest.fixture
def parallel_pools() -> list[Pool]:
    """Two identical SUI/USDC pools."""
    return [
        make_pool("pool-a", {SUI: DEEP_BALANCE, USDC: DEEP_BALANCE}),
        make_pool("pool-b", {SUI: DEEP_BALANCE, USDC: DEEP_BALANCE}),
    ]


@pytest.fixture
def triangle_pools() -> list[Pool]:
    """Direct SUI/USDC pool plus a two-hop path through USDT."""
    return [
        make_pool("direct", {SUI: DEEP_BALANCE, USDC: DEEP_BALANCE}),
        make_pool("sui-usdt", {SUI: DEEP_BALANCE, USDT: DEEP_BALANCE}),
        make_pool("usdt-usdc", {USDT: DEEP_BALANCE, USDC: DEEP_BALANCE}),
    ]
