"""Conversions between on-chain 18-decimal fixed point and local floats.

Weights, fees and flatness are stored on chain as integers scaled by 10^18.
Balances are plain integers. The pricing engine works in floats and floors
its results back to integers.
"""

from __future__ import annotations

import math

from swap_router.constants import FIXED_ONE

__all__ = [
    "FIXED_ONE",
    "close_enough",
    "from_fixed",
    "to_fixed",
    "to_int",
    "very_close_int",
]


def from_fixed(value: int) -> float:
    """Decode an 18-decimal fixed-point integer (10^18 -> 1.0)."""
    return value / FIXED_ONE


def to_fixed(value: float) -> int:
    """Encode a float as an 18-decimal fixed-point integer (rounded down)."""
    return math.floor(value * FIXED_ONE)


def to_int(value: float) -> int:
    """Floor a float amount back to integer units."""
    return math.floor(value)


def close_enough(a: float, b: float, tolerance: float) -> bool:
    """Relative closeness: ``|a - b| <= tolerance * max(a, b)``."""
    return abs(a - b) <= tolerance * max(a, b)


def very_close_int(a: float, b: float, scale: int = FIXED_ONE) -> bool:
    """Whether a and b agree within one whole unit after dividing by ``scale``."""
    return abs(math.floor(a / scale) - math.floor(b / scale)) <= 1
