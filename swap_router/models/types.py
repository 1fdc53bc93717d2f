"""Shared type definitions for the wire models.

Amounts travel as decimal strings (JSON numbers cannot hold u128 safely).
Weights, fees and flatness travel as 18-decimal fixed-point integers.
"""

from typing import Annotated, Any

from pydantic import AfterValidator, BeforeValidator, Field

# Maximum u128 value
UINT128_MAX = 2**128 - 1

# Length of a full Sui address without the 0x prefix
ADDRESS_HEX_LENGTH = 64


def validate_uint128(value: Any) -> str:
    """Validate that a value is a valid u128 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid u128 as decimal string

    Raises:
        ValueError: If value is not a non-negative integer within u128 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint128 must be string or int, got bool")

    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint128 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint128 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint128 cannot be negative: {value}")
    if int_value > UINT128_MAX:
        raise ValueError(f"Uint128 overflow: {value} > 2^128-1")

    return str(int_value)


def normalize_coin_type(coin_type: str) -> str:
    """Normalize a coin type to ``0x<64 hex>::module::NAME``.

    The address part is lowercased and left-padded with zeros, so
    ``0x2::sui::SUI`` and ``0x0000...0002::sui::SUI`` compare equal. Strings
    without ``::`` are treated as bare addresses.

    Raises:
        ValueError: If the address part is not hex or longer than 64 digits
    """
    address, sep, suffix = coin_type.strip().partition("::")
    address = address.lower()
    if address.startswith("0x"):
        address = address[2:]

    if not address or len(address) > ADDRESS_HEX_LENGTH:
        raise ValueError(f"Invalid coin type address length: {coin_type}")
    try:
        int(address, 16)
    except ValueError as err:
        raise ValueError(f"Invalid coin type address: {coin_type}") from err

    return "0x" + address.zfill(ADDRESS_HEX_LENGTH) + sep + suffix


# 128-bit unsigned integer as decimal string (validated)
Uint128 = Annotated[
    str,
    BeforeValidator(validate_uint128),
    Field(description="128-bit unsigned integer as decimal string"),
]

# 18-decimal fixed-point fraction (10^18 == 1.0) as decimal string
FixedPoint18 = Annotated[
    str,
    BeforeValidator(validate_uint128),
    Field(description="18-decimal fixed-point value as decimal string"),
]

# Fully qualified coin type, normalized on input
CoinType = Annotated[
    str,
    Field(min_length=1),
    AfterValidator(normalize_coin_type),
]
