"""Shared field types for the quote service models."""

from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

# Largest raw amount the service accepts
UINT256_MAX = 2**256 - 1


def validate_amount(value: Any) -> str:
    """Validate that a value is a non-negative uint256 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid amount as decimal string

    Raises:
        ValueError: If value is not a non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be string or int, got bool")
    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Amount must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Amount must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Amount cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Amount overflow: {value} > 2^256-1")
    return str(int_value)


def validate_fraction(value: Any) -> Decimal:
    """Parse a fee or share given as a decimal string or number.

    Range checks belong to PoolConfig; this only rejects values that are not numbers.
    """
    try:
        parsed = Decimal(str(value))
    except InvalidOperation as err:
        raise ValueError(f"Not a decimal number: '{value}'") from err
    if not parsed.is_finite():
        raise ValueError(f"Not a finite decimal number: '{value}'")
    return parsed


# Raw token amount as decimal string (validated)
Amount = Annotated[
    str,
    BeforeValidator(validate_amount),
    Field(description="Raw token amount as decimal string"),
]

# Fee rate, protocol share, kappa or limit ratio
Fraction = Annotated[
    Decimal,
    BeforeValidator(validate_fraction),
    Field(description="Decimal number, e.g. '0.003'"),
]
