"""Signed 18-decimal fixed-point math with bounded exp/ln.

The transcendental core follows Balancer's LogExpMath.sol: digit extraction
against precomputed powers of e, then a Taylor series for exp and an arctanh
series for ln (with a 36-decimal path for arguments close to 1):
https://github.com/balancer-labs/balancer-v2-monorepo/blob/6c9e24e22d0c46cca6dd15861d3d33da61a60b98/pkg/solidity-utils/contracts/math/LogExpMath.sol

All values are stored as integers scaled by 10^18. Unlike the on-chain library,
Fp is signed: LMSR exponents such as (q_i - q_j) / b are routinely negative.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import ClassVar

from lmsr_pool.errors import DomainError, NonPositiveDomain

__all__ = [
    # Classes
    "Fp",
    # Functions
    "exp",
    "ln",
    "safe_exp",
    "safe_ln",
    "require_positive",
    # Constants
    "ONE_18",
    "ONE_20",
    "ONE_36",
    "MAX_NATURAL_EXPONENT",
    "MIN_NATURAL_EXPONENT",
    "MAX_LN_ARGUMENT",
]

# =============================================================================
# Constants
# =============================================================================

ONE_18 = 10**18
ONE_20 = 10**20
ONE_36 = 10**36

MAX_NATURAL_EXPONENT = 130 * ONE_18  # e^130 is the max we can handle
MIN_NATURAL_EXPONENT = -41 * ONE_18  # e^-41 is below one unit of resolution

LN_36_LOWER_BOUND = ONE_18 - 10**17  # 0.9 in fixed-point
LN_36_UPPER_BOUND = ONE_18 + 10**17  # 1.1 in fixed-point

# ln() input must fit a signed 256-bit word
MAX_LN_ARGUMENT = 1 << 255

# Pre-computed constants for digit extraction
# x values represent exponents (powers of 2), a values are e^x

# 18-decimal precision constants (for large values)
X_18 = {
    0: 128 * ONE_18,  # 2^7
    1: 64 * ONE_18,  # 2^6
}
A_18 = {
    0: 38877084059945950922200000000000000000000000000000000000,  # e^128
    1: 6235149080811616882910000000,  # e^64
}

# 20-decimal precision constants (for medium values)
X_20 = {
    2: 3_200_000_000_000_000_000_000,  # 32 * ONE_20 = 2^5
    3: 1_600_000_000_000_000_000_000,  # 16 * ONE_20 = 2^4
    4: 800_000_000_000_000_000_000,  # 8 * ONE_20 = 2^3
    5: 400_000_000_000_000_000_000,  # 4 * ONE_20 = 2^2
    6: 200_000_000_000_000_000_000,  # 2 * ONE_20 = 2^1
    7: 100_000_000_000_000_000_000,  # 1 * ONE_20 = 2^0
    8: 50_000_000_000_000_000_000,  # 0.5 * ONE_20 = 2^-1
    9: 25_000_000_000_000_000_000,  # 0.25 * ONE_20 = 2^-2
    10: 12_500_000_000_000_000_000,  # 0.125 * ONE_20 = 2^-3
    11: 6_250_000_000_000_000_000,  # 0.0625 * ONE_20 = 2^-4
}
A_20 = {
    2: 7_896_296_018_268_069_516_100_000_000_000_000,  # e^32
    3: 888_611_052_050_787_263_676_000_000,  # e^16
    4: 298_095_798_704_172_827_474_000,  # e^8
    5: 5_459_815_003_314_423_907_810,  # e^4
    6: 738_905_609_893_065_022_723,  # e^2
    7: 271_828_182_845_904_523_536,  # e^1
    8: 164_872_127_070_012_814_685,  # e^0.5
    9: 128_402_541_668_774_148_407,  # e^0.25
    10: 113_314_845_306_682_631_683,  # e^0.125
    11: 106_449_445_891_785_942_956,  # e^0.0625
}


# =============================================================================
# Raw integer kernels
# =============================================================================


def _div_trunc(a: int, b: int) -> int:
    """Integer division with truncation toward zero.

    Python's // rounds toward negative infinity; the series below are written
    for truncating division, which only differs for operands of mixed sign.
    """
    if b == 0:
        raise ZeroDivisionError("Division by zero in _div_trunc")

    if (a >= 0) == (b >= 0):
        return a // b
    return -(abs(a) // abs(b))


def _ln(a: int) -> int:
    """Natural logarithm of a positive 18-decimal value.

    Uses digit extraction and the arctanh series
    ln(a) = 2 * (z + z^3/3 + z^5/5 + ...), z = (a-1)/(a+1).
    """
    if a < ONE_18:
        # ln(a) = -ln(1/a)
        return -_ln((ONE_18 * ONE_18) // a)

    sum_val = 0

    # Extract large powers of e (18-decimal precision)
    for i in range(2):
        if a >= A_18[i] * ONE_18:
            a //= A_18[i]
            sum_val += X_18[i]

    # Scale up to 20-decimal precision
    sum_val *= 100
    a *= 100

    # Extract medium powers of e (20-decimal precision)
    for i in range(2, 12):
        if a >= A_20[i]:
            a = (a * ONE_20) // A_20[i]
            sum_val += X_20[i]

    z = ((a - ONE_20) * ONE_20) // (a + ONE_20)
    z_squared = (z * z) // ONE_20

    num = z
    series_sum = num

    # z + z^3/3 + z^5/5 + z^7/7 + z^9/9 + z^11/11
    for i in range(3, 12, 2):
        num = (num * z_squared) // ONE_20
        series_sum += num // i

    series_sum *= 2

    return (sum_val + series_sum) // 100


def _ln_36(x: int) -> int:
    """Natural logarithm with 36-decimal precision for x close to ONE_18.

    Returns ln(x) as a 36-decimal fixed-point integer.
    """
    x *= ONE_18  # Scale to 36 decimals

    # z is negative when x < 1
    z = _div_trunc((x - ONE_36) * ONE_36, x + ONE_36)
    z_squared = _div_trunc(z * z, ONE_36)

    num = z
    series_sum = num

    # z + z^3/3 + ... + z^15/15
    for i in range(3, 16, 2):
        num = _div_trunc(num * z_squared, ONE_36)
        series_sum += _div_trunc(num, i)

    return series_sum * 2


def exp(x: int) -> int:
    """Compute e^x where x is 18-decimal fixed-point (can be negative).

    Raises:
        DomainError: If x is outside [MIN_NATURAL_EXPONENT, MAX_NATURAL_EXPONENT]
    """
    if not (MIN_NATURAL_EXPONENT <= x <= MAX_NATURAL_EXPONENT):
        raise DomainError(f"Exponent {x} outside valid range")

    if x < 0:
        # e^-x = 1 / e^x
        return (ONE_18 * ONE_18) // exp(-x)

    # Extract large powers of e (18-decimal)
    if x >= X_18[0]:
        x -= X_18[0]
        first_an = A_18[0]
    elif x >= X_18[1]:
        x -= X_18[1]
        first_an = A_18[1]
    else:
        first_an = 1

    # Scale to 20-decimal precision
    x *= 100

    # Extract medium powers of e (20-decimal)
    product = ONE_20
    for i in range(2, 10):
        if x >= X_20[i]:
            x -= X_20[i]
            product = (product * A_20[i]) // ONE_20

    # Taylor series: e^x = 1 + x + x^2/2! + ... + x^12/12!
    series_sum = ONE_20
    term = x
    series_sum += term

    for i in range(2, 13):
        term = ((term * x) // ONE_20) // i
        series_sum += term

    return (((product * series_sum) // ONE_20) * first_an) // 100


def ln(a: int) -> int:
    """Compute ln(a) where a is a positive 18-decimal fixed-point value.

    Arguments in (0.9, 1.1) take the 36-decimal series, which keeps the
    relative error small where the result approaches zero.

    Raises:
        DomainError: If a <= 0 or a >= 2^255
    """
    if a <= 0 or a >= MAX_LN_ARGUMENT:
        raise DomainError(f"Logarithm argument {a} outside valid range")

    if LN_36_LOWER_BOUND < a < LN_36_UPPER_BOUND:
        return _div_trunc(_ln_36(a), ONE_18)
    return _ln(a)


# =============================================================================
# Fp class
# =============================================================================


class Fp:
    """Signed 18-decimal fixed-point number stored as int.

    Example: 1.5 is stored as 1_500_000_000_000_000_000, -0.25 as
    -250_000_000_000_000_000.

    "down" rounding is toward negative infinity and "up" toward positive
    infinity, so the direction is meaningful for negative operands too.
    """

    ONE: ClassVar[int] = ONE_18

    __slots__ = ("value",)
    __hash__ = None  # type: ignore[assignment]  # Unhashable since we define __eq__

    def __init__(self, value: int) -> None:
        """Create Fp from raw scaled value."""
        self.value = value

    @classmethod
    def one(cls) -> Fp:
        return cls(cls.ONE)

    @classmethod
    def zero(cls) -> Fp:
        return cls(0)

    @classmethod
    def from_int(cls, i: int) -> Fp:
        """Create from integer (will be scaled by 10^18)."""
        return cls(i * cls.ONE)

    @classmethod
    def from_decimal(cls, d: Decimal | int | str) -> Fp:
        """Create from decimal (will be scaled by 10^18, ROUND_HALF_UP)."""
        scaled = (Decimal(d) * cls.ONE).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return cls(int(scaled))

    def to_decimal(self) -> Decimal:
        """Convert to Decimal for display."""
        return Decimal(self.value) / Decimal(self.ONE)

    def __float__(self) -> float:
        return self.value / self.ONE

    # --- Arithmetic ---

    def mul_down(self, other: Fp) -> Fp:
        """Multiply with floor rounding."""
        return Fp((self.value * other.value) // self.ONE)

    def mul_up(self, other: Fp) -> Fp:
        """Multiply with ceiling rounding."""
        return Fp(-((-(self.value * other.value)) // self.ONE))

    def div_down(self, other: Fp) -> Fp:
        """Divide with floor rounding."""
        if other.value == 0:
            raise ZeroDivisionError("Fp division by zero")
        return Fp((self.value * self.ONE) // other.value)

    def div_up(self, other: Fp) -> Fp:
        """Divide with ceiling rounding."""
        if other.value == 0:
            raise ZeroDivisionError("Fp division by zero")
        return Fp(-((-(self.value * self.ONE)) // other.value))

    def add(self, other: Fp) -> Fp:
        return Fp(self.value + other.value)

    def sub(self, other: Fp) -> Fp:
        """Subtract other from self. The result may be negative."""
        return Fp(self.value - other.value)

    def neg(self) -> Fp:
        return Fp(-self.value)

    def abs(self) -> Fp:
        return Fp(abs(self.value))

    def complement(self) -> Fp:
        """Return 1 - self. Clamps to 0 if self > 1."""
        return Fp(max(0, self.ONE - self.value))

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fp):
            return NotImplemented
        return self.value == other.value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Fp):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Fp):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Fp):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Fp):
            return NotImplemented
        return self.value >= other.value

    def __repr__(self) -> str:
        return f"Fp({self.value})"

    def __str__(self) -> str:
        return str(self.to_decimal())


# =============================================================================
# Guarded wrappers
# =============================================================================


def safe_exp(x: Fp) -> Fp:
    """e^x with overflow rejected and deep underflow flushed to zero.

    Raises:
        DomainError: If x exceeds MAX_NATURAL_EXPONENT
    """
    if x.value > MAX_NATURAL_EXPONENT:
        raise DomainError(f"exp argument {x} exceeds {MAX_NATURAL_EXPONENT}")
    if x.value < MIN_NATURAL_EXPONENT:
        return Fp(0)
    return Fp(exp(x.value))


def safe_ln(x: Fp) -> Fp:
    """ln(x) for x in (0, 2^255).

    Raises:
        DomainError: If x is outside the representable range
    """
    return Fp(ln(x.value))


def require_positive(term: Fp, label: str) -> Fp:
    """Guard a term that is about to be passed to safe_ln.

    Raises:
        NonPositiveDomain: If term <= 0
    """
    if term.value <= 0:
        raise NonPositiveDomain(f"{label} must be positive, got {term}")
    return term
