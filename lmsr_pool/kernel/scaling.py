"""Scaling between native token decimals and the normalized 18-decimal basis.

Inputs the pool receives are scaled up exactly. Amounts the pool pays out are
scaled down rounding down; amounts the pool requires from the caller are
scaled down rounding up.
"""

from lmsr_pool.errors import InvalidScalingFactorError
from lmsr_pool.math.fixed_point import Fp


def scaling_factor_for(decimals: int) -> int:
    """Scaling factor 10^(18 - decimals) for a token with the given decimals.

    Raises:
        InvalidScalingFactorError: If decimals is negative or above 18
    """
    if decimals < 0 or decimals > 18:
        raise InvalidScalingFactorError(f"Token decimals must be in [0, 18], got {decimals}")
    return 10 ** (18 - decimals)


def scale_up(amount: int, scaling_factor: int) -> Fp:
    """Scale token amount to 18 decimals for internal math.

    Args:
        amount: Amount in token's native decimals
        scaling_factor: Factor to scale by (e.g., 10^12 for 6-decimal tokens)

    Raises:
        InvalidScalingFactorError: If scaling_factor <= 0
    """
    if scaling_factor <= 0:
        raise InvalidScalingFactorError(f"Scaling factor must be positive, got {scaling_factor}")
    return Fp(amount * scaling_factor)


def scale_down_down(fp: Fp, scaling_factor: int) -> int:
    """Scale a normalized amount back to token decimals, rounding down.

    Raises:
        InvalidScalingFactorError: If scaling_factor <= 0
    """
    if scaling_factor <= 0:
        raise InvalidScalingFactorError(f"Scaling factor must be positive, got {scaling_factor}")
    return fp.value // scaling_factor


def scale_down_up(fp: Fp, scaling_factor: int) -> int:
    """Scale a normalized amount back to token decimals, rounding up.

    Raises:
        InvalidScalingFactorError: If scaling_factor <= 0
    """
    if scaling_factor <= 0:
        raise InvalidScalingFactorError(f"Scaling factor must be positive, got {scaling_factor}")
    if fp.value <= 0:
        return 0
    return (fp.value - 1) // scaling_factor + 1
