"""LMSR pricing kernel.

The cost function is C(q) = b * ln(sum_i exp(q_i / b)) with a state-dependent
liquidity parameter b(q) = kappa * S(q), S(q) = sum_i q_i. Because b scales with
the pool, multiplying every balance by lambda leaves exp((q_i - q_j) / b)
unchanged.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from lmsr_pool.errors import NegativeBalance, ZeroLiquidity
from lmsr_pool.math.fixed_point import ONE_18, ONE_36, Fp, require_positive, safe_exp, safe_ln


@dataclass(frozen=True)
class Liquidity:
    """The liquidity parameter b with its reciprocal precomputed once.

    Attributes:
        b: kappa * S(q)
        inv_b: 1 / b as a 36-decimal fixed-point integer, so x / b keeps full
            18-decimal precision even for very deep pools.
    """

    b: Fp
    inv_b: int

    @classmethod
    def from_b(cls, b: Fp) -> Liquidity:
        if b.value <= 0:
            raise ZeroLiquidity(f"Liquidity parameter must be positive, got {b}")
        return cls(b=b, inv_b=(ONE_36 * ONE_18) // b.value)

    def over_b(self, x: Fp) -> Fp:
        """x / b, rounded down."""
        return Fp((x.value * self.inv_b) // ONE_36)

    def over_b_up(self, x: Fp) -> Fp:
        """x / b, rounded up."""
        return Fp(-((-(x.value * self.inv_b)) // ONE_36))

    def times_b(self, x: Fp) -> Fp:
        """x * b, rounded down."""
        return self.b.mul_down(x)

    def times_b_up(self, x: Fp) -> Fp:
        """x * b, rounded up."""
        return self.b.mul_up(x)


def validate_balances(balances: Sequence[Fp]) -> None:
    """Check the per-asset invariant q_i >= 0.

    Raises:
        NegativeBalance: If any balance is negative
    """
    for index, balance in enumerate(balances):
        if balance.value < 0:
            raise NegativeBalance(f"Balance at index {index} is negative: {balance}")


def total_size(balances: Sequence[Fp]) -> Fp:
    """S(q) = sum of normalized balances."""
    return Fp(sum(q.value for q in balances))


def compute_b(balances: Sequence[Fp], kappa: Fp) -> Fp:
    """b(q) = kappa * S(q).

    Raises:
        ZeroLiquidity: If S(q) is zero (or b rounds to zero)
    """
    size = total_size(balances)
    if size.value <= 0:
        raise ZeroLiquidity("Pool size S(q) is zero")
    b = size.mul_down(kappa)
    if b.value <= 0:
        raise ZeroLiquidity(f"Liquidity parameter rounds to zero for S={size}")
    return b


def liquidity(balances: Sequence[Fp], kappa: Fp) -> Liquidity:
    """Compute b for the current state and cache its reciprocal."""
    return Liquidity.from_b(compute_b(balances, kappa))


def exp_ratio(a: Fp, b: Fp, liq: Liquidity) -> Fp:
    """exp((a - b) / b_param), evaluated as a single exponential."""
    return safe_exp(liq.over_b(a.sub(b)))


def pair_ratio(balances: Sequence[Fp], i: int, j: int, liq: Liquidity) -> Fp:
    """r0(i, j) = exp((q_i - q_j) / b), the instantaneous pairwise ratio."""
    return exp_ratio(balances[i], balances[j], liq)


def log_sum_exp_cost(balances: Sequence[Fp], liq: Liquidity) -> Fp:
    """C(q) = b * (M + ln sum_i exp(q_i / b - M)), M = max_i q_i / b.

    Subtracting M keeps every exponent <= 0. Used for invariant checks, not on
    the swap path.
    """
    scaled = [liq.over_b(q) for q in balances]
    peak = max(scaled)
    total = Fp(sum(safe_exp(x.sub(peak)).value for x in scaled))
    require_positive(total, "sum of exp(q_i / b - M)")
    return liq.times_b(peak.add(safe_ln(total)))


def marginal_prices(balances: Sequence[Fp], liq: Liquidity) -> list[Fp]:
    """Softmax prices p_i = exp(q_i / b) / sum_k exp(q_k / b).

    These are the gradient of the cost function and sum to 1 (up to rounding).
    """
    scaled = [liq.over_b(q) for q in balances]
    peak = max(scaled)
    weights = [safe_exp(x.sub(peak)) for x in scaled]
    total = Fp(sum(w.value for w in weights))
    require_positive(total, "sum of exp(q_i / b - M)")
    return [w.div_down(total) for w in weights]
