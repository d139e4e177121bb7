"""Balanced-regime approximation for two-asset exact-in swaps.

When a two-asset pool is nearly balanced (|delta| = |q_i - q_j| / b <= 0.01) and
the trade is small relative to b (0 < tau = a / b <= 0.5), the exact output

    y(a) = b * ln(1 + r0 * (1 - e^(-tau)))

is replaced by a polynomial surrogate built from three truncated series:

    r0       ~ 1 + delta + delta^2/2 + delta^3/6
    u        = 1 - e^(-tau) ~ tau - tau^2/2            (+ tau^3/6 - tau^4/24)
    ln(1+z)  = 2 * atanh(w), w = z / (2 + z) ~ 2w      (+ 2w^3/3)

The bracketed terms form the cubic correction used for 0.1 < tau <= 0.5. Each
truncation is a lower bound of the function it replaces and every piece is
increasing, so the surrogate never pays more than the exact path, grows with
the input, and never drops when crossing from the second-order tier to the
cubic tier. Any failed precondition forwards to the exact swap engine.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from lmsr_pool.math.fixed_point import Fp

from .config import DEFAULT_KERNEL_CONFIG, KernelConfig
from .pricing import Liquidity, liquidity
from .swap_math import SwapAmounts, swap_exact_in, validate_pair

logger = structlog.get_logger()

_TWO = Fp(2 * Fp.ONE)


def _ratio_lower(delta: Fp) -> Fp:
    """Lower bound of e^delta from its cubic Taylor polynomial.

    The Lagrange remainder e^xi * delta^4 / 24 is non-negative for either sign
    of delta.
    """
    d2 = delta.mul_down(delta)
    d3 = d2.mul_down(delta)
    return Fp.one().add(delta).add(Fp(d2.value // 2)).add(Fp(d3.value // 6))


def _ratio_upper(delta: Fp, lower: Fp) -> Fp:
    """Upper bound of e^delta for |delta| <= 0.01: lower + delta^4 / 23."""
    d4 = delta.mul_up(delta).mul_up(delta.mul_up(delta))
    # a few units cover the floor rounding inside _ratio_lower
    return Fp(lower.value - (-d4.value // 23) + 4)


def _decay_complement(tau: Fp, cubic: bool) -> Fp:
    """Lower bound of u = 1 - e^(-tau) (alternating series cut after a negative term)."""
    t2 = tau.mul_up(tau)
    u = tau.sub(Fp(-(-t2.value // 2)))
    if cubic:
        t3 = tau.mul_down(tau).mul_down(tau)
        t4 = t2.mul_up(t2)
        u = u.add(Fp(t3.value // 6)).sub(Fp(-(-t4.value // 24)))
    return u


def _log1p_lower(z: Fp, cubic: bool) -> Fp:
    """Lower bound of ln(1 + z), z >= 0, from the atanh series (all terms positive)."""
    w = z.div_down(_TWO.add(z))
    series = w
    if cubic:
        w3 = w.mul_down(w).mul_down(w)
        series = series.add(Fp(w3.value // 3))
    return Fp(2 * series.value)


def _limit_input(limit: Fp, ratio_hi: Fp, liq: Liquidity, config: KernelConfig) -> Fp | None:
    """Conservative a_lim = b * ln(limit / r0) when the limit is inside the band.

    Returns None when the limit is not clearly above r0 or is outside the band;
    the exact path then computes (or rejects) the limit.
    """
    if limit <= ratio_hi:
        return None
    rho = limit.div_down(ratio_hi).sub(Fp.one())
    if rho.value <= 0 or rho.value > config.limit_band:
        return None
    return liq.times_b(_log1p_lower(rho, cubic=True))


def approximate_exact_in(
    balances: Sequence[Fp],
    i: int,
    j: int,
    amount_in: Fp,
    kappa: Fp,
    *,
    limit: Fp | None = None,
    config: KernelConfig = DEFAULT_KERNEL_CONFIG,
) -> SwapAmounts | None:
    """Evaluate the balanced-regime surrogate, or return None if it does not apply."""
    if len(balances) != 2:
        return _decline("not_two_asset", assets=len(balances))
    validate_pair(balances, i, j)
    if amount_in.value <= 0:
        return _decline("non_positive_amount", amount_in=amount_in.value)

    liq = liquidity(balances, kappa)
    delta = liq.over_b(balances[i].sub(balances[j]))
    if delta.abs().value > config.balanced_delta_max:
        return _decline("imbalanced", delta=delta.value)

    ratio = _ratio_lower(delta)
    ratio_hi = _ratio_upper(delta, ratio)

    used = amount_in
    limited = False
    if limit is not None:
        limit_in = _limit_input(limit, ratio_hi, liq, config)
        if limit_in is None:
            return _decline("limit_outside_band", limit=limit.value)
        if used > limit_in:
            used = limit_in
            limited = True

    # exact y(a) <= b * r0 * tau = r0 * a; past q_j the exact path would cap the output
    if ratio_hi.mul_up(used) > balances[j]:
        return _decline("exceeds_capacity", amount_in=used.value)

    tau = liq.over_b(used)
    if tau.value <= 0 or tau.value > config.cubic_tau_max:
        return _decline("tau_out_of_range", tau=tau.value)

    cubic = tau.value > config.quadratic_tau_max
    z = ratio.mul_down(_decay_complement(tau, cubic))
    if z.value <= 0:
        return _decline("non_positive_surrogate", tau=tau.value)

    return SwapAmounts(
        amount_in=used,
        amount_out=liq.times_b(_log1p_lower(z, cubic)),
        limited=limited,
        approximated=True,
    )


def _decline(reason: str, **context: int) -> None:
    logger.debug("approximation_fallback", reason=reason, **context)
    return None


def dispatch_exact_in(
    balances: Sequence[Fp],
    i: int,
    j: int,
    amount_in: Fp,
    kappa: Fp,
    *,
    limit: Fp | None = None,
    config: KernelConfig = DEFAULT_KERNEL_CONFIG,
) -> SwapAmounts:
    """Exact-in swap through the surrogate when it applies, else the exact engine.

    The surrogate is an optimization only: its preconditions are checked first
    and any failure forwards the unchanged request to swap_exact_in.
    """
    if config.approximation_enabled:
        approximated = approximate_exact_in(
            balances, i, j, amount_in, kappa, limit=limit, config=config
        )
        if approximated is not None:
            return approximated
    return swap_exact_in(balances, i, j, amount_in, kappa, limit=limit)
