"""Bracket-and-bisection root finder for monotone functions.

Used by the single-asset mint to solve a_req(alpha) = deposit. The function is
evaluated on raw 18-decimal integers and may report a point as infeasible by
returning None; because a_req is increasing, an infeasible point is treated as
lying above the root and narrows the bracket from above.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class BisectionResult:
    """Outcome of bracket_and_bisect.

    Attributes:
        root: Largest evaluated point with f(root) <= target (raw fixed-point)
        value: f(root)
        iterations: Function evaluations spent
        converged: False if an iteration cap ran out before the bracket closed
    """

    root: int
    value: int
    iterations: int
    converged: bool


def bracket_and_bisect(
    f: Callable[[int], int | None],
    target: int,
    seed: int,
    *,
    tolerance: int,
    max_iterations: int,
    max_doublings: int,
    ceiling: int,
) -> BisectionResult:
    """Find the largest x in [0, ceiling] with f(x) <= target for increasing f.

    Algorithm:
        1. lo = 0 (f(0) must be <= target)
        2. Double hi from the seed until f(hi) >= target, f(hi) is infeasible or
           hi reaches the ceiling
        3. Bisect [lo, hi] until target - f(lo) <= tolerance or hi - lo <= 1

    Args:
        f: Increasing function, returns None where infeasible
        target: Value to reach
        seed: Initial upper guess (> 0)
        tolerance: Accepted shortfall target - f(root)
        max_iterations: Bisection step cap
        max_doublings: Bracket expansion cap
        ceiling: Largest x ever evaluated

    Returns:
        BisectionResult; converged is False when a cap is exhausted
    """
    iterations = 0
    lo = 0
    f_lo = f(lo)
    iterations += 1
    if f_lo is None or f_lo > target:
        logger.debug("bisect_infeasible_origin", target=target, value_at_zero=f_lo)
        return BisectionResult(root=0, value=0, iterations=iterations, converged=False)
    if target - f_lo <= tolerance:
        return BisectionResult(root=lo, value=f_lo, iterations=iterations, converged=True)

    # Bracket: grow hi until it overshoots or turns infeasible
    hi = min(max(seed, 1), ceiling)
    bracketed = False
    for _ in range(max_doublings):
        value = f(hi)
        iterations += 1
        if value is None or value >= target:
            bracketed = True
            break
        lo, f_lo = hi, value
        if target - f_lo <= tolerance:
            return BisectionResult(root=lo, value=f_lo, iterations=iterations, converged=True)
        if hi >= ceiling:
            # Feasible at the ceiling and still short of the target
            break
        hi = min(hi * 2, ceiling)

    if not bracketed:
        logger.debug("bisect_bracket_failed", target=target, lo=lo, hi=hi, iterations=iterations)
        return BisectionResult(root=lo, value=f_lo, iterations=iterations, converged=False)

    for _ in range(max_iterations):
        if hi - lo <= 1:
            break
        mid = (lo + hi) // 2
        value = f(mid)
        iterations += 1
        if value is None or value > target:
            hi = mid
            continue
        lo, f_lo = mid, value
        if target - f_lo <= tolerance:
            return BisectionResult(root=lo, value=f_lo, iterations=iterations, converged=True)

    converged = hi - lo <= 1
    if not converged:
        logger.debug("bisect_iteration_cap", target=target, lo=lo, hi=hi, iterations=iterations)
    return BisectionResult(root=lo, value=f_lo, iterations=iterations, converged=converged)
