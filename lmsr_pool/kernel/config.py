"""Kernel policy configuration."""

from dataclasses import dataclass

from lmsr_pool.constants import (
    BALANCED_DELTA_MAX,
    CUBIC_TAU_MAX,
    LIMIT_BAND,
    QUADRATIC_TAU_MAX,
    SOLVER_ALPHA_CEILING,
    SOLVER_MAX_DOUBLINGS,
    SOLVER_MAX_ITERATIONS,
    SOLVER_TOLERANCE,
)


@dataclass(frozen=True)
class KernelConfig:
    """Centralized policy thresholds for the pricing kernel.

    The guard thresholds are raw 18-decimal fixed-point integers. Holding them
    in one frozen record keeps literals out of the arithmetic and makes it easy
    to test with different policies.

    Attributes:
        approximation_enabled: If False, every swap takes the exact path.
        balanced_delta_max: Largest |(q_i - q_j) / b| the surrogate accepts.
        quadratic_tau_max: Upper tau bound of the second-order tier.
        cubic_tau_max: Upper tau bound of the cubic tier.
        limit_band: Largest |limit / r0 - 1| the surrogate handles itself.
        solver_tolerance: Accepted gap between a_req(alpha) and the deposit.
        solver_max_iterations: Bisection step cap.
        solver_max_doublings: Bracket expansion cap.
        solver_alpha_ceiling: Upper bound for the growth factor alpha.
    """

    approximation_enabled: bool = True

    balanced_delta_max: int = BALANCED_DELTA_MAX
    quadratic_tau_max: int = QUADRATIC_TAU_MAX
    cubic_tau_max: int = CUBIC_TAU_MAX
    limit_band: int = LIMIT_BAND

    solver_tolerance: int = SOLVER_TOLERANCE
    solver_max_iterations: int = SOLVER_MAX_ITERATIONS
    solver_max_doublings: int = SOLVER_MAX_DOUBLINGS
    solver_alpha_ceiling: int = SOLVER_ALPHA_CEILING


# Default configuration instance
DEFAULT_KERNEL_CONFIG = KernelConfig()
