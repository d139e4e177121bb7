"""Policy constants for the LMSR pool kernel.

All thresholds are raw 18-decimal fixed-point integers so they can be compared
directly against Fp.value. KernelConfig (lmsr_pool.kernel.config) uses these
as its defaults.
"""

from lmsr_pool.math.fixed_point import ONE_18

# Balanced-regime approximation preconditions
# |delta| = |q_i - q_j| / b must not exceed this
BALANCED_DELTA_MAX = ONE_18 // 100  # 0.01
# tau = a / b tier boundary between the second-order and cubic surrogates
QUADRATIC_TAU_MAX = ONE_18 // 10  # 0.1
# Largest tau the surrogate accepts at all
CUBIC_TAU_MAX = ONE_18 // 2  # 0.5
# A supplied limit must satisfy |limit / r0 - 1| <= LIMIT_BAND
LIMIT_BAND = ONE_18 // 10  # 0.1

# Single-asset mint solver
# Tolerance on a_req(alpha) vs the deposit, in normalized units (1e-6 tokens)
SOLVER_TOLERANCE = 10**12
SOLVER_MAX_ITERATIONS = 256
SOLVER_MAX_DOUBLINGS = 64
# alpha = 1 would withdraw every other asset completely
SOLVER_ALPHA_CEILING = ONE_18
