"""Fee-free LMSR kernel: pricing, two-asset swaps, liquidity operations.

Every function here is pure. It takes a balance vector and returns amounts plus
the new balance vector, leaving state ownership to lmsr_pool.pool.
"""

# Dispatcher
from .approximation import approximate_exact_in, dispatch_exact_in

# Policy
from .config import DEFAULT_KERNEL_CONFIG, KernelConfig

# Liquidity operations
from .liquidity import (
    AssetContribution,
    BurnSwap,
    ProportionalBurn,
    ProportionalMint,
    SwapMint,
    calc_burn_swap,
    calc_proportional_burn,
    calc_proportional_mint,
    calc_swap_mint,
)

# Pricing
from .pricing import (
    Liquidity,
    compute_b,
    exp_ratio,
    liquidity,
    log_sum_exp_cost,
    marginal_prices,
    pair_ratio,
    total_size,
    validate_balances,
)

# Scaling helpers
from .scaling import scale_down_down, scale_down_up, scale_up, scaling_factor_for

# Root finding
from .solver import BisectionResult, bracket_and_bisect

# Swap math
from .swap_math import (
    SwapAmounts,
    apply_swap,
    calc_capped_in,
    calc_in_given_out,
    calc_limit_amounts,
    calc_out_given_in,
    swap_exact_in,
    swap_exact_out,
    validate_pair,
)

__all__ = [
    # Dispatcher
    "approximate_exact_in",
    "dispatch_exact_in",
    # Policy
    "DEFAULT_KERNEL_CONFIG",
    "KernelConfig",
    # Liquidity operations
    "AssetContribution",
    "BurnSwap",
    "ProportionalBurn",
    "ProportionalMint",
    "SwapMint",
    "calc_burn_swap",
    "calc_proportional_burn",
    "calc_proportional_mint",
    "calc_swap_mint",
    # Pricing
    "Liquidity",
    "compute_b",
    "exp_ratio",
    "liquidity",
    "log_sum_exp_cost",
    "marginal_prices",
    "pair_ratio",
    "total_size",
    "validate_balances",
    # Scaling helpers
    "scale_down_down",
    "scale_down_up",
    "scale_up",
    "scaling_factor_for",
    # Root finding
    "BisectionResult",
    "bracket_and_bisect",
    # Swap math
    "SwapAmounts",
    "apply_swap",
    "calc_capped_in",
    "calc_in_given_out",
    "calc_limit_amounts",
    "calc_out_given_in",
    "swap_exact_in",
    "swap_exact_out",
    "validate_pair",
]
