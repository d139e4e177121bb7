"""Multi-asset LMSR liquidity pool kernel."""

from lmsr_pool.errors import KernelError
from lmsr_pool.kernel.config import DEFAULT_KERNEL_CONFIG, KernelConfig
from lmsr_pool.math.fixed_point import Fp
from lmsr_pool.pool import InMemoryShareLedger, InMemoryTransfer, LmsrPool, PoolConfig, PoolState

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_KERNEL_CONFIG",
    "Fp",
    "InMemoryShareLedger",
    "InMemoryTransfer",
    "KernelConfig",
    "KernelError",
    "LmsrPool",
    "PoolConfig",
    "PoolState",
]
