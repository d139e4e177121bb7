"""Stateful LMSR pool and its collaborator interfaces."""

from lmsr_pool.pool.collaborators import (
    BalanceTransfer,
    InMemoryShareLedger,
    InMemoryTransfer,
    InsufficientBalance,
    ShareLedger,
)
from lmsr_pool.pool.config import PoolConfig
from lmsr_pool.pool.pool import (
    BurnSwapSettlement,
    LmsrPool,
    MintSettlement,
    SwapMintSettlement,
    SwapSettlement,
)
from lmsr_pool.pool.state import PoolState

__all__ = [
    # Pool
    "LmsrPool",
    "PoolConfig",
    "PoolState",
    # Settlements
    "SwapSettlement",
    "MintSettlement",
    "SwapMintSettlement",
    "BurnSwapSettlement",
    # Collaborators
    "BalanceTransfer",
    "ShareLedger",
    "InMemoryTransfer",
    "InMemoryShareLedger",
    "InsufficientBalance",
]
