"""Immutable pool state."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from lmsr_pool.kernel.pricing import Liquidity, liquidity, total_size, validate_balances
from lmsr_pool.math.fixed_point import Fp


@dataclass(frozen=True)
class PoolState:
    """Normalized balances q, replaced wholesale by every operation."""

    balances: tuple[Fp, ...]

    def __post_init__(self) -> None:
        validate_balances(self.balances)

    @classmethod
    def of(cls, balances: Sequence[Fp]) -> PoolState:
        return cls(balances=tuple(balances))

    @property
    def size(self) -> Fp:
        """S(q)."""
        return total_size(self.balances)

    def liquidity(self, kappa: Fp) -> Liquidity:
        return liquidity(self.balances, kappa)
