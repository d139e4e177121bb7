"""Pool parameters."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from lmsr_pool.errors import InvalidFeeError, InvalidPoolConfig, InvalidScalingFactorError
from lmsr_pool.kernel.scaling import scaling_factor_for
from lmsr_pool.math.fixed_point import Fp


@dataclass(frozen=True)
class PoolConfig:
    """Immutable parameters of one LMSR pool, validated at construction.

    Attributes:
        assets: Asset identifiers, in balance-vector order
        kappa: Liquidity coefficient, b = kappa * S(q)
        fees: Per-asset swap fee as decimal (e.g., 0.003 for 0.3%)
        protocol_fee_share: Fraction of each fee paid to the protocol
        protocol_fee_receiver: Recipient of the protocol carve-out
        scaling_factors: 10^(18 - decimals) per asset. For 6-decimal tokens
            like USDC, this is 10^12 to normalize to 18 decimals.
    """

    assets: tuple[str, ...]
    kappa: Decimal
    fees: tuple[Decimal, ...]
    protocol_fee_share: Decimal = Decimal(0)
    protocol_fee_receiver: str | None = None
    scaling_factors: tuple[int, ...] = field(default=())

    def __post_init__(self) -> None:
        n = len(self.assets)
        if n < 2:
            raise InvalidPoolConfig(f"Pool needs at least 2 assets, got {n}")
        if len(set(self.assets)) != n:
            raise InvalidPoolConfig(f"Duplicate assets in {self.assets}")
        if self.kappa <= 0 or Fp.from_decimal(self.kappa).value <= 0:
            raise InvalidPoolConfig(f"kappa must be positive, got {self.kappa}")

        if len(self.fees) != n:
            raise InvalidFeeError(f"Expected {n} fees, got {len(self.fees)}")
        for fee in self.fees:
            if fee < 0 or fee >= 1:
                raise InvalidFeeError(f"Swap fee must be in range [0, 1), got {fee}")
        if self.protocol_fee_share < 0 or self.protocol_fee_share >= 1:
            raise InvalidFeeError(
                f"Protocol fee share must be in range [0, 1), got {self.protocol_fee_share}"
            )
        if self.protocol_fee_share > 0 and not self.protocol_fee_receiver:
            raise InvalidPoolConfig("A protocol fee share requires a protocol_fee_receiver")

        if not self.scaling_factors:
            # frozen dataclass: default every asset to 18 decimals
            object.__setattr__(self, "scaling_factors", (1,) * n)
        if len(self.scaling_factors) != n:
            raise InvalidScalingFactorError(
                f"Expected {n} scaling factors, got {len(self.scaling_factors)}"
            )
        for factor in self.scaling_factors:
            if factor <= 0:
                raise InvalidScalingFactorError(f"Scaling factor must be positive, got {factor}")

    @classmethod
    def create(
        cls,
        assets: Sequence[str],
        kappa: Decimal | str,
        fee: Decimal | str | Sequence[Decimal | str] = Decimal(0),
        *,
        protocol_fee_share: Decimal | str = Decimal(0),
        protocol_fee_receiver: str | None = None,
        decimals: Sequence[int] | None = None,
    ) -> PoolConfig:
        """Build a config, broadcasting a scalar fee to every asset."""
        n = len(assets)
        if isinstance(fee, (Decimal, str, int)):
            fees = (Decimal(fee),) * n
        else:
            fees = tuple(Decimal(f) for f in fee)
        scaling_factors = tuple(scaling_factor_for(d) for d in decimals) if decimals else ()
        return cls(
            assets=tuple(assets),
            kappa=Decimal(kappa),
            fees=fees,
            protocol_fee_share=Decimal(protocol_fee_share),
            protocol_fee_receiver=protocol_fee_receiver,
            scaling_factors=scaling_factors,
        )

    @property
    def n_assets(self) -> int:
        return len(self.assets)

    @property
    def kappa_fp(self) -> Fp:
        return Fp.from_decimal(self.kappa)

    @property
    def fee_rates(self) -> tuple[Fp, ...]:
        return tuple(Fp.from_decimal(fee) for fee in self.fees)

    @property
    def protocol_share_fp(self) -> Fp:
        return Fp.from_decimal(self.protocol_fee_share)

    def index_of(self, asset: str) -> int:
        """Position of an asset in the balance vector.

        Raises:
            IndexError: If the asset is not in the pool
        """
        try:
            return self.assets.index(asset)
        except ValueError:
            raise IndexError(f"Asset {asset} is not in the pool") from None
