"""Fee settlement result types."""

from dataclasses import dataclass

from lmsr_pool.kernel.liquidity import BurnSwap, SwapMint
from lmsr_pool.kernel.swap_math import SwapAmounts
from lmsr_pool.math.fixed_point import Fp


@dataclass(frozen=True)
class FeeSplit:
    """Breakdown of the fee charged on one settlement.

    For inputs, gross is what the caller pays and net what the fee-free engine
    consumed. For outputs, gross is what the engine produced and net what the
    caller receives. In both cases fee = gross - net.

    Attributes:
        gross: Amount before the fee
        net: Amount after the fee
        fee: Total fee (rounded up)
        protocol_fee: Carve-out paid to the protocol receiver (rounded down)

    Examples:
        split = FeeSplit(gross=Fp(1000), net=Fp(997), fee=Fp(3), protocol_fee=Fp(1))
        assert split.retained == Fp(2)
    """

    gross: Fp
    net: Fp
    fee: Fp
    protocol_fee: Fp

    @property
    def retained(self) -> Fp:
        """Part of the fee that stays in the pool."""
        return self.fee.sub(self.protocol_fee)


@dataclass(frozen=True)
class SwapOutcome:
    """Fee-inclusive swap: engine amounts, fee split and the resulting balances."""

    amounts: SwapAmounts
    fee: FeeSplit
    balances: tuple[Fp, ...]

    @property
    def amount_in(self) -> Fp:
        """Gross input charged to the trader."""
        return self.fee.gross

    @property
    def amount_out(self) -> Fp:
        return self.amounts.amount_out


@dataclass(frozen=True)
class SwapMintOutcome:
    mint: SwapMint
    fee: FeeSplit
    balances: tuple[Fp, ...]

    @property
    def amount_in(self) -> Fp:
        return self.fee.gross

    @property
    def shares(self) -> Fp:
        return self.mint.shares


@dataclass(frozen=True)
class BurnSwapOutcome:
    redeem: BurnSwap
    fee: FeeSplit
    balances: tuple[Fp, ...]

    @property
    def amount_out(self) -> Fp:
        """Net payout to the redeemer."""
        return self.fee.net
