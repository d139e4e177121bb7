"""Fee composer.

Adjusts the nominal amount of a caller-facing operation before it reaches the
fee-free kernel, and splits the charged fee between the pool and the protocol.

Rounding policy:
    - The total fee rounds up (the trader never underpays)
    - The protocol carve-out rounds down (the pool never overpays the protocol)
    - A gross-up of a partially used input rounds up
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from lmsr_pool.errors import InvalidFeeError
from lmsr_pool.kernel.approximation import dispatch_exact_in
from lmsr_pool.kernel.config import DEFAULT_KERNEL_CONFIG, KernelConfig
from lmsr_pool.kernel.liquidity import calc_burn_swap, calc_swap_mint
from lmsr_pool.math.fixed_point import Fp

from .result import BurnSwapOutcome, FeeSplit, SwapMintOutcome, SwapOutcome

logger = structlog.get_logger()


def validate_fee(rate: Fp, label: str = "Swap fee") -> Fp:
    """Check that a fee rate (or protocol share) is in [0, 1).

    Raises:
        InvalidFeeError: If rate is outside [0, 1)
    """
    if rate.value < 0 or rate.value >= Fp.ONE:
        raise InvalidFeeError(f"{label} must be in range [0, 1), got {rate}")
    return rate


def effective_pair_fee(fee_in: Fp, fee_out: Fp) -> Fp:
    """f_eff = 1 - (1 - f_i)(1 - f_j).

    The product of complements rounds down, so f_eff rounds up.
    """
    validate_fee(fee_in)
    validate_fee(fee_out)
    return fee_in.complement().mul_down(fee_out.complement()).complement()


def split_input_fee(gross: Fp, rate: Fp, protocol_share: Fp) -> FeeSplit:
    """Take the fee out of an offered input: fee = ceil(gross * rate)."""
    fee = gross.mul_up(rate)
    if fee > gross:
        fee = gross
    return FeeSplit(
        gross=gross,
        net=gross.sub(fee),
        fee=fee,
        protocol_fee=fee.mul_down(protocol_share),
    )


def gross_up(net: Fp, rate: Fp, protocol_share: Fp, offered: Fp | None = None) -> FeeSplit:
    """Gross amount charged for a net input the engine actually used.

    gross = ceil(net / (1 - rate)), never more than what was offered.
    """
    gross = net.div_up(rate.complement())
    if offered is not None and gross > offered:
        gross = offered
    fee = gross.sub(net)
    return FeeSplit(gross=gross, net=net, fee=fee, protocol_fee=fee.mul_down(protocol_share))


def split_output_fee(gross: Fp, rate: Fp, protocol_share: Fp) -> FeeSplit:
    """Take the fee out of a gross payout: the caller receives gross - ceil(gross * rate)."""
    return split_input_fee(gross, rate, protocol_share)


def _settle_input(offered: FeeSplit, used: Fp, rate: Fp, protocol_share: Fp) -> FeeSplit:
    if used >= offered.net:
        return offered
    return gross_up(used, rate, protocol_share, offered=offered.gross)


class FeeComposer:
    """Fee-inclusive wrappers around the kernel operations that charge fees.

    Proportional mint and burn are fee-free and go to the kernel directly.

    Attributes:
        fees: Per-asset fee rates
        protocol_share: Fraction of every fee paid to the protocol
        kappa: Pool liquidity coefficient
        kernel_config: Policy passed to the dispatcher and the solver
    """

    def __init__(
        self,
        fees: Sequence[Fp],
        protocol_share: Fp,
        kappa: Fp,
        kernel_config: KernelConfig | None = None,
    ):
        for rate in fees:
            validate_fee(rate)
        validate_fee(protocol_share, "Protocol fee share")
        self.fees = tuple(fees)
        self.protocol_share = protocol_share
        self.kappa = kappa
        self.kernel_config = kernel_config or DEFAULT_KERNEL_CONFIG

    def _rate(self, index: int) -> Fp:
        if index < 0 or index >= len(self.fees):
            raise IndexError(f"token_index {index} out of range for {len(self.fees)} tokens")
        return self.fees[index]

    def swap(
        self,
        balances: Sequence[Fp],
        i: int,
        j: int,
        amount_in: Fp,
        *,
        limit: Fp | None = None,
    ) -> SwapOutcome:
        """Exact-in swap i -> j charging the effective pair fee on the input.

        The fee-free engine sees the net amount. When it consumes less (limit
        or capacity cap) the trader is only charged the grossed-up used amount.
        The retained part of the fee stays in q_i.

        Raises:
            ValueError: If amount_in is not positive
        """
        if amount_in.value <= 0:
            raise ValueError(f"amount_in must be positive, got {amount_in}")
        rate = effective_pair_fee(self._rate(i), self._rate(j))
        offered = split_input_fee(amount_in, rate, self.protocol_share)

        amounts = dispatch_exact_in(
            balances, i, j, offered.net, self.kappa, limit=limit, config=self.kernel_config
        )
        split = _settle_input(offered, amounts.amount_in, rate, self.protocol_share)

        new_balances = list(balances)
        new_balances[i] = new_balances[i].add(amounts.amount_in).add(split.retained)
        new_balances[j] = new_balances[j].sub(amounts.amount_out)
        logger.debug(
            "swap_composed",
            token_in=i,
            token_out=j,
            gross_in=split.gross.value,
            net_in=amounts.amount_in.value,
            amount_out=amounts.amount_out.value,
            fee=split.fee.value,
            approximated=amounts.approximated,
        )
        return SwapOutcome(amounts=amounts, fee=split, balances=tuple(new_balances))

    def swap_mint(
        self,
        balances: Sequence[Fp],
        index: int,
        amount_in: Fp,
        supply: Fp,
    ) -> SwapMintOutcome:
        """Single-asset mint charging f_i on the deposit.

        Raises:
            ValueError: If amount_in is not positive
        """
        if amount_in.value <= 0:
            raise ValueError(f"amount_in must be positive, got {amount_in}")
        rate = self._rate(index)
        offered = split_input_fee(amount_in, rate, self.protocol_share)

        mint = calc_swap_mint(
            balances, index, offered.net, self.kappa, supply, config=self.kernel_config
        )
        split = _settle_input(offered, mint.amount_in, rate, self.protocol_share)

        new_balances = list(mint.balances)
        new_balances[index] = new_balances[index].add(split.retained)
        return SwapMintOutcome(mint=mint, fee=split, balances=tuple(new_balances))

    def burn_swap(
        self,
        balances: Sequence[Fp],
        index: int,
        shares: Fp,
        supply: Fp,
    ) -> BurnSwapOutcome:
        """Single-asset redeem charging f_i on the gross payout."""
        rate = self._rate(index)
        redeem = calc_burn_swap(balances, index, shares, self.kappa, supply)
        split = split_output_fee(redeem.amount_out, rate, self.protocol_share)

        new_balances = list(redeem.balances)
        new_balances[index] = new_balances[index].add(split.retained)
        return BurnSwapOutcome(redeem=redeem, fee=split, balances=tuple(new_balances))
