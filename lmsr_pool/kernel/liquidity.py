"""LMSR liquidity operations.

Proportional mint/burn scale the whole balance vector and need no solver.
Single-asset mint finds the growth factor alpha whose cost in the deposited
asset matches the deposit; single-asset redeem burns a fraction of the pool and
swaps the other assets' share into the target asset.

All functions are fee-free and pure: they return the new balance vector
together with the settlement amounts, and never touch the caller's state.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from lmsr_pool.errors import KernelError, SolverDidNotConverge, ZeroLiquidity
from lmsr_pool.math.fixed_point import Fp

from .config import DEFAULT_KERNEL_CONFIG, KernelConfig
from .pricing import liquidity, pair_ratio, total_size, validate_balances
from .solver import bracket_and_bisect
from .swap_math import SwapAmounts, apply_swap, calc_in_given_out, swap_exact_in

logger = structlog.get_logger()


@dataclass(frozen=True)
class ProportionalMint:
    alpha: Fp
    deposits: tuple[Fp, ...]
    shares: Fp
    balances: tuple[Fp, ...]


@dataclass(frozen=True)
class ProportionalBurn:
    alpha: Fp
    amounts_out: tuple[Fp, ...]
    balances: tuple[Fp, ...]


@dataclass(frozen=True)
class SwapMint:
    """Single-asset mint result.

    Attributes:
        alpha: Solved growth factor
        amount_in: a_req(alpha), never more than the offered deposit
        shares: alpha * total supply
        iterations: Solver evaluations
        balances: Balance vector after the deposit
    """

    alpha: Fp
    amount_in: Fp
    shares: Fp
    iterations: int
    balances: tuple[Fp, ...]


@dataclass(frozen=True)
class AssetContribution:
    """Per-asset outcome of a single-asset redeem.

    Either amount is set, or skipped_reason explains why the asset contributed
    nothing.
    """

    index: int
    amount: Fp
    skipped_reason: str | None = None

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None

    @classmethod
    def skip(cls, index: int, reason: str) -> AssetContribution:
        return cls(index=index, amount=Fp(0), skipped_reason=reason)


@dataclass(frozen=True)
class BurnSwap:
    """Single-asset redeem result (before fees).

    Attributes:
        alpha: Burned fraction of the pool
        direct: alpha * q_target, paid without swapping
        contributions: Tagged swap outcome for every other asset
        amount_out: direct + sum of non-skipped contributions
        balances: Balance vector after the payout
    """

    alpha: Fp
    direct: Fp
    contributions: tuple[AssetContribution, ...]
    amount_out: Fp
    balances: tuple[Fp, ...]


def _validate_index(balances: Sequence[Fp], index: int) -> None:
    n = len(balances)
    if n < 2:
        raise ValueError(f"Pool needs at least 2 assets, got {n}")
    if index < 0 or index >= n:
        raise IndexError(f"token_index {index} out of range for {n} tokens")


def calc_proportional_mint(balances: Sequence[Fp], supply: Fp, amount: Fp) -> ProportionalMint:
    """Grow every balance by alpha = amount / S(q).

    Deposits round up and shares round down, both in the pool's favor.

    Raises:
        ZeroLiquidity: If the pool is empty
        ValueError: If amount is not positive
    """
    validate_balances(balances)
    size = total_size(balances)
    if size.value <= 0:
        raise ZeroLiquidity("Cannot mint proportionally into an empty pool")
    if amount.value <= 0:
        raise ValueError(f"Mint amount must be positive, got {amount}")

    alpha = amount.div_down(size)
    deposits = tuple(alpha.mul_up(q) for q in balances)
    shares = alpha.mul_down(supply)
    new_balances = tuple(q.add(d) for q, d in zip(balances, deposits, strict=True))
    return ProportionalMint(alpha=alpha, deposits=deposits, shares=shares, balances=new_balances)


def calc_proportional_burn(balances: Sequence[Fp], supply: Fp, shares: Fp) -> ProportionalBurn:
    """Shrink every balance by alpha = shares / supply.

    Raises:
        ZeroLiquidity: If supply is zero or the burn would empty the pool
        ValueError: If shares is not in (0, supply]
    """
    validate_balances(balances)
    if supply.value <= 0:
        raise ZeroLiquidity("No shares outstanding")
    if shares.value <= 0 or shares > supply:
        raise ValueError(f"Shares to burn must be in (0, {supply}], got {shares}")

    alpha = shares.div_down(supply)
    amounts_out = tuple(alpha.mul_down(q) for q in balances)
    new_balances = tuple(q.sub(out) for q, out in zip(balances, amounts_out, strict=True))
    if total_size(new_balances).value <= 0:
        raise ZeroLiquidity("Burn would leave the pool empty")
    return ProportionalBurn(alpha=alpha, amounts_out=amounts_out, balances=new_balances)


def calc_swap_mint(
    balances: Sequence[Fp],
    index: int,
    amount: Fp,
    kappa: Fp,
    supply: Fp,
    config: KernelConfig = DEFAULT_KERNEL_CONFIG,
) -> SwapMint:
    """Mint shares from a deposit of a single asset.

    Solves a_req(alpha) = alpha * q_i + sum_{j != i} x_j(alpha) = amount, where
    x_j(alpha) is the exact-out input buying alpha * q_j on the current state.
    a_req is strictly increasing, so the root is unique. Only asset i changes:
    the bought amounts are deposited straight back.

    Raises:
        IndexError: If index is out of range
        ValueError: If amount is negative
        ZeroLiquidity: If the pool is empty
        SolverDidNotConverge: If the solver exhausts its iteration caps
    """
    _validate_index(balances, index)
    validate_balances(balances)
    if amount.value < 0:
        raise ValueError(f"Deposit must be non-negative, got {amount}")

    liq = liquidity(balances, kappa)
    size = total_size(balances)
    balance_in = balances[index]
    # r0(i, j) depends only on the pre-trade state; evaluate once per asset
    legs = [
        (balance, pair_ratio(balances, index, j, liq))
        for j, balance in enumerate(balances)
        if j != index
    ]

    def required_input(alpha_raw: int) -> int | None:
        alpha = Fp(alpha_raw)
        total = alpha.mul_up(balance_in)
        for balance, r0 in legs:
            target = alpha.mul_up(balance)
            if target.value > 0 and target >= balance:
                return None
            try:
                total = total.add(calc_in_given_out(r0, liq, target))
            except KernelError:
                return None
        return total.value

    seed = max(amount.div_down(size).value, 1)
    result = bracket_and_bisect(
        required_input,
        amount.value,
        seed,
        tolerance=config.solver_tolerance,
        max_iterations=config.solver_max_iterations,
        max_doublings=config.solver_max_doublings,
        ceiling=config.solver_alpha_ceiling,
    )
    if not result.converged:
        logger.debug(
            "swap_mint_not_converged",
            index=index,
            amount=amount.value,
            alpha=result.root,
            value=result.value,
            iterations=result.iterations,
        )
        raise SolverDidNotConverge(
            f"Single-asset mint did not converge after {result.iterations} evaluations"
        )

    alpha = Fp(result.root)
    amount_in = Fp(result.value)
    new_balances = list(balances)
    new_balances[index] = balance_in.add(amount_in)
    return SwapMint(
        alpha=alpha,
        amount_in=amount_in,
        shares=alpha.mul_down(supply),
        iterations=result.iterations,
        balances=tuple(new_balances),
    )


def _swap_contribution(
    local: list[Fp],
    source: int,
    target: int,
    amount: Fp,
    kappa: Fp,
) -> tuple[AssetContribution, tuple[Fp, ...] | None]:
    """Swap one asset's redeemed share into the target asset.

    Returns the tagged contribution and the updated local balances, or None in
    place of the balances when the swap could not be evaluated.
    """
    if amount.value == 0:
        return AssetContribution(index=source, amount=Fp(0)), None
    try:
        amounts = swap_exact_in(local, source, target, amount, kappa)
        # The full redeemed share enters the pool even if the output was capped
        settled = apply_swap(
            local,
            source,
            target,
            SwapAmounts(amount_in=amount, amount_out=amounts.amount_out, capped=amounts.capped),
        )
    except KernelError as err:
        return AssetContribution.skip(source, f"{type(err).__name__}: {err}"), None
    return AssetContribution(index=source, amount=amounts.amount_out), settled


def calc_burn_swap(
    balances: Sequence[Fp],
    index: int,
    shares: Fp,
    kappa: Fp,
    supply: Fp,
) -> BurnSwap:
    """Redeem shares entirely into one asset.

    The burned fraction alpha of every balance leaves the pool state q_local =
    (1 - alpha) q. The target asset's share is paid directly; each other
    asset's share is swapped into the target against q_local, one asset after
    the other, with the output capped at what q_local holds of the target. An
    asset whose swap fails contributes zero instead of aborting the redemption.

    Raises:
        IndexError: If index is out of range
        ZeroLiquidity: If no shares are outstanding
        ValueError: If shares is not in (0, supply]
    """
    _validate_index(balances, index)
    validate_balances(balances)
    if supply.value <= 0:
        raise ZeroLiquidity("No shares outstanding")
    if shares.value <= 0 or shares > supply:
        raise ValueError(f"Shares to burn must be in (0, {supply}], got {shares}")

    alpha = shares.div_down(supply)
    redeemed = [alpha.mul_down(q) for q in balances]
    local = [q.sub(r) for q, r in zip(balances, redeemed, strict=True)]
    direct = redeemed[index]

    contributions: list[AssetContribution] = []
    for j, amount in enumerate(redeemed):
        if j == index:
            continue
        contribution, settled = _swap_contribution(local, j, index, amount, kappa)
        if settled is not None:
            local = list(settled)
        else:
            # A skipped share stays in the pool
            local[j] = local[j].add(amount)
        if contribution.skipped:
            logger.debug(
                "burn_swap_asset_skipped",
                source=j,
                target=index,
                amount=amount.value,
                reason=contribution.skipped_reason,
            )
        contributions.append(contribution)

    amount_out = Fp(direct.value + sum(c.amount.value for c in contributions))
    return BurnSwap(
        alpha=alpha,
        direct=direct,
        contributions=tuple(contributions),
        amount_out=amount_out,
        balances=tuple(local),
    )
