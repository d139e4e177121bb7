"""Two-asset LMSR swap math.

Closed forms for a swap i -> j with b held at its pre-trade value and
r0 = exp((q_i - q_j) / b):

    exact-in:       y(a) = b * ln(1 + r0 * (1 - e^(-a/b)))
    exact-out:      a(y) = b * ln(r0 / (r0 + 1 - e^(y/b)))
    swap-to-limit:  a_lim = b * ln(limit / r0)
                    y_lim = b * ln(1 + r0 * (1 - r0 / limit))

y(a) is strictly increasing and concave with asymptote b * ln(1 + r0); a(y) is
its inverse. Fees are applied by the caller before these functions run.
Outputs round down and required inputs round up.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from lmsr_pool.errors import DomainError, InfeasibleOutput, LimitNotAboveCurrent, NegativeBalance
from lmsr_pool.math.fixed_point import Fp, require_positive, safe_exp, safe_ln

from .pricing import Liquidity, liquidity, pair_ratio, validate_balances


@dataclass(frozen=True)
class SwapAmounts:
    """Fee-free amounts of one swap step.

    Attributes:
        amount_in: Input actually consumed
        amount_out: Output delivered
        limited: Input was truncated at the limit ratio
        capped: Output was capped at the available balance and inverted
        approximated: Output came from the balanced-regime surrogate
    """

    amount_in: Fp
    amount_out: Fp
    limited: bool = False
    capped: bool = False
    approximated: bool = False


def calc_out_given_in(r0: Fp, liq: Liquidity, amount_in: Fp) -> Fp:
    """Exact-in output y(a).

    Raises:
        ValueError: If amount_in is negative
        NonPositiveDomain: If the log argument is not positive
    """
    if amount_in.value < 0:
        raise ValueError(f"amount_in must be non-negative, got {amount_in}")
    if amount_in.value == 0:
        return Fp(0)

    # e^(-a/b); a/b rounded down keeps the decay factor (and thus y) conservative
    decay = safe_exp(liq.over_b(amount_in).neg())
    inner = Fp.one().add(r0.mul_down(decay.complement()))
    require_positive(inner, "1 + r0 * (1 - e^(-a/b))")
    return liq.times_b(safe_ln(inner))


def calc_in_given_out(r0: Fp, liq: Liquidity, amount_out: Fp) -> Fp:
    """Exact-out input a(y).

    Raises:
        ValueError: If amount_out is negative
        InfeasibleOutput: If y is at or beyond the asymptote b * ln(1 + r0)
    """
    if amount_out.value < 0:
        raise ValueError(f"amount_out must be non-negative, got {amount_out}")
    if amount_out.value == 0:
        return Fp(0)

    try:
        growth = safe_exp(liq.over_b_up(amount_out))
    except DomainError as err:
        raise InfeasibleOutput(f"Output {amount_out} is far beyond the asymptote") from err

    denominator = r0.add(Fp.one()).sub(growth)
    if denominator.value <= 0:
        raise InfeasibleOutput(
            f"Output {amount_out} is at or beyond the asymptote (r0 + 1 - e^(y/b) = {denominator})"
        )
    return liq.times_b_up(safe_ln(r0.div_up(denominator)))


def calc_limit_amounts(r0: Fp, liq: Liquidity, limit: Fp) -> tuple[Fp, Fp]:
    """Input and output that move the pair ratio from r0 to the limit.

    Returns:
        Tuple of (a_lim, y_lim)

    Raises:
        LimitNotAboveCurrent: If limit <= r0
    """
    if limit.value <= r0.value:
        raise LimitNotAboveCurrent(f"Limit ratio {limit} must exceed current ratio {r0}")

    amount_in = liq.times_b(safe_ln(limit.div_down(r0)))
    inner = Fp.one().add(r0.mul_down(r0.div_up(limit).complement()))
    require_positive(inner, "1 + r0 * (1 - r0 / limit)")
    amount_out = liq.times_b(safe_ln(inner))
    return amount_in, amount_out


def calc_capped_in(r0: Fp, liq: Liquidity, balance_out: Fp) -> Fp:
    """Input that drains exactly balance_out (cap-and-invert)."""
    return calc_in_given_out(r0, liq, balance_out)


def validate_pair(balances: Sequence[Fp], i: int, j: int) -> None:
    """Check indices and balances for a swap i -> j."""
    n = len(balances)
    if n < 2:
        raise ValueError(f"Pool needs at least 2 assets, got {n}")
    if i < 0 or i >= n:
        raise IndexError(f"token_index_in {i} out of range for {n} tokens")
    if j < 0 or j >= n:
        raise IndexError(f"token_index_out {j} out of range for {n} tokens")
    if i == j:
        raise ValueError("Cannot swap token with itself")
    validate_balances(balances)


def swap_exact_in(
    balances: Sequence[Fp],
    i: int,
    j: int,
    amount_in: Fp,
    kappa: Fp,
    *,
    limit: Fp | None = None,
) -> SwapAmounts:
    """Fee-free exact-in swap i -> j on the given state.

    The input is first truncated at the limit (if any); if the resulting output
    would exceed the output balance, the output is capped at q_j and the input
    re-derived from the exact-out form.

    Raises:
        IndexError: If an index is out of range
        ValueError: If i == j or amount_in is negative
        ZeroLiquidity: If the pool is empty
        LimitNotAboveCurrent: If a limit is supplied and limit <= r0
    """
    validate_pair(balances, i, j)
    if amount_in.value < 0:
        raise ValueError(f"amount_in must be non-negative, got {amount_in}")

    liq = liquidity(balances, kappa)
    r0 = pair_ratio(balances, i, j, liq)

    used = amount_in
    limited = False
    if limit is not None:
        limit_in, _ = calc_limit_amounts(r0, liq, limit)
        if used > limit_in:
            used = limit_in
            limited = True

    amount_out = calc_out_given_in(r0, liq, used)
    balance_out = balances[j]
    if amount_out > balance_out:
        capped_in = calc_capped_in(r0, liq, balance_out)
        return SwapAmounts(
            amount_in=min(capped_in, used),
            amount_out=balance_out,
            limited=limited,
            capped=True,
        )

    return SwapAmounts(amount_in=used, amount_out=amount_out, limited=limited)


def swap_exact_out(
    balances: Sequence[Fp],
    i: int,
    j: int,
    amount_out: Fp,
    kappa: Fp,
) -> SwapAmounts:
    """Fee-free exact-out swap i -> j on the given state.

    Raises:
        InfeasibleOutput: If amount_out exceeds q_j or the asymptote
    """
    validate_pair(balances, i, j)
    if amount_out > balances[j]:
        raise InfeasibleOutput(f"Output {amount_out} exceeds balance {balances[j]}")

    liq = liquidity(balances, kappa)
    r0 = pair_ratio(balances, i, j, liq)
    return SwapAmounts(amount_in=calc_in_given_out(r0, liq, amount_out), amount_out=amount_out)


def apply_swap(balances: Sequence[Fp], i: int, j: int, amounts: SwapAmounts) -> tuple[Fp, ...]:
    """New balance vector after crediting amount_in to i and debiting amount_out from j.

    Raises:
        NegativeBalance: If q_j would go negative
    """
    updated = list(balances)
    updated[i] = updated[i].add(amounts.amount_in)
    updated[j] = updated[j].sub(amounts.amount_out)
    if updated[j].value < 0:
        raise NegativeBalance(f"Swap drains more than balance at index {j}")
    return tuple(updated)
