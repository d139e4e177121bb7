"""Tests for the fee-free two-asset swap engine.

Reference values come from the float closed forms, not hand-typed decimals:

    y(a)  = b * ln(1 + r0 * (1 - e^(-a/b)))
    a(y)  = b * ln(r0 / (r0 + 1 - e^(y/b)))
    a_lim = b * ln(limit / r0),  y_lim = b * ln(1 + r0 * (1 - r0 / limit))
"""

import math

import pytest

from lmsr_pool.errors import InfeasibleOutput, LimitNotAboveCurrent, NegativeBalance, ZeroLiquidity
from lmsr_pool.kernel.pricing import liquidity, pair_ratio
from lmsr_pool.kernel.swap_math import (
    SwapAmounts,
    apply_swap,
    calc_in_given_out,
    calc_limit_amounts,
    calc_out_given_in,
    swap_exact_in,
    swap_exact_out,
)
from lmsr_pool.math.fixed_point import Fp
from tests.helpers import fp_balances, tokens

# Round-trip tolerance: 1e-6 tokens
EPSILON = 10**12


def y_float(a: float, b: float, r0: float) -> float:
    return b * math.log(1 + r0 * (1 - math.exp(-a / b)))


def a_float(y: float, b: float, r0: float) -> float:
    return b * math.log(r0 / (r0 + 1 - math.exp(y / b)))


class TestConcreteScenario:
    """q = (1000, 1000), kappa = 0.1: b = 200, r0 = 1."""

    def test_exact_in_100(self, balanced_pair, kappa) -> None:
        result = swap_exact_in(balanced_pair, 0, 1, tokens(100), kappa)
        expected = y_float(100, 200, 1)  # 200 * ln(2 - e^-0.5)
        assert float(result.amount_out) == pytest.approx(expected, rel=1e-12)
        assert result.amount_in == tokens(100)
        assert not result.limited
        assert not result.capped
        assert not result.approximated

    def test_exact_out_recovers_input(self, balanced_pair, kappa) -> None:
        y = swap_exact_in(balanced_pair, 0, 1, tokens(100), kappa).amount_out
        result = swap_exact_out(balanced_pair, 0, 1, y, kappa)
        assert abs(result.amount_in.value - tokens(100).value) <= EPSILON

    def test_swap_to_limit(self, balanced_pair, kappa) -> None:
        liq = liquidity(balanced_pair, kappa)
        a_lim, y_lim = calc_limit_amounts(Fp.one(), liq, tokens("1.2"))
        assert float(a_lim) == pytest.approx(200 * math.log(1.2), rel=1e-12)
        assert float(y_lim) == pytest.approx(200 * math.log(1 + (1 - 1 / 1.2)), rel=1e-12)

    def test_limit_truncates_input(self, balanced_pair, kappa) -> None:
        result = swap_exact_in(balanced_pair, 0, 1, tokens(100), kappa, limit=tokens("1.2"))
        assert result.limited
        assert float(result.amount_in) == pytest.approx(200 * math.log(1.2), rel=1e-12)
        assert float(result.amount_out) == pytest.approx(200 * math.log(2 - 1 / 1.2), rel=1e-12)

    def test_limit_not_reached(self, balanced_pair, kappa) -> None:
        """A limit beyond the trade's final ratio leaves the swap unchanged."""
        plain = swap_exact_in(balanced_pair, 0, 1, tokens(10), kappa)
        limited = swap_exact_in(balanced_pair, 0, 1, tokens(10), kappa, limit=tokens("1.2"))
        assert limited == plain


class TestMonotonicity:
    """y(a) strictly increasing and concave; a(y) strictly increasing and convex."""

    def test_exact_in_increasing_and_concave(self, skewed_pair, kappa) -> None:
        liq = liquidity(skewed_pair, kappa)
        r0 = pair_ratio(skewed_pair, 1, 0, liq)
        outputs = [calc_out_given_in(r0, liq, tokens(a)).value for a in range(0, 400, 20)]
        deltas = [b - a for a, b in zip(outputs, outputs[1:])]
        assert all(d > 0 for d in deltas)
        assert all(d2 < d1 for d1, d2 in zip(deltas, deltas[1:]))

    def test_exact_out_increasing_and_convex(self, balanced_pair, kappa) -> None:
        liq = liquidity(balanced_pair, kappa)
        r0 = Fp.one()
        # asymptote b * ln(2) ~ 138.6
        inputs = [calc_in_given_out(r0, liq, tokens(y)).value for y in range(0, 130, 10)]
        deltas = [b - a for a, b in zip(inputs, inputs[1:])]
        assert all(d > 0 for d in deltas)
        assert all(d2 > d1 for d1, d2 in zip(deltas, deltas[1:]))

    def test_output_below_asymptote(self, balanced_pair, kappa) -> None:
        liq = liquidity(balanced_pair, kappa)
        y = calc_out_given_in(Fp.one(), liq, tokens(10_000))
        # b * ln(2) ~ 138.629
        assert tokens("138.62") < y < tokens("138.63")


class TestRoundTrip:
    @pytest.mark.parametrize("amount", ["0.001", "1", "25", "100", "180"])
    @pytest.mark.parametrize("direction", [(0, 1), (1, 0)])
    def test_exact_out_inverts_exact_in(self, skewed_pair, kappa, amount, direction):
        i, j = direction
        liq = liquidity(skewed_pair, kappa)
        r0 = pair_ratio(skewed_pair, i, j, liq)
        a = tokens(amount)
        y = calc_out_given_in(r0, liq, a)
        if y.value == 0:
            pytest.skip("output rounds to zero")
        a_back = calc_in_given_out(r0, liq, y)
        assert abs(a_back.value - a.value) <= EPSILON

    def test_zero_amounts(self, balanced_pair, kappa) -> None:
        liq = liquidity(balanced_pair, kappa)
        assert calc_out_given_in(Fp.one(), liq, Fp(0)) == Fp(0)
        assert calc_in_given_out(Fp.one(), liq, Fp(0)) == Fp(0)

    def test_float_reference_for_exact_out(self, skewed_pair, kappa) -> None:
        liq = liquidity(skewed_pair, kappa)
        r0 = pair_ratio(skewed_pair, 1, 0, liq)
        result = calc_in_given_out(r0, liq, tokens(10))
        assert float(result) == pytest.approx(a_float(10, 200, math.e**-2), rel=1e-12)


class TestGuards:
    def test_exact_out_beyond_asymptote(self, balanced_pair, kappa) -> None:
        liq = liquidity(balanced_pair, kappa)
        with pytest.raises(InfeasibleOutput):
            calc_in_given_out(Fp.one(), liq, tokens(139))  # b * ln(2) ~ 138.63

    def test_exact_out_far_beyond_asymptote(self, balanced_pair, kappa) -> None:
        """e^(y/b) overflow is reported as infeasible, not as a domain error."""
        liq = liquidity(balanced_pair, kappa)
        with pytest.raises(InfeasibleOutput):
            calc_in_given_out(Fp.one(), liq, tokens(10**9))

    def test_exact_out_above_balance(self, kappa) -> None:
        """Reachable by the curve but more than the pool holds."""
        q = fp_balances(1000, 10)
        with pytest.raises(InfeasibleOutput, match="exceeds balance"):
            swap_exact_out(q, 0, 1, tokens(11), kappa)

    @pytest.mark.parametrize("limit", ["1", "0.5"])
    def test_limit_not_above_current(self, balanced_pair, kappa, limit: str) -> None:
        with pytest.raises(LimitNotAboveCurrent):
            swap_exact_in(balanced_pair, 0, 1, tokens(1), kappa, limit=tokens(limit))
        liq = liquidity(balanced_pair, kappa)
        with pytest.raises(LimitNotAboveCurrent):
            calc_limit_amounts(Fp.one(), liq, tokens(limit))

    def test_negative_amounts(self, balanced_pair, kappa) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            swap_exact_in(balanced_pair, 0, 1, Fp(-1), kappa)
        liq = liquidity(balanced_pair, kappa)
        with pytest.raises(ValueError, match="non-negative"):
            calc_in_given_out(Fp.one(), liq, Fp(-1))

    def test_self_swap(self, balanced_pair, kappa) -> None:
        with pytest.raises(ValueError, match="itself"):
            swap_exact_in(balanced_pair, 0, 0, tokens(1), kappa)

    @pytest.mark.parametrize("index", [-1, 2])
    def test_index_out_of_range(self, balanced_pair, kappa, index: int) -> None:
        with pytest.raises(IndexError):
            swap_exact_in(balanced_pair, index, 1, tokens(1), kappa)

    def test_empty_pool(self, kappa) -> None:
        with pytest.raises(ZeroLiquidity):
            swap_exact_in(fp_balances(0, 0), 0, 1, tokens(1), kappa)


class TestCapAndInvert:
    """Outputs above q_j are capped and the input re-derived."""

    def test_cap_at_balance(self, kappa) -> None:
        q = fp_balances(1990, 10)  # b = 200, r0 = e^9.9, asymptote ~ 2180
        result = swap_exact_in(q, 0, 1, tokens(500), kappa)
        assert result.capped
        assert result.amount_out == tokens(10)
        assert result.amount_in < tokens(500)
        # the re-derived input buys exactly the balance
        liq = liquidity(q, kappa)
        r0 = pair_ratio(q, 0, 1, liq)
        assert result.amount_in == calc_in_given_out(r0, liq, tokens(10))

    def test_capped_swap_leaves_zero(self, kappa) -> None:
        q = fp_balances(1990, 10)
        result = swap_exact_in(q, 0, 1, tokens(500), kappa)
        new_q = apply_swap(q, 0, 1, result)
        assert new_q[1] == Fp(0)
        assert new_q[0] == q[0].add(result.amount_in)


class TestApplySwap:
    def test_apply_swap(self, balanced_pair) -> None:
        amounts = SwapAmounts(amount_in=tokens(10), amount_out=tokens(9))
        assert apply_swap(balanced_pair, 0, 1, amounts) == fp_balances(1010, 991)

    def test_apply_swap_rejects_overdraw(self, balanced_pair) -> None:
        amounts = SwapAmounts(amount_in=tokens(10), amount_out=tokens(1001))
        with pytest.raises(NegativeBalance):
            apply_swap(balanced_pair, 0, 1, amounts)
