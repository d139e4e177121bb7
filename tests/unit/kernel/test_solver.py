"""Tests for the bracket-and-bisection root finder."""

from lmsr_pool.kernel.solver import BisectionResult, bracket_and_bisect


def solve(f, target, seed=1, **overrides) -> BisectionResult:
    params = {
        "tolerance": 0,
        "max_iterations": 256,
        "max_doublings": 64,
        "ceiling": 10**30,
    }
    params.update(overrides)
    return bracket_and_bisect(f, target, seed, **params)


class TestBracketAndBisect:
    def test_linear_root(self) -> None:
        result = solve(lambda x: 3 * x, 3_000_000, seed=10)
        assert result.converged
        assert result.root == 1_000_000
        assert result.value == 3_000_000

    def test_largest_point_not_exceeding_target(self) -> None:
        """With no exact root, returns the largest x with f(x) <= target."""
        result = solve(lambda x: 3 * x, 100, seed=1)
        assert result.converged
        assert result.root == 33
        assert result.value == 99

    def test_tolerance_stops_early(self) -> None:
        exact = solve(lambda x: x * x, 10**20, seed=1)
        loose = solve(lambda x: x * x, 10**20, seed=1, tolerance=10**15)
        assert exact.root == 10**10
        assert loose.converged
        assert 10**20 - loose.value <= 10**15
        assert loose.iterations < exact.iterations

    def test_zero_target(self) -> None:
        result = solve(lambda x: x, 0, seed=5)
        assert result.converged
        assert result.root == 0
        assert result.iterations == 1

    def test_infeasible_points_narrow_from_above(self) -> None:
        """None marks x as beyond the domain; the root is the largest feasible point."""
        result = solve(lambda x: x if x <= 500 else None, 10**6, seed=1)
        assert result.converged
        assert result.root == 500
        assert result.value == 500

    def test_infeasible_origin(self) -> None:
        result = solve(lambda x: None, 10, seed=1)
        assert not result.converged
        assert result.root == 0

    def test_target_below_origin_value(self) -> None:
        result = solve(lambda x: x + 100, 10, seed=1)
        assert not result.converged

    def test_ceiling_reached_without_bracket(self) -> None:
        """Feasible at the ceiling but still short of the target."""
        result = solve(lambda x: x, 10**6, seed=1, ceiling=1000)
        assert not result.converged
        assert result.root == 1000

    def test_doubling_cap(self) -> None:
        result = solve(lambda x: x, 10**6, seed=1, max_doublings=3)
        assert not result.converged
        assert result.root == 4

    def test_iteration_cap(self) -> None:
        result = solve(lambda x: x, 10**6 + 1, seed=2**30, max_iterations=2)
        assert not result.converged
        assert result.value <= 10**6 + 1

    def test_ceiling_caps_seed(self) -> None:
        evaluated: list[int] = []

        def f(x: int) -> int:
            evaluated.append(x)
            return x

        solve(f, 50, seed=10**9, ceiling=100)
        assert max(evaluated) <= 100
