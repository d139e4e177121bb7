"""Pytest configuration and fixtures."""

import pytest

from lmsr_pool import Fp
from tests.helpers import fp_balances, tokens


@pytest.fixture
def kappa() -> Fp:
    """kappa = 0.1, so b = S(q) / 10."""
    return tokens("0.1")


@pytest.fixture
def balanced_pair() -> tuple[Fp, ...]:
    """Two-asset pool q = (1000, 1000): b = 200, r0 = 1."""
    return fp_balances(1000, 1000)


@pytest.fixture
def skewed_pair() -> tuple[Fp, ...]:
    """Two-asset pool q = (1200, 800): b = 200, r0(0, 1) = e^2."""
    return fp_balances(1200, 800)


@pytest.fixture
def three_assets() -> tuple[Fp, ...]:
    """Three-asset pool q = (1000, 1000, 1000): b = 300."""
    return fp_balances(1000, 1000, 1000)
