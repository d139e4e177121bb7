"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Asset names, accounts and pool parameters
- factories: Fixed-point, config and pool factory functions
"""

from tests.helpers.constants import (
    DAI,
    FEE_30_BPS,
    KAPPA,
    LP,
    ONE_TOKEN,
    PROTOCOL,
    TOKEN_DECIMALS,
    TRADER,
    USDC,
    WBTC,
    WETH,
)
from tests.helpers.factories import fp_balances, make_config, make_pool, raw, tokens

__all__ = [
    # Constants
    "WETH",
    "DAI",
    "USDC",
    "WBTC",
    "TOKEN_DECIMALS",
    "LP",
    "TRADER",
    "PROTOCOL",
    "KAPPA",
    "FEE_30_BPS",
    "ONE_TOKEN",
    # Factories
    "tokens",
    "fp_balances",
    "raw",
    "make_config",
    "make_pool",
]
