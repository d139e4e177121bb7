"""Tests for PoolConfig validation and PoolState."""

from decimal import Decimal

import pytest

from lmsr_pool.errors import (
    InvalidFeeError,
    InvalidPoolConfig,
    InvalidScalingFactorError,
    NegativeBalance,
    ZeroLiquidity,
)
from lmsr_pool.math.fixed_point import Fp
from lmsr_pool.pool import PoolConfig, PoolState
from tests.helpers import DAI, PROTOCOL, USDC, WBTC, WETH, fp_balances, make_config, tokens


class TestPoolConfig:
    def test_create_broadcasts_scalar_fee(self) -> None:
        config = PoolConfig.create([WETH, DAI, WBTC], "0.1", "0.003")
        assert config.fees == (Decimal("0.003"),) * 3
        assert config.scaling_factors == (1, 1, 1)
        assert config.n_assets == 3

    def test_per_asset_fees(self) -> None:
        config = PoolConfig.create([WETH, DAI], "0.1", ["0.001", "0.003"])
        assert config.fee_rates == (tokens("0.001"), tokens("0.003"))

    def test_decimals_to_scaling_factors(self) -> None:
        config = make_config(assets=[WETH, USDC, WBTC], with_decimals=True)
        assert config.scaling_factors == (1, 10**12, 10**10)

    def test_fixed_point_views(self) -> None:
        config = make_config(protocol_fee_share="0.25")
        assert config.kappa_fp == tokens("0.1")
        assert config.protocol_share_fp == tokens("0.25")
        assert config.protocol_fee_receiver == PROTOCOL

    def test_index_of(self) -> None:
        config = make_config()
        assert config.index_of(DAI) == 1
        with pytest.raises(IndexError, match="not in the pool"):
            config.index_of(USDC)

    def test_frozen(self) -> None:
        config = make_config()
        with pytest.raises(AttributeError):
            config.kappa = Decimal(1)


class TestPoolConfigValidation:
    def test_single_asset(self) -> None:
        with pytest.raises(InvalidPoolConfig, match="at least 2"):
            PoolConfig.create([WETH], "0.1")

    def test_duplicate_assets(self) -> None:
        with pytest.raises(InvalidPoolConfig, match="Duplicate"):
            PoolConfig.create([WETH, WETH], "0.1")

    @pytest.mark.parametrize("kappa", ["0", "-0.1", "1e-19"])
    def test_kappa_must_be_positive(self, kappa: str) -> None:
        with pytest.raises(InvalidPoolConfig, match="kappa"):
            PoolConfig.create([WETH, DAI], kappa)

    @pytest.mark.parametrize("fee", ["1", "-0.01", "2.5"])
    def test_fee_range(self, fee: str) -> None:
        with pytest.raises(InvalidFeeError):
            PoolConfig.create([WETH, DAI], "0.1", fee)

    def test_fee_count(self) -> None:
        with pytest.raises(InvalidFeeError, match="Expected 2 fees"):
            PoolConfig.create([WETH, DAI], "0.1", ["0.003"])

    def test_protocol_share_range(self) -> None:
        with pytest.raises(InvalidFeeError, match="Protocol fee share"):
            PoolConfig.create([WETH, DAI], "0.1", protocol_fee_share="1", protocol_fee_receiver=PROTOCOL)

    def test_protocol_share_needs_receiver(self) -> None:
        with pytest.raises(InvalidPoolConfig, match="receiver"):
            PoolConfig.create([WETH, DAI], "0.1", protocol_fee_share="0.5")

    def test_scaling_factor_count(self) -> None:
        with pytest.raises(InvalidScalingFactorError):
            PoolConfig(
                assets=(WETH, DAI), kappa=Decimal("0.1"), fees=(Decimal(0),) * 2, scaling_factors=(1,)
            )

    def test_scaling_factor_positive(self) -> None:
        with pytest.raises(InvalidScalingFactorError):
            PoolConfig(
                assets=(WETH, DAI),
                kappa=Decimal("0.1"),
                fees=(Decimal(0),) * 2,
                scaling_factors=(1, 0),
            )

    def test_decimals_out_of_range(self) -> None:
        with pytest.raises(InvalidScalingFactorError):
            PoolConfig.create([WETH, DAI], "0.1", decimals=[18, 24])

    def test_errors_share_a_base(self) -> None:
        """Fee and scaling errors are configuration errors."""
        assert issubclass(InvalidFeeError, InvalidPoolConfig)
        assert issubclass(InvalidScalingFactorError, InvalidPoolConfig)


class TestPoolState:
    def test_size_and_liquidity(self, kappa) -> None:
        state = PoolState.of(fp_balances(1200, 800))
        assert state.size == tokens(2000)
        assert state.liquidity(kappa).b == tokens(200)

    def test_rejects_negative_balance(self) -> None:
        with pytest.raises(NegativeBalance):
            PoolState.of([tokens(1), Fp(-1)])

    def test_empty_state_has_no_liquidity(self, kappa) -> None:
        state = PoolState.of(fp_balances(0, 0))
        with pytest.raises(ZeroLiquidity):
            state.liquidity(kappa)
