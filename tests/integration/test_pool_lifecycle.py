"""End-to-end pool lifecycle across several accounts.

Seeds a three-asset pool, adds a second LP, trades through it and winds
liquidity down again, checking custody and share accounting after every step.
"""

import pytest

from lmsr_pool.pool import LmsrPool
from tests.helpers import DAI, FEE_30_BPS, LP, PROTOCOL, TRADER, WBTC, WETH, make_config, make_pool, raw

LP2 = "second-provider"


def assert_consistent(pool, transfer, ledger, holders) -> None:
    config = pool.config
    for asset, factor, q in zip(config.assets, config.scaling_factors, pool.balances, strict=True):
        assert q.value == transfer.custody[asset] * factor
    assert sum(ledger.balance_of(h) for h in holders) == ledger.total_supply()


@pytest.fixture
def lifecycle():
    config = make_config(n_assets=3, fee=FEE_30_BPS, protocol_fee_share="0.1")
    pool, transfer, ledger = make_pool((1000, 1000, 1000), config=config)
    for asset in (WETH, DAI, WBTC):
        transfer.fund(LP2, asset, raw(200))
        transfer.fund(TRADER, asset, raw(200))
    return pool, transfer, ledger


class TestLifecycle:
    def test_second_provider_joins_and_leaves(self, lifecycle) -> None:
        pool, transfer, ledger = lifecycle
        holders = (LP, LP2, TRADER)

        minted = pool.mint(raw(300), account=LP2)
        assert minted.shares == raw(300)
        assert minted.deposits == (raw(100),) * 3
        assert_consistent(pool, transfer, ledger, holders)

        for i, j in ((0, 1), (1, 2), (2, 0)):
            pool.swap(i, j, raw(10), account=TRADER)
            assert_consistent(pool, transfer, ledger, holders)

        supply = ledger.total_supply()
        balances = pool.balances
        payouts = pool.burn(minted.shares, account=LP2)
        alpha = minted.shares * 10**18 // supply
        assert payouts == [alpha * q.value // 10**18 for q in balances]
        assert ledger.balance_of(LP2) == 0
        assert_consistent(pool, transfer, ledger, holders)

        # the protocol collected a carve-out in every traded asset
        for asset in (WETH, DAI, WBTC):
            assert transfer.balance_of(PROTOCOL, asset) > 0

    def test_swap_cycle_loses_value(self, lifecycle) -> None:
        """Chaining 0 -> 1 -> 2 -> 0 never returns more than was put in."""
        pool, transfer, _ = lifecycle
        amount = raw(10)
        for i, j in ((0, 1), (1, 2), (2, 0)):
            amount = pool.swap(i, j, amount, account=TRADER).amount_out
        assert amount < raw(10)
        assert transfer.balance_of(TRADER, WETH) < raw(200)

    def test_single_asset_round_trip(self, lifecycle) -> None:
        pool, transfer, ledger = lifecycle
        minted = pool.swap_mint(0, raw(50), account=TRADER)
        assert ledger.balance_of(TRADER) == minted.shares

        redeemed = pool.burn_swap(minted.shares, 0, account=TRADER)
        assert redeemed.amount_out < minted.amount_in
        assert ledger.balance_of(TRADER) == 0
        assert transfer.balance_of(TRADER, DAI) == raw(200)
        assert_consistent(pool, transfer, ledger, (LP, TRADER))

    def test_restore_from_persisted_state(self, lifecycle) -> None:
        pool, transfer, ledger = lifecycle
        pool.swap(0, 1, raw(25), account=TRADER)

        restored = LmsrPool.from_state(pool.config, pool.state, transfer, ledger)
        assert restored.quote_swap(1, 2, raw(5)) == pool.quote_swap(1, 2, raw(5))
        assert restored.quote_burn_swap(raw(30), 2) == pool.quote_burn_swap(raw(30), 2)

        restored.swap(1, 2, raw(5), account=TRADER)
        assert_consistent(restored, transfer, ledger, (LP, TRADER))
