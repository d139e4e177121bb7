"""Factory functions for creating test objects.

Usage:
    from tests.helpers import make_pool, tokens
    # or
    from tests.helpers.factories import make_pool, tokens

    pool, transfer, ledger = make_pool([1000, 1000])
"""

from collections.abc import Sequence
from decimal import Decimal

from lmsr_pool import Fp, KernelConfig
from lmsr_pool.pool import InMemoryShareLedger, InMemoryTransfer, LmsrPool, PoolConfig
from tests.helpers.constants import DAI, KAPPA, LP, PROTOCOL, TOKEN_DECIMALS, WBTC, WETH

DEFAULT_ASSETS = (WETH, DAI, WBTC)


def tokens(amount: int | str | Decimal) -> Fp:
    """Normalized Fp for a whole-token amount, e.g. tokens(1000) == Fp(1000 * 10**18)."""
    return Fp.from_decimal(Decimal(amount))


def fp_balances(*amounts: int | str | Decimal) -> tuple[Fp, ...]:
    """Balance tuple from whole-token amounts."""
    return tuple(tokens(a) for a in amounts)


def raw(amount: int | str | Decimal, decimals: int = 18) -> int:
    """Raw token units for a whole-token amount."""
    return int(Decimal(amount) * 10**decimals)


def make_config(
    n_assets: int = 2,
    kappa: Decimal | str = KAPPA,
    fee: Decimal | str | Sequence[Decimal | str] = Decimal(0),
    protocol_fee_share: Decimal | str = Decimal(0),
    assets: Sequence[str] | None = None,
    with_decimals: bool = False,
) -> PoolConfig:
    """Create a PoolConfig with sensible defaults.

    Args:
        n_assets: Number of assets when assets is not given (default: 2)
        kappa: Liquidity coefficient (default: 0.1)
        fee: Scalar or per-asset swap fee (default: 0)
        protocol_fee_share: Protocol carve-out (default: 0)
        assets: Asset names (default: WETH, DAI, WBTC prefix)
        with_decimals: Use the real token decimals instead of 18 everywhere
    """
    assets = tuple(assets) if assets is not None else DEFAULT_ASSETS[:n_assets]
    decimals = [TOKEN_DECIMALS.get(a, 18) for a in assets] if with_decimals else None
    receiver = PROTOCOL if Decimal(protocol_fee_share) > 0 else None
    return PoolConfig.create(
        assets,
        kappa,
        fee,
        protocol_fee_share=protocol_fee_share,
        protocol_fee_receiver=receiver,
        decimals=decimals,
    )


def make_pool(
    seed: Sequence[int | str | Decimal] = (1000, 1000),
    config: PoolConfig | None = None,
    kernel_config: KernelConfig | None = None,
    account: str = LP,
) -> tuple[LmsrPool, InMemoryTransfer, InMemoryShareLedger]:
    """Create a seeded pool backed by in-memory collaborators.

    Seed amounts are whole tokens, converted with each asset's decimals.

    Returns:
        Tuple of (pool, transfer, ledger)
    """
    config = config or make_config(n_assets=len(seed))
    transfer = InMemoryTransfer()
    ledger = InMemoryShareLedger()
    pool = LmsrPool(config, transfer, ledger, kernel_config=kernel_config)

    amounts = []
    for asset, amount, factor in zip(config.assets, seed, config.scaling_factors, strict=True):
        amount_raw = int(Decimal(amount) * 10**18) // factor
        transfer.fund(account, asset, amount_raw)
        amounts.append(amount_raw)
    pool.initialize(amounts, account=account)
    return pool, transfer, ledger
