"""Quote endpoints for the LMSR pool service."""

import os

import structlog
from fastapi import APIRouter, Depends

from lmsr_pool.fees.result import FeeSplit
from lmsr_pool.kernel.config import KernelConfig
from lmsr_pool.kernel.scaling import scale_up
from lmsr_pool.models.quotes import (
    BurnSwapQuoteRequest,
    BurnSwapQuoteResponse,
    Contribution,
    FeeBreakdown,
    PoolSnapshot,
    PricesRequest,
    PricesResponse,
    SwapMintQuoteRequest,
    SwapMintQuoteResponse,
    SwapQuoteRequest,
    SwapQuoteResponse,
)
from lmsr_pool.pool import InMemoryShareLedger, InMemoryTransfer, LmsrPool, PoolConfig, PoolState

logger = structlog.get_logger()

router = APIRouter()

# Balanced-regime surrogate on/off, configurable via LMSR_APPROXIMATION
APPROXIMATION_ENABLED = os.environ.get("LMSR_APPROXIMATION", "true").lower() in (
    "true",
    "1",
    "yes",
)

# Holder of the snapshot's share supply in the throwaway ledger
SNAPSHOT_HOLDER = "snapshot"


def get_kernel_config() -> KernelConfig:
    """Dependency provider for the kernel policy.

    Override this in tests to force a policy:
        app.dependency_overrides[get_kernel_config] = lambda: KernelConfig(...)
    """
    return KernelConfig(approximation_enabled=APPROXIMATION_ENABLED)


def build_pool(snapshot: PoolSnapshot, kernel_config: KernelConfig) -> LmsrPool:
    """Rebuild a read-only pool from a request snapshot.

    Raises:
        InvalidPoolConfig: If the snapshot parameters are invalid
        ZeroLiquidity: If the snapshot balances are all zero
    """
    n = len(snapshot.balances)
    config = PoolConfig.create(
        assets=[f"asset{k}" for k in range(n)],
        kappa=snapshot.kappa,
        fee=snapshot.fees,
        protocol_fee_share=snapshot.protocol_fee_share,
        protocol_fee_receiver="protocol",
        decimals=snapshot.decimals,
    )
    state = PoolState.of(
        scale_up(int(balance), factor)
        for balance, factor in zip(snapshot.balances, config.scaling_factors, strict=True)
    )

    ledger = InMemoryShareLedger()
    supply = int(snapshot.total_supply) if snapshot.total_supply is not None else state.size.value
    ledger.mint(SNAPSHOT_HOLDER, supply)
    return LmsrPool.from_state(
        config, state, InMemoryTransfer(), ledger, kernel_config=kernel_config
    )


def _fee_breakdown(split: FeeSplit) -> FeeBreakdown:
    return FeeBreakdown(
        gross=str(split.gross.value),
        net=str(split.net.value),
        fee=str(split.fee.value),
        protocol_fee=str(split.protocol_fee.value),
    )


@router.post("/quote/swap")
def quote_swap(
    request: SwapQuoteRequest,
    kernel_config: KernelConfig = Depends(get_kernel_config),
) -> SwapQuoteResponse:
    """Quote an exact-in swap without committing it.

    Error Handling:
        - Invalid request schema: Returns 422 Validation Error (Pydantic)
        - Kernel rejection (infeasible, limit, liquidity): Returns 422 with the error kind
    """
    pool = build_pool(request.pool, kernel_config)
    settlement = pool.quote_swap(
        request.token_in,
        request.token_out,
        int(request.amount_in),
        request.limit_ratio,
    )
    logger.info(
        "quoted_swap",
        token_in=request.token_in,
        token_out=request.token_out,
        amount_in=settlement.amount_in,
        amount_out=settlement.amount_out,
        approximated=settlement.approximated,
    )
    return SwapQuoteResponse(
        amount_in=settlement.amount_in,
        amount_out=settlement.amount_out,
        protocol_fee=settlement.protocol_fee,
        fee=_fee_breakdown(settlement.fee),
        limited=settlement.limited,
        capped=settlement.capped,
        approximated=settlement.approximated,
    )


@router.post("/quote/swap-mint")
def quote_swap_mint(
    request: SwapMintQuoteRequest,
    kernel_config: KernelConfig = Depends(get_kernel_config),
) -> SwapMintQuoteResponse:
    """Quote a single-asset mint without committing it."""
    pool = build_pool(request.pool, kernel_config)
    settlement = pool.quote_swap_mint(request.token_in, int(request.amount_in))
    logger.info(
        "quoted_swap_mint",
        token_in=request.token_in,
        amount_in=settlement.amount_in,
        shares=settlement.shares,
        iterations=settlement.iterations,
    )
    return SwapMintQuoteResponse(
        amount_in=settlement.amount_in,
        shares=settlement.shares,
        protocol_fee=settlement.protocol_fee,
        fee=_fee_breakdown(settlement.fee),
        iterations=settlement.iterations,
    )


@router.post("/quote/burn-swap")
def quote_burn_swap(
    request: BurnSwapQuoteRequest,
    kernel_config: KernelConfig = Depends(get_kernel_config),
) -> BurnSwapQuoteResponse:
    """Quote a single-asset redeem without committing it."""
    pool = build_pool(request.pool, kernel_config)
    settlement = pool.quote_burn_swap(int(request.shares), request.token_out)
    logger.info(
        "quoted_burn_swap",
        token_out=request.token_out,
        shares=settlement.shares,
        amount_out=settlement.amount_out,
    )
    return BurnSwapQuoteResponse(
        amount_out=settlement.amount_out,
        protocol_fee=settlement.protocol_fee,
        fee=_fee_breakdown(settlement.fee),
        contributions=[
            Contribution(
                index=c.index,
                amount=str(c.amount.value),
                skipped_reason=c.skipped_reason,
            )
            for c in settlement.contributions
        ],
    )


@router.post("/prices")
def prices(
    request: PricesRequest,
    kernel_config: KernelConfig = Depends(get_kernel_config),
) -> PricesResponse:
    """Marginal prices, cost and liquidity parameter of a snapshot."""
    pool = build_pool(request.pool, kernel_config)
    liquidity = pool.state.liquidity(pool.config.kappa_fp)
    return PricesResponse(
        prices=[str(p) for p in pool.marginal_prices()],
        cost=str(pool.cost()),
        liquidity=str(liquidity.b),
    )