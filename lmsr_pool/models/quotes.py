"""Pydantic models for the quote service requests and responses.

Requests carry a full pool snapshot, so the service holds no state. Raw amounts
travel as decimal strings; normalized fee breakdowns use 18-decimal units.
"""

from pydantic import BaseModel, Field, model_validator

from lmsr_pool.models.types import Amount, Fraction


class PoolSnapshot(BaseModel):
    """Pool parameters and balances to quote against."""

    balances: list[Amount] = Field(min_length=2, description="Raw balance per asset.")
    kappa: Fraction = Field(description="Liquidity coefficient, b = kappa * S(q).")
    fees: list[Fraction] | Fraction = Field(
        default=0,
        description="Per-asset swap fee, or a single fee for every asset.",
    )
    protocol_fee_share: Fraction = Field(
        default=0,
        alias="protocolFeeShare",
        description="Fraction of each fee paid to the protocol.",
    )
    decimals: list[int] | None = Field(
        default=None, description="Token decimals per asset (default 18)."
    )
    total_supply: Amount | None = Field(
        default=None,
        alias="totalSupply",
        description="Outstanding LP shares (default: the normalized pool size).",
    )

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def check_lengths(self) -> "PoolSnapshot":
        n = len(self.balances)
        if isinstance(self.fees, list) and len(self.fees) != n:
            raise ValueError(f"Expected {n} fees, got {len(self.fees)}")
        if self.decimals is not None and len(self.decimals) != n:
            raise ValueError(f"Expected {n} decimals, got {len(self.decimals)}")
        return self


class FeeBreakdown(BaseModel):
    """Normalized (18-decimal) fee split of one settlement."""

    gross: str
    net: str
    fee: str
    protocol_fee: str = Field(alias="protocolFee")

    model_config = {"populate_by_name": True}


class SwapQuoteRequest(BaseModel):
    pool: PoolSnapshot
    token_in: int = Field(alias="tokenIn", ge=0)
    token_out: int = Field(alias="tokenOut", ge=0)
    amount_in: Amount = Field(alias="amountIn")
    limit_ratio: Fraction | None = Field(
        default=None,
        alias="limitRatio",
        description="Stop once exp((q_in - q_out) / b) reaches this ratio.",
    )

    model_config = {"populate_by_name": True}


class SwapQuoteResponse(BaseModel):
    amount_in: Amount = Field(alias="amountIn")
    amount_out: Amount = Field(alias="amountOut")
    protocol_fee: Amount = Field(alias="protocolFee")
    fee: FeeBreakdown
    limited: bool
    capped: bool
    approximated: bool

    model_config = {"populate_by_name": True}


class SwapMintQuoteRequest(BaseModel):
    pool: PoolSnapshot
    token_in: int = Field(alias="tokenIn", ge=0)
    amount_in: Amount = Field(alias="amountIn")

    model_config = {"populate_by_name": True}


class SwapMintQuoteResponse(BaseModel):
    amount_in: Amount = Field(alias="amountIn")
    shares: Amount
    protocol_fee: Amount = Field(alias="protocolFee")
    fee: FeeBreakdown
    iterations: int

    model_config = {"populate_by_name": True}


class BurnSwapQuoteRequest(BaseModel):
    pool: PoolSnapshot
    shares: Amount
    token_out: int = Field(alias="tokenOut", ge=0)

    model_config = {"populate_by_name": True}


class Contribution(BaseModel):
    """Per-asset leg of a single-asset redeem."""

    index: int
    amount: str = Field(description="Normalized amount added to the payout.")
    skipped_reason: str | None = Field(default=None, alias="skippedReason")

    model_config = {"populate_by_name": True}


class BurnSwapQuoteResponse(BaseModel):
    amount_out: Amount = Field(alias="amountOut")
    protocol_fee: Amount = Field(alias="protocolFee")
    fee: FeeBreakdown
    contributions: list[Contribution]

    model_config = {"populate_by_name": True}


class PricesRequest(BaseModel):
    pool: PoolSnapshot


class PricesResponse(BaseModel):
    prices: list[str] = Field(description="Marginal prices as decimal strings, summing to 1.")
    cost: str = Field(description="C(q) as a decimal string.")
    liquidity: str = Field(description="b = kappa * S(q) as a decimal string.")


class ErrorResponse(BaseModel):
    error: str
    detail: str
