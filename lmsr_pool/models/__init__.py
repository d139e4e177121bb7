"""Pydantic models for the quote service."""

from lmsr_pool.models.quotes import (
    BurnSwapQuoteRequest,
    BurnSwapQuoteResponse,
    Contribution,
    ErrorResponse,
    FeeBreakdown,
    PoolSnapshot,
    PricesRequest,
    PricesResponse,
    SwapMintQuoteRequest,
    SwapMintQuoteResponse,
    SwapQuoteRequest,
    SwapQuoteResponse,
)
from lmsr_pool.models.types import Amount, Fraction

__all__ = [
    # Types
    "Amount",
    "Fraction",
    # Requests
    "PoolSnapshot",
    "SwapQuoteRequest",
    "SwapMintQuoteRequest",
    "BurnSwapQuoteRequest",
    "PricesRequest",
    # Responses
    "FeeBreakdown",
    "Contribution",
    "SwapQuoteResponse",
    "SwapMintQuoteResponse",
    "BurnSwapQuoteResponse",
    "PricesResponse",
    "ErrorResponse",
]
