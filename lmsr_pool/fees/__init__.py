"""Fee composition for LMSR pool operations.

Usage:
    from lmsr_pool.fees import FeeComposer

    composer = FeeComposer(fees=[Fp.from_decimal("0.003")] * 2, protocol_share=Fp(0), kappa=kappa)
    outcome = composer.swap(balances, 0, 1, amount_in)
    outcome.fee.gross, outcome.amount_out
"""

from lmsr_pool.fees.composer import (
    FeeComposer,
    effective_pair_fee,
    gross_up,
    split_input_fee,
    split_output_fee,
    validate_fee,
)
from lmsr_pool.fees.result import BurnSwapOutcome, FeeSplit, SwapMintOutcome, SwapOutcome

__all__ = [
    # Composer
    "FeeComposer",
    "effective_pair_fee",
    "gross_up",
    "split_input_fee",
    "split_output_fee",
    "validate_fee",
    # Results
    "FeeSplit",
    "SwapOutcome",
    "SwapMintOutcome",
    "BurnSwapOutcome",
]
