"""LMSR pool: caller-facing operations around the pure kernel.

Every operation follows the same steps:

    1. Plan: compute the new PoolState and the settlement from the current
       immutable state (nothing is mutated, so a failure leaves the pool as is)
    2. Check the caller's slippage bound
    3. Pull inbound assets (all or nothing) / burn inbound shares through the
       collaborators
    4. Commit the new state in a single assignment, mint outbound shares
    5. Push outbound assets (including the protocol fee)

Amounts at this boundary are raw token units. They are scaled to the 18-decimal
basis on entry; payouts round down and charges round up on exit, and the
rounding dust between the two bases stays in the pool balances.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

import structlog

from lmsr_pool.errors import SlippageExceeded, ZeroLiquidity
from lmsr_pool.fees.composer import FeeComposer
from lmsr_pool.fees.result import FeeSplit
from lmsr_pool.kernel.config import DEFAULT_KERNEL_CONFIG, KernelConfig
from lmsr_pool.kernel.liquidity import (
    AssetContribution,
    calc_proportional_burn,
    calc_proportional_mint,
)
from lmsr_pool.kernel.pricing import log_sum_exp_cost, marginal_prices
from lmsr_pool.kernel.scaling import scale_down_down, scale_down_up, scale_up
from lmsr_pool.math.fixed_point import Fp

from .collaborators import BalanceTransfer, ShareLedger
from .config import PoolConfig
from .state import PoolState

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapSettlement:
    """Raw-unit result of a swap.

    Attributes:
        token_in: Input asset index
        token_out: Output asset index
        amount_in: Input charged to the trader (fee included)
        amount_out: Output paid to the trader
        protocol_fee: Part of the fee sent to the protocol receiver (input asset)
        fee: Normalized fee breakdown
        limited: Input was truncated at the limit ratio
        capped: Output was capped at the pool balance
        approximated: Output came from the balanced-regime surrogate
    """

    token_in: int
    token_out: int
    amount_in: int
    amount_out: int
    protocol_fee: int
    fee: FeeSplit
    limited: bool = False
    capped: bool = False
    approximated: bool = False


@dataclass(frozen=True)
class MintSettlement:
    shares: int
    deposits: tuple[int, ...]


@dataclass(frozen=True)
class SwapMintSettlement:
    token_in: int
    amount_in: int
    shares: int
    protocol_fee: int
    fee: FeeSplit
    iterations: int


@dataclass(frozen=True)
class BurnSwapSettlement:
    """Raw-unit result of a single-asset redeem.

    contributions lists, per other asset, the normalized amount its swap added
    to the payout, or why it was skipped.
    """

    token_out: int
    shares: int
    amount_out: int
    protocol_fee: int
    fee: FeeSplit
    contributions: tuple[AssetContribution, ...]


def _credit(balances: Sequence[Fp], index: int, amount: Fp) -> tuple[Fp, ...]:
    updated = list(balances)
    updated[index] = updated[index].add(amount)
    return tuple(updated)


class LmsrPool:
    """Multi-asset LMSR pool with state-dependent liquidity b = kappa * S(q).

    Attributes:
        config: Pool parameters
        transfer: Custody collaborator
        ledger: LP share collaborator
        kernel_config: Dispatcher and solver policy
    """

    def __init__(
        self,
        config: PoolConfig,
        transfer: BalanceTransfer,
        ledger: ShareLedger,
        *,
        kernel_config: KernelConfig | None = None,
    ):
        self.config = config
        self.transfer = transfer
        self.ledger = ledger
        self.kernel_config = kernel_config or DEFAULT_KERNEL_CONFIG
        self._kappa = config.kappa_fp
        self._composer = FeeComposer(
            fees=config.fee_rates,
            protocol_share=config.protocol_share_fp,
            kappa=self._kappa,
            kernel_config=self.kernel_config,
        )
        self._state: PoolState | None = None

    @classmethod
    def from_state(
        cls,
        config: PoolConfig,
        state: PoolState,
        transfer: BalanceTransfer,
        ledger: ShareLedger,
        *,
        kernel_config: KernelConfig | None = None,
    ) -> LmsrPool:
        """Rebuild a pool around a state persisted elsewhere (no transfers happen).

        Raises:
            ValueError: If the state does not match the config's asset count
            ZeroLiquidity: If the state is empty
        """
        if len(state.balances) != config.n_assets:
            raise ValueError(
                f"State has {len(state.balances)} balances, config has {config.n_assets} assets"
            )
        pool = cls(config, transfer, ledger, kernel_config=kernel_config)
        state.liquidity(pool._kappa)
        pool._state = state
        return pool

    # --- Views ---

    @property
    def state(self) -> PoolState:
        return self._require_state()

    @property
    def balances(self) -> tuple[Fp, ...]:
        """Normalized balances q."""
        return self._require_state().balances

    @property
    def initialized(self) -> bool:
        return self._state is not None

    def marginal_prices(self) -> list[Fp]:
        """Softmax marginal prices, summing to 1."""
        state = self._require_state()
        return marginal_prices(state.balances, state.liquidity(self._kappa))

    def cost(self) -> Fp:
        """C(q) = b * ln(sum_i exp(q_i / b))."""
        state = self._require_state()
        return log_sum_exp_cost(state.balances, state.liquidity(self._kappa))

    def quote_swap(
        self,
        i: int,
        j: int,
        amount_in: int,
        limit_ratio: Decimal | None = None,
    ) -> SwapSettlement:
        settlement, _ = self._plan_swap(i, j, amount_in, limit_ratio)
        return settlement

    def quote_swap_mint(self, i: int, amount_in: int) -> SwapMintSettlement:
        settlement, _ = self._plan_swap_mint(i, amount_in)
        return settlement

    def quote_burn_swap(self, shares: int, target_index: int) -> BurnSwapSettlement:
        settlement, _ = self._plan_burn_swap(shares, target_index)
        return settlement

    # --- Operations ---

    def initialize(self, amounts: Sequence[int], *, account: str) -> int:
        """Seed the pool and mint L = S(q0) shares to account.

        Raises:
            ValueError: If the pool is already seeded or amounts are malformed
            ZeroLiquidity: If every seed amount is zero
        """
        if self._state is not None:
            raise ValueError("Pool is already initialized")
        n = self.config.n_assets
        if len(amounts) != n:
            raise ValueError(f"Expected {n} seed amounts, got {len(amounts)}")
        if any(amount < 0 for amount in amounts):
            raise ValueError(f"Seed amounts must be non-negative, got {list(amounts)}")

        state = PoolState.of(
            scale_up(amount, factor)
            for amount, factor in zip(amounts, self.config.scaling_factors, strict=True)
        )
        # rejects S = 0 and a b that rounds to zero
        state.liquidity(self._kappa)

        self._receive_all(account, amounts)
        self._state = state
        shares = state.size.value
        self.ledger.mint(account, shares)

        logger.info("pool_initialized", account=account, amounts=list(amounts), shares=shares)
        return shares

    def swap(
        self,
        i: int,
        j: int,
        amount_in: int,
        limit_ratio: Decimal | None = None,
        min_out: int = 0,
        *,
        account: str,
    ) -> SwapSettlement:
        """Exact-in swap of asset i for asset j.

        Raises:
            SlippageExceeded: If the output is below min_out
        """
        settlement, state = self._plan_swap(i, j, amount_in, limit_ratio)
        if settlement.amount_out < min_out:
            raise SlippageExceeded(f"Output {settlement.amount_out} is below minimum {min_out}")

        assets = self.config.assets
        self.transfer.receive(assets[i], account, settlement.amount_in)
        self._state = state
        if settlement.amount_out > 0:
            self.transfer.send(assets[j], account, settlement.amount_out)
        self._pay_protocol(assets[i], settlement.protocol_fee)

        logger.info(
            "pool_swap",
            account=account,
            token_in=assets[i],
            token_out=assets[j],
            amount_in=settlement.amount_in,
            amount_out=settlement.amount_out,
            limited=settlement.limited,
            capped=settlement.capped,
            approximated=settlement.approximated,
        )
        return settlement

    def mint(self, amount: int, min_shares: int = 0, *, account: str) -> MintSettlement:
        """Proportional mint growing the pool size S(q) by amount (18-decimal units).

        Raises:
            SlippageExceeded: If fewer than min_shares would be minted
        """
        state = self._require_state()
        result = calc_proportional_mint(
            state.balances, Fp(self.ledger.total_supply()), Fp(amount)
        )
        factors = self.config.scaling_factors
        deposits = tuple(
            scale_down_up(deposit, factor)
            for deposit, factor in zip(result.deposits, factors, strict=True)
        )
        balances = result.balances
        for k, (deposit, factor) in enumerate(zip(result.deposits, factors, strict=True)):
            balances = _credit(balances, k, scale_up(deposits[k], factor).sub(deposit))

        shares = result.shares.value
        if shares < min_shares:
            raise SlippageExceeded(f"Minted shares {shares} are below minimum {min_shares}")

        self._receive_all(account, deposits)
        self._state = PoolState.of(balances)
        self.ledger.mint(account, shares)

        logger.info("pool_mint", account=account, shares=shares, deposits=list(deposits))
        return MintSettlement(shares=shares, deposits=deposits)

    def burn(
        self,
        shares: int,
        min_amounts: Sequence[int] | None = None,
        *,
        account: str,
    ) -> list[int]:
        """Proportional burn paying alpha * q_k of every asset.

        Raises:
            SlippageExceeded: If any payout is below its minimum
        """
        state = self._require_state()
        result = calc_proportional_burn(state.balances, Fp(self.ledger.total_supply()), Fp(shares))
        factors = self.config.scaling_factors
        payouts = [
            scale_down_down(out, factor)
            for out, factor in zip(result.amounts_out, factors, strict=True)
        ]
        balances = result.balances
        for k, (out, factor) in enumerate(zip(result.amounts_out, factors, strict=True)):
            balances = _credit(balances, k, out.sub(scale_up(payouts[k], factor)))

        if min_amounts is not None:
            if len(min_amounts) != len(payouts):
                raise ValueError(f"Expected {len(payouts)} minimum amounts, got {len(min_amounts)}")
            for k, (paid, minimum) in enumerate(zip(payouts, min_amounts, strict=True)):
                if paid < minimum:
                    raise SlippageExceeded(
                        f"Payout {paid} of {self.config.assets[k]} is below minimum {minimum}"
                    )

        self.ledger.burn(account, shares)
        self._state = PoolState.of(balances)
        for asset, paid in zip(self.config.assets, payouts, strict=True):
            if paid > 0:
                self.transfer.send(asset, account, paid)

        logger.info("pool_burn", account=account, shares=shares, payouts=payouts)
        return payouts

    def swap_mint(
        self,
        i: int,
        amount_in: int,
        min_shares: int = 0,
        *,
        account: str,
    ) -> SwapMintSettlement:
        """Single-asset mint from a deposit of asset i.

        Raises:
            SlippageExceeded: If fewer than min_shares would be minted
            SolverDidNotConverge: If the growth factor cannot be solved
        """
        settlement, state = self._plan_swap_mint(i, amount_in)
        if settlement.shares < min_shares:
            raise SlippageExceeded(
                f"Minted shares {settlement.shares} are below minimum {min_shares}"
            )

        asset = self.config.assets[i]
        self.transfer.receive(asset, account, settlement.amount_in)
        self._state = state
        self.ledger.mint(account, settlement.shares)
        self._pay_protocol(asset, settlement.protocol_fee)

        logger.info(
            "pool_swap_mint",
            account=account,
            token_in=asset,
            amount_in=settlement.amount_in,
            shares=settlement.shares,
            iterations=settlement.iterations,
        )
        return settlement

    def burn_swap(
        self,
        shares: int,
        target_index: int,
        min_out: int = 0,
        *,
        account: str,
    ) -> BurnSwapSettlement:
        """Single-asset redeem of shares into asset target_index.

        Raises:
            SlippageExceeded: If the payout is below min_out
        """
        settlement, state = self._plan_burn_swap(shares, target_index)
        if settlement.amount_out < min_out:
            raise SlippageExceeded(f"Payout {settlement.amount_out} is below minimum {min_out}")

        asset = self.config.assets[target_index]
        self.ledger.burn(account, shares)
        self._state = state
        if settlement.amount_out > 0:
            self.transfer.send(asset, account, settlement.amount_out)
        self._pay_protocol(asset, settlement.protocol_fee)

        logger.info(
            "pool_burn_swap",
            account=account,
            token_out=asset,
            shares=shares,
            amount_out=settlement.amount_out,
            skipped=[c.index for c in settlement.contributions if c.skipped],
        )
        return settlement

    # --- Planning ---

    def _require_state(self) -> PoolState:
        if self._state is None:
            raise ZeroLiquidity("Pool is not initialized")
        return self._state

    def _check_index(self, index: int) -> None:
        n = self.config.n_assets
        if index < 0 or index >= n:
            raise IndexError(f"token_index {index} out of range for {n} tokens")

    def _receive_all(self, account: str, amounts: Sequence[int]) -> None:
        """Pull one amount per asset, or none of them.

        A rejected leg returns the legs already received before re-raising, so
        custody never holds a partial deposit the pool state does not reflect.
        """
        received: list[tuple[str, int]] = []
        try:
            for asset, amount in zip(self.config.assets, amounts, strict=True):
                if amount > 0:
                    self.transfer.receive(asset, account, amount)
                    received.append((asset, amount))
        except Exception:
            logger.debug("inbound_transfer_rolled_back", account=account, legs=len(received))
            for asset, amount in reversed(received):
                self.transfer.send(asset, account, amount)
            raise

    def _pay_protocol(self, asset: str, amount: int) -> None:
        if amount > 0 and self.config.protocol_fee_receiver is not None:
            self.transfer.send(asset, self.config.protocol_fee_receiver, amount)

    def _plan_swap(
        self,
        i: int,
        j: int,
        amount_in: int,
        limit_ratio: Decimal | None,
    ) -> tuple[SwapSettlement, PoolState]:
        state = self._require_state()
        self._check_index(i)
        self._check_index(j)
        factor_in = self.config.scaling_factors[i]
        factor_out = self.config.scaling_factors[j]
        limit = Fp.from_decimal(limit_ratio) if limit_ratio is not None else None

        outcome = self._composer.swap(
            state.balances, i, j, scale_up(amount_in, factor_in), limit=limit
        )
        charged = scale_down_up(outcome.fee.gross, factor_in)
        paid = scale_down_down(outcome.amount_out, factor_out)
        protocol_fee = scale_down_down(outcome.fee.protocol_fee, factor_in)

        balances = _credit(
            outcome.balances,
            i,
            scale_up(charged, factor_in)
            .sub(outcome.fee.gross)
            .add(outcome.fee.protocol_fee)
            .sub(scale_up(protocol_fee, factor_in)),
        )
        balances = _credit(balances, j, outcome.amount_out.sub(scale_up(paid, factor_out)))

        amounts = outcome.amounts
        settlement = SwapSettlement(
            token_in=i,
            token_out=j,
            amount_in=charged,
            amount_out=paid,
            protocol_fee=protocol_fee,
            fee=outcome.fee,
            limited=amounts.limited,
            capped=amounts.capped,
            approximated=amounts.approximated,
        )
        return settlement, PoolState.of(balances)

    def _plan_swap_mint(self, i: int, amount_in: int) -> tuple[SwapMintSettlement, PoolState]:
        state = self._require_state()
        self._check_index(i)
        factor = self.config.scaling_factors[i]

        outcome = self._composer.swap_mint(
            state.balances, i, scale_up(amount_in, factor), Fp(self.ledger.total_supply())
        )
        charged = scale_down_up(outcome.fee.gross, factor)
        protocol_fee = scale_down_down(outcome.fee.protocol_fee, factor)
        balances = _credit(
            outcome.balances,
            i,
            scale_up(charged, factor)
            .sub(outcome.fee.gross)
            .add(outcome.fee.protocol_fee)
            .sub(scale_up(protocol_fee, factor)),
        )

        settlement = SwapMintSettlement(
            token_in=i,
            amount_in=charged,
            shares=outcome.shares.value,
            protocol_fee=protocol_fee,
            fee=outcome.fee,
            iterations=outcome.mint.iterations,
        )
        return settlement, PoolState.of(balances)

    def _plan_burn_swap(
        self, shares: int, target_index: int
    ) -> tuple[BurnSwapSettlement, PoolState]:
        state = self._require_state()
        self._check_index(target_index)
        factor = self.config.scaling_factors[target_index]

        outcome = self._composer.burn_swap(
            state.balances, target_index, Fp(shares), Fp(self.ledger.total_supply())
        )
        paid = scale_down_down(outcome.amount_out, factor)
        protocol_fee = scale_down_down(outcome.fee.protocol_fee, factor)
        balances = _credit(
            outcome.balances,
            target_index,
            outcome.amount_out.sub(scale_up(paid, factor))
            .add(outcome.fee.protocol_fee)
            .sub(scale_up(protocol_fee, factor)),
        )

        settlement = BurnSwapSettlement(
            token_out=target_index,
            shares=shares,
            amount_out=paid,
            protocol_fee=protocol_fee,
            fee=outcome.fee,
            contributions=outcome.redeem.contributions,
        )
        return settlement, PoolState.of(balances)
