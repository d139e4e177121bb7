"""Interfaces of the pool's external collaborators, with in-memory versions.

The pool only computes amounts. Moving tokens and tracking LP shares belongs to
a BalanceTransfer and a ShareLedger; both work in raw token units. A
collaborator rejects a call by raising, which aborts the operation before the
pool state changes.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Protocol, runtime_checkable


@runtime_checkable
class BalanceTransfer(Protocol):
    """Custody of the pool's assets."""

    def receive(self, asset: str, sender: str, amount: int) -> None:
        """Pull amount of asset from sender into the pool."""
        ...

    def send(self, asset: str, recipient: str, amount: int) -> None:
        """Push amount of asset from the pool to recipient."""
        ...


@runtime_checkable
class ShareLedger(Protocol):
    """LP share accounting."""

    def total_supply(self) -> int: ...

    def mint(self, account: str, amount: int) -> None: ...

    def burn(self, account: str, amount: int) -> None: ...


class InsufficientBalance(Exception):
    """An in-memory account does not hold enough to cover a transfer."""

    pass


class InMemoryTransfer:
    """Dict-backed BalanceTransfer holding both user accounts and pool custody."""

    def __init__(self) -> None:
        self.accounts: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
        self.custody: dict[str, int] = defaultdict(int)

    def fund(self, account: str, asset: str, amount: int) -> None:
        self.accounts[account][asset] += amount

    def balance_of(self, account: str, asset: str) -> int:
        return self.accounts[account][asset]

    def receive(self, asset: str, sender: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative, got {amount}")
        held = self.accounts[sender][asset]
        if held < amount:
            raise InsufficientBalance(f"{sender} holds {held} {asset}, needs {amount}")
        self.accounts[sender][asset] = held - amount
        self.custody[asset] += amount

    def send(self, asset: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative, got {amount}")
        if self.custody[asset] < amount:
            raise InsufficientBalance(f"Pool holds {self.custody[asset]} {asset}, needs {amount}")
        self.custody[asset] -= amount
        self.accounts[recipient][asset] += amount


class InMemoryShareLedger:
    """Dict-backed ShareLedger."""

    def __init__(self) -> None:
        self.shares: dict[str, int] = defaultdict(int)
        self._supply = 0

    def total_supply(self) -> int:
        return self._supply

    def balance_of(self, account: str) -> int:
        return self.shares[account]

    def mint(self, account: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Mint amount must be non-negative, got {amount}")
        self.shares[account] += amount
        self._supply += amount

    def burn(self, account: str, amount: int) -> None:
        held = self.shares[account]
        if amount < 0 or held < amount:
            raise InsufficientBalance(f"{account} holds {held} shares, cannot burn {amount}")
        self.shares[account] = held - amount
        self._supply -= amount
