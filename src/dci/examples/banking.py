"""
Money transfer between accounts, wired the DCI way.

Accounts only know how to change their own balance. Moving money between
two of them is the MoneySource role's transfer_funds, and starting a transfer
is TransferCtx's job.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

from dci.capability import CapabilityInterface
from dci.context import Context
from dci.data import DataObject
from dci.errors import DomainError
from dci.providers import ProviderRegistry, role_actions

INSUFFICIENT_FUNDS = "Insufficient Funds"
INVALID_AMOUNT = "Invalid Amount"


class MoneySource(Protocol):
    def withdraw(self, amount: Any) -> Any: ...

    def get_balance(self) -> Any: ...


class MoneySink(Protocol):
    def deposit(self, amount: Any) -> None: ...


MONEY_SOURCE = CapabilityInterface.from_protocol(MoneySource, roles={"transfer_funds": 2})
MONEY_SINK = CapabilityInterface.from_protocol(MoneySink)


class MoneySourceActions:
    @staticmethod
    def transfer_funds(self: MoneySource, dest: MoneySink, amount: Any) -> Any:
        if amount <= 0:
            raise DomainError(INVALID_AMOUNT, f"Transfer amount must be positive, got {amount}.")
        available = self.get_balance()
        if amount > available:
            raise DomainError(INSUFFICIENT_FUNDS, f"Tried to withdraw {amount}, {available} available.")
        withdrawn = self.withdraw(amount)
        dest.deposit(withdrawn)
        return withdrawn


def register(registry: Optional[ProviderRegistry] = None, *, overwrite: bool = False) -> None:
    """Register the banking providers (default registry unless one is given)."""
    role_actions(MONEY_SOURCE, registry=registry, overwrite=overwrite)(MoneySourceActions)


class Account(DataObject, capabilities=[MONEY_SOURCE, MONEY_SINK]):
    """A dumb balance holder. Knows nothing about transfers."""

    def __init__(self, initial_balance: Any = 0) -> None:
        self.balance = initial_balance

    def withdraw(self, amount: Any) -> Any:
        with self.guard:
            if amount > self.balance:
                raise DomainError(INSUFFICIENT_FUNDS, f"Tried to withdraw {amount}, {self.balance} available.")
            self.balance -= amount
            return amount

    def deposit(self, amount: Any) -> None:
        with self.guard:
            self.balance += amount

    def get_balance(self) -> Any:
        return self.balance


class FeeAccount(Account):
    """Keeps (1 - fee_rate) of every deposit."""

    def __init__(self, initial_balance: Any = 0, fee_rate: Any = 0.1) -> None:
        super().__init__(initial_balance)
        if not 0 <= fee_rate < 1:
            raise ValueError(f"fee_rate must be in [0, 1), got {fee_rate!r}")
        self.fee_rate = fee_rate

    def deposit(self, amount: Any) -> None:
        with self.guard:
            self.balance += amount * (1 - self.fee_rate)


class TransferCtx(Context):
    participants = (MONEY_SOURCE, MONEY_SINK)

    def interact(self, source: MoneySource, sink: MoneySink, amount: Any) -> Any:
        return source.transfer_funds(sink, amount)
