"""
Bank account domain model.

States, events, commands and replies of the Account entity. All values are
immutable; amounts are Decimal.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict

from ..core.canonical import decimal_to_str
from ..core.commands import Command, ReplyChannel

ZERO = Decimal(0)

TYPE_KEY = "Account"


# Replies

class OperationResult:
    """Reply to state-changing account commands."""
    pass


@dataclass(frozen=True)
class Confirmed(OperationResult):
    pass


@dataclass(frozen=True)
class Rejected(OperationResult):
    reason: str


@dataclass(frozen=True)
class CurrentBalance:
    balance: Decimal


CONFIRMED = Confirmed()


# Events

@dataclass(frozen=True)
class AccountCreated:
    pass


@dataclass(frozen=True)
class Deposited:
    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount <= ZERO:
            raise ValueError(f"deposited amount must be positive: {self.amount}")


@dataclass(frozen=True)
class Withdrawn:
    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount <= ZERO:
            raise ValueError(f"withdrawn amount must be positive: {self.amount}")


@dataclass(frozen=True)
class AccountClosed:
    pass


EVENT_TYPES = (AccountCreated, Deposited, Withdrawn, AccountClosed)


# States

@dataclass(frozen=True)
class EmptyAccount:
    def to_dict(self) -> Dict[str, Any]:
        return {"status": "empty"}


@dataclass(frozen=True)
class OpenedAccount:
    balance: Decimal

    def __post_init__(self) -> None:
        if self.balance < ZERO:
            raise ValueError("Account balance can't be negative")

    def can_withdraw(self, amount: Decimal) -> bool:
        return self.balance - amount >= ZERO

    def to_dict(self) -> Dict[str, Any]:
        return {"status": "opened", "balance": decimal_to_str(self.balance)}


@dataclass(frozen=True)
class ClosedAccount:
    def to_dict(self) -> Dict[str, Any]:
        return {"status": "closed"}


STATE_TYPES = (EmptyAccount, OpenedAccount, ClosedAccount)


# Commands

@dataclass(frozen=True)
class CreateAccount(Command):
    reply_type = OperationResult

    reply_to: ReplyChannel = field(compare=False, repr=False)


@dataclass(frozen=True)
class Deposit(Command):
    reply_type = OperationResult

    amount: Decimal
    reply_to: ReplyChannel = field(compare=False, repr=False)


@dataclass(frozen=True)
class Withdraw(Command):
    reply_type = OperationResult

    amount: Decimal
    reply_to: ReplyChannel = field(compare=False, repr=False)


@dataclass(frozen=True)
class GetBalance(Command):
    reply_type = CurrentBalance

    reply_to: ReplyChannel = field(compare=False, repr=False)


@dataclass(frozen=True)
class CloseAccount(Command):
    reply_type = OperationResult

    reply_to: ReplyChannel = field(compare=False, repr=False)


COMMAND_TYPES = (CreateAccount, Deposit, Withdraw, GetBalance, CloseAccount)
