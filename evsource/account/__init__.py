"""
Account entity: a bank account with Empty -> Opened -> Closed lifecycle.
"""

from .model import (
    TYPE_KEY,
    ZERO,
    CONFIRMED,
    OperationResult,
    Confirmed,
    Rejected,
    CurrentBalance,
    AccountCreated,
    Deposited,
    Withdrawn,
    AccountClosed,
    EmptyAccount,
    OpenedAccount,
    ClosedAccount,
    CreateAccount,
    Deposit,
    Withdraw,
    GetBalance,
    CloseAccount,
    EVENT_TYPES,
    STATE_TYPES,
    COMMAND_TYPES,
)
from .handlers import account_behavior, build_applier, build_dispatcher
from .codec import account_codec

__all__ = [
    "TYPE_KEY",
    "ZERO",
    "CONFIRMED",
    "OperationResult",
    "Confirmed",
    "Rejected",
    "CurrentBalance",
    "AccountCreated",
    "Deposited",
    "Withdrawn",
    "AccountClosed",
    "EmptyAccount",
    "OpenedAccount",
    "ClosedAccount",
    "CreateAccount",
    "Deposit",
    "Withdraw",
    "GetBalance",
    "CloseAccount",
    "EVENT_TYPES",
    "STATE_TYPES",
    "COMMAND_TYPES",
    "account_behavior",
    "build_applier",
    "build_dispatcher",
    "account_codec",
]
