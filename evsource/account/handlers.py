"""
Account command and event handlers.

Command handlers are pure (state, command) -> Effect functions registered per
state type. Event handlers are pure (state, event) -> state functions; any
pair not registered here is an IllegalFoldError.
"""

from ..core.behavior import EventSourcedBehavior
from ..core.dispatcher import CommandDispatcher
from ..core.effects import Effect, persist, reply, unhandled
from ..core.errors import IllegalFoldError
from ..core.reducer import EventApplier
from .model import (
    CONFIRMED,
    TYPE_KEY,
    ZERO,
    AccountClosed,
    AccountCreated,
    ClosedAccount,
    CloseAccount,
    CreateAccount,
    CurrentBalance,
    Deposit,
    Deposited,
    EmptyAccount,
    GetBalance,
    OpenedAccount,
    Rejected,
    Withdraw,
    Withdrawn,
)

INSUFFICIENT_FUNDS = "insufficient funds"
BALANCE_NOT_ZERO = "balance must be zero"
AMOUNT_NOT_POSITIVE = "amount must be positive"
ALREADY_CREATED = "account is already created"
ACCOUNT_CLOSED = "account is closed"
ALREADY_CLOSED = "account is already closed"


def _confirmed(_state) -> object:
    return CONFIRMED


def _valid_amount(amount) -> bool:
    # NaN and Infinity do not compare or fold safely
    return amount.is_finite() and amount > ZERO


# Empty

def create_account(state: EmptyAccount, cmd: CreateAccount) -> Effect:
    return persist(AccountCreated()).then_reply(_confirmed)


# Opened

def deposit(state: OpenedAccount, cmd: Deposit) -> Effect:
    if not _valid_amount(cmd.amount):
        return reply(Rejected(AMOUNT_NOT_POSITIVE))
    return persist(Deposited(cmd.amount)).then_reply(_confirmed)


def withdraw(state: OpenedAccount, cmd: Withdraw) -> Effect:
    if not _valid_amount(cmd.amount):
        return reply(Rejected(AMOUNT_NOT_POSITIVE))
    if not state.can_withdraw(cmd.amount):
        return reply(Rejected(INSUFFICIENT_FUNDS))
    return persist(Withdrawn(cmd.amount)).then_reply(_confirmed)


def get_balance(state: OpenedAccount, cmd: GetBalance) -> Effect:
    return reply(CurrentBalance(state.balance))


def close_account(state: OpenedAccount, cmd: CloseAccount) -> Effect:
    if state.balance == ZERO:
        return persist(AccountClosed()).then_reply(_confirmed)
    return reply(Rejected(BALANCE_NOT_ZERO))


def already_created(state, cmd: CreateAccount) -> Effect:
    return reply(Rejected(ALREADY_CREATED))


# Empty and Closed

def drop_without_reply(state, cmd) -> Effect:
    return unhandled(no_reply=True)


def closed_reject(state: ClosedAccount, cmd) -> Effect:
    if isinstance(cmd, GetBalance):
        return reply(CurrentBalance(ZERO))
    if isinstance(cmd, CloseAccount):
        return reply(Rejected(ALREADY_CLOSED))
    if isinstance(cmd, CreateAccount):
        return reply(Rejected(ALREADY_CREATED))
    return reply(Rejected(ACCOUNT_CLOSED))


def build_dispatcher(closed_policy: str = "unhandled") -> CommandDispatcher:
    """
    Build the account command handler tables.

    Args:
        closed_policy: "unhandled" drops every command on a closed account
            without a reply; "reject" answers each with a rejection
    """
    if closed_policy not in ("unhandled", "reject"):
        raise ValueError(f"unsupported closed policy: {closed_policy}")

    dispatcher = CommandDispatcher()

    # Anything but CreateAccount is dropped without a reply until the account exists
    dispatcher.for_state(EmptyAccount) \
        .on_command(CreateAccount, create_account) \
        .on_any_command(drop_without_reply)

    dispatcher.for_state(OpenedAccount) \
        .on_command(Deposit, deposit) \
        .on_command(Withdraw, withdraw) \
        .on_command(GetBalance, get_balance) \
        .on_command(CloseAccount, close_account) \
        .on_command(CreateAccount, already_created)

    dispatcher.for_state(ClosedAccount).on_any_command(
        closed_reject if closed_policy == "reject" else drop_without_reply
    )
    return dispatcher


# Event handlers

def on_created(state: EmptyAccount, event: AccountCreated) -> OpenedAccount:
    return OpenedAccount(balance=ZERO)


def on_deposited(state: OpenedAccount, event: Deposited) -> OpenedAccount:
    return OpenedAccount(balance=state.balance + event.amount)


def on_withdrawn(state: OpenedAccount, event: Withdrawn) -> OpenedAccount:
    if not state.can_withdraw(event.amount):
        raise IllegalFoldError(state, event)
    return OpenedAccount(balance=state.balance - event.amount)


def on_closed(state: OpenedAccount, event: AccountClosed) -> ClosedAccount:
    if state.balance != ZERO:
        raise IllegalFoldError(state, event)
    return ClosedAccount()


def build_applier() -> EventApplier:
    applier = EventApplier()
    applier.register(EmptyAccount, AccountCreated, on_created)
    applier.register(OpenedAccount, Deposited, on_deposited)
    applier.register(OpenedAccount, Withdrawn, on_withdrawn)
    applier.register(OpenedAccount, AccountClosed, on_closed)
    return applier


def account_behavior(closed_policy: str = "unhandled") -> EventSourcedBehavior:
    """Account entity definition, starting from EmptyAccount."""
    return EventSourcedBehavior(
        type_key=TYPE_KEY,
        empty_state=EmptyAccount(),
        dispatcher=build_dispatcher(closed_policy),
        applier=build_applier(),
    )
