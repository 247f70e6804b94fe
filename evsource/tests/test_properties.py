"""
Property tests over random command sequences.
"""

from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from evsource.account import (
    AccountClosed,
    ClosedAccount,
    CloseAccount,
    CreateAccount,
    Deposit,
    EmptyAccount,
    GetBalance,
    OpenedAccount,
    Rejected,
    Withdraw,
    account_behavior,
    build_applier,
)
from evsource.core.commands import ReplyBox
from evsource.engine import AggregateEngine
from evsource.log.memory_store import InMemoryEventLog
from evsource.replay.runner import compute_state_hash, replay

amounts = st.decimals(
    min_value=Decimal("0.01"),
    max_value=Decimal("1000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)

commands = st.one_of(
    st.just(("create", None)),
    st.tuples(st.just("deposit"), amounts),
    st.tuples(st.just("withdraw"), amounts),
    st.just(("balance", None)),
    st.just(("close", None)),
)


def _command(kind, amount, box):
    if kind == "create":
        return CreateAccount(reply_to=box)
    if kind == "deposit":
        return Deposit(amount, reply_to=box)
    if kind == "withdraw":
        return Withdraw(amount, reply_to=box)
    if kind == "balance":
        return GetBalance(reply_to=box)
    return CloseAccount(reply_to=box)


def _run(script):
    log = InMemoryEventLog()
    engine = AggregateEngine(account_behavior(), log)
    handle = engine.activate("acc")
    outcomes = []
    for kind, amount in script:
        box = ReplyBox()
        before = handle.state
        outcome = engine.submit(handle, _command(kind, amount, box))
        outcomes.append((kind, amount, before, outcome, box))
    return log, handle, outcomes


@settings(max_examples=200, deadline=None)
@given(st.lists(commands, max_size=30))
def test_state_invariants_hold(script):
    log, handle, _ = _run(script)

    # Folding every persisted event from Empty keeps balance >= 0 throughout
    applier = build_applier()
    state = EmptyAccount()
    for rec in log.read_events("Account|acc"):
        if isinstance(rec.event, AccountClosed):
            assert state == OpenedAccount(Decimal(0))
        state = applier.apply(state, rec.event)
        if isinstance(state, OpenedAccount):
            assert state.balance >= 0
    assert state == handle.state


@settings(max_examples=200, deadline=None)
@given(st.lists(commands, max_size=30))
def test_replies_exactly_once_and_rejections_never_persist(script):
    _, _, outcomes = _run(script)

    for kind, amount, before, outcome, box in outcomes:
        if outcome.replied:
            assert len(box.replies) == 1
        else:
            assert box.replies == []
            assert outcome.persisted == ()
            assert isinstance(before, (EmptyAccount, ClosedAccount))
        if outcome.replied and isinstance(box.replies[0], Rejected):
            assert outcome.persisted == ()
        if kind == "withdraw" and isinstance(before, OpenedAccount) and amount > before.balance:
            assert outcome.persisted == ()
            assert isinstance(box.reply, Rejected)


@settings(max_examples=100, deadline=None)
@given(st.lists(commands, max_size=30))
def test_recovery_matches_live_state(script):
    log, handle, _ = _run(script)
    behavior = account_behavior()

    recovered = AggregateEngine(behavior, log).activate("acc")
    first = replay(log, behavior, "acc")
    second = replay(log, behavior, "acc")

    assert recovered.state == handle.state
    assert compute_state_hash(first.state) == compute_state_hash(second.state)
    assert compute_state_hash(recovered.state) == compute_state_hash(handle.state)
