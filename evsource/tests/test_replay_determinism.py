"""
Tests for replay determinism and recovery.

Critical: Recovery must reproduce exactly the state that existed live.
"""

import os
import tempfile
from decimal import Decimal

import pytest

from evsource.account import (
    AccountClosed,
    AccountCreated,
    CreateAccount,
    Deposit,
    Deposited,
    EmptyAccount,
    GetBalance,
    OpenedAccount,
    Withdraw,
    account_behavior,
    account_codec,
)
from evsource.core.commands import ReplyBox
from evsource.core.errors import EntityStoppedError, IllegalFoldError
from evsource.engine import ACTIVE, STOPPED, AggregateEngine
from evsource.log.file_store import FileEventLog
from evsource.log.memory_store import InMemoryEventLog
from evsource.replay.runner import compute_state_hash, replay


def _drive(engine, entity_id):
    h = engine.activate(entity_id)
    for cmd in (
        CreateAccount(reply_to=ReplyBox()),
        Deposit(Decimal("100"), reply_to=ReplyBox()),
        Withdraw(Decimal("30"), reply_to=ReplyBox()),
        Withdraw(Decimal("1000"), reply_to=ReplyBox()),
        Deposit(Decimal("0.50"), reply_to=ReplyBox()),
    ):
        engine.submit(h, cmd)
    return h


def test_recovery_reproduces_live_state():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "events.log")
        live = _drive(AggregateEngine(account_behavior(), FileEventLog(path, account_codec())), "acc-1")

        # Fresh engine and log object, as after a crash
        engine = AggregateEngine(account_behavior(), FileEventLog(path, account_codec()))
        recovered = engine.activate("acc-1")

        assert recovered.mode == ACTIVE
        assert recovered.state == live.state == OpenedAccount(Decimal("70.50"))
        assert recovered.applied == live.applied == 4
        assert recovered.last_seq == live.last_seq
        assert compute_state_hash(recovered.state) == compute_state_hash(live.state)

        box = ReplyBox()
        engine.submit(recovered, GetBalance(reply_to=box))
        assert box.reply.balance == Decimal("70.50")


def test_replay_determinism_100_runs():
    log = InMemoryEventLog()
    _drive(AggregateEngine(account_behavior(), log), "acc-1")
    behavior = account_behavior()

    hashes = {compute_state_hash(replay(log, behavior, "acc-1").state) for _ in range(100)}

    assert len(hashes) == 1


def test_replay_partial():
    log = InMemoryEventLog()
    _drive(AggregateEngine(account_behavior(), log), "acc-1")

    result = replay(log, account_behavior(), "acc-1", to_seq=1)

    assert result.applied == 2
    assert result.last_seq == 1
    assert result.state == OpenedAccount(Decimal("100"))


def test_replay_empty_log():
    result = replay(InMemoryEventLog(), account_behavior(), "nobody")

    assert result.applied == 0
    assert result.last_seq == -1
    assert result.state == EmptyAccount()


def test_replay_filters_by_entity():
    log = InMemoryEventLog()
    engine = AggregateEngine(account_behavior(), log)
    _drive(engine, "acc-1")
    h2 = engine.activate("acc-2")
    engine.submit(h2, CreateAccount(reply_to=ReplyBox()))

    assert replay(log, account_behavior(), "acc-2").applied == 1
    assert replay(log, account_behavior(), "acc-1").applied == 4


def test_corrupt_log_stops_entity_during_recovery():
    log = InMemoryEventLog()
    behavior = account_behavior()
    pid = behavior.persistence_id("acc-1")
    log.append(pid, [AccountCreated()])
    log.append(pid, [AccountCreated()])

    engine = AggregateEngine(behavior, log)
    with pytest.raises(IllegalFoldError):
        engine.activate("acc-1")


def test_illegal_close_in_log_is_fatal():
    log = InMemoryEventLog()
    behavior = account_behavior()
    pid = behavior.persistence_id("acc-1")
    log.append(pid, [AccountCreated(), Deposited(Decimal(5)), AccountClosed()])

    with pytest.raises(IllegalFoldError):
        replay(log, behavior, "acc-1")


def test_failed_recovery_handle_is_stopped():
    log = InMemoryEventLog()
    behavior = account_behavior()
    log.append(behavior.persistence_id("acc-1"), [Deposited(Decimal(1))])
    engine = AggregateEngine(behavior, log)

    with pytest.raises(IllegalFoldError) as exc_info:
        engine.activate("acc-1")

    handle = exc_info.value.handle
    assert handle.failure is exc_info.value
    assert handle.mode == STOPPED
    with pytest.raises(EntityStoppedError):
        engine.submit(handle, GetBalance(reply_to=ReplyBox()))
