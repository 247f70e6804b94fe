import pytest

from evsource.account import account_behavior
from evsource.core.commands import ReplyBox
from evsource.engine import AggregateEngine
from evsource.log.memory_store import InMemoryEventLog


@pytest.fixture
def log():
    return InMemoryEventLog()


@pytest.fixture
def engine(log):
    return AggregateEngine(account_behavior(), log)


@pytest.fixture
def box():
    return ReplyBox()
