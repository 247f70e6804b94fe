"""
Effect algebra: declarative results of handling one command.

Handlers never persist or reply themselves. They return one of:
- PersistAndReply: append events, then reply computed from the resulting state
- ReplyOnly: reply immediately, nothing persisted
- Unhandled: no handler for this command in the current state
- UnhandledNoReply: the state declares it drops the command without a reply

The engine executes the effect.
"""

from dataclasses import dataclass
from typing import Any, Callable, Tuple

from .errors import InvalidEffectError

# Reply function signature: resulting_state -> reply
ReplyFn = Callable[[Any], Any]


class Effect:
    """Base class for effects."""
    pass


@dataclass(frozen=True)
class PersistAndReply(Effect):
    """
    Persist events in order, then reply.

    Fields:
        events: Non-empty tuple of events, appended atomically
        reply_fn: Called with the state after all events are folded
    """
    events: Tuple[Any, ...]
    reply_fn: ReplyFn

    def __post_init__(self) -> None:
        if not isinstance(self.events, tuple):
            object.__setattr__(self, "events", tuple(self.events))
        if not self.events:
            raise InvalidEffectError("PersistAndReply requires at least one event")
        if not callable(self.reply_fn):
            raise InvalidEffectError("PersistAndReply requires a callable reply_fn")


@dataclass(frozen=True)
class ReplyOnly(Effect):
    """Reply without persisting anything."""
    reply: Any


class Unhandled(Effect):
    """No handler matched. Use the UNHANDLED singleton."""

    def __repr__(self) -> str:
        return "UNHANDLED"


UNHANDLED = Unhandled()


class UnhandledNoReply(Effect):
    """
    Command deliberately dropped without a reply.

    Unlike a bare UNHANDLED this is a declared outcome of the handler table,
    so the engine does not report it as a missing handler.
    """

    def __repr__(self) -> str:
        return "UNHANDLED_NO_REPLY"


UNHANDLED_NO_REPLY = UnhandledNoReply()


@dataclass(frozen=True)
class PendingPersist:
    """
    Events waiting for their reply.

    Only then_reply() turns this into an Effect, so a persist without a reply
    cannot be returned from a handler.
    """
    events: Tuple[Any, ...]

    def then_reply(self, reply_fn: ReplyFn) -> PersistAndReply:
        return PersistAndReply(events=self.events, reply_fn=reply_fn)


def persist(*events: Any) -> PendingPersist:
    """
    Start a persist effect.

    Usage:
        return persist(Deposited(cmd.amount)).then_reply(lambda _: CONFIRMED)
    """
    if not events:
        raise InvalidEffectError("persist() requires at least one event")
    return PendingPersist(events=tuple(events))


def reply(value: Any) -> ReplyOnly:
    return ReplyOnly(reply=value)


def unhandled(no_reply: bool = False) -> Effect:
    """
    Leave the command unhandled.

    With no_reply=True the drop is declared and the caller is knowingly left
    without an answer.
    """
    if no_reply:
        return UNHANDLED_NO_REPLY
    return UNHANDLED
