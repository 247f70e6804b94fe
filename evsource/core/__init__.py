"""
Core event-sourcing primitives.

This module provides the foundational abstractions:
- Command: Requests carrying a reply obligation
- Effects: Declarative results of command handling
- EventApplier: Pure (state, event) -> state transitions
- CommandDispatcher: Per-state (state, command) -> effect tables
- EventSourcedBehavior: Definition of one entity type
- Canonical: Deterministic serialization
"""

from .commands import Command, ReplyBox, ReplyChannel
from .effects import (
    Effect,
    PersistAndReply,
    ReplyOnly,
    Unhandled,
    UNHANDLED,
    UnhandledNoReply,
    UNHANDLED_NO_REPLY,
    persist,
    reply,
    unhandled,
)
from .reducer import EventApplier
from .dispatcher import CommandDispatcher, StateHandlers
from .behavior import EventSourcedBehavior
from .canonical import canonicalize, canonical_json_bytes, canonical_json_str
from .errors import (
    EngineError,
    IllegalFoldError,
    UnhandledEnforcedCommandError,
    InvalidEffectError,
    EntityStoppedError,
    EntityBusyError,
    EventStoreError,
    IntegrityError,
)

__all__ = [
    "Command",
    "ReplyBox",
    "ReplyChannel",
    "Effect",
    "PersistAndReply",
    "ReplyOnly",
    "Unhandled",
    "UNHANDLED",
    "UnhandledNoReply",
    "UNHANDLED_NO_REPLY",
    "persist",
    "reply",
    "unhandled",
    "EventApplier",
    "CommandDispatcher",
    "StateHandlers",
    "EventSourcedBehavior",
    "canonicalize",
    "canonical_json_bytes",
    "canonical_json_str",
    "EngineError",
    "IllegalFoldError",
    "UnhandledEnforcedCommandError",
    "InvalidEffectError",
    "EntityStoppedError",
    "EntityBusyError",
    "EventStoreError",
    "IntegrityError",
]
