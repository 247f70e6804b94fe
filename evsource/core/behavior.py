"""
Event-sourced behavior: everything the engine needs to run one entity type.
"""

from dataclasses import dataclass
from typing import Any

from .dispatcher import CommandDispatcher
from .reducer import EventApplier


@dataclass(frozen=True)
class EventSourcedBehavior:
    """
    Definition of one entity type.

    Fields:
        type_key: Entity type name (e.g. "Account"), used for log routing and logging
        empty_state: State every entity starts from before any event
        dispatcher: Per-state command handlers
        applier: Per-state event handlers
    """
    type_key: str
    empty_state: Any
    dispatcher: CommandDispatcher
    applier: EventApplier

    def persistence_id(self, entity_id: str) -> str:
        """Stable key for the entity's events in the log."""
        return f"{self.type_key}|{entity_id}"
