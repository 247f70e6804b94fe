"""
Event applier: pure state transition functions.

The applier is the heart of event sourcing. It must be:
- Pure (no side effects, no I/O)
- Deterministic (same input -> same output)
- Total over registered pairs (anything else is an IllegalFoldError)

It is used both for live folding of newly persisted events and for replay.
"""

from typing import Any, Callable, Dict, Iterable, Tuple

from .errors import IllegalFoldError

# Handler signature: (current_state, event) -> new_state
Handler = Callable[[Any, Any], Any]


class EventApplier:
    """
    Registry of event handlers keyed by (state type, event type).

    Usage:
        applier = EventApplier()
        applier.register(EmptyAccount, AccountCreated, lambda s, e: OpenedAccount(ZERO))
        new_state = applier.apply(state, event)
    """

    def __init__(self) -> None:
        self._handlers: Dict[Tuple[type, type], Handler] = {}

    def register(self, state_type: type, event_type: type, handler: Handler) -> None:
        """
        Register event handler.

        Args:
            state_type: State class the handler applies to
            event_type: Event class the handler applies to
            handler: Pure function (current_state, event) -> new_state
        """
        self._handlers[(state_type, event_type)] = handler

    def apply(self, state: Any, event: Any) -> Any:
        """
        Apply event to state using registered handler.

        Raises:
            IllegalFoldError: If no handler is registered for (state, event)
        """
        handler = self._handlers.get((type(state), type(event)))
        if handler is None:
            raise IllegalFoldError(state, event)
        return handler(state, event)

    def fold(self, state: Any, events: Iterable[Any]) -> Any:
        """Apply events in order, returning the final state."""
        for ev in events:
            state = self.apply(state, ev)
        return state
