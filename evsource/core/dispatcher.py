"""
Command dispatcher: state-dependent handler tables.

Dispatch is keyed first by the runtime type of the state, then by the runtime
type of the command. Handlers are pure: (state, command) -> Effect.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .effects import Effect, UNHANDLED

# Handler signature: (state, command) -> Effect
CommandHandler = Callable[[Any, Any], Effect]


class StateHandlers:
    """Handler table for one state type."""

    def __init__(self, state_type: type) -> None:
        self.state_type = state_type
        self._on_command: Dict[type, CommandHandler] = {}
        self._on_any: Optional[CommandHandler] = None

    def on_command(self, command_type: type, handler: CommandHandler) -> "StateHandlers":
        self._on_command[command_type] = handler
        return self

    def on_any_command(self, handler: CommandHandler) -> "StateHandlers":
        """Fallback for every command without a specific handler."""
        self._on_any = handler
        return self

    def lookup(self, command_type: type) -> Optional[CommandHandler]:
        handler = self._on_command.get(command_type)
        if handler is None:
            return self._on_any
        return handler


class CommandDispatcher:
    """
    Registry of per-state handler tables.

    Usage:
        dispatcher = CommandDispatcher()
        dispatcher.for_state(EmptyAccount).on_command(CreateAccount, create_account)
        effect = dispatcher.dispatch(state, command)
    """

    def __init__(self) -> None:
        self._tables: Dict[type, StateHandlers] = {}

    def for_state(self, state_type: type) -> StateHandlers:
        table = self._tables.get(state_type)
        if table is None:
            table = StateHandlers(state_type)
            self._tables[state_type] = table
        return table

    def dispatch(self, state: Any, command: Any) -> Effect:
        """
        Select and run the handler for (state, command).

        Returns:
            The handler's effect, or UNHANDLED when no handler matches
        """
        table = self._tables.get(type(state))
        if table is None:
            return UNHANDLED
        handler = table.lookup(type(command))
        if handler is None:
            return UNHANDLED
        return handler(state, command)

    def missing_handlers(
        self, state_types: Iterable[type], command_types: Iterable[type]
    ) -> List[Tuple[type, type]]:
        """
        List (state type, command type) pairs that have no handler.

        Used to check handler-table completeness whenever a state or command
        variant is added.
        """
        command_types = list(command_types)
        missing = []
        for st in state_types:
            table = self._tables.get(st)
            for ct in command_types:
                if table is None or table.lookup(ct) is None:
                    missing.append((st, ct))
        return missing
