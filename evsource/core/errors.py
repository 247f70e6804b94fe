"""
Exception types for the aggregate engine.
"""


class EngineError(Exception):
    """Base class for engine failures."""
    pass


class IllegalFoldError(EngineError):
    """Raised when an event cannot be applied to the current state."""

    def __init__(self, state, event) -> None:
        self.state = state
        self.event = event
        # Set to the STOPPED EntityHandle when raised during activation
        self.handle = None
        super().__init__(
            f"unexpected event [{type(event).__name__}] in state [{type(state).__name__}]"
        )


class UnhandledEnforcedCommandError(EngineError):
    """Raised when a reply-enforced command has no handler for the current state."""

    def __init__(self, state, command) -> None:
        self.state = state
        self.command = command
        super().__init__(
            f"no handler for reply-enforced command [{type(command).__name__}] "
            f"in state [{type(state).__name__}]"
        )


class InvalidEffectError(EngineError):
    """Raised when a command handler returns a malformed effect."""
    pass


class EntityStoppedError(EngineError):
    """Raised when a command is submitted to an entity that is not active."""
    pass


class EventStoreError(EngineError):
    """Raised when event log operations fail."""
    pass


class IntegrityError(EngineError):
    """Raised when hash chain verification fails."""
    pass


class EntityBusyError(EngineError):
    """Raised when a command arrives while another is awaiting persistence."""
    pass
