"""
Aggregate engine: recovery and command handling for one entity type.

Protocol:
1. activate(entity_id) replays the entity's events (RECOVERING) and returns an
   ACTIVE handle.
2. submit(handle, command) dispatches the command, validates the effect,
   appends events, folds them and replies, in that order.

Precondition: the host serializes submit() calls per entity identity (one
actor, task, or consumer per entity). The engine takes no locks of its own.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .logging_config import get_logger
from .log.store import EventLog
from .replay.runner import replay
from .core.behavior import EventSourcedBehavior
from .core.effects import PersistAndReply, ReplyOnly, Unhandled, UnhandledNoReply
from .core.errors import (
    EntityBusyError,
    EntityStoppedError,
    IllegalFoldError,
    InvalidEffectError,
    UnhandledEnforcedCommandError,
)

RECOVERING = "recovering"
ACTIVE = "active"
STOPPED = "stopped"

REPLIED = "replied"
NO_REPLY = "no_reply"


@dataclass
class EntityHandle:
    """
    Live entity instance owned by one engine.

    Fields:
        entity_id: Entity identity
        persistence_id: Key of the entity's events in the log
        state: Current state (derived, never stored)
        mode: RECOVERING, ACTIVE or STOPPED
        applied: Number of events folded so far
        last_seq: Log sequence of the last folded event
        in_flight: Command waiting for its append to be acknowledged
        failure: Fatal error that stopped the entity
    """
    entity_id: str
    persistence_id: str
    state: Any
    mode: str = RECOVERING
    applied: int = 0
    last_seq: int = -1
    in_flight: Optional[Any] = None
    failure: Optional[Exception] = None

    @property
    def active(self) -> bool:
        return self.mode == ACTIVE


@dataclass(frozen=True)
class SubmitOutcome:
    """
    Result of submitting one command.

    Fields:
        status: REPLIED (reply handed to the caller's channel) or NO_REPLY
        reply: The reply, if any
        persisted: Events appended for this command
    """
    status: str
    reply: Any = None
    persisted: Tuple[Any, ...] = ()

    @property
    def replied(self) -> bool:
        return self.status == REPLIED


class AggregateEngine:
    """
    Orchestrates dispatcher, applier and event log for one entity type.

    Usage:
        engine = AggregateEngine(account_behavior(), InMemoryEventLog())
        handle = engine.activate("acc-1")
        outcome = engine.submit(handle, Deposit(Decimal("100"), reply_to=box))
    """

    def __init__(
        self,
        behavior: EventSourcedBehavior,
        log: EventLog,
        unhandled_policy: str = "log",
    ) -> None:
        """
        Args:
            behavior: Entity definition
            log: Event log collaborator
            unhandled_policy: "log" reports unhandled reply-enforced commands
                at ERROR level, "raise" raises UnhandledEnforcedCommandError.
                Declared no-reply drops are never reported.
        """
        if unhandled_policy not in ("log", "raise"):
            raise ValueError(f"unsupported unhandled policy: {unhandled_policy}")
        self.behavior = behavior
        self.log = log
        self.unhandled_policy = unhandled_policy

    def activate(self, entity_id: str) -> EntityHandle:
        """
        Recover an entity from its events and make it ACTIVE.

        No commands are processed and no replies are sent while recovering.

        Raises:
            IllegalFoldError: If the stored events cannot be folded. The
                STOPPED handle is attached to the error as its handle
                attribute.
        """
        pid = self.behavior.persistence_id(entity_id)
        handle = EntityHandle(
            entity_id=entity_id,
            persistence_id=pid,
            state=self.behavior.empty_state,
        )
        logger = get_logger(__name__, trace_id=pid)

        try:
            result = replay(self.log, self.behavior, entity_id)
        except IllegalFoldError as ex:
            self._stop(handle, ex)
            ex.handle = handle
            raise

        handle.state = result.state
        handle.applied = result.applied
        handle.last_seq = result.last_seq
        handle.mode = ACTIVE
        logger.info(
            "Entity recovered: %d events applied, state %s",
            result.applied,
            type(result.state).__name__,
        )
        return handle

    def submit(self, handle: EntityHandle, command: Any) -> SubmitOutcome:
        """
        Handle one command.

        Must not be called concurrently for the same entity.

        Returns:
            SubmitOutcome describing whether a reply was sent

        Raises:
            EntityStoppedError: If the handle is not ACTIVE
            EntityBusyError: If another command is still awaiting persistence
            EventStoreError: If the append failed (no state change, no reply)
            IllegalFoldError: If the effect's events are illegal for the state
            InvalidEffectError: If the handler returned a malformed effect
            UnhandledEnforcedCommandError: Under the "raise" unhandled policy
        """
        if not handle.active:
            raise EntityStoppedError(
                f"entity {handle.persistence_id} is {handle.mode}, not accepting commands"
            )
        if handle.in_flight is not None:
            raise EntityBusyError(
                f"entity {handle.persistence_id} is still persisting "
                f"{type(handle.in_flight).__name__}"
            )

        effect = self.behavior.dispatcher.dispatch(handle.state, command)

        if isinstance(effect, UnhandledNoReply):
            return self._dropped(handle, command)
        if isinstance(effect, Unhandled):
            return self._unhandled(handle, command)
        if isinstance(effect, ReplyOnly):
            self._check_reply(command, effect.reply)
            self._deliver(handle, command, effect.reply)
            return SubmitOutcome(status=REPLIED, reply=effect.reply)
        if isinstance(effect, PersistAndReply):
            return self._persist_and_reply(handle, command, effect)

        raise InvalidEffectError(f"unsupported effect: {effect!r}")

    def _persist_and_reply(
        self, handle: EntityHandle, command: Any, effect: PersistAndReply
    ) -> SubmitOutcome:
        logger = get_logger(__name__, trace_id=handle.persistence_id)
        if not effect.events:
            raise InvalidEffectError("PersistAndReply requires at least one event")

        # Fold before appending so an illegal event never reaches the log
        try:
            new_state = self.behavior.applier.fold(handle.state, effect.events)
        except IllegalFoldError as ex:
            self._stop(handle, ex)
            raise

        handle.in_flight = command
        try:
            result = self.log.append(handle.persistence_id, effect.events)
        finally:
            handle.in_flight = None

        handle.state = new_state
        handle.applied += len(effect.events)
        handle.last_seq = result.last_seq
        logger.debug(
            "Persisted %s up to seq %d",
            [type(ev).__name__ for ev in effect.events],
            result.last_seq,
        )

        value = effect.reply_fn(new_state)
        self._check_reply(command, value)
        self._deliver(handle, command, value)
        return SubmitOutcome(status=REPLIED, reply=value, persisted=effect.events)

    def _check_reply(self, command: Any, value: Any) -> None:
        if not command.accepts_reply(value):
            raise InvalidEffectError(
                f"{type(command).__name__} expects a {command.reply_type} reply, "
                f"got {type(value).__name__}"
            )

    def _deliver(self, handle: EntityHandle, command: Any, value: Any) -> None:
        """
        Hand the reply to the caller's channel.

        Delivery is fire-and-forget: by now any events are durable and the
        state is committed, so a failing channel must not surface as a
        command failure the host might retry.
        """
        try:
            command.deliver(value)
        except Exception as ex:
            get_logger(__name__, trace_id=handle.persistence_id).warning(
                "Reply to %s not delivered: %s", type(command).__name__, ex
            )

    def _dropped(self, handle: EntityHandle, command: Any) -> SubmitOutcome:
        get_logger(__name__, trace_id=handle.persistence_id).info(
            "Dropped %s without reply in state %s",
            type(command).__name__,
            type(handle.state).__name__,
        )
        return SubmitOutcome(status=NO_REPLY)

    def _unhandled(self, handle: EntityHandle, command: Any) -> SubmitOutcome:
        logger = get_logger(__name__, trace_id=handle.persistence_id)
        if command.enforced_reply:
            err = UnhandledEnforcedCommandError(handle.state, command)
            if self.unhandled_policy == "raise":
                raise err
            logger.error(str(err))
        else:
            logger.info(
                "Unhandled command %s in state %s",
                type(command).__name__,
                type(handle.state).__name__,
            )
        return SubmitOutcome(status=NO_REPLY)

    def _stop(self, handle: EntityHandle, ex: Exception) -> None:
        handle.mode = STOPPED
        handle.failure = ex
        get_logger(__name__, trace_id=handle.persistence_id).error("Entity stopped: %s", ex)
