"""
Replay runner: reconstruct entity state from the event log.

Replay is pure: folds every stored event through the applier in log order.
"""

import hashlib
from dataclasses import dataclass
from typing import Any, Optional

from ..core.behavior import EventSourcedBehavior
from ..core.canonical import canonical_json_bytes
from ..log.store import EventLog


@dataclass(frozen=True)
class ReplayResult:
    """
    Result of replay operation.

    Fields:
        state: Final state after applying events
        applied: Number of events applied
        last_seq: Log sequence of the last applied event (-1 if none)
    """
    state: Any
    applied: int
    last_seq: int = -1


def replay(
    log: EventLog,
    behavior: EventSourcedBehavior,
    entity_id: str,
    to_seq: Optional[int] = None,
) -> ReplayResult:
    """
    Replay one entity's events to reconstruct its state.

    Same events always produce the same state.

    Args:
        log: Event log to read from
        behavior: Entity definition (empty state and applier)
        entity_id: Entity identity (not the persistence key)
        to_seq: Stop at this sequence (inclusive, None = all)

    Returns:
        ReplayResult with final state and count

    Raises:
        IllegalFoldError: If the log holds an event illegal for the state
    """
    st = behavior.empty_state
    count = 0
    last_seq = -1

    for rec in log.read_events(behavior.persistence_id(entity_id)):
        if to_seq is not None and rec.seq > to_seq:
            break
        st = behavior.applier.apply(st, rec.event)
        count += 1
        last_seq = rec.seq

    return ReplayResult(state=st, applied=count, last_seq=last_seq)


def compute_state_hash(state: Any) -> str:
    """
    Compute SHA-256 hash of a state's canonical form.

    States expose to_dict(); equal states hash identically.
    """
    return hashlib.sha256(canonical_json_bytes(state.to_dict())).hexdigest()
