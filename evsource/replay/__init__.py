"""
Replay system for deterministic state reconstruction.

Replay applies the event applier to an entity's event stream.
Must be 100% deterministic: same events -> same state.
"""

from .runner import ReplayResult, replay, compute_state_hash

__all__ = [
    "ReplayResult",
    "replay",
    "compute_state_hash",
]
