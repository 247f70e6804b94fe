"""
Event-Sourced Aggregate Engine

Per-entity state machines whose state is derived only by replaying an
append-only log of domain events.
"""

__version__ = "0.1.0"
