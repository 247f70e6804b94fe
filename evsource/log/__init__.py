"""
Event storage and integrity verification.

This module provides:
- EventLog: Abstract interface for event persistence
- InMemoryEventLog: Process-local storage
- FileEventLog: File-based append-only storage (JSONL)
- EventCodec: Domain event <-> stored payload mapping
- Integrity: Hash chain verification
"""

from .store import EventLog, EventRecord, AppendResult
from .memory_store import InMemoryEventLog
from .file_store import FileEventLog
from .codec import EventCodec
from .integrity import ZERO_HASH, hash_record, chain_record, verify_records

__all__ = [
    "EventLog",
    "EventRecord",
    "AppendResult",
    "InMemoryEventLog",
    "FileEventLog",
    "EventCodec",
    "ZERO_HASH",
    "hash_record",
    "chain_record",
    "verify_records",
]
