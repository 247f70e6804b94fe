"""
In-memory event log.

Durable for the lifetime of the process only. Used for tests and embedding.
"""

import threading
from typing import Any, Dict, Iterator, List, Sequence

from ..core.errors import EventStoreError
from .store import AppendResult, EventLog, EventRecord


class InMemoryEventLog(EventLog):
    """
    Append-only event log held in a list.

    The lock protects the shared sequence counter across entities; per-entity
    ordering is still the host's responsibility.
    """

    def __init__(self) -> None:
        self._records: List[EventRecord] = []
        self._by_entity: Dict[str, List[EventRecord]] = {}
        self._lock = threading.Lock()

    def append(self, entity_id: str, events: Sequence[Any]) -> AppendResult:
        if not events:
            raise EventStoreError("append requires at least one event")
        with self._lock:
            base = len(self._records)
            records = tuple(
                EventRecord(entity_id=entity_id, seq=base + i, event=ev)
                for i, ev in enumerate(events)
            )
            self._records.extend(records)
            self._by_entity.setdefault(entity_id, []).extend(records)
        return AppendResult(records=records)

    def read_events(self, entity_id: str, from_seq: int = 0) -> Iterator[EventRecord]:
        for rec in list(self._by_entity.get(entity_id, ())):
            if rec.seq < from_seq:
                continue
            yield rec

    def __len__(self) -> int:
        return len(self._records)
