"""
EventLog abstract interface.

Defines the contract the engine expects from durable event storage.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterator, Sequence, Tuple


@dataclass(frozen=True)
class EventRecord:
    """
    One stored event.

    Fields:
        entity_id: Persistence key of the owning entity
        seq: Position in the log (assigned by the log, increasing)
        event: Domain event
    """
    entity_id: str
    seq: int
    event: Any


@dataclass(frozen=True)
class AppendResult:
    """
    Durable acknowledgment of an append.

    Fields:
        records: Stored records, in append order
    """
    records: Tuple[EventRecord, ...]

    @property
    def last_seq(self) -> int:
        return self.records[-1].seq


class EventLog(ABC):
    """
    Abstract event log interface.

    All implementations must guarantee:
    - Append-only (no updates, no deletes)
    - Events of one entity are read back in append order
    - append() returns only once the events are durable
    """

    @abstractmethod
    def append(self, entity_id: str, events: Sequence[Any]) -> AppendResult:
        """
        Append events for one entity, all or nothing.

        Args:
            entity_id: Persistence key
            events: Non-empty ordered sequence of domain events

        Returns:
            AppendResult once the events are durable

        Raises:
            EventStoreError: If the events were not durably stored
        """
        ...

    @abstractmethod
    def read_events(self, entity_id: str, from_seq: int = 0) -> Iterator[EventRecord]:
        """
        Read one entity's events from the beginning.

        Args:
            entity_id: Persistence key
            from_seq: Start from this sequence number (inclusive)

        Yields:
            EventRecords in append order
        """
        ...
