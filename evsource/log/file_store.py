"""
File-based event log using append-only JSONL format.

Each line is a hash chain record with prev_hash, event_hash, and event data.
"""

import json
import os
from typing import Any, Dict, Iterator, List, Sequence, Tuple

from ..core.canonical import canonical_json_str
from ..core.errors import EventStoreError
from .codec import EventCodec
from .integrity import ZERO_HASH, chain_record, verify_records
from .store import AppendResult, EventLog, EventRecord

try:
    import fcntl
except ImportError:  # Windows or unsupported platform
    fcntl = None


class FileEventLog(EventLog):
    """
    File-based append-only event log.

    Storage format: JSONL (newline-delimited JSON)
    Each line: {"prev_hash": "...", "event_hash": "...", "event": {...}}
    where event is {"entity_id", "seq", "type", "payload"}.

    Guarantees:
    - Append-only (no mutations)
    - All events of one append are written together, then fsynced
    - Hash chain integrity
    """

    def __init__(self, path: str, codec: EventCodec) -> None:
        """
        Initialize file event log.

        Args:
            path: Path to JSONL file
            codec: Codec for the domain events stored in this log
        """
        self.path = path
        self.codec = codec

        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

        if not os.path.exists(path):
            with open(path, "wb") as f:
                f.write(b"")

    def _last_seq_and_hash(self, f) -> Tuple[int, str]:
        """
        Read last sequence number and hash from log.

        Returns:
            (last_seq, last_hash) tuple
            (-1, ZERO_HASH) if log is empty
        """
        last_seq = -1
        last_hash = ZERO_HASH

        f.seek(0)
        for line in f:
            if not line.strip():
                continue
            rec = json.loads(line)
            last_seq = rec["event"]["seq"]
            last_hash = rec["event_hash"]

        return last_seq, last_hash

    def append(self, entity_id: str, events: Sequence[Any]) -> AppendResult:
        """
        Append events to log with hash chain.

        Raises:
            EventStoreError: If append fails (nothing is acknowledged)
        """
        if not events:
            raise EventStoreError("append requires at least one event")

        # Encode up front so an unregistered event never reaches the file
        encoded = [self.codec.encode(ev) for ev in events]

        try:
            with open(self.path, "a+b") as f:
                if fcntl:
                    fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                try:
                    last_seq, last_hash = self._last_seq_and_hash(f)

                    lines = []
                    records = []
                    prev_hash = last_hash
                    for offset, (name, payload) in enumerate(encoded):
                        seq = last_seq + 1 + offset
                        data = {
                            "entity_id": entity_id,
                            "seq": seq,
                            "type": name,
                            "payload": payload,
                        }
                        rec = chain_record(prev_hash, data)
                        prev_hash = rec["event_hash"]
                        lines.append(canonical_json_str(rec) + "\n")
                        records.append(
                            EventRecord(entity_id=entity_id, seq=seq, event=events[offset])
                        )

                    f.seek(0, os.SEEK_END)
                    f.write("".join(lines).encode("utf-8"))
                    f.flush()
                    os.fsync(f.fileno())
                finally:
                    if fcntl:
                        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except OSError as ex:
            raise EventStoreError(str(ex)) from ex

        return AppendResult(records=tuple(records))

    def _raw_records(self) -> Iterator[Dict[str, Any]]:
        with open(self.path, "rb") as f:
            for line in f:
                if not line.strip():
                    continue
                yield json.loads(line)

    def read_events(self, entity_id: str, from_seq: int = 0) -> Iterator[EventRecord]:
        """
        Read one entity's events from log.

        Yields:
            EventRecords in sequence order
        """
        for rec in self._raw_records():
            ev = rec["event"]

            if ev["seq"] < from_seq:
                continue
            if ev["entity_id"] != entity_id:
                continue

            yield EventRecord(
                entity_id=ev["entity_id"],
                seq=ev["seq"],
                event=self.codec.decode(ev["type"], ev.get("payload", {})),
            )

    def raw_records(self) -> List[Dict[str, Any]]:
        """All chain records as stored, for inspection tools."""
        return list(self._raw_records())

    def verify_chain(self) -> int:
        """
        Verify the whole hash chain.

        Returns:
            Number of verified records

        Raises:
            IntegrityError: If any record was tampered with
        """
        return verify_records(self._raw_records())

    def get_last_hash(self) -> str:
        with open(self.path, "rb") as f:
            _, last_hash = self._last_seq_and_hash(f)
        return last_hash
