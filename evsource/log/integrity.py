"""
Hash chain integrity verification.

Implements tamper-evident logging using cryptographic hash chains.
Each stored event includes the hash of the previous one.
"""

import hashlib
from typing import Any, Dict, Iterable

from ..core.canonical import canonical_json_bytes
from ..core.errors import IntegrityError

ZERO_HASH = "0" * 64


def hash_record(prev_hash: str, event_data: Dict[str, Any]) -> str:
    """
    Compute hash of a stored event chained to the previous hash.

    Hash input: prev_hash + canonical_json(event_data)

    Returns:
        SHA-256 hash as hex string
    """
    b = prev_hash.encode("utf-8") + canonical_json_bytes(event_data)
    return hashlib.sha256(b).hexdigest()


def chain_record(prev_hash: str, event_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create hash chain record for storage.

    Record includes:
    - prev_hash: Hash of previous event
    - event_hash: Hash of this event
    - event: Stored event data (entity_id, seq, type, payload)
    """
    return {
        "prev_hash": prev_hash,
        "event_hash": hash_record(prev_hash, event_data),
        "event": event_data,
    }


def verify_records(records: Iterable[Dict[str, Any]]) -> int:
    """
    Verify a sequence of chain records, starting from ZERO_HASH.

    Returns:
        Number of verified records

    Raises:
        IntegrityError: On the first broken link or mismatched hash
    """
    prev = ZERO_HASH
    count = 0
    for rec in records:
        seq = rec.get("event", {}).get("seq")
        if rec.get("prev_hash") != prev:
            raise IntegrityError(f"broken chain link at seq {seq}")
        if rec.get("event_hash") != hash_record(prev, rec["event"]):
            raise IntegrityError(f"event hash mismatch at seq {seq}")
        prev = rec["event_hash"]
        count += 1
    return count
