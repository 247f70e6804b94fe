"""
Event codec: domain events <-> JSON-ready dicts.

Each event class is registered under a stable type name. Field values are
passed through per-class encode/decode functions so Decimal amounts survive
the JSON round trip exactly.
"""

from dataclasses import fields, is_dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, Optional, Tuple

from ..core.canonical import canonicalize
from ..core.errors import EventStoreError

Decoder = Callable[[Dict[str, Any]], Any]


def _default_decoder(event_type: type) -> Decoder:
    def decode(payload: Dict[str, Any]) -> Any:
        kwargs = {}
        for f in fields(event_type):
            if f.name not in payload:
                continue
            value = payload[f.name]
            if f.type in (Decimal, "Decimal"):
                value = Decimal(value)
            kwargs[f.name] = value
        return event_type(**kwargs)

    return decode


class EventCodec:
    """
    Registry of event types for storage.

    Usage:
        codec = EventCodec()
        codec.register("Deposited", Deposited)
        name, payload = codec.encode(Deposited(Decimal("10")))
        event = codec.decode(name, payload)
    """

    def __init__(self) -> None:
        self._by_name: Dict[str, Tuple[type, Decoder]] = {}
        self._by_type: Dict[type, str] = {}

    def register(self, name: str, event_type: type, decoder: Optional[Decoder] = None) -> None:
        if not is_dataclass(event_type):
            raise TypeError(f"{event_type.__name__} must be a dataclass")
        self._by_name[name] = (event_type, decoder or _default_decoder(event_type))
        self._by_type[event_type] = name

    def encode(self, event: Any) -> Tuple[str, Dict[str, Any]]:
        """
        Returns:
            (type name, canonical payload dict)

        Raises:
            EventStoreError: If the event type is not registered
        """
        name = self._by_type.get(type(event))
        if name is None:
            raise EventStoreError(f"unregistered event type: {type(event).__name__}")
        payload = {f.name: getattr(event, f.name) for f in fields(event)}
        return name, canonicalize(payload)

    def decode(self, name: str, payload: Dict[str, Any]) -> Any:
        entry = self._by_name.get(name)
        if entry is None:
            raise EventStoreError(f"unknown event type in log: {name}")
        _, decoder = entry
        return decoder(payload or {})
