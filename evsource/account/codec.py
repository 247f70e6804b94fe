"""
Storage names for account events.
"""

from ..log.codec import EventCodec
from .model import EVENT_TYPES


def account_codec() -> EventCodec:
    """Codec storing each account event under its class name."""
    codec = EventCodec()
    for event_type in EVENT_TYPES:
        codec.register(event_type.__name__, event_type)
    return codec
