"""
Command and reply channel primitives.

A command is an immutable request. Commands that demand a reply carry the
channel the reply must be delivered to, and declare the reply type they expect.
"""

from typing import Any, Callable, List

# Reply channel signature: fire-and-forget delivery of one reply
ReplyChannel = Callable[[Any], None]


class Command:
    """
    Base class for commands.

    Concrete commands are frozen dataclasses declaring a ``reply_to`` field.

    Class attributes:
        reply_type: Type (or tuple of types) every reply must be an instance of
        enforced_reply: Whether every handled command must receive exactly one reply
    """
    reply_type: Any = object
    enforced_reply: bool = True

    def __post_init__(self) -> None:
        if self.enforced_reply and getattr(self, "reply_to", None) is None:
            raise ValueError(f"{type(self).__name__} requires a reply_to channel")

    def accepts_reply(self, value: Any) -> bool:
        return isinstance(value, self.reply_type)

    def deliver(self, value: Any) -> None:
        """Send a reply to the caller. Commands without a channel drop it."""
        channel = getattr(self, "reply_to", None)
        if channel is not None:
            channel(value)


class ReplyBox:
    """
    Recording reply channel.

    Collects every delivered reply. After cancel() the caller is considered
    gone and further deliveries are discarded.
    """

    def __init__(self) -> None:
        self.replies: List[Any] = []
        self.discarded: List[Any] = []
        self.cancelled = False

    def __call__(self, reply: Any) -> None:
        if self.cancelled:
            self.discarded.append(reply)
            return
        self.replies.append(reply)

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def reply(self) -> Any:
        """
        The single delivered reply.

        Raises:
            AssertionError: If zero or several replies were delivered
        """
        if len(self.replies) != 1:
            raise AssertionError(f"expected exactly one reply, got {len(self.replies)}")
        return self.replies[0]
