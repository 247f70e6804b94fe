"""
Engine configuration from environment variables.

Environment Variables:
    EVSOURCE_LOG_PATH: JSONL event log used by the CLI
        default: /tmp/evsource/events.log
    EVSOURCE_UNHANDLED_POLICY: What to do when a reply-enforced command is
        unhandled: "log" (error log, no reply) or "raise" - default: log
    EVSOURCE_CLOSED_POLICY: How closed accounts treat commands:
        "unhandled" (no reply) or "reject" (reply Rejected) - default: unhandled
"""

import os
from dataclasses import dataclass

DEFAULT_LOG_PATH = "/tmp/evsource/events.log"

UNHANDLED_POLICIES = ("log", "raise")
CLOSED_POLICIES = ("unhandled", "reject")


def _choice(key: str, default: str, allowed: tuple) -> str:
    val = os.getenv(key)
    if not val:
        return default
    val = val.strip().lower()
    if val not in allowed:
        raise ValueError(f"{key} must be one of {', '.join(allowed)}: got {val!r}")
    return val


@dataclass(frozen=True)
class EngineConfig:
    log_path: str = DEFAULT_LOG_PATH
    unhandled_policy: str = "log"
    closed_policy: str = "unhandled"

    def __post_init__(self) -> None:
        if self.unhandled_policy not in UNHANDLED_POLICIES:
            raise ValueError(f"unsupported unhandled policy: {self.unhandled_policy}")
        if self.closed_policy not in CLOSED_POLICIES:
            raise ValueError(f"unsupported closed policy: {self.closed_policy}")

    @staticmethod
    def from_env() -> "EngineConfig":
        return EngineConfig(
            log_path=os.getenv("EVSOURCE_LOG_PATH") or DEFAULT_LOG_PATH,
            unhandled_policy=_choice("EVSOURCE_UNHANDLED_POLICY", "log", UNHANDLED_POLICIES),
            closed_policy=_choice("EVSOURCE_CLOSED_POLICY", "unhandled", CLOSED_POLICIES),
        )
