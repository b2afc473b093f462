"""Numeric tables of the i3/sway IPC protocol.

The values are part of the wire protocol and must match the compositor
bit for bit.
"""

from __future__ import annotations

import enum
import typing as t

MAGIC: t.Final[bytes] = b"i3-ipc"

# Every event code has the high bit set; no command or reply code does.
EVENT_BIT: t.Final[int] = 0x8000_0000


def is_event_code(code: int) -> bool:
    """Return ``True`` when *code* identifies an asynchronous event."""
    return bool(code & EVENT_BIT)


class CommandCode(enum.IntEnum):
    """Op-codes for requests; replies echo the request's code."""

    RUN_COMMAND = 0
    GET_WORKSPACES = 1
    SUBSCRIBE = 2
    GET_OUTPUTS = 3
    GET_TREE = 4
    GET_MARKS = 5
    GET_BAR_CONFIG = 6
    GET_VERSION = 7
    GET_BINDING_MODES = 8
    GET_CONFIG = 9
    SEND_TICK = 10


class IpcEvent(enum.IntEnum):
    """Event kinds a connection can subscribe to."""

    WORKSPACE = 0x8000_0000
    MODE = 0x8000_0002
    WINDOW = 0x8000_0003
    BARCONFIG_UPDATE = 0x8000_0004
    BINDING = 0x8000_0005
    SHUTDOWN = 0x8000_0006
    TICK = 0x8000_0007
    BAR_STATUS_UPDATE = 0x8000_0014

    @property
    def event_name(self) -> str:
        """Return the name used in subscribe payloads, e.g. ``"window"``."""
        return self.name.lower()

    @classmethod
    def from_code(cls, code: int) -> IpcEvent | None:
        """Return the event kind for *code*, or ``None`` if it is unknown."""
        try:
            return cls(code)
        except ValueError:
            return None

    @classmethod
    def from_name(cls, name: str) -> IpcEvent:
        """Parse a wire event name such as ``"bar_status_update"``."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            msg = f"unknown IPC event name: {name!r}"
            raise ValueError(msg) from None


__all__ = [
    "EVENT_BIT",
    "MAGIC",
    "CommandCode",
    "IpcEvent",
    "is_event_code",
]
