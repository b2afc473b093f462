"""Client for the sway/i3 IPC protocol.

A :class:`Connection` sends commands, queries state and receives subscribed
events over one Unix socket. Commands can be written as plain strings or
built from :mod:`ksway.command` nodes and :mod:`ksway.criteria`.
"""

from __future__ import annotations

from . import command, criteria
from .command import Command, Exec, Raw, WithCriteria, cmd, exec_, raw, with_criteria
from .connection import Connection, connect, connect_to_path
from .environment import guess_socket_path
from .errors import (
    AlreadySubscribedError,
    IncompleteFrameError,
    IpcIOError,
    KswayError,
    ProtocolError,
    SerializationError,
    SocketPathNotFoundError,
    SubscriptionError,
)
from .protocol import CommandCode, Frame, IpcCommand, IpcEvent
from .protocol import commands as ipc_command
from .subscription import EventFrame, Subscription

__all__ = [
    "AlreadySubscribedError",
    "Command",
    "CommandCode",
    "Connection",
    "EventFrame",
    "Exec",
    "Frame",
    "IncompleteFrameError",
    "IpcCommand",
    "IpcEvent",
    "IpcIOError",
    "KswayError",
    "ProtocolError",
    "Raw",
    "SerializationError",
    "SocketPathNotFoundError",
    "Subscription",
    "SubscriptionError",
    "WithCriteria",
    "cmd",
    "command",
    "connect",
    "connect_to_path",
    "criteria",
    "exec_",
    "guess_socket_path",
    "ipc_command",
    "raw",
    "with_criteria",
]
