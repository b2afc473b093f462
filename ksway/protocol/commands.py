"""IPC requests and the helpers that build them."""

from __future__ import annotations

import dataclasses as dc
import json
import typing as t

from ksway.errors import SerializationError

from .codec import encode
from .constants import CommandCode, IpcEvent


@dc.dataclass(frozen=True, slots=True)
class IpcCommand:
    """A request ready to be framed: an op-code plus its payload."""

    code: CommandCode
    payload: bytes = b""

    def encode(self) -> bytes:
        """Return the complete frame for this request."""
        return encode(self.code, self.payload)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"IpcCommand({self.code.name}, {self.payload!r})"


def run(command: object) -> IpcCommand:
    """Build a ``RUN_COMMAND`` request from the rendered *command* text."""
    return IpcCommand(CommandCode.RUN_COMMAND, str(command).encode("utf-8"))


def tick(payload: bytes | str) -> IpcCommand:
    """Build a ``SEND_TICK`` request carrying an opaque *payload*."""
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return IpcCommand(CommandCode.SEND_TICK, bytes(payload))


def _event_names(events: t.Iterable[IpcEvent | str]) -> list[str]:
    names: list[str] = []
    for event in events:
        if isinstance(event, IpcEvent):
            names.append(event.event_name)
            continue
        try:
            names.append(IpcEvent.from_name(event).event_name)
        except (AttributeError, ValueError) as exc:
            msg = f"cannot subscribe to {event!r}"
            raise SerializationError(msg) from exc
    return names


def subscribe(events: t.Iterable[IpcEvent | str]) -> IpcCommand:
    """Build a ``SUBSCRIBE`` request for *events*.

    The payload is a compact JSON array of event names, e.g.
    ``["window","tick"]``.
    """
    payload = json.dumps(_event_names(events), separators=(",", ":"))
    return IpcCommand(CommandCode.SUBSCRIBE, payload.encode("utf-8"))


def get_bar_config() -> IpcCommand:
    return IpcCommand(CommandCode.GET_BAR_CONFIG)


def get_binding_modes() -> IpcCommand:
    return IpcCommand(CommandCode.GET_BINDING_MODES)


def get_config() -> IpcCommand:
    return IpcCommand(CommandCode.GET_CONFIG)


def get_marks() -> IpcCommand:
    return IpcCommand(CommandCode.GET_MARKS)


def get_outputs() -> IpcCommand:
    return IpcCommand(CommandCode.GET_OUTPUTS)


def get_tree() -> IpcCommand:
    return IpcCommand(CommandCode.GET_TREE)


def get_version() -> IpcCommand:
    return IpcCommand(CommandCode.GET_VERSION)


def get_workspaces() -> IpcCommand:
    return IpcCommand(CommandCode.GET_WORKSPACES)


__all__ = [
    "IpcCommand",
    "get_bar_config",
    "get_binding_modes",
    "get_config",
    "get_marks",
    "get_outputs",
    "get_tree",
    "get_version",
    "get_workspaces",
    "run",
    "subscribe",
    "tick",
]
