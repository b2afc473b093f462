"""Wire-level pieces of the i3-ipc protocol."""

from . import commands
from .codec import Frame, decode_header, decode_payload, encode, read_frame
from .commands import IpcCommand
from .constants import EVENT_BIT, MAGIC, CommandCode, IpcEvent, is_event_code

__all__ = [
    "EVENT_BIT",
    "MAGIC",
    "CommandCode",
    "Frame",
    "IpcCommand",
    "IpcEvent",
    "commands",
    "decode_header",
    "decode_payload",
    "encode",
    "is_event_code",
    "read_frame",
]
