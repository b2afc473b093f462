"""Framing of i3-ipc messages.

A frame is the 6-byte magic ``i3-ipc`` followed by the payload length and
the message type, both unsigned 32-bit integers in host byte order, and then
the payload itself. Client and compositor always share a host, so there is
no byte-order negotiation.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import struct
import typing as t

from ksway._validators import validate_u32
from ksway.errors import IncompleteFrameError, ProtocolError

from .constants import MAGIC, IpcEvent, is_event_code

logger = logging.getLogger(__name__)

HEADER: t.Final[struct.Struct] = struct.Struct(f"={len(MAGIC)}sII")
HEADER_SIZE: t.Final[int] = HEADER.size


class Readable(t.Protocol):
    """Source of bytes for the decoder."""

    def read(self, size: int, /) -> bytes:
        """Return up to *size* bytes; fewer only at end of stream."""
        ...


@dc.dataclass(frozen=True, slots=True)
class Frame:
    """One decoded message."""

    type_code: int
    payload: bytes

    @property
    def is_event(self) -> bool:
        """Return ``True`` when this frame carries an event."""
        return is_event_code(self.type_code)

    @property
    def event(self) -> IpcEvent | None:
        """Return the event kind for event frames, else ``None``."""
        if not self.is_event:
            return None
        return IpcEvent.from_code(self.type_code)


def encode(type_code: int, payload: bytes = b"") -> bytes:
    """Return the wire representation of a message."""
    validate_u32(type_code, name="type_code")
    validate_u32(len(payload), name="payload length")
    return HEADER.pack(MAGIC, len(payload), type_code) + bytes(payload)


def _read_exact(stream: Readable, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise IncompleteFrameError(size, len(data))
    return data


def decode_header(stream: Readable) -> tuple[int, int]:
    """Read a frame header from *stream* and return ``(length, type_code)``."""
    magic, length, type_code = HEADER.unpack(_read_exact(stream, HEADER_SIZE))
    if magic != MAGIC:
        msg = f"bad frame magic {magic!r}, expected {MAGIC!r}"
        raise ProtocolError(msg)
    return length, type_code


def decode_payload(stream: Readable, length: int) -> bytes:
    """Read exactly *length* payload bytes from *stream*."""
    if length == 0:
        return b""
    return _read_exact(stream, length)


def read_frame(stream: Readable) -> Frame:
    """Read one complete frame from *stream*."""
    length, type_code = decode_header(stream)
    payload = decode_payload(stream, length)
    logger.debug("Read frame type=%#x length=%d", type_code, length)
    return Frame(type_code=type_code, payload=payload)


__all__ = [
    "HEADER",
    "HEADER_SIZE",
    "Frame",
    "Readable",
    "decode_header",
    "decode_payload",
    "encode",
    "read_frame",
]
