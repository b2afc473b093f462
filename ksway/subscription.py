"""Mailbox carrying events from a connection to its caller.

The connection holds the :class:`SubscriptionSender` and pushes every event
frame it reads. The caller holds the :class:`Subscription` and drains it
between commands, typically after :meth:`~ksway.connection.Connection.poll`.
Closing the subscription, or letting it be garbage collected, makes the next
delivery fail with :class:`~ksway.errors.SubscriptionError`.
"""

from __future__ import annotations

import json
import logging
import queue
import typing as t
import weakref

from .errors import SerializationError, SubscriptionError
from .protocol.constants import IpcEvent

logger = logging.getLogger(__name__)


class EventFrame(t.NamedTuple):
    """An event as read off the socket."""

    code: int
    payload: bytes

    @property
    def event(self) -> IpcEvent | None:
        """Return the event kind, or ``None`` for codes this client does not know."""
        return IpcEvent.from_code(self.code)

    def json(self) -> t.Any:  # noqa: ANN401 - arbitrary JSON document
        """Decode the payload as JSON."""
        try:
            return json.loads(self.payload)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            msg = f"malformed JSON in {self.event or hex(self.code)} event"
            raise SerializationError(msg) from exc


class Subscription:
    """Consumer side of a subscription."""

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[EventFrame] = queue.SimpleQueue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop accepting events; queued events stay readable."""
        self._closed = True

    def try_recv(self) -> EventFrame | None:
        """Return the oldest queued event without blocking, or ``None``."""
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def recv(self, timeout: float | None = None) -> EventFrame:
        """Return the oldest queued event, waiting up to *timeout* seconds.

        Raises :class:`queue.Empty` when nothing arrives in time. Events are
        only queued while the connection is reading, so waiting here is only
        useful when another thread drives the connection.
        """
        return self._queue.get(timeout=timeout)

    def drain(self) -> t.Iterator[EventFrame]:
        """Yield every event queued so far, oldest first."""
        while (frame := self.try_recv()) is not None:
            yield frame

    def __len__(self) -> int:
        return self._queue.qsize()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def _put(self, frame: EventFrame) -> None:
        self._queue.put(frame)


class SubscriptionSender:
    """Producer side, owned by the connection."""

    __slots__ = ("_consumer",)

    def __init__(self, consumer: Subscription) -> None:
        self._consumer = weakref.ref(consumer)

    def send(self, frame: EventFrame) -> None:
        """Queue *frame* for the consumer."""
        consumer = self._consumer()
        if consumer is None or consumer.closed:
            msg = "subscription consumer is gone; cannot deliver event"
            raise SubscriptionError(msg)
        consumer._put(frame)  # noqa: SLF001 - paired producer
        logger.debug("Queued event %#x (%d bytes)", frame.code, len(frame.payload))


def channel() -> tuple[SubscriptionSender, Subscription]:
    """Create a connected producer/consumer pair."""
    consumer = Subscription()
    return SubscriptionSender(consumer), consumer


__all__ = ["EventFrame", "Subscription", "SubscriptionSender", "channel"]
