"""Exception hierarchy for ksway."""

from __future__ import annotations


class KswayError(Exception):
    """Base class for every error raised by ksway."""


class SocketPathNotFoundError(KswayError):
    """No sway IPC socket could be found or guessed."""


class AlreadySubscribedError(KswayError):
    """Raised when ``subscribe`` is called twice on one connection."""


class SubscriptionError(KswayError):
    """Delivering to, or registering, a subscription failed.

    Raised when an event arrives after the consumer side of the subscription
    was closed, and when the compositor rejects the subscribe request.
    """


class IpcIOError(KswayError, OSError):
    """Reading from or writing to the IPC socket failed.

    The connection that raised it is unusable afterwards.
    """


class IncompleteFrameError(IpcIOError):
    """The stream ended before a whole frame was read."""

    def __init__(self, expected: int, received: int) -> None:
        self.expected = expected
        self.received = received
        msg = f"stream closed after {received} of {expected} bytes"
        super().__init__(msg)


class ProtocolError(IpcIOError):
    """The byte stream no longer follows the i3-ipc framing rules."""


class SerializationError(KswayError, ValueError):
    """A JSON payload could not be encoded or decoded."""


__all__ = [
    "AlreadySubscribedError",
    "IncompleteFrameError",
    "IpcIOError",
    "KswayError",
    "ProtocolError",
    "SerializationError",
    "SocketPathNotFoundError",
    "SubscriptionError",
]
