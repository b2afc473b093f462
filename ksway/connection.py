"""A synchronous connection to the sway IPC socket.

Replies and subscribed events share one byte stream. Every frame is
classified by the high bit of its type code: events are forwarded to the
subscription mailbox in the order they were read, and the first non-event
frame is the reply to the outstanding request. Only one request is ever in
flight, so replies never need matching beyond a sanity check on their code.

Without a background reader, events only move while the connection is
reading. Callers that want to react to events call :meth:`Connection.poll`
in a loop; it waits at most the socket read timeout and treats "nothing
arrived" as success.
"""

from __future__ import annotations

import logging
import os
import socket
import typing as t
from pathlib import Path

from ._validators import validate_positive_finite_timeout
from .environment import guess_socket_path, read_timeout_from_env
from .errors import (
    AlreadySubscribedError,
    IpcIOError,
    KswayError,
    ProtocolError,
    SubscriptionError,
)
from .json_utils import JsonValue, find_focused, payload_to_json
from .protocol import commands
from .protocol.codec import Frame, read_frame
from .subscription import EventFrame, Subscription, SubscriptionSender, channel

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    import types

    from .protocol.commands import IpcCommand
    from .protocol.constants import IpcEvent

logger = logging.getLogger(__name__)


class _SocketReader:
    """Adapts a socket to the ``read(n)`` interface the codec expects."""

    __slots__ = ("_sock",)

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock

    def read(self, size: int) -> bytes:
        """Read *size* bytes, returning fewer only if the peer closed."""
        buffer = bytearray(size)
        view = memoryview(buffer)
        received = 0
        while received < size:
            count = self._sock.recv_into(view[received:])
            if count == 0:
                break
            received += count
        return bytes(buffer[:received])


class Connection:
    """One socket to the compositor plus its optional subscription.

    Not safe for concurrent use from several threads without external
    locking.
    """

    def __init__(
        self, sock: socket.socket, socket_path: os.PathLike[str] | str
    ) -> None:
        """Wrap an already connected *sock* reached through *socket_path*."""
        self._sock = sock
        self._reader = _SocketReader(sock)
        self._socket_path = Path(socket_path)
        self._sender: SubscriptionSender | None = None
        self._failure: KswayError | None = None
        self._closed = False

    @classmethod
    def connect_to_path(
        cls, path: os.PathLike[str] | str, *, timeout: float | None = None
    ) -> Connection:
        """Connect to the socket at *path*.

        *timeout* is the read timeout in seconds; it defaults to
        ``KSWAY_READ_TIMEOUT`` or one second.
        """
        if timeout is None:
            timeout = read_timeout_from_env()
        validate_positive_finite_timeout(timeout)
        socket_path = Path(path)
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(timeout)
        try:
            sock.connect(os.fspath(socket_path))
        except OSError as exc:
            sock.close()
            msg = f"could not connect to {socket_path}: {exc}"
            raise IpcIOError(msg) from exc
        logger.debug("Connected to %s (read timeout %.3fs)", socket_path, timeout)
        return cls(sock, socket_path)

    @classmethod
    def connect(cls, *, timeout: float | None = None) -> Connection:
        """Connect to the socket named by ``SWAYSOCK`` or found by globbing."""
        return cls.connect_to_path(guess_socket_path(), timeout=timeout)

    @property
    def path(self) -> Path:
        """Return the socket path this connection was opened with."""
        return self._socket_path

    @property
    def subscribed(self) -> bool:
        """Return whether this connection has used its one subscription."""
        return self._sender is not None

    @property
    def closed(self) -> bool:
        """Return whether :meth:`close` has been called."""
        return self._closed

    def fileno(self) -> int:
        """Return the socket's file descriptor, e.g. for ``selectors``."""
        return self._sock.fileno()

    def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._sock.close()
        logger.debug("Closed connection to %s", self._socket_path)

    def __enter__(self) -> Connection:
        """Return the connection for use in a ``with`` block."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Close the connection when leaving a context."""
        self.close()

    def __repr__(self) -> str:
        """Return a debug representation."""
        state = "closed" if self._closed else "open"
        return f"Connection({os.fspath(self._socket_path)!r}, {state})"

    # -- failure handling -------------------------------------------------

    def _ensure_usable(self) -> None:
        if self._closed:
            msg = f"connection to {self._socket_path} is closed"
            raise IpcIOError(msg)
        if self._failure is not None:
            msg = f"connection to {self._socket_path} failed earlier: {self._failure}"
            raise IpcIOError(msg) from self._failure

    def _fail(
        self, error: KswayError, *, cause: BaseException | None = None
    ) -> t.NoReturn:
        self._failure = error
        logger.debug("Connection to %s is now unusable: %s", self._socket_path, error)
        if cause is not None:
            raise error from cause
        raise error

    # -- frame I/O ----------------------------------------------------------

    def _send(self, command: IpcCommand) -> None:
        try:
            self._sock.sendall(command.encode())
        except OSError as exc:
            msg = f"writing to {self._socket_path} failed: {exc}"
            self._fail(IpcIOError(msg), cause=exc)
        logger.debug(
            "Sent %s request (%d bytes)", command.code.name, len(command.payload)
        )

    def _read_frame(self) -> Frame:
        try:
            return read_frame(self._reader)
        except IpcIOError as exc:
            self._fail(exc)
        except OSError as exc:
            msg = f"reading from {self._socket_path} failed: {exc}"
            self._fail(IpcIOError(msg), cause=exc)

    def _has_pending_data(self) -> bool:
        """Wait up to the read timeout for the next frame to start."""
        try:
            peeked = self._sock.recv(1, socket.MSG_PEEK)
        except (TimeoutError, BlockingIOError):
            return False
        except OSError as exc:
            msg = f"reading from {self._socket_path} failed: {exc}"
            self._fail(IpcIOError(msg), cause=exc)
        if not peeked:
            msg = f"connection to {self._socket_path} closed by peer"
            self._fail(IpcIOError(msg))
        return True

    def _dispatch_event(self, frame: Frame) -> None:
        if self._sender is None:
            msg = f"received event {frame.type_code:#x} without an active subscription"
            self._fail(ProtocolError(msg))
        try:
            self._sender.send(EventFrame(frame.type_code, frame.payload))
        except SubscriptionError as exc:
            self._fail(exc)

    # -- public protocol operations -----------------------------------------

    def ipc(self, command: IpcCommand) -> bytes:
        """Send *command* and return the raw payload of its reply.

        Events read while waiting are queued on the subscription first.
        """
        self._ensure_usable()
        self._send(command)
        while True:
            frame = self._read_frame()
            if frame.is_event:
                self._dispatch_event(frame)
                continue
            if frame.type_code != command.code:
                msg = (
                    f"reply code {frame.type_code} does not match request "
                    f"{command.code.name} ({command.code.value})"
                )
                self._fail(ProtocolError(msg))
            return frame.payload

    def run(self, command: object) -> bytes:
        """Run a sway command; *command* is rendered with ``str()``."""
        return self.ipc(commands.run(command))

    def poll(self) -> None:
        """Read at most one pending frame and route it to the subscription.

        Returns without effect when nothing arrives within the read timeout.
        A reply frame here means the stream is out of step with our requests
        and is reported as :class:`~ksway.errors.ProtocolError`.
        """
        self._ensure_usable()
        if not self._has_pending_data():
            return
        frame = self._read_frame()
        if not frame.is_event:
            msg = f"unsolicited reply frame {frame.type_code} with no request pending"
            self._fail(ProtocolError(msg))
        self._dispatch_event(frame)

    def subscribe(self, events: t.Iterable[IpcEvent | str]) -> Subscription:
        """Subscribe to *events* and return the mailbox they will arrive in.

        A connection supports a single subscription for its whole lifetime.
        """
        if self._sender is not None:
            msg = "this connection already has a subscription"
            raise AlreadySubscribedError(msg)
        self._ensure_usable()
        request = commands.subscribe(events)
        sender, consumer = channel()
        self._sender = sender
        reply = payload_to_json(self.ipc(request))
        if isinstance(reply, dict) and reply.get("success") is False:
            msg = f"compositor rejected subscription: {reply}"
            raise SubscriptionError(msg)
        logger.debug("Subscribed to %s", request.payload.decode("utf-8"))
        return consumer

    # -- convenience requests ---------------------------------------------

    def send_tick(self, payload: bytes | str = b"") -> bytes:
        """Send a tick carrying *payload* to every tick subscriber."""
        return self.ipc(commands.tick(payload))

    def get_bar_config(self) -> bytes:
        """Return the raw reply to a ``GET_BAR_CONFIG`` request."""
        return self.ipc(commands.get_bar_config())

    def get_binding_modes(self) -> bytes:
        """Return the raw reply to a ``GET_BINDING_MODES`` request."""
        return self.ipc(commands.get_binding_modes())

    def get_config(self) -> bytes:
        """Return the raw reply to a ``GET_CONFIG`` request."""
        return self.ipc(commands.get_config())

    def get_marks(self) -> bytes:
        """Return the raw reply to a ``GET_MARKS`` request."""
        return self.ipc(commands.get_marks())

    def get_outputs(self) -> bytes:
        """Return the raw reply to a ``GET_OUTPUTS`` request."""
        return self.ipc(commands.get_outputs())

    def get_tree(self) -> bytes:
        """Return the raw reply to a ``GET_TREE`` request."""
        return self.ipc(commands.get_tree())

    def get_version(self) -> bytes:
        """Return the raw reply to a ``GET_VERSION`` request."""
        return self.ipc(commands.get_version())

    def get_workspaces(self) -> bytes:
        """Return the raw reply to a ``GET_WORKSPACES`` request."""
        return self.ipc(commands.get_workspaces())

    # -- JSON variants ----------------------------------------------------

    def run_json(self, command: object) -> JsonValue:
        """Run a command and decode the per-command result list."""
        return payload_to_json(self.run(command))

    def get_bar_config_json(self) -> JsonValue:
        """Return the decoded reply to a ``GET_BAR_CONFIG`` request."""
        return payload_to_json(self.get_bar_config())

    def get_binding_modes_json(self) -> JsonValue:
        """Return the decoded reply to a ``GET_BINDING_MODES`` request."""
        return payload_to_json(self.get_binding_modes())

    def get_config_json(self) -> JsonValue:
        """Return the decoded reply to a ``GET_CONFIG`` request."""
        return payload_to_json(self.get_config())

    def get_marks_json(self) -> JsonValue:
        """Return the decoded reply to a ``GET_MARKS`` request."""
        return payload_to_json(self.get_marks())

    def get_outputs_json(self) -> JsonValue:
        """Return the decoded reply to a ``GET_OUTPUTS`` request."""
        return payload_to_json(self.get_outputs())

    def get_tree_json(self) -> JsonValue:
        """Return the decoded reply to a ``GET_TREE`` request."""
        return payload_to_json(self.get_tree())

    def get_version_json(self) -> JsonValue:
        """Return the decoded reply to a ``GET_VERSION`` request."""
        return payload_to_json(self.get_version())

    def get_workspaces_json(self) -> JsonValue:
        """Return the decoded reply to a ``GET_WORKSPACES`` request."""
        return payload_to_json(self.get_workspaces())

    def focused_workspace(self) -> JsonValue | None:
        """Return the focused entry of ``get_workspaces``, if any."""
        workspaces = self.get_workspaces_json()
        if not isinstance(workspaces, list):
            return None
        return next(
            (
                ws
                for ws in workspaces
                if isinstance(ws, dict) and ws.get("focused") is True
            ),
            None,
        )

    def focused_window(self) -> JsonValue | None:
        """Return the focused node of the layout tree, if any."""
        return find_focused(self.get_tree_json())


def connect(*, timeout: float | None = None) -> Connection:
    """Shorthand for :meth:`Connection.connect`."""
    return Connection.connect(timeout=timeout)


def connect_to_path(
    path: os.PathLike[str] | str, *, timeout: float | None = None
) -> Connection:
    """Shorthand for :meth:`Connection.connect_to_path`."""
    return Connection.connect_to_path(path, timeout=timeout)


__all__ = ["Connection", "connect", "connect_to_path"]
