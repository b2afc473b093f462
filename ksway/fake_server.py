"""An in-process stand-in for the sway IPC socket.

:class:`FakeSwayServer` speaks the real framing over a Unix domain socket so
that :class:`~ksway.connection.Connection` can be exercised end to end
without a compositor. It answers every request with a canned JSON reply,
records a journal of what it received and can push events to subscribed
clients, either on demand via :meth:`FakeSwayServer.emit` or scripted ahead
of a particular reply.
"""

from __future__ import annotations

import collections
import contextlib
import dataclasses as dc
import json
import logging
import socket
import socketserver
import threading
import time
import typing as t
from pathlib import Path

from ._validators import validate_positive_finite_timeout
from .connection import Connection
from .errors import IncompleteFrameError, ProtocolError
from .protocol.codec import encode, read_frame
from .protocol.constants import CommandCode, IpcEvent

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    import types

logger = logging.getLogger(__name__)

Body = t.Union[bytes, t.Any]

FOCUSED_CON_ID: t.Final[int] = 7

DEFAULT_REPLIES: t.Final[t.Mapping[CommandCode, t.Any]] = {
    CommandCode.RUN_COMMAND: [{"success": True}],
    CommandCode.GET_WORKSPACES: [
        {
            "id": 3,
            "num": 1,
            "name": "1",
            "focused": True,
            "visible": True,
            "urgent": False,
            "output": "HEADLESS-1",
            "rect": {"x": 0, "y": 0, "width": 1920, "height": 1080},
        },
        {
            "id": 9,
            "num": 2,
            "name": "2",
            "focused": False,
            "visible": False,
            "urgent": False,
            "output": "HEADLESS-1",
            "rect": {"x": 0, "y": 0, "width": 1920, "height": 1080},
        },
    ],
    CommandCode.SUBSCRIBE: {"success": True},
    CommandCode.GET_OUTPUTS: [
        {"name": "HEADLESS-1", "active": True, "focused": True},
    ],
    CommandCode.GET_TREE: {
        "id": 1,
        "type": "root",
        "name": "root",
        "focused": False,
        "nodes": [
            {
                "id": 2,
                "type": "output",
                "name": "HEADLESS-1",
                "focused": False,
                "nodes": [
                    {
                        "id": 3,
                        "type": "workspace",
                        "name": "1",
                        "focused": False,
                        "nodes": [
                            {
                                "id": FOCUSED_CON_ID,
                                "type": "con",
                                "name": "foot",
                                "app_id": "foot",
                                "focused": True,
                                "nodes": [],
                            },
                        ],
                        "floating_nodes": [],
                    },
                ],
            },
        ],
    },
    CommandCode.GET_MARKS: [],
    CommandCode.GET_BAR_CONFIG: [],
    CommandCode.GET_VERSION: {
        "major": 1,
        "minor": 9,
        "patch": 0,
        "human_readable": "1.9 (ksway fake)",
        "loaded_config_file_name": "/dev/null",
    },
    CommandCode.GET_BINDING_MODES: ["default"],
    CommandCode.GET_CONFIG: {"config": ""},
    CommandCode.SEND_TICK: {"success": True},
}


def _to_bytes(body: Body) -> bytes:
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    return json.dumps(body).encode("utf-8")


@dc.dataclass(frozen=True, slots=True)
class RecordedRequest:
    """A request as received by the fake server."""

    code: int
    payload: bytes

    @property
    def text(self) -> str:
        """Return the payload decoded as UTF-8."""
        return self.payload.decode("utf-8")


@dc.dataclass(slots=True)
class ScriptedReply:
    """A reply plus the events the server writes immediately before it."""

    body: Body
    events_before: list[tuple[IpcEvent, Body]] = dc.field(default_factory=list)


RequestHandler = t.Callable[[RecordedRequest], "ScriptedReply | Body | None"]


class _Session:
    """Server side of one client connection."""

    def __init__(self, sock: socket.socket) -> None:
        self.sock = sock
        self.events: set[IpcEvent] = set()
        self._lock = threading.Lock()
        self.alive = True

    def send(self, code: int, body: Body) -> None:
        with self._lock:
            if not self.alive:
                return
            try:
                self.sock.sendall(encode(code, _to_bytes(body)))
            except OSError as exc:
                logger.debug("Fake sway client went away: %s", exc)
                self.alive = False

    def close(self) -> None:
        with self._lock:
            self.alive = False
        with contextlib.suppress(OSError):
            self.sock.shutdown(socket.SHUT_RDWR)


class FakeSwayServer:
    """Serve the i3-ipc protocol on *socket_path* from a background thread."""

    def __init__(
        self,
        socket_path: Path,
        *,
        handler: RequestHandler | None = None,
        timeout: float = 5.0,
    ) -> None:
        """Create a server; call :meth:`start` or use it as a context manager."""
        validate_positive_finite_timeout(timeout)
        self.socket_path = Path(socket_path)
        self.timeout = timeout
        self.replies: dict[CommandCode, t.Any] = dict(DEFAULT_REPLIES)
        self.journal: list[RecordedRequest] = []
        self.handler = handler
        self._scripted: collections.defaultdict[int, collections.deque[ScriptedReply]]
        self._scripted = collections.defaultdict(collections.deque)
        self._sessions: list[_Session] = []
        self._state = threading.Condition()
        self._server: _InnerServer | None = None
        self._thread: threading.Thread | None = None

    def __enter__(self) -> FakeSwayServer:
        """Start the server when entering a context."""
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Stop the server when leaving a context."""
        self.stop()

    def start(self) -> None:
        """Bind the socket and start serving."""
        with self._state:
            if self._thread is not None:
                msg = "fake sway server already started"
                raise RuntimeError(msg)
            _cleanup_stale_socket(self.socket_path)
            server = _InnerServer(self.socket_path, self)
            thread = threading.Thread(
                target=server.serve_forever,
                name="ksway-fake-server",
                daemon=True,
            )
            self._server = server
            self._thread = thread
        thread.start()
        _wait_until_accepting(self.socket_path, self.timeout)

    def stop(self) -> None:
        """Disconnect every client, stop serving and remove the socket."""
        with self._state:
            server, thread = self._server, self._thread
            self._server = None
            self._thread = None
            sessions = list(self._sessions)
        for session in sessions:
            session.close()
        if server is not None:
            server.shutdown()
            server.server_close()
        if thread is not None:
            thread.join(self.timeout)
        with contextlib.suppress(FileNotFoundError):
            self.socket_path.unlink()

    def connect(self, *, timeout: float | None = None) -> Connection:
        """Open a client :class:`Connection` to this server."""
        return Connection.connect_to_path(self.socket_path, timeout=timeout)

    # -- scripting ----------------------------------------------------------

    def script(
        self,
        code: CommandCode,
        body: Body,
        *,
        events_before: t.Iterable[tuple[IpcEvent, Body]] = (),
    ) -> None:
        """Answer the next *code* request with *body*, after *events_before*."""
        reply = ScriptedReply(body, list(events_before))
        with self._state:
            self._scripted[int(code)].append(reply)

    def emit(self, event: IpcEvent, body: Body) -> int:
        """Send *event* to every client subscribed to it; return how many."""
        with self._state:
            targets = [s for s in self._sessions if event in s.events]
        for session in targets:
            session.send(event, body)
        logger.debug("Emitted %s to %d client(s)", event.name, len(targets))
        return len(targets)

    def wait_for_subscribers(
        self, count: int = 1, timeout: float | None = None
    ) -> None:
        """Block until *count* clients hold a subscription."""
        deadline = time.monotonic() + (self.timeout if timeout is None else timeout)
        with self._state:
            while sum(1 for s in self._sessions if s.events) < count:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    msg = f"fewer than {count} subscriber(s) after waiting"
                    raise TimeoutError(msg)
                self._state.wait(remaining)

    # -- request processing -------------------------------------------------

    def _register(self, session: _Session) -> None:
        with self._state:
            self._sessions.append(session)

    def _unregister(self, session: _Session) -> None:
        with self._state:
            if session in self._sessions:
                self._sessions.remove(session)
            self._state.notify_all()

    def _resolve(self, request: RecordedRequest) -> ScriptedReply:
        with self._state:
            queued = self._scripted.get(request.code)
            if queued:
                return queued.popleft()
        if self.handler is not None:
            result = self.handler(request)
            if isinstance(result, ScriptedReply):
                return result
            if result is not None:
                return ScriptedReply(result)
        try:
            code = CommandCode(request.code)
        except ValueError:
            logger.warning("Fake sway got unknown request type %d", request.code)
            return ScriptedReply({"success": False, "error": "unknown request"})
        body = self.replies[code]
        if code is CommandCode.RUN_COMMAND and isinstance(body, list):
            count = max(1, len([c for c in request.text.split(";") if c.strip()]))
            return ScriptedReply(body * count)
        return ScriptedReply(body)

    def _handle_request(self, session: _Session, request: RecordedRequest) -> None:
        with self._state:
            self.journal.append(request)
        try:
            reply = self._resolve(request)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Fake sway request handler raised")
            reply = ScriptedReply({"success": False, "error": str(exc)})
        for event, body in reply.events_before:
            session.send(event, body)
        added: set[IpcEvent] = set()
        if request.code == CommandCode.SUBSCRIBE:
            added = self._apply_subscription(session, request, reply)
        session.send(request.code, reply.body)
        if IpcEvent.TICK in added:
            # sway greets new tick subscribers with a "first" tick.
            session.send(IpcEvent.TICK, {"first": True, "payload": ""})
        elif request.code == CommandCode.SEND_TICK:
            self.emit(IpcEvent.TICK, {"first": False, "payload": request.text})

    def _apply_subscription(
        self, session: _Session, request: RecordedRequest, reply: ScriptedReply
    ) -> set[IpcEvent]:
        if isinstance(reply.body, dict) and reply.body.get("success") is False:
            return set()
        names = json.loads(request.payload)
        events = {IpcEvent.from_name(name) for name in names}
        with self._state:
            session.events |= events
            self._state.notify_all()
        return events


class _ClientHandler(socketserver.BaseRequestHandler):
    """Serve one client connection until it disconnects."""

    server: _InnerServer

    def setup(self) -> None:
        self.session = _Session(self.request)
        self.server.outer._register(self.session)  # noqa: SLF001

    def handle(self) -> None:  # pragma: no cover - exercised via behaviour tests
        rfile = self.request.makefile("rb")
        with contextlib.closing(rfile):
            while self.session.alive:
                try:
                    frame = read_frame(rfile)
                except IncompleteFrameError as exc:
                    if exc.received:
                        logger.warning("Fake sway client sent a truncated frame")
                    return
                except (ProtocolError, OSError) as exc:
                    logger.warning("Fake sway dropping client: %s", exc)
                    return
                request = RecordedRequest(frame.type_code, frame.payload)
                self.server.outer._handle_request(self.session, request)  # noqa: SLF001

    def finish(self) -> None:
        self.server.outer._unregister(self.session)  # noqa: SLF001


class _InnerServer(socketserver.ThreadingUnixStreamServer):
    """Threaded Unix stream server passing requests to :class:`FakeSwayServer`."""

    def __init__(self, socket_path: Path, outer: FakeSwayServer) -> None:
        self.outer = outer
        super().__init__(str(socket_path), _ClientHandler)
        self.daemon_threads = True


def _cleanup_stale_socket(socket_path: Path) -> None:
    """Remove a leftover socket file unless something still listens on it."""
    with contextlib.closing(socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)) as probe:
        try:
            probe.connect(str(socket_path))
        except OSError:
            pass
        else:
            msg = f"Socket {socket_path} is still in use"
            raise RuntimeError(msg)
    with contextlib.suppress(FileNotFoundError):
        socket_path.unlink()


def _wait_until_accepting(socket_path: Path, timeout: float) -> None:
    """Poll *socket_path* until a connection succeeds or *timeout* passes."""
    deadline = time.monotonic() + timeout
    wait_time = 0.001
    while time.monotonic() < deadline:
        with contextlib.closing(
            socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        ) as probe:
            probe.settimeout(max(deadline - time.monotonic(), wait_time))
            try:
                probe.connect(str(socket_path))
            except OSError:
                pass
            else:
                return
        time.sleep(wait_time)
        wait_time = min(wait_time * 1.5, 0.1)
    msg = f"Socket {socket_path} not accepting connections within timeout"
    raise RuntimeError(msg)


__all__ = [
    "DEFAULT_REPLIES",
    "FOCUSED_CON_ID",
    "FakeSwayServer",
    "RecordedRequest",
    "ScriptedReply",
]
