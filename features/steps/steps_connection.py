"""Step definitions for Connection behavioural tests."""
# pyright: reportMissingImports=false, reportUnknownMemberType=false

from __future__ import annotations

import shutil
import tempfile
import typing as t
from pathlib import Path

from behave import given, then, when  # type: ignore[attr-defined]

from ksway.command import raw
from ksway.criteria import con_id
from ksway.errors import AlreadySubscribedError
from ksway.fake_server import FakeSwayServer
from ksway.protocol.constants import CommandCode, IpcEvent

if t.TYPE_CHECKING:  # pragma: no cover - typing only
    from ksway.connection import Connection
    from ksway.subscription import Subscription


class BehaveContext(t.Protocol):
    """Behave step context with attributes used in tests."""

    server: FakeSwayServer
    conn: Connection
    subscription: Subscription
    reply: object
    error: Exception | None
    expected_events: list[dict[str, object]]

    def add_cleanup(self, func: t.Callable[..., object], *args: object) -> None:
        """Register *func* to run when the scenario ends."""


@given("a fake sway server")
def step_fake_server(context: BehaveContext) -> None:
    """Start a fake compositor in a fresh directory."""
    socket_dir = Path(tempfile.mkdtemp(prefix="ksway-"))
    context.add_cleanup(shutil.rmtree, socket_dir, True)
    context.server = FakeSwayServer(socket_dir / "sway-ipc.sock")
    context.server.start()
    context.add_cleanup(context.server.stop)


@given("a connection to the fake server")
def step_connect(context: BehaveContext) -> None:
    """Open a client connection with a short read timeout."""
    context.conn = context.server.connect(timeout=0.2)
    context.add_cleanup(context.conn.close)
    context.error = None


@given('the connection is subscribed to "{event}"')
def step_subscribed(context: BehaveContext, event: str) -> None:
    """Subscribe to *event*."""
    context.subscription = context.conn.subscribe([event])


@given("the server sends {count:d} window events before the next tree reply")
def step_events_before_tree(context: BehaveContext, count: int) -> None:
    """Script window events ahead of the next GET_TREE reply."""
    context.expected_events = [{"change": "new", "seq": n} for n in range(count)]
    context.server.script(
        CommandCode.GET_TREE,
        {"id": 1, "nodes": []},
        events_before=[(IpcEvent.WINDOW, body) for body in context.expected_events],
    )


@when('I run "{command}" on the window with con_id {ident:d}')
def step_run_with_con_id(context: BehaveContext, command: str, ident: int) -> None:
    """Run *command* restricted to one container."""
    context.reply = context.conn.run_json(raw(command).with_criteria([con_id(ident)]))


@when("I request the layout tree")
def step_request_tree(context: BehaveContext) -> None:
    """Ask for the layout tree."""
    context.reply = context.conn.get_tree_json()


@when('I subscribe to "{event}" again')
def step_subscribe_again(context: BehaveContext, event: str) -> None:
    """Attempt a second subscription."""
    try:
        context.conn.subscribe([event])
    except AlreadySubscribedError as exc:
        context.error = exc


@when("I poll the connection")
def step_poll(context: BehaveContext) -> None:
    """Read at most one pending frame."""
    context.conn.poll()


@when('I send the tick "{payload}"')
def step_send_tick(context: BehaveContext, payload: str) -> None:
    """Send a tick through the server."""
    context.reply = context.conn.send_tick(payload)


@when("I poll until {count:d} events are queued")
def step_poll_until(context: BehaveContext, count: int) -> None:
    """Poll until the subscription holds *count* events."""
    for _ in range(20):
        if len(context.subscription) >= count:
            return
        context.conn.poll()
    msg = f"only {len(context.subscription)} of {count} events arrived"
    raise AssertionError(msg)


@then("the server receives the command '{text}'")
def step_server_received(context: BehaveContext, text: str) -> None:
    """Check the last journal entry."""
    last = context.server.journal[-1]
    assert last.code == CommandCode.RUN_COMMAND  # noqa: S101
    assert last.text == text  # noqa: S101


@then("the command reply has {count:d} successful result")
def step_reply_results(context: BehaveContext, count: int) -> None:
    """Check the decoded RUN_COMMAND reply."""
    assert context.reply == [{"success": True}] * count  # noqa: S101


@then("{count:d} window events are queued in order")
def step_events_queued(context: BehaveContext, count: int) -> None:
    """Check the scripted events were queued in order."""
    frames = list(context.subscription.drain())
    assert [f.event for f in frames] == [IpcEvent.WINDOW] * count  # noqa: S101
    assert [f.json() for f in frames] == context.expected_events  # noqa: S101


@then("the subscription is refused as already subscribed")
def step_refused(context: BehaveContext) -> None:
    """Check the second subscribe call failed."""
    assert isinstance(context.error, AlreadySubscribedError)  # noqa: S101


@then("no events are queued")
def step_nothing_queued(context: BehaveContext) -> None:
    """Check the mailbox is empty."""
    assert context.subscription.try_recv() is None  # noqa: S101


@then('the last queued tick carries the payload "{payload}"')
def step_last_tick(context: BehaveContext, payload: str) -> None:
    """Check the most recent tick event."""
    frames = list(context.subscription.drain())
    assert frames[-1].json() == {"first": False, "payload": payload}  # noqa: S101
