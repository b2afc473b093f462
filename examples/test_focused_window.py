"""Example tests demonstrating state queries."""

from __future__ import annotations

import typing as t

import pytest

from ksway import CommandCode, criteria, raw

pytest_plugins = ("ksway.pytest_plugin",)

pytestmark = pytest.mark.requires_unix_sockets

if t.TYPE_CHECKING:  # pragma: no cover - typing only
    from ksway.connection import Connection
    from ksway.fake_server import FakeSwayServer


def test_focused_window_from_the_tree(sway_connection: Connection) -> None:
    """focused_window() searches the layout tree returned by GET_TREE."""
    window = sway_connection.focused_window()

    assert window is not None
    assert window["app_id"] == "foot"


def test_mark_the_focused_window(
    fake_sway: FakeSwayServer, sway_connection: Connection
) -> None:
    """Address the focused window by id to mark it."""
    window = sway_connection.focused_window()
    assert window is not None

    sway_connection.run(
        raw("mark --add build").with_criteria([criteria.con_id(window["id"])])
    )

    assert fake_sway.journal[-1].text == '[con_id="7"] mark --add build'


def test_focused_workspace_follows_scripted_state(
    fake_sway: FakeSwayServer, sway_connection: Connection
) -> None:
    """Scripted replies let examples describe any compositor state."""
    fake_sway.script(
        CommandCode.GET_WORKSPACES,
        [{"name": "mail", "focused": False}, {"name": "code", "focused": True}],
    )

    workspace = sway_connection.focused_workspace()

    assert workspace == {"name": "code", "focused": True}
