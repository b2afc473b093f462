"""Example tests demonstrating command building and execution."""

from __future__ import annotations

import typing as t

import pytest

from ksway import CommandCode, cmd, criteria, exec_, raw

pytest_plugins = ("ksway.pytest_plugin",)

pytestmark = pytest.mark.requires_unix_sockets

if t.TYPE_CHECKING:  # pragma: no cover - typing only
    from ksway.connection import Connection
    from ksway.fake_server import FakeSwayServer


def test_exec_launches_a_program(
    fake_sway: FakeSwayServer, sway_connection: Connection
) -> None:
    """exec_() renders the ``exec`` prefix for you."""
    result = sway_connection.run_json(exec_("foot --title scratch"))

    assert result == [{"success": True}]
    assert fake_sway.journal[-1].text == "exec foot --title scratch"


def test_criteria_target_the_focused_window(
    fake_sway: FakeSwayServer, sway_connection: Connection
) -> None:
    """The focused sentinel renders as ``__focused__``."""
    command = raw("floating toggle").with_criteria(
        [criteria.app_id(criteria.FOCUSED), criteria.tiling()]
    )

    sway_connection.run(command)

    assert fake_sway.journal[-1].text == (
        '[app_id="__focused__" tiling] floating toggle'
    )


def test_cmd_formats_templates(
    fake_sway: FakeSwayServer, sway_connection: Connection
) -> None:
    """cmd() formats arguments and applies criteria in one call."""
    sway_connection.run(
        cmd("resize set {} {}", 800, 600, criteria=[criteria.title("editor")])
    )

    assert fake_sway.journal[-1].text == '[title="editor"] resize set 800 600'


def test_failed_commands_are_reported_in_the_reply(
    fake_sway: FakeSwayServer, sway_connection: Connection
) -> None:
    """sway reports per-command failures in the JSON reply, not as errors."""
    fake_sway.replies[CommandCode.RUN_COMMAND] = [
        {"success": False, "parse_error": True, "error": "Unknown command"}
    ]

    result = sway_connection.run_json("frobnicate")

    assert result[0]["success"] is False
