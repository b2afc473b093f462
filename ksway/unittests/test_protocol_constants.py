"""Tests for the op-code and event-code tables."""

from __future__ import annotations

import pytest

from ksway.protocol.constants import EVENT_BIT, CommandCode, IpcEvent, is_event_code


def test_command_codes_match_wire_values() -> None:
    """Op-codes are fixed by the compositor."""
    assert [(c.name, c.value) for c in CommandCode] == [
        ("RUN_COMMAND", 0),
        ("GET_WORKSPACES", 1),
        ("SUBSCRIBE", 2),
        ("GET_OUTPUTS", 3),
        ("GET_TREE", 4),
        ("GET_MARKS", 5),
        ("GET_BAR_CONFIG", 6),
        ("GET_VERSION", 7),
        ("GET_BINDING_MODES", 8),
        ("GET_CONFIG", 9),
        ("SEND_TICK", 10),
    ]


def test_event_codes_match_wire_values() -> None:
    """Event codes are fixed by the compositor."""
    assert {e.name: e.value for e in IpcEvent} == {
        "WORKSPACE": 0x80000000,
        "MODE": 0x80000002,
        "WINDOW": 0x80000003,
        "BARCONFIG_UPDATE": 0x80000004,
        "BINDING": 0x80000005,
        "SHUTDOWN": 0x80000006,
        "TICK": 0x80000007,
        "BAR_STATUS_UPDATE": 0x80000014,
    }


@pytest.mark.parametrize("event", list(IpcEvent))
def test_every_event_code_has_the_event_bit(event: IpcEvent) -> None:
    """The multiplexer relies on bit 31 to recognise events."""
    assert event & EVENT_BIT
    assert is_event_code(event)


@pytest.mark.parametrize("code", list(CommandCode))
def test_no_command_code_has_the_event_bit(code: CommandCode) -> None:
    """Replies echo op-codes, which must never look like events."""
    assert not code & EVENT_BIT
    assert not is_event_code(code)


@pytest.mark.parametrize(
    ("event", "name"),
    [
        (IpcEvent.WINDOW, "window"),
        (IpcEvent.BARCONFIG_UPDATE, "barconfig_update"),
        (IpcEvent.BAR_STATUS_UPDATE, "bar_status_update"),
    ],
)
def test_event_names_round_trip(event: IpcEvent, name: str) -> None:
    """Wire names are the lowercase member names."""
    assert event.event_name == name
    assert IpcEvent.from_name(name) is event


def test_from_code_returns_none_for_unknown_events() -> None:
    """Unknown event codes are reported as ``None`` instead of raising."""
    assert IpcEvent.from_code(0x80000003) is IpcEvent.WINDOW
    assert IpcEvent.from_code(0x80000001) is None


def test_from_name_rejects_unknown_names() -> None:
    """Typos in event names fail loudly."""
    with pytest.raises(ValueError, match="unknown IPC event name"):
        IpcEvent.from_name("windows")
