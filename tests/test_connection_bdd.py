"""Behavioural tests for Connection multiplexing using pytest-bdd."""

from __future__ import annotations

from pathlib import Path

import pytest
from pytest_bdd import scenario

from tests.steps.connection import *  # noqa: F403

FEATURES_DIR = Path(__file__).resolve().parent.parent / "features"

pytestmark = pytest.mark.requires_unix_sockets


@scenario(
    str(FEATURES_DIR / "connection.feature"),
    "running a command with criteria",
)
def test_run_command_with_criteria() -> None:
    """Criteria are rendered into the RUN_COMMAND payload."""


@scenario(
    str(FEATURES_DIR / "connection.feature"),
    "events that precede a reply are queued",
)
def test_events_before_reply_are_queued() -> None:
    """Events read while waiting for a reply land in the subscription."""


@scenario(
    str(FEATURES_DIR / "connection.feature"),
    "a connection accepts only one subscription",
)
def test_single_subscription() -> None:
    """A second subscribe call is refused."""


@scenario(
    str(FEATURES_DIR / "connection.feature"),
    "polling an idle connection",
)
def test_idle_poll() -> None:
    """poll() is a no-op when nothing is pending."""


@scenario(
    str(FEATURES_DIR / "connection.feature"),
    "tick events round trip through the server",
)
def test_tick_round_trip() -> None:
    """A sent tick comes back as a tick event."""
