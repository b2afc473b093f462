"""Pytest plugin providing the ``fake_sway`` and ``sway_connection`` fixtures."""

from __future__ import annotations

import logging
import shutil
import tempfile
import typing as t
from pathlib import Path

import pytest

from .environment import SWAYSOCK_ENV
from .fake_server import FakeSwayServer

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .connection import Connection

logger = logging.getLogger(__name__)

_DEFAULT_READ_TIMEOUT: t.Final[float] = 0.2


def pytest_configure(config: pytest.Config) -> None:
    """Register plugin-specific markers."""
    config.addinivalue_line(
        "markers",
        "fake_sway(read_timeout: float = 0.2): read timeout used by the "
        "sway_connection fixture.",
    )


def _read_timeout(request: pytest.FixtureRequest) -> float:
    marker = request.node.get_closest_marker("fake_sway")
    if marker is None or "read_timeout" not in marker.kwargs:
        return _DEFAULT_READ_TIMEOUT
    return float(marker.kwargs["read_timeout"])


@pytest.fixture
def fake_sway(
    monkeypatch: pytest.MonkeyPatch,
) -> t.Generator[FakeSwayServer, None, None]:
    """Run a :class:`FakeSwayServer` and point ``SWAYSOCK`` at it.

    The socket lives in a fresh short temporary directory because Unix
    socket paths are limited to about a hundred bytes.
    """
    socket_dir = Path(tempfile.mkdtemp(prefix="ksway-"))
    server = FakeSwayServer(socket_dir / "sway-ipc.sock")
    server.start()
    monkeypatch.setenv(SWAYSOCK_ENV, str(server.socket_path))
    logger.debug("fake_sway listening on %s", server.socket_path)
    try:
        yield server
    finally:
        server.stop()
        shutil.rmtree(socket_dir, ignore_errors=True)


@pytest.fixture
def sway_connection(
    fake_sway: FakeSwayServer, request: pytest.FixtureRequest
) -> t.Generator[Connection, None, None]:
    """Yield a :class:`Connection` to the ``fake_sway`` server."""
    with fake_sway.connect(timeout=_read_timeout(request)) as conn:
        yield conn
