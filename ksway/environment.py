"""Configuration read from the process environment."""

from __future__ import annotations

import glob
import logging
import os
import typing as t
from pathlib import Path

from ._validators import validate_positive_finite_timeout
from .errors import SocketPathNotFoundError

logger = logging.getLogger(__name__)

SWAYSOCK_ENV: t.Final[str] = "SWAYSOCK"
KSWAY_READ_TIMEOUT_ENV: t.Final[str] = "KSWAY_READ_TIMEOUT"
DEFAULT_READ_TIMEOUT: t.Final[float] = 1.0
SOCKET_GLOB: t.Final[str] = "/run/user/*/sway-ipc.*.sock"


def _mtime(path: str) -> float:
    try:
        return os.stat(path).st_mtime
    except OSError:
        return float("-inf")


def guess_socket_path(
    *,
    environ: t.Mapping[str, str] | None = None,
    pattern: str | None = None,
) -> Path:
    """Return the sway IPC socket path.

    ``SWAYSOCK`` wins when set. Otherwise the most recently modified socket
    matching *pattern* is used, which helps when running from systemd or
    another process started outside the graphical session.
    """
    env = os.environ if environ is None else environ
    if sock := env.get(SWAYSOCK_ENV):
        return Path(sock)

    if pattern is None:
        pattern = SOCKET_GLOB
    candidates = glob.glob(pattern)
    if not candidates:
        msg = f"{SWAYSOCK_ENV} is not set and nothing matches {pattern}"
        raise SocketPathNotFoundError(msg)
    best = max(candidates, key=_mtime)
    logger.debug("Guessed sway socket %s from %d candidate(s)", best, len(candidates))
    return Path(best)


def read_timeout_from_env(environ: t.Mapping[str, str] | None = None) -> float:
    """Return the socket read timeout configured via ``KSWAY_READ_TIMEOUT``."""
    env = os.environ if environ is None else environ
    raw = env.get(KSWAY_READ_TIMEOUT_ENV)
    if raw is None or not raw.strip():
        return DEFAULT_READ_TIMEOUT
    try:
        timeout = float(raw)
        validate_positive_finite_timeout(timeout)
    except ValueError as exc:
        msg = f"invalid {KSWAY_READ_TIMEOUT_ENV}: {raw!r}"
        raise ValueError(msg) from exc
    return timeout


__all__ = [
    "DEFAULT_READ_TIMEOUT",
    "KSWAY_READ_TIMEOUT_ENV",
    "SOCKET_GLOB",
    "SWAYSOCK_ENV",
    "guess_socket_path",
    "read_timeout_from_env",
]
