"""Shared helpers for the runnable examples."""

from __future__ import annotations

import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - typing only
    from ksway.connection import Connection
    from ksway.subscription import EventFrame, Subscription


def collect_events(
    conn: Connection, sub: Subscription, count: int, *, attempts: int = 20
) -> list[EventFrame]:
    """Poll *conn* until *sub* holds *count* events, then drain them."""
    for _ in range(attempts):
        if len(sub) >= count:
            break
        conn.poll()
    return list(sub.drain())
