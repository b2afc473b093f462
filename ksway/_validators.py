"""Shared validation helpers."""

from __future__ import annotations

import math


def validate_positive_finite_timeout(timeout: float) -> None:
    """Ensure *timeout* represents a usable socket timeout value."""
    if isinstance(timeout, bool):
        msg = "timeout must be a real number"
        raise TypeError(msg)

    if not (timeout > 0 and math.isfinite(timeout)):
        msg = "timeout must be > 0 and finite"
        raise ValueError(msg)


def validate_u32(value: int, *, name: str) -> None:
    """Ensure *value* fits in an unsigned 32-bit wire field."""
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{name} must be an integer"
        raise TypeError(msg)
    if not 0 <= value <= 0xFFFF_FFFF:
        msg = f"{name} must fit in an unsigned 32-bit integer"
        raise ValueError(msg)
