"""Criteria that select which containers a command applies to.

Each criterion renders as ``key="value"`` inside the ``[...]`` prefix of a
sway command. Most kinds also accept :data:`FOCUSED`, which renders as
``__focused__`` and matches whatever the currently focused window has.
``None`` is deliberately not accepted as a stand-in for "focused".
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as t

from typing_extensions import TypeVar

_T = TypeVar("_T", default=str)
_U64_MAX: t.Final[int] = 2**64 - 1


class _FocusedType:
    """Sentinel meaning "the value of the focused window"."""

    __slots__ = ()
    _instance: t.ClassVar[_FocusedType | None] = None

    def __new__(cls) -> _FocusedType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __str__(self) -> str:
        return "__focused__"

    def __repr__(self) -> str:
        return "FOCUSED"

    def __reduce__(self) -> str:
        return "FOCUSED"


FOCUSED: t.Final[_FocusedType] = _FocusedType()


def focused() -> _FocusedType:
    """Return the :data:`FOCUSED` sentinel."""
    return FOCUSED


@dc.dataclass(frozen=True, slots=True)
class Value(t.Generic[_T]):
    """A concrete criteria value."""

    value: _T

    def __str__(self) -> str:
        return str(self.value)


OrFocused = t.Union[Value[_T], _FocusedType]


class CriteriaKind(enum.Enum):
    """The keys understood by the compositor's criteria grammar."""

    APP_ID = "app_id"
    CLASS = "class"
    CON_ID = "con_id"
    CON_MARK = "con_mark"
    FLOATING = "floating"
    ID = "id"
    INSTANCE = "instance"
    SHELL = "shell"
    TILING = "tiling"
    TITLE = "title"
    URGENT = "urgent"
    WINDOW_ROLE = "window_role"
    WINDOW_TYPE = "window_type"
    WORKSPACE = "workspace"


_FLAG_KINDS: t.Final[frozenset[CriteriaKind]] = frozenset(
    {CriteriaKind.FLOATING, CriteriaKind.TILING}
)


@dc.dataclass(frozen=True, slots=True)
class Criteria:
    """A single criterion; ``str()`` gives its rendered form."""

    kind: CriteriaKind
    value: Value[t.Any] | _FocusedType | None = None

    def __post_init__(self) -> None:
        """Reject values on flag kinds and missing values elsewhere."""
        if self.kind in _FLAG_KINDS:
            if self.value is not None:
                msg = f"{self.kind.value} criteria take no value"
                raise ValueError(msg)
        elif self.value is None:
            msg = f"{self.kind.value} criteria require a value"
            raise ValueError(msg)

    def __str__(self) -> str:
        if self.value is None:
            return self.kind.value
        return f'{self.kind.value}="{self.value}"'


def _or_focused(value: object, convert: t.Callable[[t.Any], t.Any]) -> OrFocused:
    if value is FOCUSED:
        return FOCUSED
    if value is None:
        msg = "criteria values cannot be None; use focused() for the focused window"
        raise TypeError(msg)
    if isinstance(value, Value):
        value = value.value
    return Value(convert(value))


def _plain(value: object, convert: t.Callable[[t.Any], t.Any], key: str) -> Value:
    if value is FOCUSED:
        msg = f"{key} does not accept the focused sentinel"
        raise TypeError(msg)
    return _or_focused(value, convert)  # type: ignore[return-value]


def _u64(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"expected an integer id, got {value!r}"
        raise TypeError(msg)
    if not 0 <= value <= _U64_MAX:
        msg = f"id out of range: {value}"
        raise ValueError(msg)
    return value


def app_id(value: object) -> Criteria:
    """Match the Wayland app id (regular expression or focused)."""
    return Criteria(CriteriaKind.APP_ID, _or_focused(value, str))


def class_(value: object) -> Criteria:
    """Match the X11 window class (regular expression or focused)."""
    return Criteria(CriteriaKind.CLASS, _or_focused(value, str))


def con_id(value: object) -> Criteria:
    """Match the internal container id, as reported by ``get_tree``."""
    return Criteria(CriteriaKind.CON_ID, _or_focused(value, _u64))


def con_mark(value: object) -> Criteria:
    """Match container marks (regular expression)."""
    return Criteria(CriteriaKind.CON_MARK, _plain(value, str, "con_mark"))


def floating() -> Criteria:
    """Match floating windows."""
    return Criteria(CriteriaKind.FLOATING)


def id_(value: object) -> Criteria:
    """Match the numeric X11 window id."""
    return Criteria(CriteriaKind.ID, _plain(value, _u64, "id"))


def instance(value: object) -> Criteria:
    """Match the X11 window instance (regular expression or focused)."""
    return Criteria(CriteriaKind.INSTANCE, _or_focused(value, str))


def shell(value: object) -> Criteria:
    """Match the window shell, e.g. ``xdg_shell`` or ``xwayland``."""
    return Criteria(CriteriaKind.SHELL, _or_focused(value, str))


def tiling() -> Criteria:
    """Match tiling windows."""
    return Criteria(CriteriaKind.TILING)


def title(value: object) -> Criteria:
    """Match the window title (regular expression or focused)."""
    return Criteria(CriteriaKind.TITLE, _or_focused(value, str))


def urgent(value: object) -> Criteria:
    """Match urgency: first, last, latest, newest, oldest or recent."""
    return Criteria(CriteriaKind.URGENT, _plain(value, str, "urgent"))


def window_role(value: object) -> Criteria:
    """Match ``WM_WINDOW_ROLE`` (regular expression or focused)."""
    return Criteria(CriteriaKind.WINDOW_ROLE, _or_focused(value, str))


def window_type(value: object) -> Criteria:
    """Match ``_NET_WM_WINDOW_TYPE``, e.g. ``dialog`` or ``utility``."""
    return Criteria(CriteriaKind.WINDOW_TYPE, _plain(value, str, "window_type"))


def workspace(value: object) -> Criteria:
    """Match the workspace name; focused matches the focused workspace."""
    return Criteria(CriteriaKind.WORKSPACE, _or_focused(value, str))


__all__ = [
    "FOCUSED",
    "Criteria",
    "CriteriaKind",
    "OrFocused",
    "Value",
    "app_id",
    "class_",
    "con_id",
    "con_mark",
    "floating",
    "focused",
    "id_",
    "instance",
    "shell",
    "tiling",
    "title",
    "urgent",
    "window_role",
    "window_type",
    "workspace",
]
