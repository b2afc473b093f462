"""Textual sway commands as a small immutable tree.

``str()`` on any node yields the exact text sent in a ``RUN_COMMAND``
request, e.g. ``exec_("st").with_criteria([con_id(123)])`` renders as
``[con_id="123"] exec st``.
"""

from __future__ import annotations

import dataclasses as dc
import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .criteria import Criteria

_EXEC_PREFIX: t.Final[str] = "exec "


class _CommandBase:
    __slots__ = ()

    def with_criteria(self, criteria: t.Iterable[Criteria]) -> WithCriteria:
        """Return this command restricted by *criteria*."""
        return with_criteria(t.cast("Command", self), criteria)


@dc.dataclass(frozen=True, slots=True)
class Raw(_CommandBase):
    """A literal command string."""

    text: str

    def __str__(self) -> str:
        return self.text


@dc.dataclass(frozen=True, slots=True)
class Exec(_CommandBase):
    """Launch a program: renders as ``exec <text>``."""

    text: str

    def __str__(self) -> str:
        return f"{_EXEC_PREFIX}{self.text}"


@dc.dataclass(frozen=True, slots=True)
class WithCriteria(_CommandBase):
    """A command prefixed by an ordered criteria list."""

    criteria: tuple[Criteria, ...]
    command: Raw | Exec

    def __str__(self) -> str:
        if not self.criteria:
            return str(self.command)
        rendered = " ".join(str(criterion) for criterion in self.criteria)
        return f"[{rendered}] {self.command}"


Command = t.Union[Raw, Exec, WithCriteria]


def with_criteria(command: Command, criteria: t.Iterable[Criteria]) -> WithCriteria:
    """Attach *criteria* to *command*.

    An existing criteria list is extended rather than nested, so a command
    carries at most one list. Order is kept as given and duplicates are
    allowed.
    """
    added = tuple(criteria)
    if isinstance(command, WithCriteria):
        return WithCriteria(command.criteria + added, command.command)
    return WithCriteria(added, command)


def raw(text: str) -> Raw:
    """Build a :class:`Raw` command."""
    return Raw(text)


def exec_(text: str) -> Exec:
    """Build an :class:`Exec` command."""
    return Exec(text)


def cmd(template: str, *args: object, criteria: t.Iterable[Criteria] = ()) -> Command:
    """Format *template* and build the matching command node.

    A leading ``exec `` yields an :class:`Exec`, anything else a :class:`Raw`.
    Non-empty *criteria* are attached with :func:`with_criteria`::

        cmd("move absolute position {} {}", 10, 20, criteria=[con_id(7)])
    """
    text = template.format(*args) if args else template
    node: Command
    if text.startswith(_EXEC_PREFIX):
        node = Exec(text[len(_EXEC_PREFIX) :])
    else:
        node = Raw(text)
    added = tuple(criteria)
    if added:
        return with_criteria(node, added)
    return node


__all__ = [
    "Command",
    "Exec",
    "Raw",
    "WithCriteria",
    "cmd",
    "exec_",
    "raw",
    "with_criteria",
]
