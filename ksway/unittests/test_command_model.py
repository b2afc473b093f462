"""Tests for command rendering and criteria attachment."""

from __future__ import annotations

import pytest

from ksway.command import Exec, Raw, WithCriteria, cmd, exec_, raw, with_criteria
from ksway.criteria import con_id, con_mark, floating, focused, title, workspace


def test_exec_renders_with_prefix() -> None:
    """Exec nodes prepend ``exec``."""
    assert str(exec_("st")) == "exec st"
    assert str(raw("kill")) == "kill"


def test_single_criterion_prefix() -> None:
    """Criteria are rendered in brackets ahead of the command."""
    command = raw("exec st").with_criteria([con_id(123)])

    assert str(command) == '[con_id="123"] exec st'
    assert str(exec_("st").with_criteria([con_id(123)])) == '[con_id="123"] exec st'


def test_multiple_criteria_keep_input_order() -> None:
    """Rendering never sorts or de-duplicates criteria."""
    command = with_criteria(
        raw("123123"), [con_mark("123"), con_id(123), workspace(focused())]
    )

    assert (
        str(command) == '[con_mark="123" con_id="123" workspace="__focused__"] 123123'
    )


def test_duplicate_criteria_are_kept() -> None:
    """Repeated criteria are legal in the command grammar."""
    command = raw("kill").with_criteria([floating(), floating()])

    assert str(command) == "[floating floating] kill"


def test_with_criteria_flattens_instead_of_nesting() -> None:
    """A second call extends the existing list."""
    first = raw("focus").with_criteria([con_id(1)])
    second = first.with_criteria([title("vim")])

    assert isinstance(second, WithCriteria)
    assert isinstance(second.command, Raw)
    assert second.criteria == (con_id(1), title("vim"))
    assert first.criteria == (con_id(1),)


def test_with_criteria_is_associative() -> None:
    """Two applications render like one application of the concatenation."""
    a = [con_id(1), floating()]
    b = [workspace("2"), con_mark("x")]

    stepwise = with_criteria(with_criteria(exec_("st"), a), b)
    at_once = with_criteria(exec_("st"), a + b)

    assert stepwise == at_once
    assert str(stepwise) == str(at_once)


def test_empty_criteria_render_the_inner_command() -> None:
    """An empty list contributes no bracket prefix."""
    command = with_criteria(exec_("st"), [])

    assert isinstance(command, WithCriteria)
    assert str(command) == "exec st"


def test_commands_are_immutable() -> None:
    """Nodes are frozen values that compare structurally."""
    node = Exec("st")

    with pytest.raises(AttributeError):
        node.text = "foot"  # type: ignore[misc]
    assert node == exec_("st")
    assert hash(node) == hash(exec_("st"))


@pytest.mark.parametrize(
    ("args", "kwargs", "expected_type", "expected"),
    [
        (("exec {}", "st"), {}, Exec, "exec st"),
        (("move position {} {}", 10, 20), {}, Raw, "move position 10 20"),
        (("kill",), {"criteria": [con_id(7)]}, WithCriteria, '[con_id="7"] kill'),
        (("{} {{x}}",), {}, Raw, "{} {{x}}"),
    ],
)
def test_cmd_builds_the_matching_node(
    args: tuple[object, ...],
    kwargs: dict[str, object],
    expected_type: type,
    expected: str,
) -> None:
    """cmd() formats its template only when arguments are given."""
    node = cmd(*args, **kwargs)  # type: ignore[arg-type]

    assert isinstance(node, expected_type)
    assert str(node) == expected
