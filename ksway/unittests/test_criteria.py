"""Tests for criteria values and rendering."""

from __future__ import annotations

import pickle

import pytest

from ksway import criteria
from ksway.criteria import FOCUSED, Criteria, CriteriaKind, Value


@pytest.mark.parametrize(
    ("criterion", "expected"),
    [
        (criteria.app_id("firefox"), 'app_id="firefox"'),
        (criteria.app_id(FOCUSED), 'app_id="__focused__"'),
        (criteria.class_("Gimp"), 'class="Gimp"'),
        (criteria.con_id(42), 'con_id="42"'),
        (criteria.con_id(criteria.focused()), 'con_id="__focused__"'),
        (criteria.con_mark("scratch"), 'con_mark="scratch"'),
        (criteria.floating(), "floating"),
        (criteria.id_(0x1A00003), 'id="27262979"'),
        (criteria.instance("crx_abc"), 'instance="crx_abc"'),
        (criteria.shell("xwayland"), 'shell="xwayland"'),
        (criteria.tiling(), "tiling"),
        (criteria.title(Value("^vim")), 'title="^vim"'),
        (criteria.urgent("latest"), 'urgent="latest"'),
        (criteria.window_role("pop-up"), 'window_role="pop-up"'),
        (criteria.window_type("dialog"), 'window_type="dialog"'),
        (criteria.workspace(FOCUSED), 'workspace="__focused__"'),
    ],
)
def test_criteria_render(criterion: Criteria, expected: str) -> None:
    """Each kind renders as ``key="value"`` or a bare flag."""
    assert str(criterion) == expected


def test_focused_is_a_singleton() -> None:
    """The sentinel survives copying and pickling as the same object."""
    assert criteria.focused() is FOCUSED
    assert pickle.loads(pickle.dumps(FOCUSED)) is FOCUSED  # noqa: S301
    assert repr(FOCUSED) == "FOCUSED"


def test_none_is_not_focused() -> None:
    """``None`` is rejected rather than read as the focused sentinel."""
    with pytest.raises(TypeError, match="use focused"):
        criteria.title(None)


@pytest.mark.parametrize(
    "factory", [criteria.con_mark, criteria.id_, criteria.urgent, criteria.window_type]
)
def test_kinds_without_focused_support(factory: object) -> None:
    """Some kinds have no ``__focused__`` form in the grammar."""
    with pytest.raises(TypeError, match="does not accept the focused sentinel"):
        factory(FOCUSED)  # type: ignore[operator]


@pytest.mark.parametrize("bad", ["12", 1.5, True])
def test_numeric_ids_must_be_integers(bad: object) -> None:
    """Container and window ids are unsigned integers."""
    with pytest.raises(TypeError, match="integer id"):
        criteria.con_id(bad)


def test_numeric_ids_must_fit_u64() -> None:
    """Ids outside the unsigned 64-bit range are rejected."""
    with pytest.raises(ValueError, match="out of range"):
        criteria.con_id(-1)
    with pytest.raises(ValueError, match="out of range"):
        criteria.id_(2**64)


def test_flag_kinds_take_no_value() -> None:
    """Floating and tiling are bare keywords."""
    with pytest.raises(ValueError, match="take no value"):
        Criteria(CriteriaKind.FLOATING, Value("yes"))
    with pytest.raises(ValueError, match="require a value"):
        Criteria(CriteriaKind.TITLE)


def test_value_zero_is_a_concrete_value() -> None:
    """Falsy values stay concrete values, not focused or absent."""
    assert str(criteria.con_id(0)) == 'con_id="0"'
    assert str(criteria.title("")) == 'title=""'
