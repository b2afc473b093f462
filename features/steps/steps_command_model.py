"""Step definitions for command model behavioural tests."""
# pyright: reportMissingImports=false, reportUnknownMemberType=false

from __future__ import annotations

import typing as t

from behave import given, then, when  # type: ignore[attr-defined]

from ksway.command import exec_, raw
from ksway.criteria import FOCUSED, app_id, floating, workspace

if t.TYPE_CHECKING:  # pragma: no cover - typing only
    from ksway.command import Command


class BehaveContext(t.Protocol):
    """Behave step context with attributes used in tests."""

    command: Command


@given('the exec command "{text}"')
def step_exec_command(context: BehaveContext, text: str) -> None:
    """Start from an ``exec`` command."""
    context.command = exec_(text)


@given('the raw command "{text}"')
def step_raw_command(context: BehaveContext, text: str) -> None:
    """Start from a literal command."""
    context.command = raw(text)


@when('I restrict it to the app_id "{value}"')
def step_restrict_app_id(context: BehaveContext, value: str) -> None:
    """Add an ``app_id`` criterion."""
    context.command = context.command.with_criteria([app_id(value)])


@when("I restrict it to the focused workspace")
def step_restrict_workspace(context: BehaveContext) -> None:
    """Add a ``workspace`` criterion for the focused workspace."""
    context.command = context.command.with_criteria([workspace(FOCUSED)])


@when("I restrict it to floating windows")
def step_restrict_floating(context: BehaveContext) -> None:
    """Add the ``floating`` flag."""
    context.command = context.command.with_criteria([floating()])


@then('the command renders as "{text}"')
def step_renders_double(context: BehaveContext, text: str) -> None:
    """Compare the rendered command text."""
    assert str(context.command) == text  # noqa: S101


@then("the command renders as '{text}'")
def step_renders_single(context: BehaveContext, text: str) -> None:
    """Compare rendered text that itself contains double quotes."""
    assert str(context.command) == text  # noqa: S101
