"""Steps for testing the pytest plugin."""

from __future__ import annotations

import shutil
import subprocess
import sys
import tempfile
import typing as t
from pathlib import Path

from behave import given, then, when  # type: ignore[attr-defined]


class BehaveContext(t.Protocol):
    """Behave step context for plugin tests."""

    test_file: Path
    tmpdir: Path
    result: subprocess.CompletedProcess[str]


@given("a temporary test file using the fake_sway fixture")
def step_create_test_file(context: BehaveContext) -> None:
    """Write a pytest file that exercises the fixture."""
    test_code = """
from ksway import CommandCode

pytest_plugins = ("ksway.pytest_plugin",)

def test_example(fake_sway, sway_connection):
    fake_sway.script(CommandCode.GET_MARKS, ["scratch"])
    assert sway_connection.get_marks_json() == ["scratch"]
    assert sway_connection.focused_window()["app_id"] == "foot"
"""
    tmpdir = Path(tempfile.mkdtemp())
    context.test_file = tmpdir / "test_example.py"
    context.tmpdir = tmpdir
    context.test_file.write_text(test_code)


@when("I run pytest on the file")
def step_run_pytest(context: BehaveContext) -> None:
    """Execute pytest on the generated file."""
    result = subprocess.run(  # noqa: S603
        [
            sys.executable,
            "-m",
            "pytest",
            "-p",
            "no:cacheprovider",
            str(context.test_file),
        ],
        capture_output=True,
        text=True,
        check=False,
    )
    context.result = result
    shutil.rmtree(context.tmpdir)


@then("the run should pass")
def step_check_pass(context: BehaveContext) -> None:
    """Assert that pytest exited successfully."""
    assert context.result.returncode == 0, context.result.stdout  # noqa: S101
