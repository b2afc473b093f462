"""Behavioural tests for the command model using pytest-bdd."""

from __future__ import annotations

from pathlib import Path

from pytest_bdd import scenarios

from tests.steps.command_model import *  # noqa: F403

FEATURES_DIR = Path(__file__).resolve().parent.parent / "features"

scenarios(str(FEATURES_DIR / "command_model.feature"))
