"""Sanity tests ensuring the package imports correctly."""

from __future__ import annotations

import importlib

import pytest


@pytest.mark.parametrize(
    "module_name",
    [
        "wakeng",
        "wakeng.cards",
        "wakeng.rules",
        "wakeng.state",
        "wakeng.engine",
        "wakeng.agent",
        "wakeng.rooms",
        "wakeng.ismcts.search",
        "wakeng.cli.main",
    ],
)
def test_modules_import(module_name: str) -> None:
    """Ensure all foundational modules can be imported."""

    assert importlib.import_module(module_name)
