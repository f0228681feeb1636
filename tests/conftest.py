"""Pytest configuration for the flat `tests/` directory.

Tests are tagged `unit`, `regression`, `e2e` or `benchmark` from their file
names so subsets can be selected with `-m`.
"""

from __future__ import annotations

import pathlib

import pytest

_CATEGORIES = {
    "benchmark": ("benchmark",),
    "e2e": ("e2e", "end_to_end", "main_cli"),
    "regression": ("regression",),
}


def pytest_configure(config: pytest.Config) -> None:
    for marker in ("unit", *_CATEGORIES):
        config.addinivalue_line("markers", f"{marker}: {marker} tests")


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Auto-apply test category markers based on filename conventions."""
    for item in items:
        name = pathlib.Path(str(item.fspath)).name.lower()
        for marker, needles in _CATEGORIES.items():
            if any(needle in name for needle in needles):
                item.add_marker(getattr(pytest.mark, marker))
                break
        else:
            item.add_marker(pytest.mark.unit)
