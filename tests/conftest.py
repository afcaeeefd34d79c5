"""Shared fixtures for the whole suite.

The properties manager is process-wide; every test starts and ends with it
uninitialized so lifecycle tests do not leak into each other.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from lib_app_tools.application.properties import PropertiesManager
from lib_app_tools.domain.keys import FixedKeySet


@pytest.fixture(autouse=True)
def reset_properties_manager() -> Iterator[None]:
    PropertiesManager._reset_for_tests()
    yield
    PropertiesManager._reset_for_tests()


@pytest.fixture()
def db_keys() -> FixedKeySet:
    return FixedKeySet.of("db.host", "db.port", "db.user")


@pytest.fixture()
def file_tree(tmp_path: Path) -> Path:
    """Small tree: a.txt, b.log, sub/c.txt, sub/deeper/d.log."""

    (tmp_path / "sub" / "deeper").mkdir(parents=True)
    (tmp_path / "a.txt").write_text("a", encoding="utf-8")
    (tmp_path / "b.log").write_text("b", encoding="utf-8")
    (tmp_path / "sub" / "c.txt").write_text("c", encoding="utf-8")
    (tmp_path / "sub" / "deeper" / "d.log").write_text("d", encoding="utf-8")
    return tmp_path
