from __future__ import annotations

import logging
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from lib_app_tools.application.properties import EMPTY_VALUE, PropertiesManager
from lib_app_tools.domain.errors import (
    AlreadyInitialized,
    CorruptState,
    FileNotFound,
    InvalidArgument,
    InvalidConfig,
    MalformedFile,
    NotInitialized,
    UnsupportedKey,
)
from lib_app_tools.domain.keys import FixedKeySet


def test_get_instance_before_initialization_fails() -> None:
    assert PropertiesManager.is_initialized() is False
    with pytest.raises(NotInitialized):
        PropertiesManager.get_instance()


def test_initialize_without_defaults(db_keys: FixedKeySet) -> None:
    manager = PropertiesManager.initialize(db_keys)
    assert PropertiesManager.is_initialized() is True
    assert PropertiesManager.get_instance() is manager
    assert dict(manager.defaults()) == {}
    assert dict(manager.snapshot()) == {}
    assert manager.supported_keys() == {"db.host", "db.port", "db.user"}


def test_initialize_with_defaults_exposes_values(db_keys: FixedKeySet) -> None:
    defaults = {"db.host": "localhost", "db.port": "5432"}
    manager = PropertiesManager.initialize_with_defaults(db_keys, defaults)
    assert manager.get("db.host") == "localhost"
    assert manager["db.port"] == "5432"
    assert dict(manager.defaults()) == defaults


def test_defaults_are_copied_at_initialization(db_keys: FixedKeySet) -> None:
    defaults = {"db.host": "localhost"}
    manager = PropertiesManager.initialize_with_defaults(db_keys, defaults)
    defaults["db.host"] = "changed"
    assert manager.get("db.host") == "localhost"


KEY_NAMES = st.text(alphabet="abcdefghij.", min_size=1, max_size=8)


@settings(max_examples=50)
@given(
    st.dictionaries(KEY_NAMES, st.text(max_size=10), min_size=1, max_size=6),
    st.sets(KEY_NAMES, max_size=4),
)
def test_every_default_is_returned_exactly(defaults: dict[str, str], extra_keys: set[str]) -> None:
    PropertiesManager._reset_for_tests()
    keys = FixedKeySet.from_iterable(set(defaults) | extra_keys)
    manager = PropertiesManager.initialize_with_defaults(keys, defaults)
    for key, value in defaults.items():
        assert manager.get(key) == value
    PropertiesManager._reset_for_tests()


INITIALIZERS = ["empty", "defaults", "file"]


def _run_initializer(kind: str, keys: FixedKeySet, tmp_path: Path) -> PropertiesManager:
    if kind == "empty":
        return PropertiesManager.initialize(keys)
    if kind == "defaults":
        return PropertiesManager.initialize_with_defaults(keys, {"db.host": "h"})
    path = tmp_path / f"defaults-{len(list(tmp_path.iterdir()))}.properties"
    path.write_text("db.host=h\n", encoding="utf-8")
    return PropertiesManager.initialize_from_file(keys, path)


@pytest.mark.parametrize("first", INITIALIZERS)
@pytest.mark.parametrize("second", INITIALIZERS)
def test_second_initialization_always_fails(first: str, second: str, db_keys: FixedKeySet, tmp_path: Path) -> None:
    manager = _run_initializer(first, db_keys, tmp_path)
    with pytest.raises(AlreadyInitialized):
        _run_initializer(second, db_keys, tmp_path)
    assert PropertiesManager.get_instance() is manager


def test_failed_validation_does_not_consume_initialization(db_keys: FixedKeySet) -> None:
    with pytest.raises(InvalidConfig, match="'db.password'"):
        PropertiesManager.initialize_with_defaults(db_keys, {"db.host": "h", "db.password": "x"})
    assert PropertiesManager.is_initialized() is False
    manager = PropertiesManager.initialize_with_defaults(db_keys, {"db.host": "h"})
    assert manager.get("db.host") == "h"


def test_non_string_default_is_rejected(db_keys: FixedKeySet) -> None:
    with pytest.raises(InvalidConfig):
        PropertiesManager.initialize_with_defaults(db_keys, {"db.port": 5432})  # type: ignore[dict-item]


@pytest.mark.parametrize(
    "call",
    [
        lambda: PropertiesManager.initialize(None),  # type: ignore[arg-type]
        lambda: PropertiesManager.initialize_with_defaults(FixedKeySet.of("a"), None),  # type: ignore[arg-type]
        lambda: PropertiesManager.initialize_from_file(FixedKeySet.of("a"), None),  # type: ignore[arg-type]
    ],
)
def test_missing_arguments_are_rejected(call) -> None:
    with pytest.raises(InvalidArgument):
        call()
    assert PropertiesManager.is_initialized() is False


def test_key_set_without_keys_is_rejected() -> None:
    class NoKeys:
        def supported_keys(self):
            return set()

    with pytest.raises(InvalidArgument):
        PropertiesManager.initialize(NoKeys())


def test_direct_construction_is_refused() -> None:
    with pytest.raises(TypeError):
        PropertiesManager(frozenset({"a"}), {}, None)  # type: ignore[arg-type]


def test_initialize_from_file_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "defaults.properties"
    path.write_text("a=1\nb=2\n", encoding="utf-8")
    manager = PropertiesManager.initialize_from_file(FixedKeySet.of("a", "b"), path)
    assert manager.get("a") == "1"
    assert manager.get("b") == "2"


def test_initialize_from_file_errors(tmp_path: Path, db_keys: FixedKeySet) -> None:
    with pytest.raises(FileNotFound):
        PropertiesManager.initialize_from_file(db_keys, tmp_path / "missing.properties")

    broken = tmp_path / "broken.properties"
    broken.write_text("db.host=\\uZZZZ\n", encoding="utf-8")
    with pytest.raises(MalformedFile):
        PropertiesManager.initialize_from_file(db_keys, broken)

    unsupported = tmp_path / "unsupported.properties"
    unsupported.write_text("db.host=h\nother=x\n", encoding="utf-8")
    with pytest.raises(InvalidConfig, match="unsupported.properties"):
        PropertiesManager.initialize_from_file(db_keys, unsupported)

    assert PropertiesManager.is_initialized() is False


def test_initialize_from_file_uses_injected_loader(db_keys: FixedKeySet) -> None:
    class StubLoader:
        def __init__(self) -> None:
            self.calls: list[str] = []

        def load(self, path: str):
            self.calls.append(path)
            return {"db.host": f"from:{path}"}

    loader = StubLoader()
    manager = PropertiesManager.initialize_from_file(db_keys, "defaults.properties", loader=loader)
    assert manager.get("db.host") == "from:defaults.properties"
    manager.load("override.properties")
    assert loader.calls == ["defaults.properties", "override.properties"]
    assert manager.get("db.host") == "from:override.properties"


def test_get_unsupported_key(db_keys: FixedKeySet, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="lib_app_tools")
    manager = PropertiesManager.initialize(db_keys)
    with pytest.raises(UnsupportedKey):
        manager.get("db.password")
    assert any(record.getMessage() == "property_unsupported" for record in caplog.records)


def test_get_legal_key_without_value_is_corrupt_state(db_keys: FixedKeySet) -> None:
    manager = PropertiesManager.initialize(db_keys)
    with pytest.raises(CorruptState):
        manager.get("db.user")


def test_get_none_key_is_invalid_argument(db_keys: FixedKeySet) -> None:
    manager = PropertiesManager.initialize(db_keys)
    with pytest.raises(InvalidArgument):
        manager.get(None)  # type: ignore[arg-type]


@given(first=st.text(max_size=10), second=st.text(max_size=10))
def test_set_returns_prior_value(first: str, second: str) -> None:
    PropertiesManager._reset_for_tests()
    manager = PropertiesManager.initialize(FixedKeySet.of("k"))
    assert manager.set("k", first) == EMPTY_VALUE
    assert manager.set("k", second) == first
    assert manager.get("k") == second
    PropertiesManager._reset_for_tests()


def test_set_over_default_reports_default_and_keeps_defaults(db_keys: FixedKeySet) -> None:
    manager = PropertiesManager.initialize_with_defaults(db_keys, {"db.port": "5432"})
    assert manager.set("db.port", "6543") == "5432"
    assert manager.get("db.port") == "6543"
    assert dict(manager.defaults()) == {"db.port": "5432"}


def test_set_rejects_unsupported_key_and_bad_values(db_keys: FixedKeySet) -> None:
    manager = PropertiesManager.initialize(db_keys)
    with pytest.raises(UnsupportedKey):
        manager.set("nope", "x")
    with pytest.raises(InvalidArgument):
        manager.set("db.host", None)  # type: ignore[arg-type]
    with pytest.raises(InvalidArgument):
        manager.set("db.host", 1)  # type: ignore[arg-type]
    assert dict(manager.snapshot()) == {}


def test_load_mapping_overrides_entries(db_keys: FixedKeySet) -> None:
    manager = PropertiesManager.initialize_with_defaults(db_keys, {"db.host": "localhost", "db.port": "5432"})
    manager.set("db.user", "alice")
    manager.load({"db.host": "remote", "db.user": "bob"})
    assert dict(manager.snapshot()) == {"db.host": "remote", "db.port": "5432", "db.user": "bob"}


def test_load_with_unsupported_key_changes_nothing(db_keys: FixedKeySet) -> None:
    manager = PropertiesManager.initialize_with_defaults(db_keys, {"db.host": "localhost"})
    manager.set("db.user", "alice")
    before = dict(manager.snapshot())
    with pytest.raises(InvalidConfig):
        manager.load({"db.user": "mallory", "db.password": "secret"})
    assert dict(manager.snapshot()) == before


def test_load_file_merges_and_validates(tmp_path: Path, db_keys: FixedKeySet) -> None:
    manager = PropertiesManager.initialize_with_defaults(db_keys, {"db.host": "localhost"})
    override = tmp_path / "override.properties"
    override.write_text("db.host = prod-db\ndb.port: 6000\n", encoding="utf-8")
    manager.load(override)
    assert manager.get("db.host") == "prod-db"
    assert manager.get("db.port") == "6000"

    bad = tmp_path / "bad.properties"
    bad.write_text("db.host=other\nunknown=1\n", encoding="utf-8")
    with pytest.raises(InvalidConfig):
        manager.load(str(bad))
    assert manager.get("db.host") == "prod-db"

    with pytest.raises(FileNotFound):
        manager.load(tmp_path / "missing.properties")


def test_load_rejects_unknown_source_types(db_keys: FixedKeySet) -> None:
    manager = PropertiesManager.initialize(db_keys)
    with pytest.raises(InvalidArgument):
        manager.load(42)  # type: ignore[arg-type]
    with pytest.raises(InvalidArgument):
        manager.load(None)  # type: ignore[arg-type]


def test_contains_reports_resolvable_legal_keys(db_keys: FixedKeySet) -> None:
    manager = PropertiesManager.initialize_with_defaults(db_keys, {"db.host": "h"})
    assert "db.host" in manager
    assert "db.user" not in manager
    assert "unknown" not in manager
    manager.set("db.user", "u")
    assert "db.user" in manager


def test_snapshot_is_read_only(db_keys: FixedKeySet) -> None:
    manager = PropertiesManager.initialize_with_defaults(db_keys, {"db.host": "h"})
    snapshot = manager.snapshot()
    with pytest.raises(TypeError):
        snapshot["db.host"] = "x"  # type: ignore[index]
    manager.set("db.host", "y")
    assert snapshot["db.host"] == "h"


def test_initialization_is_logged(db_keys: FixedKeySet, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="lib_app_tools")
    PropertiesManager.initialize_with_defaults(db_keys, {"db.host": "h"})
    record = next(r for r in caplog.records if r.getMessage() == "properties_initialized")
    assert record.context["keys"] == 3
    assert record.context["defaults"] == 1


def test_remove_property_restores_default(db_keys: FixedKeySet) -> None:
    manager = PropertiesManager.initialize_with_defaults(db_keys, {"db.port": "5432"})
    manager.set("db.port", "6543")
    assert manager.remove_property("db.port") == "6543"
    assert manager.get("db.port") == "5432"
    assert manager.remove_property("db.user") == EMPTY_VALUE
    with pytest.raises(UnsupportedKey):
        manager.remove_property("db.password")
