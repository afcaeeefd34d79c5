"""Process-wide properties manager.

Purpose
-------
Hold the application's string properties for the lifetime of the process,
validated against a closed :class:`~lib_app_tools.application.ports.KeySet`
and layered over a write-once defaults mapping.

Contents
--------
* :class:`PropertiesManager` – the singleton store and its initializers.
* :data:`EMPTY_VALUE` – returned by :meth:`PropertiesManager.set` when the key
  had no previous value.
* :func:`_validate_entries` – shared legal-key / string-value check.

:class:`PropertiesManager` also satisfies the
:class:`~lib_app_tools.application.ports.Configurable` capability through
``property``, ``set_property`` and ``remove_property``.

Lifecycle
---------
Exactly one of :meth:`PropertiesManager.initialize`,
:meth:`~PropertiesManager.initialize_with_defaults` or
:meth:`~PropertiesManager.initialize_from_file` succeeds per process; every
later call to any of them raises :class:`AlreadyInitialized`. Afterwards
:meth:`~PropertiesManager.get_instance` returns the installed manager.
:meth:`~PropertiesManager._reset_for_tests` is the only way back to the
uninitialized state and exists for test suites only.

Locking
-------
Two :class:`~lib_app_tools.application.locks.ReadWriteLock` instances guard
independent state:

* the *defaults lock* (process state) guards the write-once defaults and the
  installed instance;
* the *entries lock* (per instance) guards the mutable entries and the legal
  key set.

Whenever both are held the defaults lock is taken first. Only the
initializers and the test reset take both; ``get``/``set``/``load`` touch the
entries lock alone. File reads always happen before any lock is taken.
"""

from __future__ import annotations

import os
from collections import ChainMap
from types import MappingProxyType
from typing import AbstractSet, Final, Mapping

from ..adapters.properties.default import PropertiesFileLoader
from ..domain.errors import (
    AlreadyInitialized,
    CorruptState,
    InvalidArgument,
    InvalidConfig,
    NotInitialized,
    UnsupportedKey,
)
from ..domain.validators import ensure_present
from ..observability import log_debug, log_error, log_info, log_warning, make_event
from .locks import ReadWriteLock
from .ports import KeySet, PropertiesLoader

EMPTY_VALUE: Final[str] = ""
"""Previous value reported by :meth:`PropertiesManager.set` for keys that had none."""

_CONSTRUCTION_TOKEN: Final[object] = object()


class _ProcessState:
    """Process-wide slots shared by every initializer.

    ``defaults`` and ``instance`` are always assigned together under the
    defaults write lock.
    """

    def __init__(self) -> None:
        self.defaults_lock = ReadWriteLock()
        self.defaults: Mapping[str, str] | None = None
        self.instance: PropertiesManager | None = None


_STATE: Final[_ProcessState] = _ProcessState()


class PropertiesManager:
    """Thread-safe, validated store of string properties.

    Obtain it through one of the ``initialize*`` class methods (once per
    process) and :meth:`get_instance` afterwards; direct construction is not
    supported.

    Examples
    --------
    >>> from lib_app_tools.domain.keys import FixedKeySet
    >>> PropertiesManager._reset_for_tests()
    >>> props = PropertiesManager.initialize_with_defaults(FixedKeySet.of("db.host", "db.port"), {"db.port": "5432"})
    >>> props.get("db.port")
    '5432'
    >>> props.set("db.host", "localhost")
    ''
    >>> PropertiesManager.get_instance() is props
    True
    >>> PropertiesManager._reset_for_tests()
    """

    def __init__(
        self,
        legal_keys: frozenset[str],
        defaults: Mapping[str, str],
        loader: PropertiesLoader,
        *,
        _token: object = None,
    ) -> None:
        if _token is not _CONSTRUCTION_TOKEN:
            raise TypeError("PropertiesManager instances are created by the initialize* class methods")
        self._entries_lock = ReadWriteLock()
        self._loader = loader
        with self._entries_lock.write_locked():
            self._legal_keys = legal_keys
            self._entries: dict[str, str] = {}
            self._view: ChainMap[str, str] = ChainMap(self._entries, defaults)

    # ------------------------------------------------------------------
    # process-wide lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def initialize(cls, keys: KeySet, *, loader: PropertiesLoader | None = None) -> "PropertiesManager":
        """Install the manager with no defaults.

        Raises
        ------
        AlreadyInitialized
            When any initializer already succeeded in this process.
        InvalidArgument
            When *keys* is ``None`` or supports no key at all.
        """

        legal_keys = _legal_keys_of(keys)
        return cls._install(legal_keys, {}, loader=loader, source=None)

    @classmethod
    def initialize_with_defaults(
        cls,
        keys: KeySet,
        defaults: Mapping[str, str],
        *,
        loader: PropertiesLoader | None = None,
    ) -> "PropertiesManager":
        """Install the manager with *defaults* as the write-once base layer.

        Raises
        ------
        InvalidConfig
            When a default key is not supported by *keys* or a value is not a
            string. Nothing is installed in that case.
        AlreadyInitialized
            When any initializer already succeeded in this process.
        """

        legal_keys = _legal_keys_of(keys)
        ensure_present(defaults, "defaults")
        _validate_entries(legal_keys, defaults, source=None)
        return cls._install(legal_keys, defaults, loader=loader, source=None)

    @classmethod
    def initialize_from_file(
        cls,
        keys: KeySet,
        path: str | os.PathLike[str],
        *,
        loader: PropertiesLoader | None = None,
    ) -> "PropertiesManager":
        """Read defaults from the properties file at *path*, then install them.

        The file is read before any lock is taken. Errors from the loader
        (``FileNotFound``, ``FileAccessError``, ``MalformedFile``) propagate
        unchanged.
        """

        legal_keys = _legal_keys_of(keys)
        ensure_present(path, "path")
        loader = loader or PropertiesFileLoader()
        defaults = loader.load(os.fspath(path))
        _validate_entries(legal_keys, defaults, source=os.fspath(path))
        return cls._install(legal_keys, defaults, loader=loader, source=os.fspath(path))

    @classmethod
    def get_instance(cls) -> "PropertiesManager":
        """Return the installed manager or raise :class:`NotInitialized`."""

        with _STATE.defaults_lock.read_locked():
            instance = _STATE.instance
        if instance is None:
            log_error("properties_not_initialized", component="properties", path=None)
            raise NotInitialized("PropertiesManager.get_instance() called before any initializer")
        return instance

    @classmethod
    def is_initialized(cls) -> bool:
        with _STATE.defaults_lock.read_locked():
            return _STATE.defaults is not None

    @classmethod
    def _install(
        cls,
        legal_keys: frozenset[str],
        defaults: Mapping[str, str],
        *,
        loader: PropertiesLoader | None,
        source: str | None,
    ) -> "PropertiesManager":
        frozen_defaults = MappingProxyType(dict(defaults))
        with _STATE.defaults_lock.write_locked():
            if _STATE.defaults is not None:
                log_error("properties_already_initialized", component="properties", path=source)
                raise AlreadyInitialized("PropertiesManager can be initialized only once per process")
            # takes the entries lock nested inside the defaults lock
            instance = cls(legal_keys, frozen_defaults, loader or PropertiesFileLoader(), _token=_CONSTRUCTION_TOKEN)
            _STATE.defaults = frozen_defaults
            _STATE.instance = instance
        log_info(
            "properties_initialized",
            **make_event("properties", source, {"keys": len(legal_keys), "defaults": len(frozen_defaults)}),
        )
        return instance

    @classmethod
    def _reset_for_tests(cls) -> None:
        """Forget the installed manager and defaults. Test suites only."""

        with _STATE.defaults_lock.write_locked():
            _STATE.defaults = None
            _STATE.instance = None

    # ------------------------------------------------------------------
    # instance operations
    # ------------------------------------------------------------------

    def load(self, source: Mapping[str, str] | str | os.PathLike[str]) -> None:
        """Merge *source* over the current entries.

        *source* is either a mapping or the path of a properties file. All keys
        are validated before anything is merged, so a rejected load leaves the
        store untouched.

        Raises
        ------
        InvalidConfig
            Unsupported key or non-string value (``MalformedFile`` for broken
            files).
        FileNotFound / FileAccessError
            When *source* names a file that cannot be read.
        """

        ensure_present(source, "source")
        path: str | None = None
        if isinstance(source, Mapping):
            new_entries = dict(source)
        elif isinstance(source, (str, os.PathLike)):
            path = os.fspath(source)
            new_entries = dict(self._loader.load(path))
        else:
            raise InvalidArgument(f"cannot load properties from {type(source).__name__}")

        with self._entries_lock.read_locked():
            legal_keys = self._legal_keys
        _validate_entries(legal_keys, new_entries, source=path)

        with self._entries_lock.write_locked():
            self._entries.update(new_entries)
        log_debug("properties_loaded", **make_event("properties", path, {"keys": sorted(new_entries)}))

    def get(self, key: str) -> str:
        """Return the value of *key*: the entry if set, else the default.

        Raises
        ------
        UnsupportedKey
            When *key* is not part of the legal key set.
        CorruptState
            When *key* is legal but neither an entry nor a default provides a
            value.
        """

        ensure_present(key, "key")
        with self._entries_lock.read_locked():
            self._check_key(key)
            value = self._view.get(key)
        if value is None:
            log_error("properties_value_missing", component="properties", path=None, key=key)
            raise CorruptState(f"no value available for property {key!r}")
        return value

    def set(self, key: str, value: str) -> str:
        """Assign *value* to *key* and return the value it replaces.

        Returns :data:`EMPTY_VALUE` when the key had no value before. The
        replaced value is the one :meth:`get` would have returned, so a key
        only present in the defaults reports its default.
        """

        ensure_present(key, "key")
        ensure_present(value, "value")
        if not isinstance(value, str):
            raise InvalidArgument(f"property values must be strings, got {type(value).__name__}")
        with self._entries_lock.write_locked():
            self._check_key(key)
            previous = self._view.get(key)
            self._entries[key] = value
        log_debug("property_set", component="properties", path=None, key=key)
        return EMPTY_VALUE if previous is None else previous

    def snapshot(self) -> Mapping[str, str]:
        """Return a read-only copy of every resolvable property."""

        with self._entries_lock.read_locked():
            return MappingProxyType(dict(self._view))

    def remove_property(self, key: str) -> str:
        """Drop the entry for *key* and return the value it had.

        A default for *key* is untouched and becomes visible again; the
        returned value is the one :meth:`get` reported before the call, or
        :data:`EMPTY_VALUE`.
        """

        ensure_present(key, "key")
        with self._entries_lock.write_locked():
            self._check_key(key)
            previous = self._view.get(key)
            self._entries.pop(key, None)
        log_debug("property_removed", component="properties", path=None, key=key)
        return EMPTY_VALUE if previous is None else previous

    # Configurable capability
    property = get
    set_property = set

    def defaults(self) -> Mapping[str, str]:
        """Return the write-once defaults layer."""

        with _STATE.defaults_lock.read_locked():
            return _STATE.defaults if _STATE.defaults is not None else MappingProxyType({})

    def supported_keys(self) -> frozenset[str]:
        with self._entries_lock.read_locked():
            return self._legal_keys

    def _check_key(self, key: str) -> None:
        if key not in self._legal_keys:
            log_warning("property_unsupported", component="properties", path=None, key=key)
            raise UnsupportedKey(f"unsupported property {key!r}")

    def __getitem__(self, key: str) -> str:
        return self.get(key)

    def __contains__(self, key: object) -> bool:
        with self._entries_lock.read_locked():
            return key in self._legal_keys and key in self._view

    def __repr__(self) -> str:
        with self._entries_lock.read_locked():
            return f"<PropertiesManager keys={len(self._legal_keys)} entries={len(self._entries)}>"


def _legal_keys_of(keys: KeySet | None) -> frozenset[str]:
    """Snapshot the legal key names so later changes to *keys* cannot leak in."""

    supported: AbstractSet[str] = ensure_present(keys, "keys").supported_keys()
    legal_keys = frozenset(ensure_present(supported, "keys.supported_keys()"))
    if not legal_keys:
        raise InvalidArgument("the key set must support at least one key")
    return legal_keys


def _validate_entries(legal_keys: AbstractSet[str], entries: Mapping[str, str], *, source: str | None) -> None:
    """Raise :class:`InvalidConfig` unless every key is legal and every value a string."""

    invalid: list[str] = []
    for key, value in entries.items():
        if key not in legal_keys or not isinstance(value, str):
            log_error("property_invalid", component="properties", path=source, key=key, value_type=type(value).__name__)
            invalid.append(repr(key))
    if invalid:
        location = f" in {source}" if source else ""
        raise InvalidConfig(f"unsupported or invalid properties{location}: {', '.join(sorted(invalid))}")
