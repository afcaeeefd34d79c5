"""Application-layer ports describing collaborator responsibilities.

Purpose
-------
Define the structural contracts the application layer depends on so concrete
adapters (and embedding applications) can be swapped without touching the
properties manager or the file list.

Contents
--------
* :class:`KeySet` – closed set of legal configuration key names.
* :class:`PathMatcher` – compiled predicate over filesystem paths.
* :class:`PropertiesLoader` – reads a flat properties file into a mapping.
* :class:`Named` / :class:`Nameable` – entities with a readable name, and
  those whose name can also be reassigned.
* :class:`Configured` / :class:`Configurable` – entities answering property
  lookups, and those whose properties can also be set and removed.
* :class:`InstanceBuilder` – generic builder with an explicit validity check.

System Role
-----------
These protocols enforce Dependency Inversion. They carry no behaviour; being
runtime-checkable they back the ``isinstance`` contract tests.
"""

from __future__ import annotations

from pathlib import PurePath
from typing import AbstractSet, Mapping, Protocol, TypeVar, runtime_checkable

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class KeySet(Protocol):
    """Closed set of key names an application recognises.

    Why
    ----
    The properties manager never invents keys; the embedding application owns
    the vocabulary and hands it over once at initialization.
    """

    def supported_keys(self) -> AbstractSet[str]:
        """Return every legal key name (never ``None``)."""


@runtime_checkable
class PathMatcher(Protocol):
    """Predicate over filesystem paths compiled from glob or regex syntax."""

    @property
    def pattern(self) -> str:
        """Effective pattern string used for matching."""

    def matches(self, path: PurePath) -> bool:
        """Return ``True`` when *path* (compared in full) satisfies the pattern."""


@runtime_checkable
class PropertiesLoader(Protocol):
    """Parse a flat ``key=value`` file into a string mapping."""

    def load(self, path: str) -> Mapping[str, str]:
        """Read *path*; raise ``FileNotFound``, ``FileAccessError`` or ``MalformedFile``."""


@runtime_checkable
class Named(Protocol):
    """Entity with a human-readable name."""

    @property
    def name(self) -> str: ...


@runtime_checkable
class Nameable(Named, Protocol):
    def set_name(self, name: str) -> str:
        """Rename the entity and return the name it had before."""


@runtime_checkable
class Configured(Protocol):
    """Entity answering lookups of its string properties."""

    def property(self, key: str) -> str: ...


@runtime_checkable
class Configurable(Configured, Protocol):
    """Configured entity whose properties may change after construction.

    Both mutators return the value the property had before the call.
    """

    def set_property(self, key: str, value: str) -> str: ...

    def remove_property(self, key: str) -> str: ...


@runtime_checkable
class InstanceBuilder(Protocol[T_co]):
    """Builder with an explicit validity check.

    ``build`` raises :class:`~lib_app_tools.domain.errors.InvalidArgument` when
    :meth:`validate` would return ``False``.
    """

    def validate(self) -> bool: ...

    def build(self) -> T_co: ...
