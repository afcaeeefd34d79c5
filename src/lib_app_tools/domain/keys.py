"""Closed key sets for the properties manager.

Purpose
-------
Provide a ready-made implementation of the
:class:`lib_app_tools.application.ports.KeySet` protocol. Applications may
supply their own implementation; this value object covers the common case of a
fixed list of names or an :class:`enum.Enum` of keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, Iterable

from .errors import InvalidArgument


@dataclass(frozen=True, slots=True)
class FixedKeySet:
    """Immutable set of legal property key names.

    Examples
    --------
    >>> keys = FixedKeySet.of("db.host", "db.port")
    >>> sorted(keys.supported_keys())
    ['db.host', 'db.port']
    >>> "db.host" in keys
    True
    """

    keys: frozenset[str]

    def __post_init__(self) -> None:
        if not self.keys:
            raise InvalidArgument("a key set must contain at least one key")
        for key in self.keys:
            if not isinstance(key, str) or not key:
                raise InvalidArgument(f"key names must be non-empty strings, got {key!r}")

    @classmethod
    def of(cls, *names: str) -> "FixedKeySet":
        """Build a key set from positional names."""

        return cls(frozenset(names))

    @classmethod
    def from_iterable(cls, names: Iterable[str]) -> "FixedKeySet":
        return cls(frozenset(names))

    @classmethod
    def from_enum(cls, enum_cls: type[Enum]) -> "FixedKeySet":
        """Use the ``value`` of each member of *enum_cls* as a key name.

        Examples
        --------
        >>> class Keys(Enum):
        ...     HOST = "db.host"
        >>> FixedKeySet.from_enum(Keys).supported_keys()
        frozenset({'db.host'})
        """

        return cls(frozenset(member.value for member in enum_cls))

    def supported_keys(self) -> AbstractSet[str]:
        return self.keys

    def __contains__(self, key: object) -> bool:
        return key in self.keys
