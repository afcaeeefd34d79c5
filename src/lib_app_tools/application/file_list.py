"""Lazily evaluated collections of file paths.

Purpose
-------
Offer a single type for "the files I want to process", whether they come from
scanning a directory tree or from an explicit list.

Contents
--------
* :class:`FileListMode` – ``TREE_WALK`` or ``WRAPPER``.
* :class:`FileList` – the collection itself.
* :class:`FileListBuilder` – :class:`~lib_app_tools.application.ports.InstanceBuilder`
  collecting options step by step.

Modes
-----
``TREE_WALK``
    Built from a glob or regex pattern and a root directory. The first call to
    :meth:`FileList.result_list` walks the tree once and caches the matches;
    later calls return the cache even if the filesystem changed.
``WRAPPER``
    Built from existing paths (or empty). :meth:`FileList.result_list`
    returns a live read-only view and :meth:`FileList.add_path` appends.

A :class:`FileList` is meant for a single owner. It has no internal locking;
share it across threads only under external synchronisation.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final, Iterable, Iterator, Sequence, overload

from ..adapters.file_walker.default import walk_matching
from ..adapters.path_matchers.default import GlobMatcher, RegexMatcher
from ..domain.errors import AppToolsError, CorruptState, InvalidArgument, UnsupportedOperation
from ..domain.validators import ensure_directory, ensure_present
from ..observability import log_debug, log_error, log_failure, make_event
from .ports import PathMatcher

PathLike = str | os.PathLike[str]


class FileListMode(Enum):
    TREE_WALK = "tree_walk"
    WRAPPER = "wrapper"


class _Uncomputed(Enum):
    TOKEN = "uncomputed"


UNCOMPUTED: Final = _Uncomputed.TOKEN
"""Cache state of a tree-walk list whose walk has not run yet."""


@dataclass(frozen=True, slots=True)
class Computed:
    """Cache state holding the result of the one-time walk."""

    paths: tuple[Path, ...]


class _PathsView(Sequence[Path]):
    """Read-only live view over a wrapper list's paths."""

    __slots__ = ("_paths",)

    def __init__(self, paths: list[Path]) -> None:
        self._paths = paths

    @overload
    def __getitem__(self, index: int) -> Path: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[Path]: ...

    def __getitem__(self, index: int | slice) -> Path | Sequence[Path]:
        if isinstance(index, slice):
            return tuple(self._paths[index])
        return self._paths[index]

    def __len__(self) -> int:
        return len(self._paths)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Sequence) and not isinstance(other, (str, bytes)):
            return list(self._paths) == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"_PathsView({self._paths!r})"


class FileList:
    """Collection of paths computed from a tree walk or wrapped from the caller.

    Prefer the named constructors :meth:`from_glob`, :meth:`from_regex`,
    :meth:`from_paths` and :meth:`empty`. The keyword constructor accepts at
    most one of ``glob``, ``regex`` or ``paths``; ``root`` only goes together
    with a pattern and defaults to the current directory.

    Examples
    --------
    >>> files = FileList.empty()
    >>> files.add_path("/a")
    True
    >>> [str(p) for p in files.result_list()]
    ['/a']
    """

    def __init__(
        self,
        *,
        glob: str | None = None,
        regex: str | re.Pattern[str] | None = None,
        root: PathLike | None = None,
        paths: Iterable[PathLike] | None = None,
    ) -> None:
        chosen = [name for name, value in (("glob", glob), ("regex", regex), ("paths", paths)) if value is not None]
        if len(chosen) > 1:
            raise InvalidArgument(f"choose only one of glob, regex or paths (got {', '.join(chosen)})")
        if root is not None and paths is not None:
            raise InvalidArgument("root applies only to glob or regex file lists")

        self._matcher: PathMatcher | None = None
        self._root: Path | None = None
        self._cache: _Uncomputed | Computed = UNCOMPUTED
        self._paths: list[Path] = []

        if glob is not None or regex is not None:
            self._root = ensure_directory("." if root is None else root, "root")
            self._matcher = GlobMatcher(glob) if glob is not None else RegexMatcher(regex)  # type: ignore[arg-type]
            self._mode = FileListMode.TREE_WALK
            log_debug(
                "file_list_created",
                **make_event("file_list", str(self._root), {"mode": self._mode.value, "pattern": self._matcher.pattern}),
            )
            return

        if root is not None:
            raise InvalidArgument("root requires a glob or regex pattern")
        self._mode = FileListMode.WRAPPER
        if paths is not None:
            self._paths = [Path(ensure_present(path, "paths item")) for path in paths]

    @classmethod
    def from_glob(cls, pattern: str, root: PathLike = ".") -> "FileList":
        """Files below *root* whose full path matches the glob *pattern*."""

        return cls(glob=ensure_present(pattern, "pattern"), root=ensure_present(root, "root"))

    @classmethod
    def from_regex(cls, pattern: str | re.Pattern[str], root: PathLike = ".") -> "FileList":
        """Files below *root* whose full path matches the regular expression *pattern*.

        Unanchored patterns are file-name fragments (``r"\\.log"`` finds every
        ``.log`` file); see :func:`~lib_app_tools.adapters.path_matchers.default.normalize_regex`.
        """

        return cls(regex=ensure_present(pattern, "pattern"), root=ensure_present(root, "root"))

    @classmethod
    def from_paths(cls, paths: Iterable[PathLike]) -> "FileList":
        """Wrap a copy of *paths*; the list stays mutable through :meth:`add_path`."""

        return cls(paths=ensure_present(paths, "paths"))

    @classmethod
    def empty(cls) -> "FileList":
        return cls()

    @property
    def mode(self) -> FileListMode:
        return self._mode

    @property
    def matcher(self) -> PathMatcher | None:
        return self._matcher

    @property
    def root(self) -> Path | None:
        return self._root

    @property
    def is_computed(self) -> bool:
        """``True`` once the contents are known (always for wrapper lists)."""

        return self._mode is FileListMode.WRAPPER or isinstance(self._cache, Computed)

    def result_list(self) -> Sequence[Path]:
        """Return the paths in this list.

        Tree-walk lists walk their root on the first call only and return the
        cached tuple from then on. Wrapper lists return a live read-only view.

        Raises
        ------
        FileAccessError
            When the walk cannot read its root directory.
        """

        if self._mode is FileListMode.WRAPPER:
            return _PathsView(self._paths)
        if isinstance(self._cache, Computed):
            return self._cache.paths

        if self._root is None or self._matcher is None:
            raise CorruptState(f"tree-walk file list without root or matcher: {self!r}")
        log_debug(
            "file_list_walk_start",
            **make_event("file_list", str(self._root.absolute()), {"pattern": self._matcher.pattern}),
        )
        found = tuple(walk_matching(self._root, self._matcher))
        self._cache = Computed(found)
        log_debug(
            "file_list_walk_done",
            **make_event("file_list", str(self._root.absolute()), {"pattern": self._matcher.pattern, "found": len(found)}),
        )
        return found

    def add_path(self, path: PathLike) -> bool:
        """Append *path* to a wrapper list and report whether it was added.

        Raises
        ------
        UnsupportedOperation
            On tree-walk lists, whose contents come from the filesystem.
        """

        ensure_present(path, "path")
        if self._mode is not FileListMode.WRAPPER:
            log_error("file_list_read_only", component="file_list", path=str(path))
            raise UnsupportedOperation("paths can only be added to file lists built from explicit paths")
        self._paths.append(Path(path))
        return True

    def __iter__(self) -> Iterator[Path]:
        """Iterate over :meth:`result_list`, yielding nothing if it fails.

        Iteration has no channel for the walk's errors, so they are logged and
        an empty iterator is returned instead. Call :meth:`result_list` to see
        the exception.
        """

        try:
            return iter(self.result_list())
        except (AppToolsError, OSError) as exc:
            log_failure(
                "file_list_iteration_failed",
                exc,
                component="file_list",
                path=str(self._root) if self._root is not None else None,
            )
            return iter(())

    def __repr__(self) -> str:
        if self._mode is FileListMode.WRAPPER:
            return f"FileList(paths={len(self._paths)})"
        state = "computed" if isinstance(self._cache, Computed) else "pending"
        return f"FileList(matcher={self._matcher!r}, root={str(self._root)!r}, {state})"


class FileListBuilder:
    """Step-by-step construction of a :class:`FileList`.

    Examples
    --------
    >>> builder = FileListBuilder().with_glob("*.py").in_directory(".")
    >>> builder.validate()
    True
    >>> builder.build().mode
    <FileListMode.TREE_WALK: 'tree_walk'>
    """

    def __init__(self) -> None:
        self._glob: str | None = None
        self._regex: str | re.Pattern[str] | None = None
        self._root: PathLike | None = None
        self._paths: list[PathLike] | None = None

    def with_glob(self, pattern: str) -> "FileListBuilder":
        self._glob = pattern
        return self

    def with_regex(self, pattern: str | re.Pattern[str]) -> "FileListBuilder":
        self._regex = pattern
        return self

    def in_directory(self, root: PathLike) -> "FileListBuilder":
        self._root = root
        return self

    def with_path(self, path: PathLike) -> "FileListBuilder":
        if self._paths is None:
            self._paths = []
        self._paths.append(path)
        return self

    def validate(self) -> bool:
        """Return ``True`` when :meth:`build` would succeed."""

        patterns = sum(value is not None for value in (self._glob, self._regex, self._paths))
        if patterns > 1:
            return False
        if self._root is not None:
            if self._paths is not None or (self._glob is None and self._regex is None):
                return False
            return Path(self._root).is_dir()
        return True

    def build(self) -> FileList:
        if not self.validate():
            raise InvalidArgument(f"incomplete or conflicting file list options: {self!r}")
        return FileList(glob=self._glob, regex=self._regex, root=self._root, paths=self._paths)

    def __repr__(self) -> str:
        return (
            f"FileListBuilder(glob={self._glob!r}, regex={self._regex!r}, "
            f"root={self._root!r}, paths={self._paths!r})"
        )
