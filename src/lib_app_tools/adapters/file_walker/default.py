"""Directory tree walker.

Purpose
-------
Collect the files below a root directory that satisfy a
:class:`~lib_app_tools.application.ports.PathMatcher`, tolerating failures on
individual entries.

Traversal
---------
Pre-order and depth-first in directory-listing order: a sub-directory is
descended into as soon as it is listed, before its later siblings. Every
directory is descended regardless of whether it matches; symlinked directories
are not followed. Only regular files (or links to them) are tested, always
with their full path. No sorting is applied.

Failure to open the root raises :class:`FileAccessError`. Failures on
sub-directories or single entries are logged as warnings and skipped.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

from ...application.ports import PathMatcher
from ...domain.errors import FileAccessError
from ...observability import log_debug, log_failure


def walk_matching(root: Path, matcher: PathMatcher) -> list[Path]:
    """Return every file below *root* accepted by *matcher*, in visitation order.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> from lib_app_tools.adapters.path_matchers.default import GlobMatcher
    >>> tmp = TemporaryDirectory()
    >>> base = Path(tmp.name)
    >>> _ = (base / "a.txt").write_text("a", encoding="utf-8")
    >>> _ = (base / "b.log").write_text("b", encoding="utf-8")
    >>> [p.name for p in walk_matching(base, GlobMatcher("*.txt"))]
    ['a.txt']
    >>> tmp.cleanup()
    """

    try:
        root_entries = os.scandir(root)
    except OSError as exc:
        log_failure("file_walk_failed", exc, component="file_walker", path=str(root))
        raise FileAccessError(f"Cannot walk directory {root}: {exc}") from exc

    matches: list[Path] = []
    stack: list[tuple[Path, Iterator[os.DirEntry[str]]]] = [(root, root_entries)]
    try:
        while stack:
            directory, entries = stack[-1]
            try:
                entry = next(entries, None)
            except OSError as exc:
                log_failure(
                    "directory_read_failed", exc, level=logging.WARNING, component="file_walker", path=str(directory)
                )
                entry = None
            if entry is None:
                _close(entries)
                stack.pop()
                continue
            path = directory / entry.name
            try:
                if entry.is_dir(follow_symlinks=False):
                    stack.append((path, os.scandir(path)))
                    continue
                if not entry.is_file():
                    continue
            except OSError as exc:
                log_failure(
                    "entry_access_failed", exc, level=logging.WARNING, component="file_walker", path=str(path)
                )
                continue
            if matcher.matches(path):
                log_debug("file_matched", component="file_walker", path=str(path))
                matches.append(path)
    finally:
        for _, entries in stack:
            _close(entries)
    return matches


def _close(entries: Iterator[os.DirEntry[str]]) -> None:
    close = getattr(entries, "close", None)
    if close is not None:
        close()
