"""Glob and regex path matchers.

Purpose
-------
Implement the :class:`lib_app_tools.application.ports.PathMatcher` protocol on
top of the platform primitives (:meth:`pathlib.PurePath.match` and :mod:`re`)
so the file list never carries its own matching engine.

Contents
--------
* :class:`GlobMatcher` – glob syntax (``*``, ``?``, ``[...]``).
* :class:`RegexMatcher` – regular expressions with file-name fragment
  normalisation.
* :func:`normalize_regex` – the fragment rewrite rule, exposed for reuse.

Both matchers compare the *absolute* form of the candidate path so results do
not depend on whether the walk root was given relative or absolute.
"""

from __future__ import annotations

import re
from pathlib import Path, PurePath

from ...domain.errors import InvalidArgument
from ...observability import log_debug


class GlobMatcher:
    """Match paths against a glob pattern.

    Relative patterns are anchored at the right end of the path, so ``*.txt``
    matches any file name ending in ``.txt`` and ``**/*.txt`` matches such a
    file inside any directory. ``**`` behaves like ``*`` (one path segment).

    Examples
    --------
    >>> GlobMatcher("*.txt").matches(PurePath("/data/notes/a.txt"))
    True
    >>> GlobMatcher("*.txt").matches(PurePath("/data/notes/a.log"))
    False
    """

    __slots__ = ("_pattern",)

    def __init__(self, pattern: str) -> None:
        if not pattern:
            raise InvalidArgument("glob pattern must not be empty")
        self._pattern = pattern
        log_debug("glob_matcher_compiled", component="matcher", path=None, pattern=pattern)

    @property
    def pattern(self) -> str:
        return self._pattern

    def matches(self, path: PurePath) -> bool:
        return _absolute(path).match(self._pattern)

    def __repr__(self) -> str:
        return f"GlobMatcher({self._pattern!r})"


class RegexMatcher:
    """Match paths against a regular expression applied to the full path string.

    Patterns that neither start with ``^`` nor end with ``$`` are treated as a
    file-name fragment and rewritten by :func:`normalize_regex`. Anchored
    patterns are used unchanged: one starting with ``^`` must match the whole
    path, one that only ends with ``$`` must match a suffix of it.

    Examples
    --------
    >>> RegexMatcher(r"\\.log").pattern
    '.*\\\\.log$'
    >>> RegexMatcher(r"\\.log$").matches(PurePath("/var/app/out.log"))
    True
    >>> RegexMatcher(r"^/var/app/out\\.log").matches(PurePath("/var/app/out.log.bak"))
    False
    """

    __slots__ = ("_regex", "_whole_path")

    def __init__(self, pattern: str | re.Pattern[str]) -> None:
        source, flags = (pattern.pattern, pattern.flags) if isinstance(pattern, re.Pattern) else (pattern, 0)
        if not isinstance(source, str):
            raise InvalidArgument("regex pattern must be a text pattern")
        try:
            self._regex = re.compile(normalize_regex(source), flags)
        except re.error as exc:
            raise InvalidArgument(f"invalid regex pattern {source!r}: {exc}") from exc
        self._whole_path = source.startswith("^")
        log_debug("regex_matcher_compiled", component="matcher", path=None, pattern=self._regex.pattern)

    @property
    def pattern(self) -> str:
        return self._regex.pattern

    def matches(self, path: PurePath) -> bool:
        text = str(_absolute(path))
        if self._whole_path:
            return self._regex.fullmatch(text) is not None
        return self._regex.search(text) is not None

    def __repr__(self) -> str:
        return f"RegexMatcher({self._regex.pattern!r})"


def normalize_regex(pattern: str) -> str:
    """Rewrite a file-name fragment into a full-path suffix pattern.

    Examples
    --------
    >>> normalize_regex("report")
    '.*report$'
    >>> normalize_regex("^/srv/.*")
    '^/srv/.*'
    >>> normalize_regex("\\\\.csv$")
    '\\\\.csv$'
    """

    if not pattern.startswith("^") and not pattern.endswith("$"):
        return f".*{pattern}$"
    return pattern


def _absolute(path: PurePath) -> PurePath:
    if path.is_absolute():
        return path
    return Path(path).absolute()
