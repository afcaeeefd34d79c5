"""Flat properties file adapter.

Purpose
-------
Implement the :class:`lib_app_tools.application.ports.PropertiesLoader`
protocol for the classic ``key=value`` properties syntax so the properties
manager never touches raw file contents itself.

Contents
--------
* :class:`PropertiesFileLoader` – reads a file and returns a ``dict[str, str]``.
* :func:`parse_properties` – pure parser used by the loader and by tests.
* Helpers (`_logical_lines`, `_split_entry`, `_unescape`) that implement line
  continuation, separator detection and escape decoding.

Syntax
------
* UTF-8 text; ``\\n``, ``\\r`` and ``\\r\\n`` end a line.
* Blank lines and lines whose first non-blank character is ``#`` or ``!`` are
  ignored.
* The key runs up to the first unescaped ``=``, ``:`` or blank; blanks around
  the separator are skipped. A key without a value maps to ``""``.
* A line ending in an odd number of backslashes continues on the next line,
  whose leading blanks are dropped.
* Escapes: ``\\t``, ``\\n``, ``\\r``, ``\\f``, ``\\uXXXX``; any other escaped
  character stands for itself.
* Later duplicates win. All values stay strings.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterator

from ...domain.errors import FileAccessError, FileNotFound, MalformedFile
from ...observability import log_debug, log_error, log_failure

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_BLANKS = " \t\f"
_SEPARATORS = "=:"
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


class PropertiesFileLoader:
    """Load flat properties files into string mappings."""

    def load(self, path: str | os.PathLike[str]) -> dict[str, str]:
        """Return the entries stored in the properties file at *path*.

        Raises
        ------
        FileNotFound
            When *path* does not exist.
        FileAccessError
            When *path* exists but cannot be read (permissions, directory, ...).
        MalformedFile
            When the content is not UTF-8 or contains a broken ``\\u`` escape.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> target = Path(tmp.name) / "app.properties"
        >>> _ = target.write_text("db.host = localhost\\n", encoding="utf-8")
        >>> PropertiesFileLoader().load(target)
        {'db.host': 'localhost'}
        >>> tmp.cleanup()
        """

        source = str(path)
        try:
            payload = Path(path).read_bytes()
        except FileNotFoundError as exc:
            log_error("properties_file_missing", component="properties", path=source)
            raise FileNotFound(f"Properties file not found: {source}") from exc
        except OSError as exc:
            log_failure("properties_file_unreadable", exc, component="properties", path=source)
            raise FileAccessError(f"Cannot read properties file {source}: {exc}") from exc

        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            log_failure("properties_file_invalid", exc, component="properties", path=source)
            raise MalformedFile(f"Properties file {source} is not valid UTF-8: {exc}") from exc

        data = parse_properties(text, source=source)
        log_debug("properties_file_loaded", component="properties", path=source, keys=len(data))
        return data


def parse_properties(text: str, *, source: str = "<string>") -> dict[str, str]:
    """Parse properties *text* into a ``dict``.

    Examples
    --------
    >>> parse_properties("# comment\\na=1\\nb : 2\\nc 3\\nempty\\n")
    {'a': '1', 'b': '2', 'c': '3', 'empty': ''}
    >>> parse_properties("greeting = hello \\\\\\n    world")
    {'greeting': 'hello world'}
    """

    result: dict[str, str] = {}
    for line_number, line in _logical_lines(text):
        raw_key, raw_value = _split_entry(line)
        key = _unescape(raw_key, source=source, line_number=line_number)
        result[key] = _unescape(raw_value, source=source, line_number=line_number)
    return result


def _logical_lines(text: str) -> Iterator[tuple[int, str]]:
    """Yield ``(first_line_number, logical_line)`` pairs with continuations joined."""

    pending: str | None = None
    start = 0
    for number, raw in enumerate(_LINE_BREAK.split(text), start=1):
        line = raw.lstrip(_BLANKS)
        if pending is None:
            if not line or line[0] in "#!":
                continue
            start = number
            pending = line
        else:
            pending += line
        if _continues(pending):
            pending = pending[:-1]
            continue
        yield start, pending
        pending = None
    if pending is not None:
        yield start, pending


def _continues(line: str) -> bool:
    """Return ``True`` when *line* ends in an odd run of backslashes."""

    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _split_entry(line: str) -> tuple[str, str]:
    """Split a logical line into its raw (still escaped) key and value."""

    index = 0
    length = len(line)
    while index < length:
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in _SEPARATORS or char in _BLANKS:
            break
        index += 1
    key = line[:index]
    rest = line[index:].lstrip(_BLANKS)
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(_BLANKS)
    return key, rest


def _unescape(raw: str, *, source: str, line_number: int) -> str:
    """Decode backslash escapes, raising :class:`MalformedFile` on broken ``\\u`` sequences."""

    if "\\" not in raw:
        return raw
    out: list[str] = []
    index = 0
    length = len(raw)
    while index < length:
        char = raw[index]
        if char != "\\":
            out.append(char)
            index += 1
            continue
        index += 1
        if index >= length:
            break
        marker = raw[index]
        if marker == "u":
            digits = raw[index + 1 : index + 5]
            if len(digits) != 4 or not _HEX_DIGITS.issuperset(digits):
                log_error("properties_escape_invalid", component="properties", path=source, line=line_number)
                raise MalformedFile(f"Malformed \\uXXXX escape on line {line_number} in {source}")
            out.append(chr(int(digits, 16)))
            index += 5
            continue
        out.append(_ESCAPES.get(marker, marker))
        index += 1
    return "".join(out)
