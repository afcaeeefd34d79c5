"""Argument validators shared by the application layer.

Each helper raises :class:`~lib_app_tools.domain.errors.InvalidArgument` on
failure and returns its (possibly normalised) input otherwise, so calls can be
used inline.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TypeVar

from .errors import InvalidArgument

T = TypeVar("T")


def ensure_present(value: T | None, name: str) -> T:
    """Return *value* unless it is ``None``.

    Examples
    --------
    >>> ensure_present("x", "key")
    'x'
    >>> ensure_present(None, "key")
    Traceback (most recent call last):
    ...
    lib_app_tools.domain.errors.InvalidArgument: key must not be None
    """

    if value is None:
        raise InvalidArgument(f"{name} must not be None")
    return value


def ensure_directory(path: str | os.PathLike[str] | None, name: str) -> Path:
    """Return *path* as a :class:`~pathlib.Path` if it names an existing directory."""

    directory = Path(ensure_present(path, name))
    if not directory.is_dir():
        raise InvalidArgument(f"{name} is not a directory: {directory}")
    return directory
