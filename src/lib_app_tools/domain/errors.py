"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by the properties manager, the file
list, the adapters and consuming applications.

Contents
--------
* :class:`AppToolsError` – umbrella base class for every library failure.
* :class:`AlreadyInitialized` / :class:`NotInitialized` – lifecycle misuse of
  the process-wide properties manager.
* :class:`InvalidConfig` / :class:`MalformedFile` – supplied or loaded data
  breaks the legal-key rule or the file syntax.
* :class:`UnsupportedKey` – a key outside the legal set was read or written.
* :class:`CorruptState` – a read found no value where one was required.
* :class:`UnsupportedOperation` – mutation of a read-only file list.
* :class:`InvalidArgument` – absent or unusable argument.
* :class:`FileNotFound` / :class:`FileAccessError` – filesystem failures.

System Role
-----------
Callers catch :class:`AppToolsError` to handle all library failures uniformly.
Filesystem errors additionally derive from the matching built-in ``OSError``
subclass so ``except OSError`` keeps working, and :class:`InvalidArgument`
derives from :class:`ValueError`.
"""

from __future__ import annotations


class AppToolsError(Exception):
    """Base type for all exceptions emitted by ``lib_app_tools``."""


class AlreadyInitialized(AppToolsError):
    """Raised when a write-once initialization is attempted a second time.

    Fatal to the call only; the previously installed state stays intact.
    """


class NotInitialized(AppToolsError):
    """Raised when the properties manager is requested before any initializer ran."""


class InvalidConfig(AppToolsError):
    """Raised when supplied properties contain unsupported keys or non-string values.

    Validation runs before any mutation, so the store is unchanged when this
    error surfaces.
    """


class MalformedFile(InvalidConfig):
    """Raised when a properties file cannot be parsed."""


class UnsupportedKey(AppToolsError):
    """Raised when a key outside the legal key set is read or written."""


class CorruptState(AppToolsError):
    """Raised when a legal key resolves to no value at read time.

    Indicates a programming error in the embedding application (for example a
    key that never received a default); it is not meant to be recovered from.
    """


class UnsupportedOperation(AppToolsError):
    """Raised when mutating a file list that is computed from a directory walk."""


class InvalidArgument(AppToolsError, ValueError):
    """Raised for absent required arguments or unusable values such as a non-directory root."""


class FileNotFound(AppToolsError, FileNotFoundError):
    """Raised when a required file does not exist."""


class FileAccessError(AppToolsError, OSError):
    """Raised when the filesystem refuses access to a file or directory."""
