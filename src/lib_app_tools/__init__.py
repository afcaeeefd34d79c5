"""Public package surface for ``lib_app_tools``.

Re-exports the process-wide :class:`PropertiesManager`, the lazily evaluated
:class:`FileList`, the contracts they depend on, the error taxonomy, and the
logging hooks so applications can write ``from lib_app_tools import ...``
without learning the internal layering.
"""

from __future__ import annotations

from .adapters.path_matchers.default import GlobMatcher, RegexMatcher
from .adapters.properties.default import PropertiesFileLoader, parse_properties
from .application.file_list import FileList, FileListBuilder, FileListMode
from .application.locks import ReadWriteLock
from .application.ports import (
    Configurable,
    Configured,
    InstanceBuilder,
    KeySet,
    Named,
    Nameable,
    PathMatcher,
    PropertiesLoader,
)
from .application.properties import EMPTY_VALUE, PropertiesManager
from .domain.errors import (
    AlreadyInitialized,
    AppToolsError,
    CorruptState,
    FileAccessError,
    FileNotFound,
    InvalidArgument,
    InvalidConfig,
    MalformedFile,
    NotInitialized,
    UnsupportedKey,
    UnsupportedOperation,
)
from .domain.keys import FixedKeySet
from .domain.validators import ensure_directory, ensure_present
from .observability import bind_trace_id, get_logger

__all__ = [
    "AlreadyInitialized",
    "AppToolsError",
    "Configurable",
    "Configured",
    "CorruptState",
    "EMPTY_VALUE",
    "FileAccessError",
    "FileList",
    "FileListBuilder",
    "FileListMode",
    "FileNotFound",
    "FixedKeySet",
    "GlobMatcher",
    "InstanceBuilder",
    "InvalidArgument",
    "InvalidConfig",
    "KeySet",
    "MalformedFile",
    "Named",
    "Nameable",
    "NotInitialized",
    "PathMatcher",
    "PropertiesFileLoader",
    "PropertiesLoader",
    "PropertiesManager",
    "ReadWriteLock",
    "RegexMatcher",
    "UnsupportedKey",
    "UnsupportedOperation",
    "bind_trace_id",
    "ensure_directory",
    "ensure_present",
    "get_logger",
    "parse_properties",
]
