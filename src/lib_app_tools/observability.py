"""Structured logging helpers shared by every component.

Purpose
    Keep log emission predictable and contextual without forcing host
    applications onto a specific logging backend.

Contents
    - ``TRACE_ID``: context variable storing the active trace identifier.
    - ``get_logger``: returns the shared package logger (quiet by default).
    - ``bind_trace_id`` / ``trace_scope``: bind a trace identifier for good or
      for the duration of a ``with`` block.
    - ``log_debug`` / ``log_info`` / ``log_warning`` / ``log_error``: emit
      structured entries via a single private emitter.
    - ``log_failure``: emit an entry describing a caught exception.
    - ``make_event``: builds the ``component`` / ``path`` payload every
      component event starts from.

System Integration
    Used by the properties manager, the file list and the adapters so every
    diagnostic carries the same trace metadata. The CLI opens one
    :func:`trace_scope` per invocation. The domain layer stays free of logging
    concerns.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Final, Iterator, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("lib_app_tools_trace_id", default=None)
"""Current trace identifier propagated through logging helpers.

Why
    A walk or a properties load emits several records; a shared identifier
    ties them to the call that caused them.
"""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_app_tools")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers.

    Why
        Leaves the library silent by default while giving host applications full
        control over handler and formatter configuration.
    """

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind or clear the active trace identifier.

    What
        Stores ``trace_id`` in :data:`TRACE_ID`; ``None`` clears the binding.
    Side Effects
        Mutates the context variable visible to subsequent logging helpers.

    Examples
    --------
    >>> bind_trace_id('abc123')
    >>> TRACE_ID.get()
    'abc123'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


@contextmanager
def trace_scope(trace_id: str | None = None) -> Iterator[str]:
    """Bind *trace_id* (or a fresh one) inside the block and restore the previous value.

    Why
        Long-lived hosts run many independent operations in one context;
        :func:`bind_trace_id` alone would leak the identifier into the next one.

    Examples
    --------
    >>> with trace_scope("outer"):
    ...     with trace_scope() as inner:
    ...         TRACE_ID.get() == inner
    ...     TRACE_ID.get()
    True
    'outer'
    >>> TRACE_ID.get() is None
    True
    """

    active = trace_id if trace_id is not None else uuid.uuid4().hex[:16]
    token = TRACE_ID.set(active)
    try:
        yield active
    finally:
        TRACE_ID.reset(token)


def log_debug(message: str, **fields: Any) -> None:
    """Emit a structured debug log entry that includes the trace context."""

    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    """Emit a structured info log entry that includes the trace context."""

    _emit(logging.INFO, message, fields)


def log_warning(message: str, **fields: Any) -> None:
    """Emit a structured warning log entry that includes the trace context."""

    _emit(logging.WARNING, message, fields)


def log_error(message: str, **fields: Any) -> None:
    """Emit a structured error log entry that includes the trace context."""

    _emit(logging.ERROR, message, fields)


def log_failure(message: str, exc: BaseException, *, level: int = logging.ERROR, **fields: Any) -> None:
    """Record a caught exception as structured ``error_type`` / ``error`` fields.

    What
        The exception is described, not attached: no traceback is rendered,
        since the caller either re-raises it or deliberately continues.

    Examples
    --------
    >>> import logging as _logging
    >>> handler = _logging.Handler()
    >>> seen = []
    >>> handler.emit = seen.append
    >>> get_logger().addHandler(handler)
    >>> get_logger().setLevel(_logging.DEBUG)
    >>> log_failure("walk_failed", PermissionError("denied"), level=_logging.WARNING, path="/x")
    >>> seen[-1].context["error_type"], seen[-1].context["error"]
    ('PermissionError', 'denied')
    >>> get_logger().removeHandler(handler)
    >>> get_logger().setLevel(_logging.NOTSET)
    """

    _emit(level, message, {**fields, "error_type": type(exc).__name__, "error": str(exc)})


def make_event(
    component: str,
    path: str | None,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a structured logging payload for a component event.

    Why
        Every record names the component that emitted it and the path it
        concerns, so filters can select one walk or one properties file.
    Inputs
        component: Name of the emitting component (``"properties"``,
            ``"file_list"``, ...).
        path: Filesystem path associated with the event, if any.
        payload: Optional mapping with extra diagnostic detail.
    Outputs
        dict[str, Any]: Data safe to unpack into :func:`log_*` helpers.

    Examples
    --------
    >>> make_event('file_list', '/tmp', {'found': 3})
    {'component': 'file_list', 'path': '/tmp', 'found': 3}
    """

    return {"component": component, "path": path, **(payload or {})}


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    """Send a log entry through the shared logger with contextual metadata."""

    if _LOGGER.isEnabledFor(level):
        _LOGGER.log(level, message, extra={"context": {"trace_id": TRACE_ID.get(), **fields}})
