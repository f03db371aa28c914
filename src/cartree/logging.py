"""
cartree.logging
===============

Opt-in loguru logging for the tree engine.

The package logger is disabled when :mod:`cartree` is imported, so fitting a
tree is silent unless the application calls :func:`enable_logging` (or runs
``logger.enable("cartree")`` itself and routes records to its own sinks).

Levels used by the engine:

- ``INFO``: start and end of each fit (shape, criterion, resulting size).
- ``DEBUG``: every accepted split.
- ``TRACE``: every finalized leaf.
"""
from __future__ import annotations

import contextlib
import sys
import threading
from typing import TYPE_CHECKING, Any, ClassVar, Literal

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME = __name__.split(".")[0]

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level> {extra}"
)


class LoggingHandle:
    """Handle owning one loguru handler added by :func:`enable_logging`.

    Call :meth:`disable` or use the handle as a context manager to remove the
    handler.  When the last handle goes away the package logger is disabled
    again.

    Examples
    --------
    >>> with enable_logging(level="DEBUG"):  # doctest: +SKIP
    ...     CARTClassifier().fit(X, y)
    """

    _active_ids: ClassVar[set[int]] = set()
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, handler_id: int):
        self.handler_id: int | None = handler_id
        with LoggingHandle._lock:
            LoggingHandle._active_ids.add(handler_id)

    def disable(self) -> None:
        """Remove the handler; safe to call more than once."""
        with LoggingHandle._lock:
            if self.handler_id is None:
                return
            LoggingHandle._active_ids.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not LoggingHandle._active_ids:
                logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.disable()

    @classmethod
    def get_active_handle_count(cls) -> int:
        with cls._lock:
            return len(cls._active_ids)


def enable_logging(*, level: LogLevel = "INFO", sink: Any = None) -> LoggingHandle:
    """
    Route cartree log records to ``sink``.

    Parameters
    ----------
    level : str, default="INFO"
        Minimum level to emit.  ``"DEBUG"`` shows every accepted split and
        ``"TRACE"`` every leaf.
    sink : loguru sink, optional
        Anything :meth:`loguru.logger.add` accepts.  Defaults to ``sys.stderr``.

    Returns
    -------
    LoggingHandle
        Handle used to remove the handler again.
    """
    logger.enable(PACKAGE_NAME)
    handler_id = logger.add(
        sink if sink is not None else sys.stderr,
        level=level,
        filter=_is_cartree_record,
        format=_FORMAT,
    )
    return LoggingHandle(handler_id)


def _is_cartree_record(record: Record) -> bool:
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)
