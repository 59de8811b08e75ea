"""
Logger Implementation

Structured logger with synchronous dispatch to backends that can write
in place (console) and task-based dispatch to async-only backends (file).
Log calls never block on I/O and never raise.
"""

import asyncio
import logging
import time
import weakref
from typing import Any, Dict, List, Optional, Set, Tuple

from .interfaces import (
    HFTLoggerInterface, LogBackend, LogRouter, LogRecord,
    LogLevel, LogType, CORRELATION_FIELDS
)


class HFTLogger(HFTLoggerInterface):
    """
    Logger with multiple backends and persistent context.

    Records for backends exposing ``write_sync`` are written immediately.
    Async-only backends get a task on the running loop; without a loop the
    record waits in ``_pending`` until the next ``flush()``.
    """

    _instances = weakref.WeakSet()

    def __init__(self, name: str, backends: List[LogBackend], router: LogRouter,
                 default_context: Optional[Dict[str, Any]] = None):
        self.name = name
        self.backends = backends
        self.router = router
        self.context: Dict[str, Any] = dict(default_context or {})

        self._tasks: Set[asyncio.Task] = set()
        self._pending: List[Tuple[LogBackend, LogRecord]] = []

        HFTLogger._instances.add(self)

    def _split_context(self, context: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        full_context = {**self.context, **context}
        correlation = {key: full_context.pop(key, None) for key in CORRELATION_FIELDS}
        return full_context, correlation

    def _dispatch(self, record: LogRecord) -> None:
        for backend in self.router.get_backends(record):
            write_sync = getattr(backend, 'write_sync', None)
            if write_sync is not None:
                write_sync(record)
                continue
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                self._pending.append((backend, record))
                continue
            task = loop.create_task(self._safe_write_to_backend(backend, record))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _safe_write_to_backend(self, backend: LogBackend, record: LogRecord) -> None:
        try:
            await backend.write(record)
        except Exception as e:
            backend._handle_error(e)

    def _log(self, level: LogLevel, msg: str, log_type: LogType = LogType.TEXT, **context) -> None:
        full_context, correlation = self._split_context(context)
        record = LogRecord(
            timestamp=time.time(),
            level=level,
            log_type=log_type,
            logger_name=self.name,
            message=str(msg),
            context=full_context,
            **correlation
        )
        self._dispatch(record)

    def debug(self, msg: str, **context) -> None:
        self._log(LogLevel.DEBUG, msg, **context)

    def info(self, msg: str, **context) -> None:
        self._log(LogLevel.INFO, msg, **context)

    def warning(self, msg: str, **context) -> None:
        self._log(LogLevel.WARNING, msg, **context)

    def error(self, msg: str, **context) -> None:
        self._log(LogLevel.ERROR, msg, **context)

    def critical(self, msg: str, **context) -> None:
        self._log(LogLevel.CRITICAL, msg, **context)

    def metric(self, name: str, value: float, **tags) -> None:
        full_tags, correlation = self._split_context(tags)
        record = LogRecord(
            timestamp=time.time(),
            level=LogLevel.INFO,
            log_type=LogType.METRIC,
            logger_name=self.name,
            message="",
            metric_name=name,
            metric_value=value,
            metric_tags=full_tags,
            **correlation
        )
        self._dispatch(record)

    def latency(self, operation: str, duration_ms: float, **tags) -> None:
        self.metric(f"{operation}_latency_ms", duration_ms, **tags)

    def counter(self, name: str, value: int = 1, **tags) -> None:
        self.metric(f"{name}_count", float(value), **tags)

    def audit(self, event: str, **context) -> None:
        self._log(LogLevel.INFO, event, LogType.AUDIT, **context)

    def set_context(self, **context) -> None:
        self.context.update(context)

    async def flush(self) -> None:
        """Write pending records, wait for in-flight writes, flush backends."""
        pending, self._pending = self._pending, []
        for backend, record in pending:
            await self._safe_write_to_backend(backend, record)

        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

        for backend in self.backends:
            try:
                await backend.flush()
            except Exception as e:
                backend._handle_error(e)

    # Python logging compatibility
    def isEnabledFor(self, level: int) -> bool:
        """True if at least one enabled backend accepts this level."""
        our_level = self._convert_py_level(level)
        return any(b.enabled and our_level >= b.min_level for b in self.backends)

    def log(self, level: int, msg: str, *args, **kwargs) -> None:
        if args:
            try:
                msg = msg % args
            except (TypeError, ValueError):
                pass
        self._log(self._convert_py_level(level), msg, **kwargs)

    @staticmethod
    def _convert_py_level(py_level: int) -> LogLevel:
        if py_level >= logging.CRITICAL:
            return LogLevel.CRITICAL
        elif py_level >= logging.ERROR:
            return LogLevel.ERROR
        elif py_level >= logging.WARNING:
            return LogLevel.WARNING
        elif py_level >= logging.INFO:
            return LogLevel.INFO
        return LogLevel.DEBUG

    @classmethod
    async def shutdown_all(cls) -> None:
        """Flush every live logger instance."""
        await asyncio.gather(*(logger.flush() for logger in list(cls._instances)),
                             return_exceptions=True)


class LoggingTimer:
    """Context manager for timing operations with automatic latency logging."""

    def __init__(self, logger: HFTLoggerInterface, operation: str, **tags):
        self.logger = logger
        self.operation = operation
        self.tags = tags
        self.start_time = None
        self.end_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            self.end_time = time.perf_counter()
            duration_ms = (self.end_time - self.start_time) * 1000
            self.logger.latency(self.operation, duration_ms, **self.tags)

        if exc_type is not None:
            self.logger.error(f"{self.operation} failed",
                              error_type=exc_type.__name__,
                              **self.tags)

    @property
    def elapsed_ms(self) -> float:
        if self.start_time is None:
            return 0.0
        end_time = self.end_time or time.perf_counter()
        return (end_time - self.start_time) * 1000
