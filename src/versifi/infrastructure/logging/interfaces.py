"""
Logging Interfaces

Lightweight record type, backend contract and logger interface shared by
the REST client and the streaming supervisor. Formatting happens in
backends, never in the logger.
"""

import time
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field


class LogLevel(IntEnum):
    """Log levels with numeric values for fast comparison."""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class LogType(IntEnum):
    """Log types for routing decisions."""
    TEXT = 1      # Regular log messages
    METRIC = 2    # Numeric metrics (latency, counters)
    AUDIT = 3     # Order lifecycle trail


# Record attributes lifted out of the call context
CORRELATION_FIELDS = ('correlation_id', 'connection', 'order_id')


@dataclass
class LogRecord:
    """Single log event passed from a logger to its backends."""
    timestamp: float
    level: LogLevel
    log_type: LogType
    logger_name: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    # Only set when log_type == METRIC
    metric_name: Optional[str] = None
    metric_value: Optional[float] = None
    metric_tags: Optional[Dict[str, Any]] = None

    # Correlation fields lifted out of the context
    correlation_id: Optional[str] = None
    connection: Optional[str] = None
    order_id: Optional[str] = None

    @classmethod
    def create_text(cls, level: LogLevel, logger_name: str, message: str, **context) -> 'LogRecord':
        return cls(
            timestamp=time.time(),
            level=level,
            log_type=LogType.TEXT,
            logger_name=logger_name,
            message=message,
            context=context
        )

    @classmethod
    def create_metric(cls, logger_name: str, metric_name: str, value: float, **tags) -> 'LogRecord':
        return cls(
            timestamp=time.time(),
            level=LogLevel.INFO,
            log_type=LogType.METRIC,
            logger_name=logger_name,
            message="",
            metric_name=metric_name,
            metric_value=value,
            metric_tags=tags
        )

    @classmethod
    def create_audit(cls, logger_name: str, event: str, **context) -> 'LogRecord':
        return cls(
            timestamp=time.time(),
            level=LogLevel.INFO,
            log_type=LogType.AUDIT,
            logger_name=logger_name,
            message=event,
            context=context
        )


class LogBackend(ABC):
    """
    Base class for all logging backends.

    Backends that can write without an event loop implement ``write_sync``;
    the logger prefers it and falls back to scheduling ``write``.
    """

    def __init__(self, name: str, min_level: LogLevel = LogLevel.DEBUG):
        self.name = name
        self.min_level = min_level
        self.enabled = True
        self._error_count = 0
        self._max_errors = 10  # Disable after too many failures

    @abstractmethod
    def should_handle(self, record: LogRecord) -> bool:
        """Fast check if this backend should process the record."""
        pass

    @abstractmethod
    async def write(self, record: LogRecord) -> None:
        """Write a record. Must not raise."""
        pass

    @abstractmethod
    async def flush(self) -> None:
        """Flush any buffered data."""
        pass

    def disable(self) -> None:
        self.enabled = False

    def enable(self) -> None:
        self.enabled = True
        self._error_count = 0

    def _handle_error(self, error: Exception) -> None:
        """Count backend failures and disable the backend past the limit."""
        self._error_count += 1
        if self._error_count >= self._max_errors:
            self.enabled = False


class LogRouter(ABC):
    """Routes log records to appropriate backends."""

    @abstractmethod
    def get_backends(self, record: LogRecord) -> List[LogBackend]:
        pass


class HFTLoggerInterface(ABC):
    """
    Logger injected into clients as ``self.logger``.

    Context is passed as keyword arguments and travels with the record,
    e.g. ``logger.info("Subscribed", topic="execution_report")``.
    """

    @abstractmethod
    def debug(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def info(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def warning(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def error(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def critical(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def metric(self, name: str, value: float, **tags) -> None:
        """Log metric value."""
        pass

    @abstractmethod
    def latency(self, operation: str, duration_ms: float, **tags) -> None:
        """Log latency metric. Convenience method for timing."""
        pass

    @abstractmethod
    def counter(self, name: str, value: int = 1, **tags) -> None:
        """Log counter metric. Increment by value."""
        pass

    @abstractmethod
    def audit(self, event: str, **context) -> None:
        """Log audit event (order lifecycle)."""
        pass

    @abstractmethod
    def set_context(self, **context) -> None:
        """Set persistent context for all logs from this logger."""
        pass

    @abstractmethod
    async def flush(self) -> None:
        pass

    # Python logging compatibility methods
    @abstractmethod
    def isEnabledFor(self, level: int) -> bool:
        pass

    @abstractmethod
    def log(self, level: int, msg: str, *args, **kwargs) -> None:
        pass
