"""
Console Backend

Bridges log records onto Python's ``logging`` module so existing handlers,
pytest's caplog and log management tools keep working.
"""

import logging
import os
import sys
from typing import Dict

from ..interfaces import CORRELATION_FIELDS, LogBackend, LogRecord, LogLevel, LogType
from ..structs import ConsoleBackendConfig

_PY_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
}


def _clip(value, limit: int = 100) -> str:
    text = str(value)
    return text if len(text) <= limit else text[:limit] + "..."


class ConsoleBackend(LogBackend):
    """Console logging backend on top of the standard ``logging`` module."""

    def __init__(self, config: ConsoleBackendConfig, name: str = "console"):
        if not isinstance(config, ConsoleBackendConfig):
            raise TypeError(f"Expected ConsoleBackendConfig, got {type(config)}")
        super().__init__(name, LogLevel[config.min_level.upper()])

        self.enabled = config.enabled
        self.include_context = config.include_context
        self.max_message_length = config.max_message_length

        self._py_loggers: Dict[str, logging.Logger] = {}

        if self.enabled:
            self._ensure_python_logging_configured()

    def should_handle(self, record: LogRecord) -> bool:
        if not self.enabled:
            return False
        if record.level < self.min_level:
            return False
        return record.log_type in (LogType.TEXT, LogType.AUDIT)

    async def write(self, record: LogRecord) -> None:
        self.write_sync(record)

    def write_sync(self, record: LogRecord) -> None:
        try:
            py_logger = self._get_python_logger(record.logger_name)
            py_logger.log(_PY_LEVELS.get(record.level, logging.INFO), self._format_message(record))
        except Exception as e:
            self._handle_error(e)

    async def flush(self) -> None:
        # logging handlers flush on their own
        pass

    def _ensure_python_logging_configured(self) -> None:
        root_logger = logging.getLogger()
        if root_logger.handlers:
            return
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter('%(levelname)-8s %(name)-20s %(message)s'))
        py_level = _PY_LEVELS[self.min_level]
        console_handler.setLevel(py_level)
        root_logger.setLevel(py_level)
        root_logger.addHandler(console_handler)

    def _get_python_logger(self, name: str) -> logging.Logger:
        if name not in self._py_loggers:
            self._py_loggers[name] = logging.getLogger(name)
        return self._py_loggers[name]

    def _format_message(self, record: LogRecord) -> str:
        message = record.message
        if len(message) > self.max_message_length:
            message = message[:self.max_message_length] + "..."
        parts = [message]

        if self.include_context and record.context:
            parts.append(", ".join(f"{key}={_clip(value)}" for key, value in record.context.items()))

        tags = [f"{attr}={getattr(record, attr)}" for attr in CORRELATION_FIELDS if getattr(record, attr)]
        if tags:
            parts.append(", ".join(tags))

        line = " | ".join(parts)
        return f"[AUDIT] {line}" if record.log_type == LogType.AUDIT else line


class ColorConsoleBackend(ConsoleBackend):
    """Console backend adding ANSI colors by level when stdout is a tty."""

    COLORS = {
        LogLevel.DEBUG: '\033[36m',
        LogLevel.INFO: '\033[37m',
        LogLevel.WARNING: '\033[33m',
        LogLevel.ERROR: '\033[31m',
        LogLevel.CRITICAL: '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, config: ConsoleBackendConfig, name: str = "console"):
        super().__init__(config, name)
        self.use_colors = (
            config.color
            and os.getenv('TERM') != 'dumb'
            and hasattr(sys.stdout, 'isatty')
            and sys.stdout.isatty()
        )

    def _format_message(self, record: LogRecord) -> str:
        message = super()._format_message(record)
        if self.use_colors and record.level in self.COLORS:
            message = f"{self.COLORS[record.level]}{message}{self.RESET}"
        return message
