"""
Logger factory.

Loggers are created once per name from the installed LoggingConfig and
cached. Components take their logger from ``get_logger`` or
``get_exchange_logger`` and keep it as ``self.logger``.
"""

import os
from typing import Dict, List, Optional

from .interfaces import HFTLoggerInterface, LogBackend, LogLevel
from .hft_logger import HFTLogger
from .router import create_router
from .backends.console import ConsoleBackend, ColorConsoleBackend
from .backends.file import FileBackend
from .structs import LoggingConfig, RouterConfig


def _build_backends(config: LoggingConfig) -> List[LogBackend]:
    backends: List[LogBackend] = []
    if config.console is not None and config.console.enabled:
        console_class = ColorConsoleBackend if config.console.color else ConsoleBackend
        backends.append(console_class(config.console, 'console'))
    if config.file is not None and config.file.enabled:
        backends.append(FileBackend(config.file, 'file'))
    return backends


class LoggerFactory:
    """Creates and caches loggers; the default config follows $ENVIRONMENT."""

    _cached_loggers: Dict[str, HFTLoggerInterface] = {}
    _default_config: Optional[LoggingConfig] = None

    @classmethod
    def create_logger(cls, name: str, config: Optional[LoggingConfig] = None) -> HFTLoggerInterface:
        logger = cls._cached_loggers.get(name)
        if logger is not None:
            return logger

        config = config or cls.get_default_config()
        backends = _build_backends(config)
        router = create_router({b.name: b for b in backends}, config.router or RouterConfig())

        logger = HFTLogger(name, backends, router, default_context=config.default_context)
        cls._cached_loggers[name] = logger
        return logger

    @classmethod
    def get_default_config(cls) -> LoggingConfig:
        if cls._default_config is None:
            cls._default_config = LoggingConfig.for_environment(os.getenv('ENVIRONMENT', 'dev'))
        return cls._default_config

    @classmethod
    def override_logger(cls, name: str, min_level: Optional[str] = None, enabled: Optional[bool] = None,
                        backend_enabled: Optional[Dict[str, bool]] = None) -> bool:
        """
        Adjust a cached logger at runtime.

        Example:
            # Hide per-frame debug output of the stream
            LoggerFactory.override_logger("versifi.ws", min_level="INFO")

        Returns:
            False when no logger with that name exists yet
        """
        logger = cls._cached_loggers.get(name)
        if logger is None:
            return False

        for backend in logger.backends:
            if min_level is not None:
                backend.min_level = LogLevel[min_level.upper()]
            switch = (backend_enabled or {}).get(backend.name, enabled)
            if switch is True:
                backend.enable()
            elif switch is False:
                backend.disable()
        return True

    @classmethod
    def clear_cache(cls) -> None:
        cls._cached_loggers.clear()
        cls._default_config = None


def configure_logging(config: LoggingConfig) -> None:
    """Install a logging configuration. Loggers created earlier are dropped."""
    config.validate()
    LoggerFactory._cached_loggers.clear()
    LoggerFactory._default_config = config


def get_logger(name: str) -> HFTLoggerInterface:
    return LoggerFactory.create_logger(name)


def get_exchange_logger(exchange: str, component: Optional[str] = None) -> HFTLoggerInterface:
    """Venue logger with optional component, e.g. ``versifi.ws.private``."""
    return get_logger(f"{exchange}.{component}" if component else exchange)
