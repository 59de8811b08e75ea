"""
Logging System

Usage:
    from versifi.infrastructure.logging import get_logger

    logger = get_logger('versifi.ws')
    logger.info("Authenticated", url="wss://...")

    # Venue logger with component
    logger = get_exchange_logger('versifi', 'rest.private')
    logger.metric("rest_request_latency_ms", 1.23, endpoint="/v2/orders")
"""

from .interfaces import (
    LogLevel,
    LogType,
    LogRecord,
    LogBackend,
    LogRouter,
    HFTLoggerInterface
)
from .hft_logger import HFTLogger, LoggingTimer
from .factory import (
    LoggerFactory,
    get_logger,
    get_exchange_logger,
    configure_logging,
)
from .structs import (
    LoggingConfig,
    BackendConfig,
    ConsoleBackendConfig,
    FileBackendConfig,
    RouterConfig
)
from .router import SimpleRouter, create_router
from .backends.console import ConsoleBackend, ColorConsoleBackend
from .backends.file import FileBackend

__all__ = [
    'LogLevel',
    'LogType',
    'LogRecord',
    'LogBackend',
    'LogRouter',
    'HFTLoggerInterface',
    'HFTLogger',
    'LoggingTimer',
    'LoggerFactory',
    'get_logger',
    'get_exchange_logger',
    'configure_logging',
    'LoggingConfig',
    'BackendConfig',
    'ConsoleBackendConfig',
    'FileBackendConfig',
    'RouterConfig',
    'SimpleRouter',
    'create_router',
    'ConsoleBackend',
    'ColorConsoleBackend',
    'FileBackend',
]
