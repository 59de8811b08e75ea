"""
Record routing.

Fixed rules by record type and level; no per-logger routing tables.
"""

from typing import Dict, List, Sequence

from .interfaces import LogBackend, LogRecord, LogLevel, LogType, LogRouter
from .structs import RouterConfig

_METRIC_BACKENDS = ('file',)
_AUDIT_BACKENDS = ('file', 'console')


class SimpleRouter(LogRouter):
    """
    METRIC records go to the file backend, AUDIT to file and console,
    WARNING and above to every backend, the rest to ``default_backends``.
    A backend still drops records its ``should_handle`` rejects.
    """

    def __init__(self, backends: Dict[str, LogBackend], config: RouterConfig):
        if not isinstance(config, RouterConfig):
            raise TypeError(f"Expected RouterConfig, got {type(config)}")
        self.backends = backends
        self.default_backends = tuple(config.default_backends)

    def _names_for(self, record: LogRecord) -> Sequence[str]:
        if record.log_type == LogType.METRIC:
            return _METRIC_BACKENDS
        if record.log_type == LogType.AUDIT:
            return _AUDIT_BACKENDS
        if record.level >= LogLevel.WARNING:
            return tuple(self.backends)
        return self.default_backends

    def get_backends(self, record: LogRecord) -> List[LogBackend]:
        selected = []
        for name in self._names_for(record):
            backend = self.backends.get(name)
            if backend is not None and backend.should_handle(record):
                selected.append(backend)
        return selected


def create_router(backends: Dict[str, LogBackend], config: RouterConfig) -> LogRouter:
    return SimpleRouter(backends, config)
