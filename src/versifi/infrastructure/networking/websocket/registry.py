import threading
from typing import Any, Callable, Dict, FrozenSet, Optional

from .structs import WILDCARD_TOPIC

# Handlers receive the raw frame bytes; coroutine functions are awaited
Handler = Callable[[bytes], Any]


class TopicRegistry:
    """
    Topic -> handler mapping shared by callers and the read loop.

    Every access goes through one lock, so a handler registered from another
    thread is either fully visible to the read loop or not at all.
    """

    __slots__ = ('_handlers', '_lock')

    def __init__(self):
        self._handlers: Dict[str, Handler] = {}
        self._lock = threading.Lock()

    def register(self, topic: str, handler: Handler) -> None:
        if not topic:
            raise ValueError("topic must be a non-empty string")
        if not callable(handler):
            raise TypeError(f"handler for {topic!r} is not callable")
        with self._lock:
            self._handlers[topic] = handler

    def unregister(self, topic: str) -> bool:
        with self._lock:
            return self._handlers.pop(topic, None) is not None

    def lookup(self, topic: str) -> Optional[Handler]:
        with self._lock:
            return self._handlers.get(topic)

    def wildcard(self) -> Optional[Handler]:
        return self.lookup(WILDCARD_TOPIC)

    def is_registered(self, topic: str) -> bool:
        with self._lock:
            return topic in self._handlers

    def topics(self) -> FrozenSet[str]:
        """Registered topics, wildcard excluded."""
        with self._lock:
            return frozenset(t for t in self._handlers if t != WILDCARD_TOPIC)

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)

    def __contains__(self, topic: str) -> bool:
        return self.is_registered(topic)
