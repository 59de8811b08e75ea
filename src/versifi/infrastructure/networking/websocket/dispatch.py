"""
Handler delivery strategies.

SyncDelivery runs handlers in-line on the read loop: strict socket order,
but a slow handler stalls the connection. QueuedDelivery hands frames to a
single worker task behind a bounded queue: order is still preserved, and a
full queue applies backpressure to the read loop instead of dropping frames.
"""

import asyncio
import inspect
from typing import Optional, Sequence, Tuple

from versifi.infrastructure.logging import HFTLoggerInterface
from .registry import Handler


async def invoke_handler(handler: Handler, raw: bytes, logger: HFTLoggerInterface) -> None:
    """Run one handler; its exceptions are logged and never reach the read loop."""
    try:
        result = handler(raw)
        if inspect.isawaitable(result):
            await result
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.error("Message handler raised",
                     handler=getattr(handler, '__qualname__', repr(handler)),
                     error_type=type(e).__name__,
                     error=str(e))


class SyncDelivery:
    mode = "sync"

    def __init__(self, logger: HFTLoggerInterface):
        self.logger = logger

    def start(self) -> None:
        pass

    async def deliver(self, handlers: Sequence[Handler], raw: bytes) -> None:
        for handler in handlers:
            await invoke_handler(handler, raw, self.logger)

    async def join(self) -> None:
        pass

    async def stop(self) -> None:
        pass


class QueuedDelivery:
    mode = "queued"

    def __init__(self, maxsize: int, logger: HFTLoggerInterface):
        self.maxsize = maxsize
        self.logger = logger
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None

    @property
    def pending(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    def start(self) -> None:
        if self._worker is not None and not self._worker.done():
            return
        if self._queue is None:
            self._queue = asyncio.Queue(maxsize=self.maxsize)
        self._worker = asyncio.create_task(self._run(), name="versifi-ws-delivery")

    async def deliver(self, handlers: Sequence[Handler], raw: bytes) -> None:
        if self._worker is None or self._worker.done():
            self.start()
        if self._queue.full():
            self.logger.warning("Delivery queue full - read loop waiting", maxsize=self.maxsize)
        await self._queue.put((tuple(handlers), raw))

    async def _run(self) -> None:
        queue = self._queue
        # stop() detaches the queue; a worker that survived it exits here
        while self._queue is queue:
            item: Tuple[Tuple[Handler, ...], bytes] = await queue.get()
            handlers, raw = item
            try:
                for handler in handlers:
                    await invoke_handler(handler, raw, self.logger)
            finally:
                queue.task_done()

    async def join(self) -> None:
        """Wait until every queued frame has been handled."""
        if self._queue is not None:
            await self._queue.join()

    async def stop(self) -> None:
        """Cancel the worker. Frames still queued are dropped."""
        worker, self._worker = self._worker, None
        if worker is not None and not worker.done() and worker is not asyncio.current_task():
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass
        if self._queue is not None and self._queue.qsize():
            self.logger.warning("Dropped undelivered frames", count=self._queue.qsize())
        self._queue = None
