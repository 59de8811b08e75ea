"""In-memory stand-ins for a websockets client connection."""

import asyncio
import json
from typing import Any, List, Optional, Union

from websockets.exceptions import ConnectionClosed

_CLOSED = object()


class FakeTransport:
    def __init__(self, ws: 'FakeWebSocket'):
        self._ws = ws
        self.aborted = False

    def abort(self) -> None:
        self.aborted = True
        self._ws._terminate()


class FakeWebSocket:
    """
    Scripted connection.

    Outbound frames are recorded in ``sent``. An auth frame is answered with
    ``auth_success`` unless it is None, in which case the server stays silent.
    """

    def __init__(self, auth_success: Optional[bool] = True):
        self.auth_success = auth_success
        self.sent: List[str] = []
        self.closed = False
        self.close_calls = 0
        self.transport = FakeTransport(self)
        self._inbox: asyncio.Queue = asyncio.Queue()

    @property
    def sent_frames(self) -> List[dict]:
        return [json.loads(frame) for frame in self.sent]

    def sent_ops(self) -> List[str]:
        return [frame['op'] for frame in self.sent_frames]

    async def send(self, message: Union[str, bytes]) -> None:
        if self.closed:
            raise ConnectionClosed(None, None)
        if isinstance(message, bytes):
            message = message.decode('utf-8')
        self.sent.append(message)
        frame = json.loads(message)
        if frame.get('op') == 'auth' and self.auth_success is not None:
            self.push({"op": "auth", "success": self.auth_success, "message": None})

    async def recv(self) -> Any:
        item = await self._inbox.get()
        if item is _CLOSED:
            raise ConnectionClosed(None, None)
        return item

    async def close(self) -> None:
        self.close_calls += 1
        self._terminate()

    def push(self, frame: Union[dict, str, bytes]) -> None:
        """Queue an inbound frame."""
        if isinstance(frame, dict):
            frame = json.dumps(frame)
        self._inbox.put_nowait(frame)

    def drop(self) -> None:
        """Simulate the peer vanishing: the next recv raises ConnectionClosed."""
        self._terminate()

    def _terminate(self) -> None:
        if not self.closed:
            self.closed = True
            self._inbox.put_nowait(_CLOSED)


class FakeConnector:
    """
    ``connect_factory`` replacement handing out scripted sockets in order.

    An exception in the script is raised instead of returning a socket; once
    the script is exhausted every dial fails with OSError. ``delay`` makes
    each dial take that long, like a slow TCP or TLS handshake.
    """

    def __init__(self, *script: Union[FakeWebSocket, Exception], delay: float = 0.0):
        self.script = list(script)
        self.delay = delay
        self.calls = 0

    def add(self, item: Union[FakeWebSocket, Exception]) -> None:
        self.script.append(item)

    async def __call__(self, config) -> FakeWebSocket:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if not self.script:
            raise OSError("connection refused")
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


async def eventually(predicate, timeout: float = 1.0, interval: float = 0.005) -> None:
    """Poll ``predicate`` until it holds; fail the test after ``timeout``."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met within %.2fs" % timeout)
        await asyncio.sleep(interval)
