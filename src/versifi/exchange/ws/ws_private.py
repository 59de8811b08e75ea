"""
Versifi private WebSocket facade.

Binds the generic WebsocketSupervisor to Versifi credentials and topics and
optionally decodes execution reports before they reach the caller.
"""

import inspect
from typing import Any, Callable, List, Optional

from versifi.config.structs import Credentials, VersifiConfig, WebSocketConfig
from versifi.exchange.structs import ExecutionReport, decode_execution_report
from versifi.infrastructure.exceptions.websocket import ProtocolError
from versifi.infrastructure.logging import HFTLoggerInterface, get_exchange_logger
from versifi.infrastructure.networking.websocket import (
    ConnectionState,
    Handler,
    WebsocketSupervisor,
    TOPIC_ANALYTICS,
    TOPIC_EXECUTION_REPORT,
)
from versifi.infrastructure.networking.websocket.ws_client import (
    ConnectFactory, ErrorHandler, ReconnectHandler,
)

ExecutionReportHandler = Callable[[ExecutionReport], Any]


class VersifiPrivateWebsocket:
    """
    Authenticated Versifi stream.

    Usage:
        async with VersifiPrivateWebsocket.from_config(load_config()) as ws:
            await ws.subscribe_execution_report(on_report, typed=True)
            await ws.wait_closed()
    """

    def __init__(
        self,
        config: WebSocketConfig,
        credentials: Credentials,
        error_handler: Optional[ErrorHandler] = None,
        on_reconnect: Optional[ReconnectHandler] = None,
        connect_factory: Optional[ConnectFactory] = None,
        logger: Optional[HFTLoggerInterface] = None,
    ):
        self.logger = logger or get_exchange_logger('versifi', 'ws.private')
        self._supervisor = WebsocketSupervisor(
            config,
            credentials,
            error_handler=error_handler,
            on_reconnect=on_reconnect,
            connect_factory=connect_factory,
            logger=self.logger,
        )

    @classmethod
    def from_config(cls, config: VersifiConfig, **kwargs) -> 'VersifiPrivateWebsocket':
        return cls(config.websocket, config.credentials, **kwargs)

    @property
    def supervisor(self) -> WebsocketSupervisor:
        return self._supervisor

    @property
    def state(self) -> ConnectionState:
        return self._supervisor.state

    def is_connected(self) -> bool:
        return self._supervisor.is_connected()

    def is_authenticated(self) -> bool:
        return self._supervisor.is_authenticated()

    async def connect(self) -> None:
        await self._supervisor.connect()

    async def disconnect(self) -> None:
        await self._supervisor.disconnect()

    async def wait_closed(self) -> None:
        await self._supervisor.wait_closed()

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    async def subscribe_execution_report(self, handler: Callable, typed: bool = False) -> None:
        """
        Subscribe to order lifecycle events.

        With ``typed=True`` the handler receives an ExecutionReport; frames
        that fail to decode are logged and not delivered. Otherwise the
        handler receives the raw frame bytes.
        """
        if typed:
            handler = self._typed_handler(handler)
        await self._supervisor.subscribe(TOPIC_EXECUTION_REPORT, handler)

    async def subscribe_analytics(self, handler: Handler) -> None:
        await self._supervisor.subscribe(TOPIC_ANALYTICS, handler)

    async def subscribe(self, topic: str, handler: Handler) -> None:
        await self._supervisor.subscribe(topic, handler)

    def set_wildcard_handler(self, handler: Optional[Handler]) -> None:
        self._supervisor.set_wildcard_handler(handler)

    def unsubscribe(self, topic: str) -> bool:
        return self._supervisor.unsubscribe(topic)

    def topics(self) -> List[str]:
        return self._supervisor.topics()

    def _typed_handler(self, handler: ExecutionReportHandler) -> Handler:
        async def on_frame(raw: bytes) -> None:
            try:
                report = decode_execution_report(raw)
            except ProtocolError as e:
                self.logger.warning("Undecodable execution report", error=e.message)
                return
            result = handler(report)
            if inspect.isawaitable(result):
                await result

        on_frame.__qualname__ = getattr(handler, '__qualname__', 'execution_report_handler')
        return on_frame
