"""
Authenticated streaming client.

WebsocketSupervisor owns one socket at a time and drives it through
DISCONNECTED -> CONNECTING -> CONNECTED -> AUTHENTICATING -> AUTHENTICATED.
Around the socket it runs three kinds of tasks:

- the read loop, which classifies every frame and routes business frames to
  the topic handler and then to the wildcard handler,
- the keepalive loop, which sends ``{"op":"ping"}`` every idle_timeout / 2,
- a transient reconnect task, which redials after a fixed delay once the
  session is lost (unless disconnect() was called).

Handlers run on the read loop (or on the delivery worker in queued mode) and
must return quickly.
"""

import asyncio
import inspect
import logging
import threading
import time
from typing import Any, Awaitable, Callable, List, Optional

from websockets import connect
from websockets.exceptions import ConnectionClosed

from versifi.config.structs import Credentials, WebSocketConfig
from versifi.infrastructure.exceptions import VersifiError
from versifi.infrastructure.exceptions.system import ConfigurationError
from versifi.infrastructure.exceptions.websocket import (
    AlreadyConnectedError,
    AuthenticationRejectedError,
    AuthenticationTimeoutError,
    ConnectionFailedError,
    NotAuthenticatedError,
    NotConnectedError,
    ProtocolError,
    TransportError,
)
from versifi.infrastructure.logging import HFTLoggerInterface, get_exchange_logger
from versifi.infrastructure.networking.http.signer import Signer
from .codec import AuthChallenge, FrameCodec
from .dispatch import QueuedDelivery, SyncDelivery
from .registry import Handler, TopicRegistry
from .structs import (
    ConnectionState,
    AuthReply, PingReply, SubscribeAck, BusinessMessage, UnknownMessage,
    TOPIC_ANALYTICS, TOPIC_EXECUTION_REPORT, WILDCARD_TOPIC,
)

ErrorHandler = Callable[[Exception], Any]
ReconnectHandler = Callable[[], Any]
ConnectFactory = Callable[[WebSocketConfig], Awaitable[Any]]


async def default_connect(config: WebSocketConfig) -> Any:
    """Open the socket with protocol pings disabled; keepalive is application level."""
    kwargs = dict(
        open_timeout=config.connect_timeout,
        close_timeout=config.close_timeout,
        ping_interval=None,
        max_size=config.max_message_size,
        compression=None,
    )
    if config.local_bind:
        kwargs['local_addr'] = config.local_bind
    return await connect(config.url, **kwargs)


async def _call(callback: Callable, *args) -> None:
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class WebsocketSupervisor:
    """
    Connection supervisor for the authenticated streaming feed.

    Args:
        config: Connection settings
        credentials: API key pair used for the auth handshake
        error_handler: Called with the error when an established session fails
            and when an automatic reconnect attempt fails; sync or async
        on_reconnect: Called after an automatic reconnect re-authenticated;
            sync or async. Handlers stay registered, the server side
            subscriptions do not, so this is the place to resubscribe.
        connect_factory: Coroutine function opening the socket (tests inject fakes)
        signer: Signer override; defaults to HMAC-SHA256 over credentials.secret_key
        logger: Logger override
    """

    def __init__(
        self,
        config: WebSocketConfig,
        credentials: Credentials,
        error_handler: Optional[ErrorHandler] = None,
        on_reconnect: Optional[ReconnectHandler] = None,
        connect_factory: Optional[ConnectFactory] = None,
        signer: Optional[Signer] = None,
        logger: Optional[HFTLoggerInterface] = None,
    ):
        try:
            config.validate()
        except ValueError as e:
            raise ConfigurationError(str(e), "websocket") from e

        self.config = config
        self.credentials = credentials
        self._signer = signer or Signer(credentials.secret_key)
        self._codec = FrameCodec()
        self._registry = TopicRegistry()
        self._error_handler = error_handler
        self._on_reconnect = on_reconnect
        self._connect_factory = connect_factory or default_connect

        self.url_name = config.url.split('/')[2] if '://' in config.url else config.url
        self.logger = logger or get_exchange_logger('versifi', 'ws')

        if config.delivery_mode == "queued":
            self._delivery = QueuedDelivery(config.delivery_queue_size, self.logger)
        else:
            self._delivery = SyncDelivery(self.logger)

        # State and socket handle change together under this lock
        self._state_lock = threading.Lock()
        self._state = ConnectionState.DISCONNECTED
        self._ws: Any = None
        # Bumped on every detach; an _establish whose attempt is stale gives up
        self._attempt = 0

        self._dial_task: Optional[asyncio.Future] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._keepalive_task: Optional[asyncio.Task] = None
        self._reconnect_task: Optional[asyncio.Task] = None
        self._auth_waiter: Optional[asyncio.Future] = None
        self._stop_event: Optional[asyncio.Event] = None

        self._should_reconnect = config.auto_reconnect
        self._messages_received = 0

    # State

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def registry(self) -> TopicRegistry:
        return self._registry

    @property
    def messages_received(self) -> int:
        return self._messages_received

    def is_connected(self) -> bool:
        return self._ws is not None and self._state in (
            ConnectionState.CONNECTED,
            ConnectionState.AUTHENTICATING,
            ConnectionState.AUTHENTICATED,
        )

    def is_authenticated(self) -> bool:
        return self._ws is not None and self._state == ConnectionState.AUTHENTICATED

    def set_error_handler(self, handler: Optional[ErrorHandler]) -> None:
        self._error_handler = handler

    def set_reconnect_handler(self, handler: Optional[ReconnectHandler]) -> None:
        self._on_reconnect = handler

    def _set_state(self, state: ConnectionState, ws: Any) -> None:
        with self._state_lock:
            self._state = state
            self._ws = ws
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug("Connection state changed", state=state.name, connection=self.url_name)

    def _detach(self) -> tuple:
        """
        Reset to DISCONNECTED and hand back the socket and tasks to clean up.

        A supervisor still dialing stays CONNECTING; the abandoned _establish
        resets the state itself once the dial returns.
        """
        with self._state_lock:
            ws = self._ws
            self._attempt += 1
            if self._state != ConnectionState.CONNECTING:
                self._state = ConnectionState.DISCONNECTED
            self._ws = None
        tasks = [t for t in (self._reader_task, self._keepalive_task) if t is not None]
        self._reader_task = None
        self._keepalive_task = None
        return ws, tasks

    # Lifecycle

    async def connect(self) -> None:
        """
        Dial, authenticate and start the background loops.

        Calling connect() after disconnect() starts a fresh session and
        re-enables automatic reconnection.

        Raises:
            AlreadyConnectedError: not in DISCONNECTED state
            ConnectionFailedError: dial failed or the socket dropped during the handshake
            AuthenticationRejectedError: server answered auth with success=false
            AuthenticationTimeoutError: no auth reply within auth_timeout
            NotConnectedError: disconnect() was called before the session came up
        """
        await self._establish()
        self._should_reconnect = self.config.auto_reconnect

    async def _establish(self) -> None:
        with self._state_lock:
            if self._state != ConnectionState.DISCONNECTED:
                raise AlreadyConnectedError(f"Cannot connect in state {self._state.name}")
            self._state = ConnectionState.CONNECTING
            attempt = self._attempt

        self._stop_event = asyncio.Event()
        self.logger.info("Connecting to WebSocket", url=self.config.url)

        dial = asyncio.ensure_future(self._connect_factory(self.config))
        self._dial_task = dial
        try:
            ws = await dial
        except asyncio.CancelledError:
            self._set_state(ConnectionState.DISCONNECTED, None)
            if attempt != self._attempt:
                raise NotConnectedError("Disconnected while connecting") from None
            raise
        except Exception as e:
            self._set_state(ConnectionState.DISCONNECTED, None)
            if attempt != self._attempt:
                raise NotConnectedError("Disconnected while connecting") from e
            self.logger.error("Failed to connect to WebSocket", url=self.config.url, error=str(e))
            raise ConnectionFailedError(f"Failed to connect to {self.config.url}: {e}") from e
        finally:
            self._dial_task = None

        with self._state_lock:
            abandoned = attempt != self._attempt
            if not abandoned:
                self._state = ConnectionState.CONNECTED
                self._ws = ws
        if abandoned:
            # The dial finished despite disconnect(); nobody owns this socket
            self._set_state(ConnectionState.DISCONNECTED, None)
            await self._close_socket(ws)
            raise NotConnectedError("Disconnected while connecting")

        self._delivery.start()
        # Reader first, so the auth reply cannot be missed
        self._reader_task = asyncio.create_task(self._read_loop(ws), name="versifi-ws-reader")

        try:
            await self._authenticate(ws)
        except BaseException:
            # After disconnect() the socket is gone and a newer connect() may own the state
            if attempt == self._attempt:
                await self._shutdown_session(send_close=True)
            raise

        with self._state_lock:
            abandoned = attempt != self._attempt
            if not abandoned:
                self._state = ConnectionState.AUTHENTICATED
        if abandoned:
            # disconnect() ran after the auth reply arrived; it already closed the socket
            raise NotConnectedError("Disconnected during authentication")

        if self.config.keepalive:
            self._keepalive_task = asyncio.create_task(
                self._keepalive_loop(ws, self._stop_event), name="versifi-ws-keepalive"
            )
        self.logger.info("WebSocket authenticated", connection=self.url_name)

    async def _authenticate(self, ws: Any) -> None:
        loop = asyncio.get_running_loop()
        waiter = loop.create_future()
        self._auth_waiter = waiter
        self._set_state(ConnectionState.AUTHENTICATING, ws)

        challenge = AuthChallenge.create(self._signer, self.config.auth_expiry_lead)
        frame = self._codec.encode_auth(self.credentials.api_key, challenge)
        start = time.perf_counter()
        try:
            try:
                await ws.send(frame.decode('utf-8'))
            except ConnectionClosed as e:
                raise ConnectionFailedError(f"Connection closed while sending auth: {e}") from e

            try:
                reply: AuthReply = await asyncio.wait_for(waiter, timeout=self.config.auth_timeout)
            except asyncio.TimeoutError as e:
                self.logger.error("Authentication timed out", timeout=self.config.auth_timeout)
                raise AuthenticationTimeoutError(
                    f"No auth reply within {self.config.auth_timeout}s"
                ) from e
            except TransportError as e:
                raise ConnectionFailedError(f"Connection lost during authentication: {e.message}") from e
        finally:
            self._auth_waiter = None

        self.logger.latency("ws_auth", (time.perf_counter() - start) * 1000, connection=self.url_name)
        if not reply.success:
            detail = bytes(reply.message).decode('utf-8', 'replace')
            self.logger.error("Authentication rejected", reply=detail)
            raise AuthenticationRejectedError(f"Authentication rejected: {detail}")

    async def disconnect(self) -> None:
        """
        Close the session and stop every background task.

        Sends a close frame, disables automatic reconnection and unblocks a
        pending connect(). Safe to call repeatedly and from any task,
        including a message handler.
        """
        self._should_reconnect = False
        if self._stop_event is not None:
            self._stop_event.set()

        reconnect_task, self._reconnect_task = self._reconnect_task, None
        current = asyncio.current_task()
        if reconnect_task is not None and reconnect_task is not current and not reconnect_task.done():
            reconnect_task.cancel()
            try:
                await reconnect_task
            except asyncio.CancelledError:
                pass

        was_open = self._ws is not None
        await self._shutdown_session(send_close=True)

        dial = self._dial_task
        if dial is not None and not dial.done():
            dial.cancel()
            await asyncio.gather(dial, return_exceptions=True)
        await self._delivery.stop()
        if was_open:
            self.logger.info("WebSocket disconnected", connection=self.url_name)

    async def _shutdown_session(self, send_close: bool) -> None:
        ws, tasks = self._detach()

        waiter = self._auth_waiter
        if waiter is not None and not waiter.done():
            waiter.set_exception(NotConnectedError("Disconnected during authentication"))

        current = asyncio.current_task()
        tasks = [t for t in tasks if t is not current and not t.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        if ws is None:
            return
        if send_close:
            await self._close_socket(ws)
        else:
            # Dead session: drop the transport without a closing handshake
            transport = getattr(ws, 'transport', None)
            if transport is not None:
                transport.abort()

    async def _close_socket(self, ws: Any) -> None:
        try:
            await asyncio.wait_for(ws.close(), timeout=self.config.close_timeout)
        except asyncio.TimeoutError:
            self.logger.warning("WebSocket close timeout", connection=self.url_name)
        except (ConnectionClosed, OSError) as e:
            self.logger.warning("Error closing WebSocket", error=str(e))

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    # Subscriptions and sending

    async def subscribe(self, topic: str, handler: Handler) -> None:
        """
        Register ``handler`` for ``topic`` and send the subscribe frame.

        The handler is registered before the frame is written. The server
        confirmation is only logged. Subscribing to ``"*"`` installs the
        wildcard handler locally without a wire frame.

        Raises:
            NotAuthenticatedError: session not authenticated; nothing is sent
        """
        if not self.is_authenticated():
            raise NotAuthenticatedError(f"Cannot subscribe to {topic!r} in state {self._state.name}")
        self._registry.register(topic, handler)
        if topic == WILDCARD_TOPIC:
            return
        await self._send_raw(self._codec.encode_subscribe(topic))
        self.logger.info("Subscribe sent", topic=topic)

    async def subscribe_execution_report(self, handler: Handler) -> None:
        await self.subscribe(TOPIC_EXECUTION_REPORT, handler)

    async def subscribe_analytics(self, handler: Handler) -> None:
        await self.subscribe(TOPIC_ANALYTICS, handler)

    def set_wildcard_handler(self, handler: Optional[Handler]) -> None:
        """Install or remove the handler receiving every business frame."""
        if handler is None:
            self._registry.unregister(WILDCARD_TOPIC)
        else:
            self._registry.register(WILDCARD_TOPIC, handler)

    def unsubscribe(self, topic: str) -> bool:
        """Remove the local handler. The venue has no unsubscribe operation."""
        removed = self._registry.unregister(topic)
        if removed:
            self.logger.info("Unsubscribed", topic=topic)
        return removed

    async def send_json(self, obj: Any) -> None:
        """Send an arbitrary JSON frame."""
        await self._send_raw(self._codec.encode_json(obj))

    async def send_ping(self) -> None:
        await self._send_raw(self._codec.encode_ping())

    async def _send_raw(self, data: bytes) -> None:
        ws = self._ws
        if ws is None:
            raise NotConnectedError("WebSocket not connected")
        try:
            await ws.send(data.decode('utf-8'))
        except ConnectionClosed as e:
            raise TransportError(f"Failed to send frame: {e}", e) from e

    async def _resubscribe_all(self) -> None:
        for topic in sorted(self._registry.topics()):
            try:
                await self._send_raw(self._codec.encode_subscribe(topic))
                self.logger.info("Resubscribed", topic=topic)
            except VersifiError as e:
                self.logger.error("Resubscribe failed", topic=topic, error=str(e))
                return

    # Background loops

    async def _read_loop(self, ws: Any) -> None:
        while True:
            try:
                message = await ws.recv()
            except asyncio.CancelledError:
                raise
            except ConnectionClosed as e:
                await self._handle_transport_failure(ws, TransportError(f"Connection closed: {e}", e))
                return
            except Exception as e:
                await self._handle_transport_failure(ws, TransportError(f"Receive failed: {e}", e))
                return

            raw = message.encode('utf-8') if isinstance(message, str) else bytes(message)
            self._messages_received += 1
            if self.logger.isEnabledFor(logging.DEBUG):
                self.logger.debug("Received frame", size=len(raw), preview=raw[:100].decode('utf-8', 'replace'))

            try:
                inbound = self._codec.classify(raw, self._registry.is_registered)
            except ProtocolError as e:
                self.logger.warning("Dropping malformed frame", error=e.message)
                continue

            await self._route(inbound)

    async def _route(self, inbound) -> None:
        if isinstance(inbound, BusinessMessage):
            handlers = [h for h in (self._registry.lookup(inbound.topic), self._registry.wildcard()) if h]
            self.logger.counter("ws_messages_received", topic=inbound.topic)
            if handlers:
                await self._delivery.deliver(handlers, inbound.raw)
        elif isinstance(inbound, UnknownMessage):
            wildcard = self._registry.wildcard()
            if wildcard is not None:
                await self._delivery.deliver([wildcard], inbound.raw)
            elif self.logger.isEnabledFor(logging.DEBUG):
                self.logger.debug("No handler for operation", op=inbound.op)
        elif isinstance(inbound, AuthReply):
            waiter = self._auth_waiter
            if waiter is not None and not waiter.done():
                waiter.set_result(inbound)
            else:
                self.logger.debug("Unsolicited auth reply dropped")
        elif isinstance(inbound, PingReply):
            if self.logger.isEnabledFor(logging.DEBUG):
                self.logger.debug("Keepalive acknowledged")
        elif isinstance(inbound, SubscribeAck):
            self.logger.info("Subscription confirmed", success=inbound.success,
                             message=bytes(inbound.message).decode('utf-8', 'replace'))

    async def _keepalive_loop(self, ws: Any, stop_event: asyncio.Event) -> None:
        interval = self.config.keepalive_interval
        while True:
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
                return
            except asyncio.TimeoutError:
                pass
            if ws is not self._ws:
                return
            try:
                await ws.send(self._codec.encode_ping().decode('utf-8'))
            except asyncio.CancelledError:
                raise
            except Exception as e:
                await self._handle_transport_failure(ws, TransportError(f"Keepalive ping failed: {e}", e))
                return

    # Failure handling and reconnection

    async def _handle_transport_failure(self, ws: Any, error: TransportError) -> None:
        if ws is not self._ws:
            return  # stale socket or explicit disconnect

        waiter = self._auth_waiter
        if waiter is not None and not waiter.done():
            # Handshake in progress; connect() reports the failure
            waiter.set_exception(error)
            return

        self.logger.error("WebSocket session lost", connection=self.url_name, error=error.message)
        await self._shutdown_session(send_close=False)
        await self._notify_error(error)

        if self._should_reconnect:
            self._schedule_reconnect()

    async def _notify_error(self, error: Exception) -> None:
        if self._error_handler is None:
            return
        try:
            await _call(self._error_handler, error)
        except Exception as e:
            self.logger.error("Error handler raised", error=str(e))

    def _schedule_reconnect(self) -> None:
        if self._reconnect_task is not None and not self._reconnect_task.done():
            return
        self._reconnect_task = asyncio.create_task(self._reconnect_loop(), name="versifi-ws-reconnect")

    async def _reconnect_loop(self) -> None:
        attempts = 0
        max_attempts = self.config.max_reconnect_attempts
        while self._should_reconnect:
            attempts += 1
            self.logger.warning("Reconnecting", delay=self.config.reconnect_delay, attempt=attempts)
            self.logger.counter("ws_reconnect_attempts")
            await asyncio.sleep(self.config.reconnect_delay)
            if not self._should_reconnect:
                return

            try:
                await self._establish()
            except AlreadyConnectedError:
                return
            except AuthenticationRejectedError as e:
                self.logger.error("Reconnect rejected by server - giving up", error=e.message)
                await self._notify_error(e)
                return
            except VersifiError as e:
                self.logger.error("Reconnect attempt failed", attempt=attempts, error=str(e))
                await self._notify_error(e)
                if max_attempts and attempts >= max_attempts:
                    self.logger.error("Reconnect attempts exhausted", attempts=attempts)
                    return
                continue

            # A later failure must be able to schedule a fresh reconnect task
            self._reconnect_task = None
            self.logger.info("Reconnected", attempts=attempts)
            if self.config.resubscribe_on_reconnect:
                await self._resubscribe_all()
            if self._on_reconnect is not None:
                try:
                    await _call(self._on_reconnect)
                except Exception as e:
                    self.logger.error("Reconnect handler raised", error=str(e))
            return

    async def wait_closed(self) -> None:
        """Wait for the current reader task to finish (session end)."""
        task = self._reader_task
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    def topics(self) -> List[str]:
        return sorted(self._registry.topics())
