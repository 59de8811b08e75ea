"""
End-to-end streaming tests against a local websockets server.

The server verifies the auth signature the same way the venue does and
pushes one execution report per subscription.
"""

import asyncio
import hashlib
import hmac
import json
import time

import pytest
import websockets

from versifi.config import Credentials, WebSocketConfig
from versifi.exchange import VersifiPrivateWebsocket
from versifi.exchange.structs import ExecutionReport, OrderStatus, RequestOrderType, WsBasicOrderDetail
from versifi.infrastructure.exceptions import AuthenticationRejectedError, AuthenticationTimeoutError
from versifi.infrastructure.networking.websocket import ConnectionState, WebsocketSupervisor

API_KEY = "e2e-key"
SECRET = "e2e-secret"

EXECUTION_REPORT = {
    "op": "execution_report",
    "success": True,
    "message": {
        "order_id": 1001,
        "client_order_id": 55,
        "order_type": "LIMIT",
        "status": "PARTIALLY_FILLED",
        "timestamp": 1700000000123,
        "request_order_type": "basic",
        "order": {
            "symbol": "BTC/USDT",
            "client_order_id": 55,
            "exchange": "BINANCE_SPOT",
            "price": "42000.5",
            "quantity": "0.01",
            "side": "BUY",
            "order_type": "LIMIT",
            "child_order": {
                "id": 9,
                "trades": [{
                    "trade_id": 1,
                    "order_id": 1001,
                    "executed_price": "42000.5",
                    "executed_quantity": "0.005",
                    "average_price": "42000.5",
                    "cummulative_filled_quantity": "0.005",
                }],
            },
        },
    },
}


class VenueServer:
    """Minimal venue: checks auth, acknowledges subscriptions and publishes one report each."""

    def __init__(self, answer_auth: bool = True):
        self.answer_auth = answer_auth
        self.frames = []
        self.server = None

    @property
    def url(self) -> str:
        port = self.server.sockets[0].getsockname()[1]
        return f"ws://127.0.0.1:{port}/v1/ws"

    def _verify(self, args) -> bool:
        api_key, expires, signature = args
        expected = hmac.new(SECRET.encode(), f"GET/realtime{expires}".encode(), hashlib.sha256).hexdigest()
        return api_key == API_KEY and signature == expected and int(expires) > time.time()

    async def handler(self, ws):
        async for message in ws:
            frame = json.loads(message)
            self.frames.append(frame)
            op = frame.get("op")
            if op == "auth":
                if self.answer_auth:
                    ok = self._verify(frame["args"])
                    await ws.send(json.dumps({"op": "auth", "success": ok,
                                              "message": None if ok else "invalid signature"}))
            elif op == "subscribe":
                await ws.send(json.dumps({"op": "subscribe", "success": True, "message": frame["args"]}))
                if frame["args"] == ["execution_report"]:
                    await ws.send(json.dumps(EXECUTION_REPORT))
            elif op == "ping":
                await ws.send(json.dumps({"op": "ping", "success": True}))

    async def __aenter__(self):
        self.server = await websockets.serve(self.handler, "127.0.0.1", 0)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.server.close()
        await self.server.wait_closed()


def client_config(url: str, **overrides) -> WebSocketConfig:
    settings = dict(url=url, keepalive=False, auto_reconnect=False, close_timeout=1.0)
    settings.update(overrides)
    return WebSocketConfig(**settings)


@pytest.mark.integration
class TestStreamingEndToEnd:

    @pytest.mark.asyncio
    async def test_auth_success(self):
        async with VenueServer() as venue:
            supervisor = WebsocketSupervisor(client_config(venue.url), Credentials(API_KEY, SECRET))
            await supervisor.connect()

            assert supervisor.state == ConnectionState.AUTHENTICATED
            assert venue.frames[0]["op"] == "auth"
            await supervisor.disconnect()

    @pytest.mark.asyncio
    async def test_auth_rejected_with_wrong_secret(self):
        async with VenueServer() as venue:
            supervisor = WebsocketSupervisor(client_config(venue.url), Credentials(API_KEY, "wrong"))

            with pytest.raises(AuthenticationRejectedError):
                await supervisor.connect()
            assert supervisor.state == ConnectionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_auth_timeout_with_default_budget(self):
        async with VenueServer(answer_auth=False) as venue:
            config = client_config(venue.url)
            supervisor = WebsocketSupervisor(config, Credentials(API_KEY, SECRET))

            start = time.monotonic()
            with pytest.raises(AuthenticationTimeoutError):
                await supervisor.connect()
            elapsed = time.monotonic() - start

            assert config.auth_timeout == 10
            assert 10 <= elapsed < 11
            assert supervisor.state == ConnectionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_execution_report_delivered_once(self):
        received = []
        async with VenueServer() as venue:
            supervisor = WebsocketSupervisor(client_config(venue.url), Credentials(API_KEY, SECRET))
            await supervisor.connect()
            await supervisor.subscribe_execution_report(received.append)

            for _ in range(100):
                if received:
                    break
                await asyncio.sleep(0.01)
            await asyncio.sleep(0.2)

            assert len(received) == 1
            assert json.loads(received[0]) == EXECUTION_REPORT
            await supervisor.disconnect()

    @pytest.mark.asyncio
    async def test_typed_execution_report(self):
        reports = []
        async with VenueServer() as venue:
            ws = VersifiPrivateWebsocket(client_config(venue.url), Credentials(API_KEY, SECRET))
            async with ws:
                await ws.subscribe_execution_report(reports.append, typed=True)
                for _ in range(100):
                    if reports:
                        break
                    await asyncio.sleep(0.01)

        assert len(reports) == 1
        report = reports[0]
        assert isinstance(report, ExecutionReport)
        assert report.detail.order_id == 1001
        assert report.detail.status is OrderStatus.PARTIALLY_FILLED
        assert report.detail.request_order_type is RequestOrderType.BASIC

        order = report.detail.decode_order()
        assert isinstance(order, WsBasicOrderDetail)
        assert order.child_order.trades[0].executed_quantity == "0.005"

    @pytest.mark.asyncio
    async def test_keepalive_ping_reaches_server(self):
        async with VenueServer() as venue:
            config = client_config(venue.url, keepalive=True, idle_timeout=0.2)
            supervisor = WebsocketSupervisor(config, Credentials(API_KEY, SECRET))
            await supervisor.connect()

            for _ in range(100):
                if any(f["op"] == "ping" for f in venue.frames):
                    break
                await asyncio.sleep(0.01)

            assert any(f == {"op": "ping"} for f in venue.frames)
            await supervisor.disconnect()
