"""
Versifi execution API client.

    from versifi import load_config, VersifiPrivateRest, VersifiPrivateWebsocket

    config = load_config()
    async with VersifiPrivateWebsocket.from_config(config) as ws:
        await ws.subscribe_execution_report(on_report, typed=True)
"""

from versifi.config import (
    Credentials,
    RestConfig,
    VersifiConfig,
    WebSocketConfig,
    load_config,
)
from versifi.exchange import VersifiPrivateRest, VersifiPrivateWebsocket
from versifi.exchange.structs import ExecutionReport, decode_execution_report
from versifi.infrastructure.exceptions import (
    VersifiError,
    VersifiAPIError,
    is_api_error,
    ConnectionFailedError,
    AuthenticationRejectedError,
    AuthenticationTimeoutError,
)
from versifi.infrastructure.networking.websocket import ConnectionState, WebsocketSupervisor

__version__ = "0.1.0"

__all__ = [
    'Credentials',
    'RestConfig',
    'VersifiConfig',
    'WebSocketConfig',
    'load_config',
    'VersifiPrivateRest',
    'VersifiPrivateWebsocket',
    'ExecutionReport',
    'decode_execution_report',
    'VersifiError',
    'VersifiAPIError',
    'is_api_error',
    'ConnectionFailedError',
    'AuthenticationRejectedError',
    'AuthenticationTimeoutError',
    'ConnectionState',
    'WebsocketSupervisor',
]
