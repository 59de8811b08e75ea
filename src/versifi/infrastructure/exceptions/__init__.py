from .exchange import (
    VersifiError,
    ExchangeRestError,
    ExchangeConnectionRestError,
    ExchangeServerError,
    ExchangeTimeoutError,
    AuthenticationRestError,
    InvalidParameterError,
    OrderNotFoundError,
    VersifiAPIError,
    is_api_error,
    error_class_for_status,
    raise_for_status,
)
from .websocket import (
    WebSocketError,
    ConnectionFailedError,
    AuthenticationError,
    AuthenticationRejectedError,
    AuthenticationTimeoutError,
    ProtocolError,
    TransportError,
    AlreadyConnectedError,
    NotAuthenticatedError,
    NotConnectedError,
)
from .system import ConfigurationError

__all__ = [
    'VersifiError',
    'ExchangeRestError',
    'ExchangeConnectionRestError',
    'ExchangeServerError',
    'ExchangeTimeoutError',
    'AuthenticationRestError',
    'InvalidParameterError',
    'OrderNotFoundError',
    'VersifiAPIError',
    'is_api_error',
    'error_class_for_status',
    'raise_for_status',
    'WebSocketError',
    'ConnectionFailedError',
    'AuthenticationError',
    'AuthenticationRejectedError',
    'AuthenticationTimeoutError',
    'ProtocolError',
    'TransportError',
    'AlreadyConnectedError',
    'NotAuthenticatedError',
    'NotConnectedError',
    'ConfigurationError',
]
