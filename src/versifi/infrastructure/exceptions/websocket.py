from .exchange import VersifiError


class WebSocketError(VersifiError):
    """Base exception for streaming connection errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConnectionFailedError(WebSocketError):
    """Dial or handshake failed; connect() did not retry."""
    pass


class AuthenticationError(WebSocketError):
    """The auth handshake did not complete."""
    pass


class AuthenticationRejectedError(AuthenticationError):
    """Server answered the auth frame with success=false."""
    pass


class AuthenticationTimeoutError(AuthenticationError):
    """No auth reply arrived in time."""
    pass


class ProtocolError(WebSocketError):
    """Inbound frame could not be decoded."""

    def __init__(self, message: str, raw: bytes = b"") -> None:
        super().__init__(message)
        self.raw = raw


class TransportError(WebSocketError):
    """Read or write on an established session failed."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class AlreadyConnectedError(WebSocketError):
    pass


class NotAuthenticatedError(WebSocketError):
    pass


class NotConnectedError(WebSocketError):
    pass
