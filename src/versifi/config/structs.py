from typing import Optional, Tuple

from msgspec import Struct, field

from versifi.infrastructure.logging.structs import LoggingConfig

DEFAULT_REST_URL = "https://api.versifi.io"
# Placeholder endpoint; production deployments set websocket.url in config.yaml
DEFAULT_WS_URL = "wss://example.com/v1/ws"

DELIVERY_MODES = ("sync", "queued")


class Credentials(Struct, frozen=True):
    """API key pair shared by the REST client and the streaming handshake."""
    api_key: str
    secret_key: str

    def is_configured(self) -> bool:
        return bool(self.api_key) and bool(self.secret_key)

    def get_preview(self) -> str:
        """Get safe preview of credentials for logging."""
        if not self.api_key:
            return "Not configured"
        if len(self.api_key) > 8:
            return f"{self.api_key[:4]}...{self.api_key[-4:]}"
        return "***"


class WebSocketConfig(Struct, frozen=True):
    """
    Streaming connection settings.

    Attributes:
        url: WebSocket endpoint
        idle_timeout: Idle timeout in seconds; keepalive pings every half of it
        keepalive: Send application level pings while connected
        auto_reconnect: Reconnect after a read or write failure
        reconnect_delay: Fixed delay before each reconnect attempt in seconds
        max_reconnect_attempts: Consecutive failed attempts before giving up (0 = unlimited)
        auth_timeout: Seconds to wait for the auth reply
        auth_expiry_lead: Seconds between signing and the signature's expiry
        connect_timeout: Opening handshake timeout in seconds
        close_timeout: Closing handshake timeout in seconds
        max_message_size: Largest inbound frame in bytes
        local_addr: Local source IP to bind outgoing connections to
        delivery_mode: "sync" runs handlers on the read loop, "queued" on a worker task
        delivery_queue_size: Bound of the queued delivery buffer
        resubscribe_on_reconnect: Re-send subscribe frames for known topics after reconnect
    """
    url: str = DEFAULT_WS_URL
    idle_timeout: float = 60.0
    keepalive: bool = True
    auto_reconnect: bool = True
    reconnect_delay: float = 5.0
    max_reconnect_attempts: int = 0
    auth_timeout: float = 10.0
    auth_expiry_lead: int = 300
    connect_timeout: float = 45.0
    close_timeout: float = 5.0
    max_message_size: int = 1048576  # 1MB
    local_addr: Optional[str] = None
    delivery_mode: str = "sync"
    delivery_queue_size: int = 1000
    resubscribe_on_reconnect: bool = False

    @property
    def keepalive_interval(self) -> float:
        return self.idle_timeout / 2

    @property
    def local_bind(self) -> Optional[Tuple[str, int]]:
        """Local (host, port) tuple with an ephemeral port, or None."""
        if not self.local_addr:
            return None
        return (self.local_addr, 0)

    def validate(self) -> None:
        if not self.url.startswith(('ws://', 'wss://')):
            raise ValueError(f"WebSocket URL must start with ws:// or wss://, got: {self.url}")
        if self.idle_timeout <= 0:
            raise ValueError("idle_timeout must be positive")
        if self.reconnect_delay < 0:
            raise ValueError("reconnect_delay cannot be negative")
        if self.max_reconnect_attempts < 0:
            raise ValueError("max_reconnect_attempts cannot be negative")
        if self.auth_timeout <= 0:
            raise ValueError("auth_timeout must be positive")
        if self.auth_expiry_lead <= 0:
            raise ValueError("auth_expiry_lead must be positive")
        if self.connect_timeout <= 0:
            raise ValueError("connect_timeout must be positive")
        if self.max_message_size <= 0:
            raise ValueError("max_message_size must be positive")
        if self.delivery_mode not in DELIVERY_MODES:
            raise ValueError(f"delivery_mode must be one of {DELIVERY_MODES}, got: {self.delivery_mode}")
        if self.delivery_queue_size <= 0:
            raise ValueError("delivery_queue_size must be positive")


class RestConfig(Struct, frozen=True):
    """
    REST transport settings.

    Attributes:
        base_url: API root, without trailing slash
        timeout: Total request timeout in seconds
        local_addr: Local source IP to bind outgoing connections to
        user_agent: User-Agent header value
        debug: Log every request and response body at DEBUG
    """
    base_url: str = DEFAULT_REST_URL
    timeout: float = 30.0
    local_addr: Optional[str] = None
    user_agent: str = "Versifi/python"
    debug: bool = False

    def validate(self) -> None:
        if not self.base_url.startswith(('http://', 'https://')):
            raise ValueError(f"base_url must start with http:// or https://, got: {self.base_url}")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")


class VersifiConfig(Struct, frozen=True):
    """Complete client configuration as loaded from config.yaml."""
    credentials: Credentials
    rest: RestConfig = field(default_factory=RestConfig)
    websocket: WebSocketConfig = field(default_factory=WebSocketConfig)
    logging: Optional[LoggingConfig] = None

    def validate(self) -> None:
        self.rest.validate()
        self.websocket.validate()
        if self.logging:
            self.logging.validate()
