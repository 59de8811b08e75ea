from enum import Enum
from typing import Optional, Union

import msgspec


class ConnectionState(Enum):
    """WebSocket connection states"""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


# Control operations handled by the supervisor itself
OP_AUTH = "auth"
OP_PING = "ping"
OP_SUBSCRIBE = "subscribe"

# Business topics published by the venue
TOPIC_EXECUTION_REPORT = "execution_report"
TOPIC_ANALYTICS = "analytics"
BUSINESS_TOPICS = frozenset({TOPIC_EXECUTION_REPORT, TOPIC_ANALYTICS})

WILDCARD_TOPIC = "*"


class Envelope(msgspec.Struct, frozen=True):
    """
    Generic inbound frame: ``{"op": ..., "success": ..., "message": ...}``.

    ``message`` stays undecoded until a caller asks for a concrete shape.
    """
    op: str
    success: bool = False
    message: msgspec.Raw = msgspec.field(default_factory=msgspec.Raw)


class ControlFrame(msgspec.Struct, frozen=True, omit_defaults=True):
    """Outbound frame: ``{"op": ..., "args": [...]}``; args omitted when None."""
    op: str
    args: Optional[list] = None


# Inbound tagged union. Every variant keeps the raw frame bytes.

class AuthReply(msgspec.Struct, frozen=True):
    success: bool
    message: msgspec.Raw
    raw: bytes


class PingReply(msgspec.Struct, frozen=True):
    raw: bytes


class SubscribeAck(msgspec.Struct, frozen=True):
    success: bool
    message: msgspec.Raw
    raw: bytes


class BusinessMessage(msgspec.Struct, frozen=True):
    topic: str
    success: bool
    message: msgspec.Raw
    raw: bytes


class UnknownMessage(msgspec.Struct, frozen=True):
    op: str
    raw: bytes


InboundMessage = Union[AuthReply, PingReply, SubscribeAck, BusinessMessage, UnknownMessage]
