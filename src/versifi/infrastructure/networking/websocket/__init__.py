from .structs import (
    ConnectionState,
    Envelope,
    ControlFrame,
    InboundMessage,
    AuthReply,
    PingReply,
    SubscribeAck,
    BusinessMessage,
    UnknownMessage,
    TOPIC_EXECUTION_REPORT,
    TOPIC_ANALYTICS,
    BUSINESS_TOPICS,
    WILDCARD_TOPIC,
)
from .codec import AuthChallenge, FrameCodec
from .registry import Handler, TopicRegistry
from .dispatch import SyncDelivery, QueuedDelivery
from .ws_client import WebsocketSupervisor, default_connect

__all__ = [
    'ConnectionState',
    'Envelope',
    'ControlFrame',
    'InboundMessage',
    'AuthReply',
    'PingReply',
    'SubscribeAck',
    'BusinessMessage',
    'UnknownMessage',
    'TOPIC_EXECUTION_REPORT',
    'TOPIC_ANALYTICS',
    'BUSINESS_TOPICS',
    'WILDCARD_TOPIC',
    'AuthChallenge',
    'FrameCodec',
    'Handler',
    'TopicRegistry',
    'SyncDelivery',
    'QueuedDelivery',
    'WebsocketSupervisor',
    'default_connect',
]
