import time
from typing import Callable, List, Optional, Union

import msgspec

from versifi.infrastructure.exceptions.websocket import ProtocolError
from versifi.infrastructure.networking.http.signer import Signer
from .structs import (
    Envelope, ControlFrame, InboundMessage,
    AuthReply, PingReply, SubscribeAck, BusinessMessage, UnknownMessage,
    OP_AUTH, OP_PING, OP_SUBSCRIBE, BUSINESS_TOPICS,
)

AUTH_PAYLOAD_PREFIX = "GET/realtime"


class AuthChallenge(msgspec.Struct, frozen=True):
    """Signed expiry proving key ownership during the streaming handshake."""
    expires: int
    signature: str

    @staticmethod
    def payload(expires: int) -> str:
        """Signed text: the prefix immediately followed by the decimal expiry."""
        return f"{AUTH_PAYLOAD_PREFIX}{expires}"

    @classmethod
    def create(cls, signer: Signer, lead_seconds: int, now: Optional[float] = None) -> 'AuthChallenge':
        if lead_seconds <= 0:
            raise ValueError("lead_seconds must be positive")
        now = time.time() if now is None else now
        expires = int(now) + lead_seconds
        return cls(expires=expires, signature=signer.sign(cls.payload(expires)))

    def args(self, api_key: str) -> List[str]:
        return [api_key, str(self.expires), self.signature]


class FrameCodec:
    """
    Wire codec for the streaming protocol.

    Outbound frames are compact JSON text; inbound frames decode into an
    Envelope and are then classified into the InboundMessage union.
    """

    __slots__ = ('_encoder', '_decoder')

    def __init__(self):
        self._encoder = msgspec.json.Encoder()
        self._decoder = msgspec.json.Decoder(Envelope)

    def encode(self, op: str, args: Optional[list] = None) -> bytes:
        return self._encoder.encode(ControlFrame(op=op, args=args))

    def encode_auth(self, api_key: str, challenge: AuthChallenge) -> bytes:
        return self.encode(OP_AUTH, challenge.args(api_key))

    def encode_subscribe(self, topic: str) -> bytes:
        return self.encode(OP_SUBSCRIBE, [topic])

    def encode_ping(self) -> bytes:
        return self.encode(OP_PING)

    def encode_json(self, obj) -> bytes:
        return self._encoder.encode(obj)

    def decode(self, raw: Union[bytes, str]) -> Envelope:
        """
        Decode one inbound frame.

        Raises:
            ProtocolError: malformed JSON, non-object frame or missing ``op``
        """
        try:
            return self._decoder.decode(raw)
        except msgspec.DecodeError as e:
            raw_bytes = raw.encode('utf-8') if isinstance(raw, str) else bytes(raw)
            raise ProtocolError(f"Malformed frame: {e}", raw_bytes) from e

    def classify(self, raw: Union[bytes, str],
                 is_registered: Optional[Callable[[str], bool]] = None) -> InboundMessage:
        """
        Decode and classify a frame.

        An operation is a business message when it is a known venue topic or
        when a handler is registered for it; anything else is UnknownMessage.
        """
        if isinstance(raw, str):
            raw = raw.encode('utf-8')
        envelope = self.decode(raw)
        op = envelope.op

        if op == OP_AUTH:
            return AuthReply(success=envelope.success, message=envelope.message, raw=raw)
        if op == OP_PING:
            return PingReply(raw=raw)
        if op == OP_SUBSCRIBE:
            return SubscribeAck(success=envelope.success, message=envelope.message, raw=raw)
        if op in BUSINESS_TOPICS or (is_registered is not None and is_registered(op)):
            return BusinessMessage(topic=op, success=envelope.success, message=envelope.message, raw=raw)
        return UnknownMessage(op=op, raw=raw)
