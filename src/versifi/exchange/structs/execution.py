"""
Execution report structures delivered on the ``execution_report`` topic.

The ``order`` payload changes shape with ``request_order_type``, so it is
kept as ``msgspec.Raw`` and decoded on demand by
``ExecutionReportDetail.decode_order``.
"""

from typing import Any, Optional, List, Union

import msgspec
from msgspec import Struct

from versifi.infrastructure.exceptions.websocket import ProtocolError
from versifi.infrastructure.networking.websocket.structs import Envelope
from .enums import (
    AlgoOrderType, BasicOrderType, ExchangeType, OrderStatus, RequestOrderType, Side,
)


class WsTrade(Struct, frozen=True):
    trade_id: int
    order_id: int
    executed_price: str
    executed_quantity: str
    average_price: str = ""
    # venue spelling
    cummulative_filled_quantity: str = ""
    leg_id: Optional[int] = None  # pair orders only


class WsChildOrder(Struct, frozen=True):
    id: int
    trades: List[WsTrade] = []


class WsBasicOrderDetail(Struct, frozen=True):
    symbol: str
    exchange: ExchangeType
    quantity: str
    side: Side
    order_type: BasicOrderType
    client_order_id: int = 0
    quote_order_quantity: str = ""
    stop_price: str = ""
    price: str = ""
    child_order: Optional[WsChildOrder] = None


class WsAlgoOrderDetail(Struct, frozen=True):
    id: int
    exchange: ExchangeType
    order_type: AlgoOrderType
    quantity: str
    side: Side
    symbol: str
    quote_order_quantity: str = ""
    order_params: Any = None
    child_order: Optional[WsChildOrder] = None


class WsPairLeg(Struct, frozen=True):
    symbol: str
    exchange: ExchangeType
    order_type: str = ""
    leg_ratio: float = 0.0
    max_position_long: str = ""
    max_position_short: str = ""
    max_notional_long: str = ""
    max_notional_short: str = ""
    child_order: Optional[WsChildOrder] = None


class WsPairOrderDetail(Struct, frozen=True):
    params: Any = None
    lead_leg: Optional[WsPairLeg] = None
    leg: Optional[WsPairLeg] = None


# Generic business frame with the payload left undecoded
WsEnvelope = Envelope

WsOrderDetail = Union[WsBasicOrderDetail, WsAlgoOrderDetail, WsPairOrderDetail]

_ORDER_DETAIL_TYPES = {
    RequestOrderType.BASIC: WsBasicOrderDetail,
    RequestOrderType.ALGO: WsAlgoOrderDetail,
    RequestOrderType.PAIR: WsPairOrderDetail,
}


class ExecutionReportDetail(Struct, frozen=True):
    order_id: int
    client_order_id: int
    order_type: str
    status: OrderStatus
    timestamp: int
    request_order_type: RequestOrderType
    order: msgspec.Raw = msgspec.field(default_factory=msgspec.Raw)

    def decode_order(self) -> Optional[WsOrderDetail]:
        """
        Decode the order payload into the struct for ``request_order_type``.

        Returns None when the frame carried no order payload.

        Raises:
            ProtocolError: payload does not match the expected shape
        """
        raw = bytes(self.order)
        if not raw or raw == b"null":
            return None
        detail_type = _ORDER_DETAIL_TYPES[self.request_order_type]
        try:
            return msgspec.json.decode(raw, type=detail_type)
        except msgspec.DecodeError as e:
            raise ProtocolError(f"Invalid {self.request_order_type.value} order payload: {e}", raw) from e


class ExecutionReport(Struct, frozen=True):
    """One ``execution_report`` frame."""
    op: str
    message: ExecutionReportDetail
    success: bool = False

    @property
    def detail(self) -> ExecutionReportDetail:
        return self.message


_execution_report_decoder = msgspec.json.Decoder(ExecutionReport)
_envelope_decoder = msgspec.json.Decoder(WsEnvelope)


def decode_execution_report(raw: Union[bytes, str]) -> ExecutionReport:
    """
    Decode a raw ``execution_report`` frame as handed to topic handlers.

    Raises:
        ProtocolError: malformed JSON or a frame that is not an execution report
    """
    try:
        return _execution_report_decoder.decode(raw)
    except msgspec.DecodeError as e:
        raw_bytes = raw.encode('utf-8') if isinstance(raw, str) else bytes(raw)
        raise ProtocolError(f"Invalid execution report: {e}", raw_bytes) from e


def decode_envelope(raw: Union[bytes, str]) -> WsEnvelope:
    try:
        return _envelope_decoder.decode(raw)
    except msgspec.DecodeError as e:
        raw_bytes = raw.encode('utf-8') if isinstance(raw, str) else bytes(raw)
        raise ProtocolError(f"Invalid frame: {e}", raw_bytes) from e
