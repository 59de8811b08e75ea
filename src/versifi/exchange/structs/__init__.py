from .enums import (
    Side,
    ExchangeType,
    AlgoOrderType,
    BasicOrderType,
    PairOrderType,
    TimeInForce,
    OrderStatus,
    PairStyle,
    RequestOrderType,
)
from .common import (
    AlgoOrderRequest,
    BasicOrderRequest,
    PairLeg,
    PairOrderLead,
    PairOrderRequest,
    CancelBatchRequest,
    LegResponse,
    OrderResponse,
    Trade,
    ChildOrder,
    AlgoOrderDetail,
    BasicOrderDetail,
    PairLegDetail,
    PairOrderDetail,
    GetOrderResponse,
    ListOrderItem,
)
from .execution import (
    WsTrade,
    WsChildOrder,
    WsBasicOrderDetail,
    WsAlgoOrderDetail,
    WsPairLeg,
    WsPairOrderDetail,
    WsOrderDetail,
    ExecutionReportDetail,
    ExecutionReport,
    WsEnvelope,
    decode_execution_report,
    decode_envelope,
)

__all__ = [
    "Side",
    "ExchangeType",
    "AlgoOrderType",
    "BasicOrderType",
    "PairOrderType",
    "TimeInForce",
    "OrderStatus",
    "PairStyle",
    "RequestOrderType",
    "AlgoOrderRequest",
    "BasicOrderRequest",
    "PairLeg",
    "PairOrderLead",
    "PairOrderRequest",
    "CancelBatchRequest",
    "LegResponse",
    "OrderResponse",
    "Trade",
    "ChildOrder",
    "AlgoOrderDetail",
    "BasicOrderDetail",
    "PairLegDetail",
    "PairOrderDetail",
    "GetOrderResponse",
    "ListOrderItem",
    "WsTrade",
    "WsChildOrder",
    "WsBasicOrderDetail",
    "WsAlgoOrderDetail",
    "WsPairLeg",
    "WsPairOrderDetail",
    "WsOrderDetail",
    "ExecutionReportDetail",
    "ExecutionReport",
    "WsEnvelope",
    "decode_execution_report",
    "decode_envelope",
]
