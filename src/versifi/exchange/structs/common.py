"""
Order request and response structures for the REST order services.

Requests are encoded with ``omit_defaults`` so that optional fields left
unset never reach the wire. Prices and quantities travel as decimal strings
and are kept as strings here; converting them is left to the caller.
"""

from typing import Any, Dict, List, Optional

import msgspec
from msgspec import Struct

from .enums import (
    AlgoOrderType, BasicOrderType, ExchangeType, OrderStatus, PairOrderType,
    PairStyle, RequestOrderType, Side, TimeInForce,
)


# Requests

class AlgoOrderRequest(Struct, frozen=True, omit_defaults=True):
    """Body of POST /v2/orders/algo/."""
    exchange: ExchangeType
    order_type: AlgoOrderType
    quantity: str
    side: Side
    symbol: str
    client_order_id: Optional[int] = None
    params: Optional[Dict[str, Any]] = None


class BasicOrderRequest(Struct, frozen=True, omit_defaults=True):
    """Body of POST /v2/orders/basic/."""
    exchange: ExchangeType
    order_type: BasicOrderType
    quantity: str
    side: Side
    symbol: str
    client_order_id: Optional[int] = None
    price: Optional[str] = None
    start_time: Optional[int] = None
    stop_price: Optional[str] = None
    tif: Optional[TimeInForce] = None
    trailing_delta: Optional[str] = None


class PairLeg(Struct, frozen=True, omit_defaults=True):
    """One leg of a pair order."""
    exchange: ExchangeType
    symbol: str
    order_type: Optional[str] = None
    leg_ratio: Optional[float] = None
    max_position_long: Optional[str] = None
    max_position_short: Optional[str] = None
    max_notional_long: Optional[str] = None
    max_notional_short: Optional[str] = None
    params: Optional[Dict[str, Any]] = None


class PairOrderLead(Struct, frozen=True, omit_defaults=True):
    """Lead object of a pair order: algorithm type plus the lead leg's venue fields."""
    order_type: PairOrderType
    params: Optional[Dict[str, Any]] = None
    exchange: Optional[ExchangeType] = None
    symbol: Optional[str] = None
    leg_ratio: Optional[float] = None

    @classmethod
    def build(cls, order_type: PairOrderType,
              params: Optional[Dict[str, Any]] = None,
              lead: Optional[PairLeg] = None) -> 'PairOrderLead':
        """
        Merge the lead leg into the lead object.

        The leg's exchange, symbol and ratio are copied over and its params
        are merged on top of the order-level params (leg wins on conflicts).
        """
        if lead is None:
            return cls(order_type=order_type, params=params)

        merged = params
        if lead.params is not None:
            merged = dict(params or {})
            merged.update(lead.params)

        return cls(
            order_type=order_type,
            params=merged,
            exchange=lead.exchange,
            symbol=lead.symbol,
            leg_ratio=lead.leg_ratio,
        )


class PairOrderRequest(Struct, frozen=True, omit_defaults=True):
    """Body of POST /v2/orders/pair/."""
    lead: PairOrderLead
    client_order_id: Optional[int] = None
    secondary: Optional[PairLeg] = None
    style: Optional[PairStyle] = None


class CancelBatchRequest(Struct, frozen=True):
    """Body of DELETE /v2/orders/batch."""
    ids: List[int]


# Responses

class LegResponse(Struct, frozen=True):
    leg_id: int
    status: OrderStatus


class OrderResponse(Struct, frozen=True):
    """Acknowledgement returned by every create endpoint."""
    order_id: int
    client_order_id: int
    status: OrderStatus
    lead: Optional[LegResponse] = None
    secondary: Optional[LegResponse] = None


class Trade(Struct, frozen=True):
    """Fill on a child order."""
    trade_id: int
    order_id: int
    child_order_id: int
    exchange_trade_id: str
    exchange: ExchangeType
    symbol: str
    price: str
    quantity: str
    side: Side
    fee: str
    leg_id: int = 0


class ChildOrder(Struct, frozen=True):
    """Venue order spawned by a parent order."""
    id: int = 0
    child_order_id: int = 0
    order_id: int = 0
    exchange: Optional[ExchangeType] = None
    exchange_order_id: str = ""
    symbol: str = ""
    order_type: str = ""
    price: str = ""
    quantity: str = ""
    side: Optional[Side] = None
    order_status: Optional[OrderStatus] = None
    average_price: str = ""
    filled_quantity: str = ""
    reject_reason: str = ""
    leg_id: int = 0
    trades: List[Trade] = []


class AlgoOrderDetail(Struct, frozen=True):
    exchange: ExchangeType
    order_type: AlgoOrderType
    quantity: str
    side: Side
    symbol: str
    quote_order_quantity: str = ""
    order_params: Optional[Dict[str, Any]] = None
    average_price: str = ""
    filled_quantity: str = ""
    reject_reason: str = ""
    tif: Optional[TimeInForce] = None
    child_orders: List[ChildOrder] = []


class BasicOrderDetail(Struct, frozen=True):
    exchange: ExchangeType
    order_type: BasicOrderType
    quantity: str
    side: Side
    symbol: str
    price: str = ""
    quote_order_quantity: str = ""
    stop_price: str = ""
    tif: Optional[TimeInForce] = None
    trailing_delta: str = ""
    average_price: str = ""
    filled_quantity: str = ""
    reject_reason: str = ""
    child_orders: List[ChildOrder] = []


class PairLegDetail(Struct, frozen=True):
    symbol: str
    exchange: ExchangeType
    order_type: str = ""
    leg_ratio: float = 0.0
    max_position_long: str = ""
    max_position_short: str = ""
    max_notional_long: str = ""
    max_notional_short: str = ""
    # the venue names this list in the singular
    child_orders: List[ChildOrder] = msgspec.field(default_factory=list, name="child_order")


class PairOrderDetail(Struct, frozen=True):
    lead_leg: Optional[PairLegDetail] = None
    secondary: Optional[PairLegDetail] = msgspec.field(default=None, name="leg")
    params: Optional[Dict[str, Any]] = None
    reject_reason: str = ""
    style: Optional[PairStyle] = None


class GetOrderResponse(Struct, frozen=True):
    """Full order state from GET /v2/orders/{id}; one of the detail fields is set."""
    order_id: int
    client_order_id: int
    order_type: str
    status: OrderStatus
    timestamp: int
    request_order_type: RequestOrderType
    algo_order: Optional[AlgoOrderDetail] = None
    basic_order: Optional[BasicOrderDetail] = None
    pair_order: Optional[PairOrderDetail] = None

    @property
    def detail(self):
        """The detail matching ``request_order_type``, or None if absent."""
        if self.request_order_type is RequestOrderType.ALGO:
            return self.algo_order
        if self.request_order_type is RequestOrderType.BASIC:
            return self.basic_order
        return self.pair_order


class ListOrderItem(Struct, frozen=True):
    order_id: int
    client_order_id: int
    status: str
    timestamp: int
    request_order_type: str
    reject_reason: str = ""
