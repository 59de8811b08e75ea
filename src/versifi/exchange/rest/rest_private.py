"""
Versifi Private REST API Implementation

Order management endpoints of the Versifi execution API.

Key Features:
- Basic, algorithmic (TWAP/VWAP/IS) and pair (BASIS) order placement
- Single and batch cancellation
- Order detail lookup with child orders and trades
- Order listing with optional pagination and status filter

Versifi Private API Specifications:
- Base URL: https://api.versifi.io
- Authentication: HMAC-SHA256, X-VERSIFI-API-KEY / X-VERSIFI-API-SIGN headers
- Signed payload: query string for GET/DELETE, JSON body for POST/PUT

Threading: Fully async/await compatible
"""

from typing import Any, Dict, Iterable, List, Optional, Union

from versifi.config.structs import Credentials, RestConfig, VersifiConfig
from versifi.exchange.structs import (
    AlgoOrderRequest, AlgoOrderType, BasicOrderRequest, BasicOrderType, CancelBatchRequest,
    ExchangeType, GetOrderResponse, ListOrderItem, OrderResponse, OrderStatus, PairLeg,
    PairOrderLead, PairOrderRequest, PairOrderType, PairStyle, Side, TimeInForce,
)
from versifi.infrastructure.logging import HFTLoggerInterface, get_exchange_logger
from versifi.infrastructure.networking.http import RestClient

Decimalish = Union[str, int, float]


def _decimal(value: Optional[Decimalish]) -> Optional[str]:
    """Prices and quantities are sent as decimal strings."""
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


class VersifiPrivateRest:
    """
    Versifi private REST client for order operations.

    Every call is signed. Errors propagate as ``VersifiAPIError`` (venue
    error body) or ``ExchangeRestError`` subclasses; nothing is retried.
    """

    def __init__(self, config: RestConfig, credentials: Credentials,
                 logger: Optional[HFTLoggerInterface] = None):
        self.logger = logger or get_exchange_logger('versifi', 'rest.private')
        self._client = RestClient(config, credentials, logger=self.logger)

    @classmethod
    def from_config(cls, config: VersifiConfig,
                    logger: Optional[HFTLoggerInterface] = None) -> 'VersifiPrivateRest':
        return cls(config.rest, config.credentials, logger=logger)

    @property
    def client(self) -> RestClient:
        return self._client

    async def __aenter__(self):
        await self._client.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        await self._client.close()

    # Order placement

    async def create_algo_order(
        self,
        exchange: ExchangeType,
        symbol: str,
        side: Side,
        order_type: AlgoOrderType,
        quantity: Decimalish,
        params: Optional[Dict[str, Any]] = None,
        client_order_id: Optional[int] = None,
    ) -> OrderResponse:
        """
        Place an algorithmic order.

        Args:
            exchange: Venue to execute on
            symbol: Trading symbol, e.g. ``BTC/USDT``
            side: BUY or SELL
            order_type: TWAP, VWAP or IS
            quantity: Total quantity to work
            params: Algorithm parameters (duration, slices, ...)
            client_order_id: Caller-assigned id

        Returns:
            OrderResponse acknowledgement
        """
        request = AlgoOrderRequest(
            exchange=exchange,
            order_type=order_type,
            quantity=_decimal(quantity),
            side=side,
            symbol=symbol,
            client_order_id=client_order_id,
            params=params,
        )
        response = await self._client.post('/v2/orders/algo/', json_data=request,
                                           response_type=OrderResponse)
        self.logger.audit("algo_order_placed",
                          order_id=response.order_id,
                          order_type=order_type.value,
                          symbol=symbol,
                          side=side.value,
                          status=response.status.value)
        return response

    async def create_basic_order(
        self,
        exchange: ExchangeType,
        symbol: str,
        side: Side,
        order_type: BasicOrderType,
        quantity: Decimalish,
        price: Optional[Decimalish] = None,
        stop_price: Optional[Decimalish] = None,
        time_in_force: Optional[TimeInForce] = None,
        trailing_delta: Optional[Decimalish] = None,
        start_time: Optional[int] = None,
        client_order_id: Optional[int] = None,
    ) -> OrderResponse:
        """
        Place a basic (exchange-native) order.

        ``price`` is required by the venue for LIMIT-family orders and
        ``stop_price`` for STOP/TAKE_PROFIT orders; validation is left to
        the venue.
        """
        request = BasicOrderRequest(
            exchange=exchange,
            order_type=order_type,
            quantity=_decimal(quantity),
            side=side,
            symbol=symbol,
            client_order_id=client_order_id,
            price=_decimal(price),
            start_time=start_time,
            stop_price=_decimal(stop_price),
            tif=time_in_force,
            trailing_delta=_decimal(trailing_delta),
        )
        response = await self._client.post('/v2/orders/basic/', json_data=request,
                                           response_type=OrderResponse)
        self.logger.audit("basic_order_placed",
                          order_id=response.order_id,
                          order_type=order_type.value,
                          symbol=symbol,
                          side=side.value,
                          status=response.status.value)
        return response

    async def create_pair_order(
        self,
        lead: PairLeg,
        secondary: Optional[PairLeg] = None,
        order_type: PairOrderType = PairOrderType.BASIS,
        params: Optional[Dict[str, Any]] = None,
        style: Optional[PairStyle] = None,
        client_order_id: Optional[int] = None,
    ) -> OrderResponse:
        """
        Place a pair order.

        The lead leg's exchange, symbol and ratio are sent inside the ``lead``
        object next to the algorithm type; its params are merged over
        ``params``. The secondary leg is sent as given.
        """
        request = PairOrderRequest(
            lead=PairOrderLead.build(order_type, params, lead),
            client_order_id=client_order_id,
            secondary=secondary,
            style=style,
        )
        response = await self._client.post('/v2/orders/pair/', json_data=request,
                                           response_type=OrderResponse)
        self.logger.audit("pair_order_placed",
                          order_id=response.order_id,
                          lead_symbol=lead.symbol,
                          secondary_symbol=secondary.symbol if secondary else None,
                          status=response.status.value)
        return response

    # Cancellation

    async def cancel_order(self, order_id: int) -> None:
        """Cancel one order. The venue answers 204 with no body."""
        await self._client.delete(f'/v2/orders/{order_id}')
        self.logger.audit("order_cancelled", order_id=order_id)

    async def cancel_orders(self, order_ids: Iterable[int]) -> None:
        """Cancel several orders in one request."""
        ids = list(order_ids)
        if not ids:
            raise ValueError("order_ids must not be empty")
        await self._client.delete('/v2/orders/batch', json_data=CancelBatchRequest(ids=ids))
        self.logger.audit("orders_cancelled", order_ids=ids)

    # Queries

    async def get_order(self, order_id: int) -> GetOrderResponse:
        return await self._client.get(f'/v2/orders/{order_id}', response_type=GetOrderResponse)

    async def list_orders(
        self,
        limit: int = 0,
        offset: int = 0,
        status: Optional[OrderStatus] = None,
    ) -> List[ListOrderItem]:
        """
        List orders, newest first.

        Only parameters that are set are sent: ``limit``/``offset`` when
        positive, ``status`` when given.
        """
        params: Dict[str, Any] = {}
        if limit > 0:
            params['limit'] = limit
        if offset > 0:
            params['offset'] = offset
        if status is not None:
            params['status'] = status.value

        orders = await self._client.get('/v2/orders', params=params or None,
                                        response_type=List[ListOrderItem])
        self.logger.debug("Listed orders", count=len(orders))
        return orders
