#!/usr/bin/env python3
"""
Order services example

Places a TWAP order and a basis pair order, lists open orders and
cancels what was placed.

Usage:
    python examples/place_orders.py
"""

import asyncio

from versifi import VersifiAPIError, VersifiPrivateRest, load_config
from versifi.exchange.structs import AlgoOrderType, ExchangeType, OrderStatus, PairLeg, Side
from versifi.infrastructure.logging import HFTLogger, get_logger

logger = get_logger('versifi.examples.orders')


async def main():
    config = load_config()

    async with VersifiPrivateRest.from_config(config) as rest:
        twap = await rest.create_algo_order(
            exchange=ExchangeType.BINANCE_SPOT,
            symbol="BTC/USDT",
            side=Side.BUY,
            order_type=AlgoOrderType.TWAP,
            quantity="0.5",
            params={"duration": 3600},
        )

        pair = await rest.create_pair_order(
            lead=PairLeg(exchange=ExchangeType.BINANCE_SPOT, symbol="BTC/USDT", leg_ratio=1.0),
            secondary=PairLeg(exchange=ExchangeType.BINANCE_FUTURES, symbol="BTC/USDT", leg_ratio=1.0),
            params={"spread": "0.002"},
        )

        for item in await rest.list_orders(limit=20, status=OrderStatus.NEW):
            logger.info("Open order", order_id=item.order_id, status=item.status,
                        kind=item.request_order_type)

        try:
            await rest.cancel_orders([twap.order_id, pair.order_id])
        except VersifiAPIError as e:
            logger.error("Batch cancel failed", status=e.status_code, api_code=e.api_code, message=e.message)

    await HFTLogger.shutdown_all()


if __name__ == "__main__":
    asyncio.run(main())
