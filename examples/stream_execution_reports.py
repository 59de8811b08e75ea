#!/usr/bin/env python3
"""
Execution report stream example

Connects to the Versifi stream, subscribes to execution reports and
prints every order update until interrupted.

Usage:
    cp config.example.yaml config.yaml
    python examples/stream_execution_reports.py
"""

import asyncio
import signal

from versifi import ExecutionReport, VersifiPrivateWebsocket, load_config
from versifi.infrastructure.logging import HFTLogger, configure_logging, get_logger


async def main():
    config = load_config()
    if config.logging:
        configure_logging(config.logging)
    logger = get_logger('versifi.examples.stream')

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    def on_report(report: ExecutionReport) -> None:
        detail = report.detail
        logger.info("Execution report",
                    order_id=detail.order_id,
                    status=detail.status.value,
                    order_type=detail.order_type,
                    kind=detail.request_order_type.value,
                    order=detail.decode_order())

    async def on_reconnect() -> None:
        logger.warning("Stream reconnected")

    async with VersifiPrivateWebsocket.from_config(config, on_reconnect=on_reconnect) as ws:
        await ws.subscribe_execution_report(on_report, typed=True)
        logger.info("Listening for execution reports", url=config.websocket.url)
        await stop.wait()

    await HFTLogger.shutdown_all()


if __name__ == "__main__":
    asyncio.run(main())
