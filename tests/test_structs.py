"""
Order and execution report structure tests.
"""

import msgspec
import pytest

from versifi.exchange.structs import (
    AlgoOrderRequest, AlgoOrderType, BasicOrderRequest, BasicOrderType, CancelBatchRequest,
    ExchangeType, ExecutionReport, GetOrderResponse, OrderStatus, PairLeg, PairOrderLead,
    PairOrderType, RequestOrderType, Side, WsAlgoOrderDetail, WsPairOrderDetail,
    decode_envelope, decode_execution_report,
)
from versifi.infrastructure.exceptions import ProtocolError


def encode(obj) -> dict:
    return msgspec.json.decode(msgspec.json.encode(obj))


class TestRequests:

    def test_unset_optionals_are_omitted(self):
        request = BasicOrderRequest(
            exchange=ExchangeType.OKX_SPOT,
            order_type=BasicOrderType.MARKET,
            quantity="1",
            side=Side.SELL,
            symbol="ETH/USDT",
        )
        assert encode(request) == {
            "exchange": "OKX_SPOT",
            "order_type": "MARKET",
            "quantity": "1",
            "side": "SELL",
            "symbol": "ETH/USDT",
        }

    def test_algo_request_params(self):
        request = AlgoOrderRequest(
            exchange=ExchangeType.BINANCE_FUTURES,
            order_type=AlgoOrderType.IS,
            quantity="3",
            side=Side.BUY,
            symbol="BTC/USDT",
            params={"urgency": "high"},
        )
        assert encode(request)["params"] == {"urgency": "high"}

    def test_cancel_batch(self):
        assert encode(CancelBatchRequest(ids=[4, 5])) == {"ids": [4, 5]}


class TestPairOrderLead:

    def test_without_lead_leg(self):
        lead = PairOrderLead.build(PairOrderType.BASIS, {"spread": "0.1"})
        assert encode(lead) == {"order_type": "BASIS", "params": {"spread": "0.1"}}

    def test_leg_params_win(self):
        leg = PairLeg(exchange=ExchangeType.OKX_FUTURES, symbol="ETH/USDT", leg_ratio=2.0,
                      params={"spread": "0.5", "extra": True})
        order_params = {"spread": "0.1"}

        lead = PairOrderLead.build(PairOrderType.BASIS, order_params, leg)

        assert lead.params == {"spread": "0.5", "extra": True}
        assert lead.exchange is ExchangeType.OKX_FUTURES
        assert lead.symbol == "ETH/USDT"
        assert lead.leg_ratio == 2.0
        assert order_params == {"spread": "0.1"}  # caller's dict untouched

    def test_leg_without_params_keeps_order_params(self):
        leg = PairLeg(exchange=ExchangeType.BINANCE_SPOT, symbol="BTC/USDT")
        lead = PairOrderLead.build(PairOrderType.BASIS, None, leg)
        assert encode(lead) == {"order_type": "BASIS", "exchange": "BINANCE_SPOT", "symbol": "BTC/USDT"}


class TestGetOrderResponse:

    def test_algo_detail_selected(self):
        raw = msgspec.json.encode({
            "order_id": 1, "client_order_id": 2, "order_type": "TWAP", "status": "NEW",
            "timestamp": 3, "request_order_type": "algo",
            "algo_order": {"exchange": "BINANCE_SPOT", "order_type": "TWAP", "quantity": "10",
                           "side": "BUY", "symbol": "BTC/USDT",
                           "order_params": {"duration": 60}, "tif": "GTC"},
        })
        response = msgspec.json.decode(raw, type=GetOrderResponse)

        assert response.detail is response.algo_order
        assert response.algo_order.order_params == {"duration": 60}
        assert response.basic_order is None

    def test_unknown_status_rejected(self):
        raw = b'{"order_id":1,"client_order_id":2,"order_type":"X","status":"OPEN","timestamp":3,"request_order_type":"basic"}'
        with pytest.raises(msgspec.ValidationError):
            msgspec.json.decode(raw, type=GetOrderResponse)


class TestExecutionReport:

    def test_algo_order_payload(self):
        raw = msgspec.json.encode({
            "op": "execution_report",
            "success": True,
            "message": {
                "order_id": 5, "client_order_id": 0, "order_type": "VWAP", "status": "FILLED",
                "timestamp": 1700000000000, "request_order_type": "algo",
                "order": {"id": 5, "exchange": "OKX_SPOT", "order_type": "VWAP", "quantity": "2",
                          "side": "SELL", "symbol": "ETH/USDT", "order_params": {"window": 300},
                          "child_order": {"id": 8, "trades": []}},
            },
        })

        report = decode_execution_report(raw)

        assert isinstance(report, ExecutionReport)
        assert report.success is True
        assert report.detail.status is OrderStatus.FILLED
        order = report.detail.decode_order()
        assert isinstance(order, WsAlgoOrderDetail)
        assert order.order_type is AlgoOrderType.VWAP
        assert order.child_order.id == 8

    def test_pair_order_payload(self):
        raw = msgspec.json.encode({
            "op": "execution_report",
            "message": {
                "order_id": 6, "client_order_id": 0, "order_type": "BASIS", "status": "NEW",
                "timestamp": 1, "request_order_type": "pair",
                "order": {
                    "params": {"spread": "0.002"},
                    "lead_leg": {"symbol": "BTC/USDT", "exchange": "BINANCE_SPOT", "leg_ratio": 1,
                                 "child_order": {"id": 1, "trades": [
                                     {"trade_id": 1, "order_id": 6, "leg_id": 11,
                                      "executed_price": "100", "executed_quantity": "1"}]}},
                    "leg": {"symbol": "BTC/USDT", "exchange": "BINANCE_FUTURES", "leg_ratio": 1},
                },
            },
        })

        order = decode_execution_report(raw).detail.decode_order()

        assert isinstance(order, WsPairOrderDetail)
        assert order.lead_leg.child_order.trades[0].leg_id == 11
        assert order.leg.exchange is ExchangeType.BINANCE_FUTURES

    def test_missing_order_payload(self):
        raw = (b'{"op":"execution_report","success":true,"message":{"order_id":1,"client_order_id":1,'
               b'"order_type":"LIMIT","status":"CANCELED","timestamp":1,"request_order_type":"basic"}}')
        report = decode_execution_report(raw)
        assert report.detail.request_order_type is RequestOrderType.BASIC
        assert report.detail.decode_order() is None

    def test_order_payload_shape_mismatch(self):
        raw = (b'{"op":"execution_report","message":{"order_id":1,"client_order_id":1,'
               b'"order_type":"LIMIT","status":"NEW","timestamp":1,"request_order_type":"basic",'
               b'"order":{"unexpected":true}}}')
        with pytest.raises(ProtocolError):
            decode_execution_report(raw).detail.decode_order()

    def test_not_an_execution_report(self):
        with pytest.raises(ProtocolError):
            decode_execution_report(b'{"op":"analytics","message":{"pnl":"1"}}')

    def test_envelope_keeps_payload_raw(self):
        envelope = decode_envelope('{"op":"analytics","success":true,"message":{"pnl":"1"}}')
        assert envelope.op == "analytics"
        assert msgspec.json.decode(envelope.message) == {"pnl": "1"}
