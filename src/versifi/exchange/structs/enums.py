from enum import Enum


class Side(Enum):
    """Order side."""
    BUY = "BUY"
    SELL = "SELL"


class ExchangeType(Enum):
    """
    Venue an order is routed to.

    Semantic Format: <EXCHANGE>_<MARKET_TYPE>
    """
    BINANCE_SPOT = "BINANCE_SPOT"
    BINANCE_FUTURES = "BINANCE_FUTURES"
    OKX_SPOT = "OKX_SPOT"
    OKX_FUTURES = "OKX_FUTURES"


class AlgoOrderType(Enum):
    """Execution algorithms."""
    TWAP = "TWAP"
    VWAP = "VWAP"
    IS = "IS"  # Implementation Shortfall


class BasicOrderType(Enum):
    MARKET = "MARKET"
    LIMIT = "LIMIT"
    STOP = "STOP"
    STOP_LOSS = "STOP_LOSS"
    STOP_LOSS_LIMIT = "STOP_LOSS_LIMIT"
    TAKE_PROFIT = "TAKE_PROFIT"
    TAKE_PROFIT_LIMIT = "TAKE_PROFIT_LIMIT"
    LIMIT_MAKER = "LIMIT_MAKER"


class PairOrderType(Enum):
    BASIS = "BASIS"


class TimeInForce(Enum):
    """Time in force for orders."""
    FOK = "FOK"  # Fill or Kill
    GTC = "GTC"  # Good Till Cancelled
    GTD = "GTD"  # Good Till Date
    IOC = "IOC"  # Immediate or Cancel
    GTX = "GTX"
    POST_ON = "POST_ON"


class OrderStatus(Enum):
    """Order execution status."""
    NEW = "NEW"
    PARTIALLY_FILLED = "PARTIALLY_FILLED"
    FILLED = "FILLED"
    CANCELED = "CANCELED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


class PairStyle(Enum):
    """How the two legs of a pair order are worked."""
    SYNC = "SYNC"
    ASYNC = "ASYNC"
    TWAP = "TWAP"


class RequestOrderType(Enum):
    """Order family; selects the shape of the order payload."""
    BASIC = "basic"
    ALGO = "algo"
    PAIR = "pair"
