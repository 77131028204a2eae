"""Domain models for the gateway."""

from .account import (
    Account,
    AccountByL1Response,
    AccountPosition,
    AccountSummary,
    PositionRow,
    SubAccount,
)
from .markets import ExchangeStat, Instrument, MarketRow, MarketsMessage
from .orders import OrderAck, OrderIntent, OrderRow
from .shared import OrderSide, OrderStatus, OrderType, PositionSide

__all__ = [
    "Account",
    "AccountByL1Response",
    "AccountPosition",
    "AccountSummary",
    "PositionRow",
    "SubAccount",
    "ExchangeStat",
    "Instrument",
    "MarketRow",
    "MarketsMessage",
    "OrderAck",
    "OrderIntent",
    "OrderRow",
    "OrderSide",
    "OrderStatus",
    "OrderType",
    "PositionSide",
]
