"""Shared enumerations used across the gateway models."""

from __future__ import annotations

from enum import StrEnum


class OrderSide(StrEnum):
    """Direction of a submitted trade intent."""

    BUY = "buy"
    SELL = "sell"


class OrderType(StrEnum):
    """Execution style of a submitted trade intent."""

    MARKET = "market"
    LIMIT = "limit"


class OrderStatus(StrEnum):
    """Lifecycle states of an order log entry.

    Only ``OPEN`` is ever assigned while the trade path is a stub.
    """

    OPEN = "open"
    FILLED = "filled"
    CANCELLED = "cancelled"


class PositionSide(StrEnum):
    LONG = "long"
    SHORT = "short"
