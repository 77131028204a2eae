"""Dict-based data contracts for market rows and their upstream inputs."""

from __future__ import annotations

from typing import TypedDict


class Instrument(TypedDict):
    """Instrument metadata as listed by ``orderBookDetails``."""

    symbol: str
    market_id: int
    status: str
    taker_fee: str
    maker_fee: str
    open_interest: float


class ExchangeStat(TypedDict):
    """24h statistics for one symbol from ``exchangeStats``."""

    symbol: str
    last_trade_price: float
    daily_price_change: float
    daily_base_token_volume: float
    daily_quote_token_volume: float


class MarketRow(TypedDict):
    """Instrument metadata joined with stats and funding on symbol."""

    symbol: str
    market_id: int
    status: str
    taker_fee: str
    maker_fee: str
    open_interest: float

    index_price: float
    mark_price: float
    change_24h_pct: float

    open_interest_usd: float
    volume_24h_usd: float
    funding_rate_8h: float


class MarketsMessage(TypedDict):
    """Payload of a single ``/ws/markets`` frame."""

    markets: list[MarketRow]
