"""Market aggregation: joins instruments, 24h stats and funding on symbol."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from ..contracts.upstream.interface import UpstreamSource
from ..models.markets import ExchangeStat, Instrument, MarketRow
from .errors import UpstreamError
from .numeric import finite_or_zero, parse_float
from .scope import RequestScope

logger = logging.getLogger(__name__)

DEFAULT_FETCH_WORKERS = 8


class MarketAggregator:
    """Builds merged market rows from three upstream listings.

    Instrument metadata is authoritative for which symbols exist and in what
    order; a failure there fails the call. Stats and funding are fetched
    concurrently and degrade to empty dictionaries when unavailable.
    """

    def __init__(
        self,
        source: UpstreamSource,
        *,
        executor: ThreadPoolExecutor | None = None,
        max_workers: int = DEFAULT_FETCH_WORKERS,
    ) -> None:
        self._source = source
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="lighter-fetch"
        )
        self._owns_executor = executor is None

    def load_merged_markets(self, scope: RequestScope) -> list[MarketRow]:
        """Return one merged row per instrument, in upstream order."""

        stats_future = self._executor.submit(self._source.exchange_stats, scope)
        funding_future = self._executor.submit(self._source.funding_rates, scope)

        try:
            instruments = parse_instruments(self._source.order_book_details(scope))
        except UpstreamError:
            stats_future.cancel()
            funding_future.cancel()
            raise

        stats_by_symbol = _side_result(stats_future, parse_exchange_stats, "exchange stats")
        funding_by_symbol = _side_result(funding_future, parse_funding_rates, "funding rates")
        return merge_market_rows(instruments, stats_by_symbol, funding_by_symbol)

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)


def merge_market_rows(
    instruments: Iterable[Instrument],
    stats_by_symbol: Mapping[str, ExchangeStat],
    funding_by_symbol: Mapping[str, float],
) -> list[MarketRow]:
    rows: list[MarketRow] = []
    for instrument in instruments:
        row: MarketRow = {
            "symbol": instrument["symbol"],
            "market_id": instrument["market_id"],
            "status": instrument["status"],
            "taker_fee": instrument["taker_fee"],
            "maker_fee": instrument["maker_fee"],
            "open_interest": instrument["open_interest"],
            "index_price": 0.0,
            "mark_price": 0.0,
            "change_24h_pct": 0.0,
            "open_interest_usd": 0.0,
            "volume_24h_usd": 0.0,
            "funding_rate_8h": 0.0,
        }

        stat = stats_by_symbol.get(row["symbol"])
        if stat is not None:
            price = stat["last_trade_price"]
            row["index_price"] = price
            row["mark_price"] = price
            row["change_24h_pct"] = stat["daily_price_change"]
            row["volume_24h_usd"] = stat["daily_quote_token_volume"]

        price = effective_price(row)
        row["open_interest_usd"] = finite_or_zero(row["open_interest"] * price) if price != 0 else 0.0

        rate = funding_by_symbol.get(row["symbol"])
        if rate is not None:
            row["funding_rate_8h"] = rate
        rows.append(row)
    return rows


def effective_price(row: MarketRow) -> float:
    """Mark price when set, otherwise the index price."""

    return row["mark_price"] if row["mark_price"] != 0 else row["index_price"]


def price_map(markets: Iterable[MarketRow]) -> dict[str, float]:
    """Map symbol to effective price, skipping symbols without a price."""

    prices: dict[str, float] = {}
    for row in markets:
        price = effective_price(row)
        if price != 0:
            prices[row["symbol"]] = price
    return prices


# ----------------------------------------------------------------------
# Payload parsing
def parse_instruments(payload: Any) -> list[Instrument]:
    entries = _listing(payload, "order_book_details")
    instruments: list[Instrument] = []
    for raw in entries:
        if not isinstance(raw, Mapping):
            raise UpstreamError("orderBookDetails entry is not an object")
        try:
            market_id = int(raw.get("market_id") or 0)
        except (TypeError, ValueError) as exc:
            raise UpstreamError(f"orderBookDetails has invalid market_id: {exc}") from exc
        instruments.append(
            {
                "symbol": str(raw.get("symbol") or ""),
                "market_id": market_id,
                "status": str(raw.get("status") or ""),
                "taker_fee": str(raw.get("taker_fee") or ""),
                "maker_fee": str(raw.get("maker_fee") or ""),
                "open_interest": parse_float(raw.get("open_interest")),
            }
        )
    return instruments


def parse_exchange_stats(payload: Any) -> dict[str, ExchangeStat]:
    stats: dict[str, ExchangeStat] = {}
    for raw in _listing(payload, "order_book_stats"):
        if not isinstance(raw, Mapping):
            continue
        symbol = str(raw.get("symbol") or "")
        stats[symbol] = {
            "symbol": symbol,
            "last_trade_price": parse_float(raw.get("last_trade_price")),
            "daily_price_change": parse_float(raw.get("daily_price_change")),
            "daily_base_token_volume": parse_float(raw.get("daily_base_token_volume")),
            "daily_quote_token_volume": parse_float(raw.get("daily_quote_token_volume")),
        }
    return stats


def parse_funding_rates(payload: Any) -> dict[str, float]:
    """Map symbol to 8h funding rate; the last row for a symbol wins."""

    rates: dict[str, float] = {}
    for raw in _listing(payload, "funding_rates"):
        if not isinstance(raw, Mapping):
            continue
        rates[str(raw.get("symbol") or "")] = parse_float(raw.get("rate"))
    return rates


def _listing(payload: Any, key: str) -> Sequence[Any]:
    if not isinstance(payload, Mapping):
        raise UpstreamError(f"expected JSON object with {key!r}, got {type(payload).__name__}")
    entries = payload.get(key)
    if entries is None:
        return []
    if not isinstance(entries, Sequence) or isinstance(entries, str):
        raise UpstreamError(f"{key!r} must be a list")
    return entries


def _side_result(
    future: Future[Any],
    parser: Callable[[Any], dict[str, Any]],
    label: str,
) -> dict[str, Any]:
    try:
        return parser(future.result())
    except UpstreamError as exc:
        logger.warning("%s unavailable, continuing without them: %s", label, exc)
        return {}
