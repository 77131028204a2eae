"""Stub order intake backed by an in-memory, process-wide order log."""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable

from ..models.orders import OrderIntent, OrderRow
from ..models.shared import OrderSide, OrderStatus, OrderType
from .errors import OrderValidationError

logger = logging.getLogger(__name__)

NANOS_PER_SECOND = 1_000_000_000
ORDER_ID_PREFIX = "dev-"


class OrderLog:
    """Append-only list of order rows guarded by a single lock.

    Readers receive copies taken under the same lock, so a snapshot is always
    a prefix of the log at some point in time.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rows: list[OrderRow] = []

    def append(self, row: OrderRow) -> None:
        with self._lock:
            self._rows.append(row)

    def snapshot(self) -> list[OrderRow]:
        with self._lock:
            return [OrderRow(**row) for row in self._rows]

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)


def validate_intent(intent: OrderIntent) -> None:
    """Apply the intake rules in order; the first failing rule wins."""

    if not intent.symbol:
        raise OrderValidationError("symbol is required")
    if intent.side not in (OrderSide.BUY, OrderSide.SELL):
        raise OrderValidationError("side must be 'buy' or 'sell'")
    if intent.type not in (OrderType.MARKET, OrderType.LIMIT):
        raise OrderValidationError("type must be 'market' or 'limit'")
    if intent.type == OrderType.LIMIT and not _positive(intent.price):
        raise OrderValidationError("limit orders require positive price")
    if not _positive(intent.size_usd) and not _positive(intent.size_contracts):
        raise OrderValidationError("size_usd or size_contracts must be > 0")
    numbers = (
        intent.price,
        intent.size_usd,
        intent.size_contracts,
        intent.leverage,
        intent.stop_loss,
        intent.take_profit,
    )
    if any(value is not None and not math.isfinite(value) for value in numbers):
        raise OrderValidationError("numeric fields must be finite")


class OrderIntake:
    """Validates trade intents and records them as open orders.

    Nothing is sent upstream: accepted orders stay ``open`` forever.
    """

    def __init__(
        self,
        log: OrderLog | None = None,
        *,
        clock_ns: Callable[[], int] = time.time_ns,
    ) -> None:
        self.log = log if log is not None else OrderLog()
        self._clock_ns = clock_ns
        self._submit_lock = threading.Lock()
        # Ids stay unique even if the clock repeats a reading.
        self._last_ns = 0

    def submit(self, intent: OrderIntent) -> OrderRow:
        validate_intent(intent)
        # Id assignment and append share one critical section so that log
        # order matches id order.
        with self._submit_lock:
            now_ns = max(self._clock_ns(), self._last_ns + 1)
            self._last_ns = now_ns
            row: OrderRow = {
                "order_id": f"{ORDER_ID_PREFIX}{now_ns}",
                "symbol": intent.symbol,
                "side": intent.side,
                "type": intent.type,
                "status": str(OrderStatus.OPEN),
                "price": intent.price,
                "size_usd": intent.size_usd,
                "size_contracts": intent.size_contracts,
                "leverage": intent.leverage,
                "reduce_only": intent.reduce_only,
                "client_id": intent.client_id,
                "stop_loss": intent.stop_loss,
                "take_profit": intent.take_profit,
                "created_at_epoch": now_ns // NANOS_PER_SECOND,
            }
            self.log.append(row)
        logger.info(
            "accepted stub order %s: %s %s %s size_usd=%s size_contracts=%s",
            row["order_id"],
            row["side"],
            row["type"],
            row["symbol"],
            row["size_usd"],
            row["size_contracts"],
        )
        return row


def _positive(value: float | None) -> bool:
    return value is not None and value > 0
