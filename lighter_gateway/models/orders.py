"""Order intake data contracts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypedDict

from pydantic import StrictBool, StrictFloat, StrictStr


@dataclass(slots=True)
class OrderIntent:
    """Trade intent submitted by the UI.

    ``side`` and ``type`` stay plain strings so that out-of-range values reach
    the intake rules and produce their specific diagnostics. Field types are
    strict when decoded from a request body: numeric strings and string
    booleans are rejected as malformed JSON.
    """

    symbol: StrictStr = ""
    side: StrictStr = ""
    type: StrictStr = ""
    price: StrictFloat | None = None
    size_usd: StrictFloat | None = None
    size_contracts: StrictFloat | None = None
    leverage: StrictFloat = 0.0
    reduce_only: StrictBool = False
    client_id: StrictStr = ""
    stop_loss: StrictFloat | None = None
    take_profit: StrictFloat | None = None


class OrderRow(TypedDict):
    """Entry of the in-memory order log."""

    order_id: str
    symbol: str
    side: str
    type: str
    status: str
    price: float | None
    size_usd: float | None
    size_contracts: float | None
    leverage: float
    reduce_only: bool
    client_id: str
    stop_loss: float | None
    take_profit: float | None
    created_at_epoch: int


class OrderAck(TypedDict):
    """Response body of an accepted ``POST /api/trade/order``."""

    order_id: str
    status: str
    message: str
    request: dict[str, Any]
