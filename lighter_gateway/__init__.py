"""Backend facade over the Lighter perpetual-futures exchange.

This module exposes the public API: the upstream client and its protocol,
the market aggregator, account projections, the stub order intake and the
application factory.
"""

from .contracts.upstream.interface import UpstreamSource
from .core.aggregator import MarketAggregator, merge_market_rows, price_map
from .core.config import Settings
from .core.errors import (
    ConfigurationError,
    GatewayError,
    OrderValidationError,
    RequestCancelledError,
    UpstreamError,
)
from .core.orders import OrderIntake, OrderLog
from .core.projector import flatten_positions, summarize
from .core.scope import RequestScope
from .exchanges.lighter.rest import LighterRestClient
from .models.account import AccountByL1Response, AccountSummary, PositionRow
from .models.markets import MarketRow
from .models.orders import OrderIntent, OrderRow

__all__ = [
    "UpstreamSource",
    "LighterRestClient",
    "MarketAggregator",
    "merge_market_rows",
    "price_map",
    "Settings",
    "RequestScope",
    "OrderIntake",
    "OrderLog",
    "summarize",
    "flatten_positions",
    "AccountByL1Response",
    "AccountSummary",
    "PositionRow",
    "MarketRow",
    "OrderIntent",
    "OrderRow",
    "GatewayError",
    "ConfigurationError",
    "UpstreamError",
    "RequestCancelledError",
    "OrderValidationError",
]
