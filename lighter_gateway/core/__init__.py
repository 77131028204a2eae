"""Core aggregation, projection and intake logic."""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "MarketAggregator",
    "OrderIntake",
    "OrderLog",
    "RequestScope",
    "Settings",
    "summarize",
    "flatten_positions",
    "parse_float",
    "GatewayError",
    "ConfigurationError",
    "UpstreamError",
    "RequestCancelledError",
    "OrderValidationError",
]

_lazy_targets = {
    "MarketAggregator": ("aggregator", "MarketAggregator"),
    "OrderIntake": ("orders", "OrderIntake"),
    "OrderLog": ("orders", "OrderLog"),
    "RequestScope": ("scope", "RequestScope"),
    "Settings": ("config", "Settings"),
    "summarize": ("projector", "summarize"),
    "flatten_positions": ("projector", "flatten_positions"),
    "parse_float": ("numeric", "parse_float"),
    "GatewayError": ("errors", "GatewayError"),
    "ConfigurationError": ("errors", "ConfigurationError"),
    "UpstreamError": ("errors", "UpstreamError"),
    "RequestCancelledError": ("errors", "RequestCancelledError"),
    "OrderValidationError": ("errors", "OrderValidationError"),
}


def __getattr__(name: str) -> Any:
    try:
        module_name, attr_name = _lazy_targets[name]
    except KeyError as exc:
        raise AttributeError(f"module 'lighter_gateway.core' has no attribute {name!r}") from exc
    module = import_module(f"{__name__}.{module_name}")
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
