"""Account models: decoded upstream responses and the derived projections."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypedDict

# Upstream monetary and size fields arrive as strings to preserve precision;
# they stay textual here and are parsed by the projector.


@dataclass(frozen=True, slots=True)
class AccountPosition:
    """One position under a sub-account as returned by ``/api/v1/account``."""

    symbol: str
    market_id: int = 0
    sign: int | None = None
    position: str = ""
    position_value: str = ""
    avg_entry_price: str = ""
    unrealized_pnl: str = ""
    realized_pnl: str = ""
    allocated_margin: str = ""
    initial_margin_fraction: str = ""
    liquidation_price: str = ""
    open_order_count: int = 0

    @classmethod
    def from_payload(cls, raw: Mapping[str, Any]) -> AccountPosition:
        return cls(
            symbol=_text(raw.get("symbol")),
            market_id=int(raw.get("market_id") or 0),
            sign=None if raw.get("sign") is None else int(raw["sign"]),
            position=_text(raw.get("position")),
            position_value=_text(raw.get("position_value")),
            avg_entry_price=_text(raw.get("avg_entry_price")),
            unrealized_pnl=_text(raw.get("unrealized_pnl")),
            realized_pnl=_text(raw.get("realized_pnl")),
            allocated_margin=_text(raw.get("allocated_margin")),
            initial_margin_fraction=_text(raw.get("initial_margin_fraction")),
            liquidation_price=_text(raw.get("liquidation_price")),
            open_order_count=int(raw.get("open_order_count") or 0),
        )


@dataclass(frozen=True, slots=True)
class Account:
    """A sub-account under one L1 address."""

    index: int = 0
    l1_address: str = ""
    collateral: str = ""
    available_balance: str = ""
    total_asset_value: str = ""
    positions: tuple[AccountPosition, ...] = ()

    @classmethod
    def from_payload(cls, raw: Mapping[str, Any]) -> Account:
        positions = raw.get("positions") or []
        if not isinstance(positions, Sequence) or isinstance(positions, str):
            raise ValueError("account positions must be a list")
        return cls(
            index=int(raw.get("index") or 0),
            l1_address=_text(raw.get("l1_address")),
            collateral=_text(raw.get("collateral")),
            available_balance=_text(raw.get("available_balance")),
            total_asset_value=_text(raw.get("total_asset_value")),
            positions=tuple(AccountPosition.from_payload(_mapping(entry)) for entry in positions),
        )


@dataclass(frozen=True, slots=True)
class AccountByL1Response:
    """Decoded ``GET /api/v1/account?by=l1_address`` payload."""

    code: int = 0
    total: int = 0
    accounts: tuple[Account, ...] = ()

    @classmethod
    def from_payload(cls, raw: Any) -> AccountByL1Response:
        payload = _mapping(raw)
        accounts = payload.get("accounts") or []
        if not isinstance(accounts, Sequence) or isinstance(accounts, str):
            raise ValueError("accounts must be a list")
        return cls(
            code=int(payload.get("code") or 0),
            total=int(payload.get("total") or 0),
            accounts=tuple(Account.from_payload(_mapping(entry)) for entry in accounts),
        )


@dataclass(frozen=True, slots=True)
class SubAccount:
    """Entry of the legacy ``accountsByL1Address`` listing."""

    index: int = 0
    l1_address: str = ""
    account_type: int = 0
    collateral: str = ""
    available_balance: str = ""

    @classmethod
    def from_payload(cls, raw: Mapping[str, Any]) -> SubAccount:
        return cls(
            index=int(raw.get("index") or 0),
            l1_address=_text(raw.get("l1_address")),
            account_type=int(raw.get("account_type") or 0),
            collateral=_text(raw.get("collateral")),
            available_balance=_text(raw.get("available_balance")),
        )


class AccountSummary(TypedDict):
    """Aggregated view over every sub-account of one L1 address."""

    account_id: str
    balance_usd: float
    equity_usd: float
    unrealized_pnl_usd: float
    realized_pnl_usd: float
    margin_used_usd: float
    margin_available_usd: float
    effective_leverage: float
    sharpe_30d: float


class PositionRow(TypedDict):
    """Flattened, UI-ready position."""

    symbol: str
    side: str
    size_usd: float
    size_contracts: float
    entry_price: float
    mark_price: float
    leverage: float
    unrealized_pnl_usd: float
    realized_pnl_usd: float
    margin_used_usd: float


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _mapping(value: Any) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"expected JSON object, got {type(value).__name__}")
    return value
