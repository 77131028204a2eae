"""Account projections derived from the upstream account response."""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from ..models.account import AccountByL1Response, AccountPosition, AccountSummary, PositionRow
from ..models.shared import PositionSide
from .numeric import finite_or_zero, parse_float

# Upstream reports initial margin fraction in percent (5 -> 20x).
LEVERAGE_NUMERATOR = 100.0


def summarize(response: AccountByL1Response, account_id: str = "") -> AccountSummary:
    """Aggregate collateral and allocated margin over every sub-account.

    Sub-accounts are treated as one logical account. Equity equals balance
    until unrealized PnL is rolled in; PnL and Sharpe fields are placeholders.
    """

    balance = 0.0
    margin_used = 0.0
    for account in response.accounts:
        balance += parse_float(account.collateral)
        for position in account.positions:
            margin_used += parse_float(position.allocated_margin)

    balance = finite_or_zero(balance)
    margin_used = finite_or_zero(margin_used)
    equity = balance
    effective_leverage = finite_or_zero(equity / margin_used) if margin_used > 0 else 0.0
    return {
        "account_id": account_id,
        "balance_usd": balance,
        "equity_usd": equity,
        "unrealized_pnl_usd": 0.0,
        "realized_pnl_usd": 0.0,
        "margin_used_usd": margin_used,
        "margin_available_usd": finite_or_zero(equity - margin_used),
        "effective_leverage": effective_leverage,
        "sharpe_30d": 0.0,
    }


def flatten_positions(
    response: AccountByL1Response,
    prices: Mapping[str, float],
) -> list[PositionRow]:
    """Return one row per non-zero position, sub-accounts in upstream order."""

    return [project_position(position, prices) for position in _open_positions(response)]


def project_position(position: AccountPosition, prices: Mapping[str, float]) -> PositionRow:
    quantity = parse_float(position.position)
    value = parse_float(position.position_value)
    margin_fraction = parse_float(position.initial_margin_fraction)

    return {
        "symbol": position.symbol,
        "side": str(position_side(position.sign, quantity)),
        "size_usd": abs(value),
        "size_contracts": abs(quantity),
        "entry_price": parse_float(position.avg_entry_price),
        "mark_price": mark_price(position.symbol, quantity, value, prices),
        "leverage": finite_or_zero(LEVERAGE_NUMERATOR / margin_fraction) if margin_fraction > 0 else 0.0,
        "unrealized_pnl_usd": parse_float(position.unrealized_pnl),
        "realized_pnl_usd": parse_float(position.realized_pnl),
        "margin_used_usd": parse_float(position.allocated_margin),
    }


def mark_price(symbol: str, quantity: float, value: float, prices: Mapping[str, float]) -> float:
    """Resolve a mark price: market map, then value per contract, then 0."""

    price = prices.get(symbol, 0.0)
    if price == 0 and quantity != 0:
        price = finite_or_zero(value / quantity)
    return price


def position_side(sign: int | None, quantity: float) -> PositionSide:
    """Short iff ``sign`` is negative; without a sign, the quantity decides."""

    if sign is None:
        return PositionSide.SHORT if quantity < 0 else PositionSide.LONG
    return PositionSide.SHORT if sign < 0 else PositionSide.LONG


def _open_positions(response: AccountByL1Response) -> Iterator[AccountPosition]:
    for account in response.accounts:
        for position in account.positions:
            if parse_float(position.position) != 0:
                yield position
