from __future__ import annotations

import math

import pytest

from lighter_gateway.core.numeric import parse_float
from lighter_gateway.core.projector import flatten_positions, summarize
from lighter_gateway.models.account import AccountByL1Response
from tests.stubs import L1_ADDRESS, position


def _response(*accounts: dict) -> AccountByL1Response:
    return AccountByL1Response.from_payload({"code": 200, "total": len(accounts), "accounts": list(accounts)})


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("12.5", 12.5), ("", 0.0), (None, 0.0), ("abc", 0.0), ("nan", 0.0), ("inf", 0.0), (3, 3.0), (" -1.25 ", -1.25)],
)
def test_parse_float_is_lenient(raw, expected):
    assert parse_float(raw) == expected


def test_summary_aggregates_collateral_and_margin():
    response = _response(
        {"collateral": "1000", "positions": [position("BTC", "0.1", "5000", sign=1, margin="250")]},
        {"collateral": "500.5", "positions": [position("ETH", "-2", "-6000", sign=-1, margin="250")]},
    )

    summary = summarize(response, account_id=L1_ADDRESS)

    assert summary["account_id"] == L1_ADDRESS
    assert summary["balance_usd"] == 1500.5
    assert summary["equity_usd"] == 1500.5
    assert summary["margin_used_usd"] == 500.0
    assert summary["margin_available_usd"] == summary["equity_usd"] - summary["margin_used_usd"]
    assert summary["effective_leverage"] == pytest.approx(1500.5 / 500.0)
    assert summary["unrealized_pnl_usd"] == 0.0
    assert summary["realized_pnl_usd"] == 0.0
    assert summary["sharpe_30d"] == 0.0


def test_summary_without_margin_has_zero_leverage():
    response = _response({"collateral": "", "positions": []}, {"collateral": "42", "positions": []})

    summary = summarize(response)

    assert summary["balance_usd"] == 42.0
    assert summary["margin_used_usd"] == 0.0
    assert summary["effective_leverage"] == 0.0
    assert summary["margin_available_usd"] == 42.0


def test_summary_of_empty_response_is_all_zero():
    summary = summarize(_response())

    assert summary["balance_usd"] == 0.0
    assert summary["effective_leverage"] == 0.0


def test_short_position_uses_market_price():
    response = _response({"collateral": "0", "positions": [position("ETH", "-2.0", "-6000", sign=-1, imf="5")]})

    [row] = flatten_positions(response, {"ETH": 3000.0})

    assert row["side"] == "short"
    assert row["size_contracts"] == 2.0
    assert row["size_usd"] == 6000.0
    assert row["mark_price"] == 3000.0
    assert row["leverage"] == 20.0


def test_zero_quantity_positions_are_skipped():
    response = _response(
        {
            "collateral": "0",
            "positions": [
                position("BTC", "0", "0", sign=1),
                position("SOL", "", "0", sign=1),
                position("ETH", "1.5", "4500", sign=1),
            ],
        }
    )

    rows = flatten_positions(response, {})

    assert [row["symbol"] for row in rows] == ["ETH"]


def test_mark_price_falls_back_to_value_per_contract():
    response = _response({"collateral": "0", "positions": [position("ARB", "200", "150", sign=1, imf="0")]})

    [row] = flatten_positions(response, {"BTC": 1.0})

    assert row["side"] == "long"
    assert row["mark_price"] == 0.75
    assert row["leverage"] == 0.0


def test_positions_keep_upstream_order_across_sub_accounts():
    response = _response(
        {"collateral": "0", "positions": [position("B", "1", "1", sign=1), position("A", "-1", "-1", sign=-1)]},
        {"collateral": "0", "positions": [position("C", "3", "3", sign=0)]},
    )

    rows = flatten_positions(response, {})

    assert [row["symbol"] for row in rows] == ["B", "A", "C"]
    for row, sign in zip(rows, (1, -1, 0)):
        assert row["size_contracts"] >= 0
        assert row["size_usd"] >= 0
        assert (row["side"] == "short") == (sign < 0)


def test_missing_sign_takes_side_from_quantity():
    raw = position("ETH", "-2.0", "-6000", sign=-1, imf="5")
    del raw["sign"]
    response = _response({"collateral": "0", "positions": [raw]})

    [row] = flatten_positions(response, {"ETH": 3000.0})

    assert response.accounts[0].positions[0].sign is None
    assert row["side"] == "short"
    assert row["size_contracts"] == 2.0
    assert row["size_usd"] == 6000.0
    assert row["mark_price"] == 3000.0
    assert row["leverage"] == 20.0


def test_explicit_sign_wins_over_quantity():
    response = _response({"collateral": "0", "positions": [position("ETH", "-2.0", "-6000", sign=0)]})

    [row] = flatten_positions(response, {})

    assert row["side"] == "long"


def test_overflowing_derivations_are_zeroed():
    response = _response(
        {"collateral": "1e308", "positions": [position("TINY", "1e-310", "1e10", sign=1, imf="1e-310", margin="1e-310")]},
        {"collateral": "1e308", "positions": []},
    )

    [row] = flatten_positions(response, {})
    summary = summarize(response)

    assert row["mark_price"] == 0.0
    assert row["leverage"] == 0.0
    assert summary["balance_usd"] == 0.0
    assert summary["effective_leverage"] == 0.0
    assert all(math.isfinite(value) for value in row.values() if isinstance(value, float))
    assert all(math.isfinite(value) for value in summary.values() if isinstance(value, float))
