from __future__ import annotations

import pytest
import requests

from lighter_gateway.core.errors import RequestCancelledError, UpstreamError
from lighter_gateway.core.scope import RequestScope
from lighter_gateway.exchanges.lighter import rest as lighter_module
from lighter_gateway.exchanges.lighter.rest import LighterRestClient
from tests.stubs import L1_ADDRESS, StubSession, details_payload, instrument, position


@pytest.fixture()
def session_and_client():
    session = StubSession()
    client = LighterRestClient(session=session, base_url="https://upstream.test/")
    return session, client


@pytest.fixture()
def scope() -> RequestScope:
    return RequestScope()


def test_order_book_details_returns_decoded_json(session_and_client, scope):
    session, client = session_and_client
    payload = details_payload(instrument("BTC", 1, 10.0))
    session.queue(lighter_module.ORDER_BOOK_DETAILS_ENDPOINT, payload)

    result = client.order_book_details(scope)

    assert result == payload
    assert session.calls[0]["method"] == "GET"
    assert session.calls[0]["url"] == "https://upstream.test/api/v1/orderBookDetails"
    assert session.calls[0]["timeout"] == 5.0


def test_market_endpoints_hit_expected_paths(session_and_client, scope):
    session, client = session_and_client
    session.queue(lighter_module.EXCHANGE_STATS_ENDPOINT, {"order_book_stats": []})
    session.queue(lighter_module.FUNDING_RATES_ENDPOINT, {"funding_rates": []})

    client.exchange_stats(scope)
    client.funding_rates(scope)

    assert session.calls[0]["url"].endswith("/api/v1/exchangeStats")
    assert session.calls[1]["url"].endswith("/api/v1/funding-rates")


def test_history_endpoints_forward_query(session_and_client, scope):
    session, client = session_and_client
    session.queue(lighter_module.FUNDINGS_ENDPOINT, {"fundings": []})
    session.queue(lighter_module.LIQUIDATIONS_ENDPOINT, {"liquidations": []})

    client.fundings(scope, {"market_id": 1, "limit": 10})
    client.liquidations(scope, {"market_id": 1})

    assert session.calls[0]["params"] == {"market_id": 1, "limit": 10}
    assert session.calls[1]["url"].endswith("/api/v1/liquidations")


def test_account_by_l1_sends_typed_query_and_decodes(session_and_client, scope):
    session, client = session_and_client
    session.queue(
        lighter_module.ACCOUNT_ENDPOINT,
        {
            "code": 200,
            "total": 1,
            "accounts": [
                {
                    "index": 7,
                    "l1_address": L1_ADDRESS,
                    "collateral": "1500.5",
                    "positions": [position("ETH", "-2.0", "-6000", sign=-1, imf="5")],
                }
            ],
        },
    )

    response = client.account_by_l1(scope, L1_ADDRESS)

    assert session.calls[0]["params"] == {"by": "l1_address", "value": L1_ADDRESS}
    assert response.total == 1
    account = response.accounts[0]
    assert account.collateral == "1500.5"
    assert account.positions[0].sign == -1
    assert account.positions[0].position == "-2.0"


def test_account_by_l1_rejects_malformed_payload(session_and_client, scope):
    session, client = session_and_client
    session.queue(lighter_module.ACCOUNT_ENDPOINT, {"accounts": "nope"})

    with pytest.raises(UpstreamError):
        client.account_by_l1(scope, L1_ADDRESS)


def test_accounts_by_l1_address_parses_sub_accounts(session_and_client, scope):
    session, client = session_and_client
    session.queue(
        lighter_module.ACCOUNTS_BY_L1_ENDPOINT,
        {"l1_address": L1_ADDRESS, "sub_accounts": [{"index": 3, "collateral": "12"}]},
    )

    sub_accounts = client.accounts_by_l1_address(scope, L1_ADDRESS)

    assert session.calls[0]["params"] == {"l1_address": L1_ADDRESS}
    assert sub_accounts[0].index == 3
    assert sub_accounts[0].collateral == "12"


def test_non_2xx_status_carries_diagnostics(session_and_client, scope):
    session, client = session_and_client
    session.queue(lighter_module.EXCHANGE_STATS_ENDPOINT, {"code": 29500, "message": "internal"}, status_code=503)

    with pytest.raises(UpstreamError) as excinfo:
        client.exchange_stats(scope)

    error = excinfo.value
    assert error.method == "GET"
    assert error.path == "/api/v1/exchangeStats"
    assert error.status == 503
    assert "internal" in error.body
    assert str(error).startswith("GET /api/v1/exchangeStats => 503:")


def test_non_json_body_is_a_failure(session_and_client, scope):
    session, client = session_and_client
    session.queue(lighter_module.FUNDING_RATES_ENDPOINT, text="<html>gateway</html>")

    with pytest.raises(UpstreamError) as excinfo:
        client.funding_rates(scope)

    assert excinfo.value.body == "<html>gateway</html>"


def test_transport_failure_is_wrapped(session_and_client, scope):
    session, client = session_and_client
    session.queue_error(lighter_module.ORDER_BOOK_DETAILS_ENDPOINT, requests.ConnectionError("refused"))

    with pytest.raises(UpstreamError) as excinfo:
        client.order_book_details(scope)

    assert excinfo.value.status is None
    assert "refused" in str(excinfo.value)


def test_cancelled_scope_skips_io(session_and_client):
    session, client = session_and_client
    scope = RequestScope()
    scope.cancel()

    with pytest.raises(RequestCancelledError):
        client.order_book_details(scope)

    assert session.calls == []


def test_scope_deadline_shortens_timeout(session_and_client):
    session, client = session_and_client
    session.queue(lighter_module.ORDER_BOOK_DETAILS_ENDPOINT, details_payload())

    client.order_book_details(RequestScope(timeout=1.0))

    assert 0 < session.calls[0]["timeout"] <= 1.0


def test_close_leaves_injected_session_open(session_and_client):
    session, client = session_and_client
    client.close()
    assert session.closed is False
