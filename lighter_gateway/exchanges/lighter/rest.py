"""Lighter public REST client."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

import requests

from ...contracts.upstream.interface import UpstreamSource
from ...core.config import DEFAULT_BASE_URL, DEFAULT_REQUEST_TIMEOUT
from ...core.errors import UpstreamError
from ...core.scope import RequestScope
from ...models.account import AccountByL1Response, SubAccount

logger = logging.getLogger(__name__)

ORDER_BOOK_DETAILS_ENDPOINT = "/api/v1/orderBookDetails"
EXCHANGE_STATS_ENDPOINT = "/api/v1/exchangeStats"
FUNDING_RATES_ENDPOINT = "/api/v1/funding-rates"
FUNDINGS_ENDPOINT = "/api/v1/fundings"
LIQUIDATIONS_ENDPOINT = "/api/v1/liquidations"
ACCOUNT_ENDPOINT = "/api/v1/account"
ACCOUNTS_BY_L1_ENDPOINT = "/api/v1/accountsByL1Address"
# Upstream error bodies can be whole HTML pages; keep diagnostics readable.
MAX_BODY_DIAGNOSTIC = 512


class LighterRestClient(UpstreamSource):
    """Requests-backed implementation of :class:`UpstreamSource`.

    The client is shared by every request handler. Its only state is the
    configuration and the session's connection pool.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._session = session or requests.Session()
        self._owns_session = session is None
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    # ------------------------------------------------------------------
    # Markets
    def order_book_details(self, scope: RequestScope) -> Any:
        return self._request(scope, "GET", ORDER_BOOK_DETAILS_ENDPOINT)

    def exchange_stats(self, scope: RequestScope) -> Any:
        return self._request(scope, "GET", EXCHANGE_STATS_ENDPOINT)

    def funding_rates(self, scope: RequestScope) -> Any:
        return self._request(scope, "GET", FUNDING_RATES_ENDPOINT)

    # ------------------------------------------------------------------
    # History
    def fundings(self, scope: RequestScope, params: Mapping[str, Any] | None = None) -> Any:
        return self._request(scope, "GET", FUNDINGS_ENDPOINT, params)

    def liquidations(self, scope: RequestScope, params: Mapping[str, Any] | None = None) -> Any:
        return self._request(scope, "GET", LIQUIDATIONS_ENDPOINT, params)

    # ------------------------------------------------------------------
    # Account
    def account_by_l1(self, scope: RequestScope, address: str) -> AccountByL1Response:
        payload = self._request(
            scope,
            "GET",
            ACCOUNT_ENDPOINT,
            {"by": "l1_address", "value": address},
        )
        try:
            return AccountByL1Response.from_payload(payload)
        except (TypeError, ValueError) as exc:
            raise UpstreamError(
                f"GET {ACCOUNT_ENDPOINT}: unexpected account payload: {exc}",
                method="GET",
                path=ACCOUNT_ENDPOINT,
            ) from exc

    def accounts_by_l1_address(self, scope: RequestScope, address: str) -> Sequence[SubAccount]:
        payload = self._request(scope, "GET", ACCOUNTS_BY_L1_ENDPOINT, {"l1_address": address})
        try:
            entries = payload.get("sub_accounts") or []
            return [SubAccount.from_payload(entry) for entry in entries]
        except (AttributeError, TypeError, ValueError) as exc:
            raise UpstreamError(
                f"GET {ACCOUNTS_BY_L1_ENDPOINT}: unexpected sub-account payload: {exc}",
                method="GET",
                path=ACCOUNTS_BY_L1_ENDPOINT,
            ) from exc

    # ------------------------------------------------------------------
    # Internal helpers
    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def _request(
        self,
        scope: RequestScope,
        method: str,
        path: str,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        timeout = scope.timeout_for(self._timeout)
        url = f"{self._base_url}{path}"
        try:
            response = self._session.request(
                method,
                url,
                params=dict(params) if params else None,
                timeout=timeout,
            )
        except requests.RequestException as exc:
            raise UpstreamError(
                f"{method} {path}: {exc}",
                method=method,
                path=path,
            ) from exc

        if not 200 <= response.status_code < 300:
            self._raise_http_error(method, path, response)
        return self._decode_response(method, path, response)

    def _decode_response(self, method: str, path: str, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(
                f"{method} {path}: upstream returned a non-JSON payload",
                method=method,
                path=path,
                status=response.status_code,
                body=_body_text(response),
            ) from exc

    def _raise_http_error(self, method: str, path: str, response: requests.Response) -> None:
        body = _body_text(response)
        logger.debug("upstream %s %s failed with %s", method, path, response.status_code)
        raise UpstreamError(
            f"{method} {path} => {response.status_code}: {body}",
            method=method,
            path=path,
            status=response.status_code,
            body=body,
        )


def _body_text(response: requests.Response) -> str:
    text = response.text or ""
    if len(text) > MAX_BODY_DIAGNOSTIC:
        return text[:MAX_BODY_DIAGNOSTIC] + "..."
    return text
