"""Protocols describing the upstream exchange data source."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

from ...core.scope import RequestScope
from ...models.account import AccountByL1Response, SubAccount


@runtime_checkable
class UpstreamSource(Protocol):
    """Data source serving the upstream's public REST endpoints.

    Every call takes the caller's :class:`RequestScope`; implementations must
    raise :class:`~lighter_gateway.core.errors.UpstreamError` on failure.
    """

    # Markets -----------------------------------------------------------
    def order_book_details(self, scope: RequestScope) -> Any:
        """Return the decoded instrument metadata listing."""

    def exchange_stats(self, scope: RequestScope) -> Any:
        """Return the decoded 24h statistics listing."""

    def funding_rates(self, scope: RequestScope) -> Any:
        """Return the decoded funding rate listing."""

    # History -----------------------------------------------------------
    def fundings(self, scope: RequestScope, params: Mapping[str, Any] | None = None) -> Any:
        """Return historical funding events."""

    def liquidations(self, scope: RequestScope, params: Mapping[str, Any] | None = None) -> Any:
        """Return historical liquidation events."""

    # Account -----------------------------------------------------------
    def account_by_l1(self, scope: RequestScope, address: str) -> AccountByL1Response:
        """Return every sub-account (with positions) owned by ``address``."""

    def accounts_by_l1_address(self, scope: RequestScope, address: str) -> Sequence[SubAccount]:
        """Return the lightweight sub-account listing for ``address``."""

    def close(self) -> None:
        """Release transport resources."""
