"""Print merged market rows (and optionally account projections) from the live upstream."""
from __future__ import annotations

from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lighter_gateway.core.aggregator import MarketAggregator, price_map
from lighter_gateway.core.config import Settings
from lighter_gateway.core.errors import UpstreamError
from lighter_gateway.core.projector import flatten_positions, summarize
from lighter_gateway.core.scope import RequestScope
from lighter_gateway.exchanges.lighter.rest import LighterRestClient


def _print_header(title: str) -> None:
    print(f"\n=== {title} ===")


def main() -> None:
    settings = Settings.from_env()
    client = LighterRestClient(base_url=settings.base_url, timeout=settings.request_timeout)
    aggregator = MarketAggregator(client)
    try:
        _print_header(f"markets @ {client.base_url}")
        try:
            rows = aggregator.load_merged_markets(RequestScope())
        except UpstreamError as exc:  # pragma: no cover - manual script
            print(f"markets error: {exc}")
            rows = []
        for row in rows:
            print(
                f"{row['symbol']:>10} mark={row['mark_price']:<14} "
                f"chg24h={row['change_24h_pct']:<8} oi_usd={row['open_interest_usd']:<16.2f} "
                f"funding8h={row['funding_rate_8h']}"
            )

        if not settings.l1_address:
            return
        _print_header(f"account {settings.l1_address}")
        try:
            account = client.account_by_l1(RequestScope(), settings.l1_address)
        except UpstreamError as exc:  # pragma: no cover - manual script
            print(f"account error: {exc}")
            return
        print(summarize(account, account_id=settings.l1_address))
        for position in flatten_positions(account, price_map(rows)):
            print(position)
    finally:
        aggregator.close()
        client.close()


if __name__ == "__main__":  # pragma: no cover - manual script
    main()
