"""FastAPI application exposing the merged markets, account and order routes."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import TypeVar

from fastapi import FastAPI, Request, WebSocket
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..contracts.upstream.interface import UpstreamSource
from ..core.aggregator import MarketAggregator, price_map
from ..core.config import Settings
from ..core.errors import ConfigurationError, OrderValidationError, UpstreamError
from ..core.orders import OrderIntake
from ..core.projector import flatten_positions, summarize
from ..core.scope import RequestScope
from ..exchanges.lighter.rest import LighterRestClient
from ..models.account import AccountSummary, PositionRow
from ..models.markets import MarketRow
from ..models.orders import OrderAck, OrderIntent
from .broadcaster import MarketBroadcaster

logger = logging.getLogger(__name__)

NETWORK_ID = 1
STUB_ORDER_MESSAGE = "stubbed order (not sent to exchange yet)"
CORS_METHODS = ["GET", "POST", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization"]
DISCONNECT_POLL_INTERVAL = 0.1

T = TypeVar("T")


class PreflightCORSMiddleware(CORSMiddleware):
    """CORS middleware answering successful preflights with an empty 204."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        return Response(status_code=204, headers=headers)


async def watch_disconnect(
    request: Request,
    scope: RequestScope,
    *,
    interval: float = DISCONNECT_POLL_INTERVAL,
) -> None:
    """Cancel ``scope`` as soon as the HTTP client goes away."""

    while not scope.cancelled:
        if await request.is_disconnected():
            logger.debug("http client disconnected, cancelling upstream work")
            scope.cancel()
            return
        await asyncio.sleep(interval)


async def run_scoped(
    request: Request,
    work: Callable[[RequestScope], T],
    *,
    interval: float = DISCONNECT_POLL_INTERVAL,
) -> T:
    """Run blocking ``work`` in the threadpool under a per-request scope.

    The scope is cancelled when the client disconnects mid-call and, in any
    case, once ``work`` has returned.
    """

    scope = RequestScope()
    watcher = asyncio.create_task(watch_disconnect(request, scope, interval=interval))
    try:
        return await run_in_threadpool(work, scope)
    finally:
        scope.cancel()
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher


def create_app(
    settings: Settings | None = None,
    *,
    source: UpstreamSource | None = None,
    aggregator: MarketAggregator | None = None,
    intake: OrderIntake | None = None,
) -> FastAPI:
    """Wire the upstream client, aggregator, order intake and routes together.

    Collaborators can be injected for tests; by default everything is built
    from ``settings`` (which itself defaults to the environment).
    """

    settings = settings or Settings.from_env()
    source = source or LighterRestClient(base_url=settings.base_url, timeout=settings.request_timeout)
    aggregator = aggregator or MarketAggregator(source)
    intake = intake or OrderIntake()
    broadcaster = MarketBroadcaster(aggregator, interval=settings.ws_interval)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info("gateway ready: upstream=%s account=%s", settings.base_url, settings.l1_address or "<unset>")
        yield
        aggregator.close()
        source.close()

    app = FastAPI(title="Lighter Gateway", lifespan=lifespan)
    app.state.settings = settings
    app.add_middleware(
        PreflightCORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )
    _register_error_handlers(app)

    def _require_address() -> str:
        if not settings.l1_address:
            raise ConfigurationError("LIGHTER_L1_ADDRESS not set in env")
        return settings.l1_address

    def _merged_markets(scope: RequestScope) -> list[MarketRow]:
        return aggregator.load_merged_markets(scope)

    def _account_summary(scope: RequestScope) -> AccountSummary:
        address = _require_address()
        try:
            response = source.account_by_l1(scope, address)
        except UpstreamError as exc:
            logger.error("account lookup failed for summary: %s", exc)
            raise UpstreamError("failed to fetch accounts") from exc
        return summarize(response, account_id=address)

    def _account_positions(scope: RequestScope) -> list[PositionRow]:
        address = _require_address()
        try:
            response = source.account_by_l1(scope, address)
        except UpstreamError as exc:
            logger.error("account lookup failed for positions: %s", exc)
            raise UpstreamError("failed to fetch account positions") from exc

        try:
            rows = aggregator.load_merged_markets(scope)
        except UpstreamError as exc:
            logger.warning("markets unavailable for position pricing, using fallback: %s", exc)
            rows = []
        return flatten_positions(response, price_map(rows))

    # Health ------------------------------------------------------------
    @app.get("/api/healthz")
    def healthz() -> PlainTextResponse:
        return PlainTextResponse("backend-ok")

    @app.get("/api/status")
    def status() -> JSONResponse:
        return JSONResponse({"network_id": NETWORK_ID, "status": 200, "timestamp": int(time.time())})

    # Markets -----------------------------------------------------------
    @app.get("/api/markets")
    async def markets(request: Request) -> JSONResponse:
        return JSONResponse(await run_scoped(request, _merged_markets))

    @app.get("/api/markets/live")
    async def markets_live(request: Request) -> JSONResponse:
        return JSONResponse(await run_scoped(request, _merged_markets))

    @app.websocket("/ws/markets")
    async def markets_feed(websocket: WebSocket) -> None:
        await broadcaster.serve(websocket)

    # Account -----------------------------------------------------------
    @app.get("/api/account/summary")
    async def account_summary(request: Request) -> JSONResponse:
        return JSONResponse(await run_scoped(request, _account_summary))

    @app.get("/api/account/positions")
    async def account_positions(request: Request) -> JSONResponse:
        return JSONResponse({"positions": await run_scoped(request, _account_positions)})

    @app.get("/api/account/orders")
    def account_orders() -> JSONResponse:
        return JSONResponse({"orders": intake.log.snapshot()})

    # Trading -----------------------------------------------------------
    @app.post("/api/trade/order")
    def trade_order(intent: OrderIntent) -> JSONResponse:
        row = intake.submit(intent)
        ack: OrderAck = {
            "order_id": row["order_id"],
            "status": "accepted",
            "message": STUB_ORDER_MESSAGE,
            "request": asdict(intent),
        }
        return JSONResponse(ack)

    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ConfigurationError)
    async def configuration_error(_: Request, exc: ConfigurationError) -> JSONResponse:
        logger.warning("configuration error: %s", exc)
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(OrderValidationError)
    async def order_rejected(_: Request, exc: OrderValidationError) -> JSONResponse:
        logger.info("order rejected: %s", exc)
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(UpstreamError)
    async def upstream_error(request: Request, exc: UpstreamError) -> JSONResponse:
        logger.error("%s %s upstream failure: %s", request.method, request.url.path, exc)
        return JSONResponse({"error": str(exc)}, status_code=502)

    @app.exception_handler(RequestValidationError)
    async def invalid_body(_: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("order decode error: %s", exc.errors())
        return JSONResponse({"error": "invalid JSON"}, status_code=400)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = "method not allowed" if exc.status_code == 405 else str(exc.detail)
        return JSONResponse({"error": message}, status_code=exc.status_code, headers=exc.headers)
