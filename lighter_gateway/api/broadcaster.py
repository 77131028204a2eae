"""Periodic market snapshot push over WebSocket."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from starlette.concurrency import run_in_threadpool
from starlette.websockets import WebSocket, WebSocketDisconnect

from ..core.aggregator import MarketAggregator
from ..core.config import DEFAULT_WS_INTERVAL
from ..core.errors import GatewayError
from ..core.scope import RequestScope
from ..models.markets import MarketsMessage

logger = logging.getLogger(__name__)

WS_INTERNAL_ERROR = 1011


class MarketBroadcaster:
    """Pushes ``{"markets": [...]}`` to one connection every ``interval`` seconds.

    Each tick overwrites the previous snapshot instead of queueing, so a slow
    client skews the cadence but never accumulates pending frames. Client
    frames are read and ignored; a disconnect cancels the connection scope and
    the loop ends at the next tick boundary or write.
    """

    def __init__(self, aggregator: MarketAggregator, *, interval: float = DEFAULT_WS_INTERVAL) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._aggregator = aggregator
        self._interval = interval

    async def serve(self, websocket: WebSocket) -> None:
        await websocket.accept()
        scope = RequestScope()
        reader = asyncio.create_task(_drain_client(websocket, scope))
        try:
            await self._push_loop(websocket, scope)
        finally:
            scope.cancel()
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reader

    async def _push_loop(self, websocket: WebSocket, scope: RequestScope) -> None:
        while True:
            await asyncio.sleep(self._interval)
            if scope.cancelled:
                logger.debug("ws subscriber gone, stopping market push")
                return

            try:
                markets = await run_in_threadpool(self._aggregator.load_merged_markets, scope)
            except GatewayError as exc:
                if scope.cancelled:
                    return
                logger.warning("ws market aggregation failed, closing connection: %s", exc)
                await _close(websocket, WS_INTERNAL_ERROR)
                return

            message: MarketsMessage = {"markets": markets}
            try:
                await websocket.send_json(message)
            except (WebSocketDisconnect, RuntimeError, OSError) as exc:
                logger.info("ws write failed, dropping subscriber: %s", exc)
                return


async def _drain_client(websocket: WebSocket, scope: RequestScope) -> None:
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    except (WebSocketDisconnect, RuntimeError) as exc:
        logger.debug("ws reader stopped: %s", exc)
    scope.cancel()


async def _close(websocket: WebSocket, code: int) -> None:
    try:
        await websocket.close(code=code)
    except (RuntimeError, OSError) as exc:
        logger.debug("ws close failed: %s", exc)
