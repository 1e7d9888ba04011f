"""FastAPI surface: portfolio CRUD, liveness ping and the live snapshot socket.

Routes mirror what the dashboard calls:

* ``GET    /api/stocks/ping``
* ``GET    /api/stocks/portfolio``
* ``POST   /api/stocks/portfolio/{symbol}``
* ``DELETE /api/stocks/portfolio/{symbol}``
* ``POST   /api/stocks/session/refresh`` (drop NSE cookies, re-handshake next cycle)
* ``WS     /topic/stocks`` (one JSON text frame per broadcast)

The poller publishes from its worker thread while WebSocket handlers live on
the server's event loop, so each socket gets an :class:`asyncio.Queue` fed via
``loop.call_soon_threadsafe``.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from fastapi import APIRouter, FastAPI, HTTPException, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from nse_tracker.broadcast.broadcaster import STOCKS_TOPIC, Broadcaster
from nse_tracker.data_feed.session import SessionManager
from nse_tracker.portfolio.store import PortfolioStore

LOGGER = logging.getLogger(__name__)

# Slow sockets only ever need the latest snapshot; older ones are dropped.
SOCKET_QUEUE_SIZE = 4


def _offer(queue: "asyncio.Queue[Any]", payload: Any) -> None:
    if queue.full():
        queue.get_nowait()
    queue.put_nowait(payload)


async def _pump(websocket: WebSocket, queue: "asyncio.Queue[Any]") -> None:
    while True:
        payload = await queue.get()
        await websocket.send_json(payload)


async def _drain(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


def create_app(
    *,
    portfolio: PortfolioStore,
    broadcaster: Broadcaster,
    session: Optional[SessionManager] = None,
    cors_origins: Sequence[str] = ("*",),
    topic: str = STOCKS_TOPIC,
) -> FastAPI:
    """Build the FastAPI application around already-constructed components."""

    app = FastAPI(title="NSE Tracker API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    router = APIRouter(prefix="/api/stocks")

    @router.get("/ping")
    def ping() -> str:
        return "pong"

    @router.get("/portfolio")
    def get_portfolio() -> List[str]:
        return portfolio.list()

    @router.post("/portfolio/{symbol}")
    def add_to_portfolio(symbol: str) -> None:
        portfolio.add(_normalize_symbol(symbol))

    @router.delete("/portfolio/{symbol}")
    def remove_from_portfolio(symbol: str) -> None:
        portfolio.remove(_normalize_symbol(symbol))

    @router.post("/session/refresh")
    def refresh_session() -> Dict[str, str]:
        if session is None:
            raise HTTPException(status_code=503, detail="NSE session is not wired")
        session.invalidate()
        return {"status": session.status.value}

    app.include_router(router)

    @app.websocket(topic)
    async def stocks_socket(websocket: WebSocket) -> None:
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=SOCKET_QUEUE_SIZE)
        # Subscribe before accepting so no snapshot published after the handshake is missed.
        subscription = broadcaster.subscribe(
            topic, lambda payload: loop.call_soon_threadsafe(_offer, queue, payload)
        )
        try:
            await websocket.accept()
            LOGGER.info("Snapshot subscriber connected", extra={"client": str(websocket.client)})
            tasks = {
                asyncio.create_task(_pump(websocket, queue)),
                asyncio.create_task(_drain(websocket)),
            }
            done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            for task in done:
                if not task.cancelled() and task.exception() is not None:
                    LOGGER.debug("Snapshot socket closed: %s", task.exception())
        finally:
            subscription.cancel()
            LOGGER.info("Snapshot subscriber disconnected", extra={"client": str(websocket.client)})

    return app


def _normalize_symbol(symbol: str) -> str:
    cleaned = symbol.strip()
    if not cleaned:
        raise HTTPException(status_code=422, detail="symbol must not be blank")
    return cleaned


__all__ = ["create_app"]
