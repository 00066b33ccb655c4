"""SSE streaming endpoint relaying realtime quotes."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import StreamingResponse

from .multiplexer import RealtimeClient

logger = logging.getLogger(__name__)


def create_stream_router(client: RealtimeClient) -> APIRouter:
    """Create the SSE streaming router around a shared RealtimeClient.

    Every connected browser is one more listener on the client, so the
    upstream feed subscribes each symbol once however many are watching.
    """
    router = APIRouter(prefix="/api/stream", tags=["streaming"])

    @router.get("/quotes")
    async def stream_quotes(
        request: Request,
        symbols: str = Query(..., description="Comma-separated symbols, e.g. MSFT,TWLO"),
    ) -> StreamingResponse:
        """SSE endpoint for live quotes of the requested symbols.

        Each realtime message is sent as one event:

            data: {"symbol": "MSFT", "lastSalePrice": 101.5, ...}
        """
        topics = [s.strip() for s in symbols.split(",") if s.strip()]
        if not topics:
            raise HTTPException(status_code=400, detail="At least one symbol is required")
        return StreamingResponse(
            _generate_events(client, topics, request),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",  # Disable nginx buffering if proxied
            },
        )

    return router


async def _generate_events(
    client: RealtimeClient,
    topics: list[str],
    request: Request,
    interval: float = 0.5,
) -> AsyncGenerator[str, None]:
    """Async generator that yields SSE-formatted quote events.

    Waits up to `interval` seconds for each message so a disconnected client
    is noticed even when the feed is quiet. The subscription is released
    when the generator finishes, whatever the reason.
    """
    # Tell the client to retry after 1 second if the connection drops
    yield "retry: 1000\n\n"

    queue: asyncio.Queue[dict] = asyncio.Queue()
    subscription = client.observe(*topics).subscribe(queue.put_nowait)
    client_ip = request.client.host if request.client else "unknown"
    logger.info("SSE client connected: %s (%s)", client_ip, ",".join(topics))

    try:
        while True:
            if await request.is_disconnected():
                logger.info("SSE client disconnected: %s", client_ip)
                break
            try:
                message = await asyncio.wait_for(queue.get(), timeout=interval)
            except asyncio.TimeoutError:
                continue
            yield f"data: {json.dumps(message)}\n\n"
    except asyncio.CancelledError:
        logger.info("SSE stream cancelled for: %s", client_ip)
    finally:
        subscription.cancel()
