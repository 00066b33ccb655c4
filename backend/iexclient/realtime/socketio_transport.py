"""Socket.IO transport for the IEX realtime (TOPS) feed."""

from __future__ import annotations

import asyncio
import logging
from urllib.parse import urlsplit

import socketio

from .interface import Handler, PushTransport

logger = logging.getLogger(__name__)


class SocketIOTransport(PushTransport):
    """PushTransport backed by python-socketio's AsyncClient.

    The endpoint path is the Socket.IO namespace, so
    ``https://ws-api.iextrading.com/1.0/tops`` connects to the server at
    ``https://ws-api.iextrading.com`` on namespace ``/1.0/tops``.

    Control messages go through an outbox drained by a single sender task,
    which keeps them in call order. Reconnection is left to python-socketio;
    each successful reconnect fires the "connect" handler again.
    """

    def __init__(self, endpoint: str, client: socketio.AsyncClient | None = None) -> None:
        parts = urlsplit(endpoint)
        self._url = f"{parts.scheme}://{parts.netloc}"
        self._namespace = parts.path.rstrip("/") or "/"
        self._sio = client or socketio.AsyncClient(reconnection=True)
        self._outbox: asyncio.Queue[tuple[str, str]] = asyncio.Queue()
        self._task: asyncio.Task | None = None

    @property
    def url(self) -> str:
        return self._url

    @property
    def namespace(self) -> str:
        return self._namespace

    def on(self, event: str, handler: Handler) -> None:
        self._sio.on(event, handler, namespace=self._namespace)

    def emit(self, event: str, data: str) -> None:
        self._outbox.put_nowait((event, data))

    async def connect(self) -> None:
        await self._sio.connect(self._url, namespaces=[self._namespace])
        # Control messages queued by the "connect" handler wait in the outbox
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._send_loop(), name="socketio-sender")
        logger.info("Socket.IO connected to %s namespace %s", self._url, self._namespace)

    async def disconnect(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        # Also stops a reconnect in progress, which disconnect() would miss
        await self._sio.shutdown()
        logger.info("Socket.IO transport closed")

    # --- Internal ---

    async def _send_loop(self) -> None:
        """Drain the outbox in order. A failed send is logged and skipped."""
        while True:
            event, data = await self._outbox.get()
            try:
                await self._sio.emit(event, data, namespace=self._namespace)
            except Exception as e:
                logger.error("Socket.IO emit %s %s failed: %s", event, data, e)
