"""Realtime client: one shared push connection, many independent feeds."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from typing import Any

from .channel import BroadcastChannel, Listener
from .interface import PushTransport
from .models import (
    CONNECT,
    DISCONNECT,
    MESSAGE,
    SUBSCRIBE,
    UNSUBSCRIBE,
    ControlMessage,
    decode_message,
    topic_of,
)

logger = logging.getLogger(__name__)

REALTIME_ENDPOINT = "https://ws-api.iextrading.com/1.0/tops"

TransportFactory = Callable[[str], PushTransport]


def _default_transport_factory(endpoint: str) -> PushTransport:
    # Lazy import: python-socketio is only needed for the live feed.
    from .socketio_transport import SocketIOTransport

    return SocketIOTransport(endpoint)


def _ignore(message: dict) -> None:
    pass


class Subscription:
    """Handle for one attach to an Observation. Cancel to detach."""

    def __init__(
        self,
        client: RealtimeClient,
        attachments: list[tuple[BroadcastChannel, int]],
    ) -> None:
        self._client = client
        self._attachments = attachments
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def cancel(self) -> None:
        """Detach from every topic. Calling it again does nothing."""
        if self._closed:
            return
        self._closed = True
        self._client._detach(self._attachments)

    unsubscribe = cancel

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.cancel()


class Observation:
    """Lazy, multicast view of the messages for a set of topics.

    Nothing happens until something attaches. Every attach (``subscribe``,
    ``async for``, ``first``) gets its own independent lifecycle; the client
    ref-counts them per topic so the wire sees one subscribe per topic.
    """

    def __init__(self, client: RealtimeClient, topics: tuple[str, ...]) -> None:
        self._client = client
        self._topics = topics

    @property
    def topics(self) -> tuple[str, ...]:
        return self._topics

    def subscribe(self, listener: Listener | None = None) -> Subscription:
        """Attach ``listener`` to every topic. Returns the detach handle."""
        return self._client._attach(self._topics, listener or _ignore)

    def __aiter__(self) -> AsyncIterator[dict]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[dict]:
        """Yield messages in arrival order until the iterator is closed.

        The feed never ends on its own. Wrap it in ``contextlib.aclosing`` to
        detach as soon as the loop exits.
        """
        queue: asyncio.Queue[dict] = asyncio.Queue()
        subscription = self.subscribe(queue.put_nowait)
        try:
            while True:
                yield await queue.get()
        finally:
            subscription.cancel()

    async def first(self) -> dict:
        """Wait for the next message on any of the topics, then detach."""
        future: asyncio.Future[dict] = asyncio.get_running_loop().create_future()

        def _resolve(message: dict) -> None:
            if not future.done():
                future.set_result(message)

        subscription = self.subscribe(_resolve)
        try:
            return await future
        finally:
            subscription.cancel()

    def __repr__(self) -> str:
        return f"Observation(topics={self._topics!r})"


class RealtimeClient:
    """Multiplexes per-symbol realtime feeds over a single push transport.

    Each topic maps to a BroadcastChannel. The first listener on a topic
    triggers a ``subscribe`` control message and the last one to leave
    triggers ``unsubscribe``; everything in between is handled in-process.
    Requests made before the transport reports ``connect`` are queued and
    sent in request order once it does.

    All methods run on the event loop thread and never suspend mid-update,
    so no locking is needed.
    """

    def __init__(
        self,
        transport_factory: TransportFactory | None = None,
        endpoint: str = REALTIME_ENDPOINT,
        *,
        resubscribe_on_reconnect: bool = False,
    ) -> None:
        self._endpoint = endpoint
        self._resubscribe_on_reconnect = resubscribe_on_reconnect
        self._ready = False
        self._channels: dict[str, BroadcastChannel] = {}  # never evicted
        self._pending: dict[str, None] = {}  # ordered set of topics

        # State must exist before registering: a transport may fire
        # "connect" from inside on().
        factory = transport_factory or _default_transport_factory
        self._transport = factory(endpoint)
        self._transport.on(CONNECT, self.on_connect)
        self._transport.on(DISCONNECT, self.on_disconnect)
        self._transport.on(MESSAGE, self.on_message)

    # --- Public API ---

    def observe(self, *topics: str) -> Observation:
        """Get a feed of messages for one or more securities.

        Topics are passed to the transport as given; duplicates collapse.
        """
        if not topics:
            raise ValueError("observe() requires at least one topic")
        return Observation(self, tuple(dict.fromkeys(topics)))

    async def start(self) -> None:
        """Connect the transport. Readiness follows its "connect" event."""
        await self._transport.connect()
        logger.info("Realtime client started: %s", self._endpoint)

    async def stop(self) -> None:
        """Disconnect the transport. Safe to call multiple times."""
        await self._transport.disconnect()
        self._ready = False
        logger.info("Realtime client stopped")

    async def __aenter__(self) -> RealtimeClient:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def transport(self) -> PushTransport:
        return self._transport

    def topics(self) -> list[str]:
        """Topics that currently have at least one listener."""
        return [topic for topic, channel in self._channels.items() if channel.listener_count]

    def pending_topics(self) -> list[str]:
        """Topics waiting for the transport to become ready, in request order."""
        return list(self._pending)

    def listener_count(self, topic: str) -> int:
        channel = self._channels.get(topic)
        return channel.listener_count if channel else 0

    # --- Transport handlers ---

    def on_connect(self) -> None:
        """Mark the transport ready and flush queued subscribes.

        A repeated connect only subscribes topics that are not already
        active on the wire.
        """
        self._ready = True
        pending, self._pending = self._pending, {}
        flushed = 0
        for topic in pending:
            channel = self._channels.get(topic)
            if channel is None or channel.subscribed or not channel.listener_count:
                continue
            self._send(SUBSCRIBE, channel)
            flushed += 1
        logger.info("Realtime transport connected: %d queued topics subscribed", flushed)

    def on_disconnect(self, *_: Any) -> None:
        """Mark the transport not ready.

        With ``resubscribe_on_reconnect`` every topic that still has
        listeners is queued so the next connect subscribes it again.
        """
        self._ready = False
        if self._resubscribe_on_reconnect:
            for topic, channel in self._channels.items():
                if channel.listener_count:
                    channel.subscribed = False
                    self._pending[topic] = None
        logger.info(
            "Realtime transport disconnected (%d topics queued for next connect)",
            len(self._pending),
        )

    def on_message(self, raw: Any) -> None:
        """Deliver an inbound frame to the listeners of its topic.

        Frames for topics nobody is listening to are dropped.
        """
        record = decode_message(raw)
        if record is None:
            return
        topic = topic_of(record)
        channel = self._channels.get(topic) if topic is not None else None
        if channel is None or not channel.listener_count:
            logger.debug("Dropping message for unobserved topic %s", topic)
            return
        channel.publish(record)

    # --- Internal ---

    def _attach(self, topics: tuple[str, ...], listener: Listener) -> Subscription:
        attachments: list[tuple[BroadcastChannel, int]] = []
        try:
            for topic in topics:
                channel = self._channels.get(topic)
                if channel is None:
                    channel = self._channels[topic] = BroadcastChannel(topic)
                attachments.append((channel, channel.attach(listener)))
                if channel.listener_count == 1:
                    self._request_subscribe(channel)
        except Exception:
            # Undo the partial attach so no listener is left without a handle
            self._detach(attachments)
            raise
        return Subscription(self, attachments)

    def _detach(self, attachments: list[tuple[BroadcastChannel, int]]) -> None:
        for channel, token in attachments:
            if not channel.detach(token) or channel.listener_count:
                continue
            if channel.subscribed:
                if self._ready:
                    self._send(UNSUBSCRIBE, channel)
                else:
                    # The connection that held the subscription is gone.
                    channel.subscribed = False
            else:
                self._pending.pop(channel.topic, None)

    def _request_subscribe(self, channel: BroadcastChannel) -> None:
        if channel.subscribed:
            return
        if self._ready:
            self._send(SUBSCRIBE, channel)
        else:
            self._pending[channel.topic] = None
            logger.debug("Queued %s until transport is ready", channel.topic)

    def _send(self, action: str, channel: BroadcastChannel) -> None:
        message = ControlMessage(action, channel.topic)
        self._transport.emit(message.action, message.topic)
        channel.subscribed = action == SUBSCRIBE
        logger.info("Realtime: %s %s", message.action, message.topic)
