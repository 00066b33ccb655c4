"""Abstract interface for push transports."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

Handler = Callable[..., Any]


class PushTransport(ABC):
    """Contract for the connection a RealtimeClient drives.

    The transport carries control messages out and topic-tagged data messages
    in. It is owned by exactly one RealtimeClient; consumers never touch it.

    Lifecycle:
        transport = factory(endpoint)
        transport.on("connect", client.on_connect)
        transport.on("message", client.on_message)
        await transport.connect()
        # ... "connect" handler fires once the link is up ...
        transport.emit("subscribe", "MSFT")
        # ... "message" handler fires for each inbound frame ...
        await transport.disconnect()
    """

    @abstractmethod
    def on(self, event: str, handler: Handler) -> None:
        """Register a handler for "connect", "disconnect" or "message".

        "connect" fires once per successful connection establishment and
        "message" fires with the raw payload of each inbound frame.
        """

    @abstractmethod
    def emit(self, event: str, data: str) -> None:
        """Send a named control message with a string argument.

        Returns immediately. Messages must reach the wire in call order.
        """

    @abstractmethod
    async def connect(self) -> None:
        """Open the connection. The "connect" handler signals readiness."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the connection and release resources.

        Safe to call multiple times.
        """
