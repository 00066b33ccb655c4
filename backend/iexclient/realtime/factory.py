"""Factory for creating realtime transports and clients."""

from __future__ import annotations

import logging
import os

from .multiplexer import REALTIME_ENDPOINT, RealtimeClient, TransportFactory

logger = logging.getLogger(__name__)


def create_transport_factory() -> TransportFactory:
    """Pick the transport based on environment variables.

    - IEX_REALTIME_SOURCE == "simulator" → SimulatorTransport (no network)
    - Otherwise → SocketIOTransport (live IEX feed)

    The returned factory takes the endpoint and builds an unconnected
    transport.
    """
    source = os.environ.get("IEX_REALTIME_SOURCE", "").strip().lower()

    if source == "simulator":
        from .simulator import SimulatorTransport

        logger.info("Realtime source: simulator")
        return SimulatorTransport
    else:
        from .socketio_transport import SocketIOTransport

        logger.info("Realtime source: IEX Socket.IO")
        return SocketIOTransport


def create_realtime_client(**kwargs) -> RealtimeClient:
    """Create a RealtimeClient configured from the environment.

    IEX_REALTIME_ENDPOINT overrides the default TOPS endpoint. Keyword
    arguments are passed through to RealtimeClient. Caller must await
    client.start().
    """
    endpoint = os.environ.get("IEX_REALTIME_ENDPOINT", "").strip() or REALTIME_ENDPOINT
    return RealtimeClient(create_transport_factory(), endpoint, **kwargs)
