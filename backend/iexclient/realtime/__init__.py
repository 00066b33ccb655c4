"""Realtime market data for iexclient.

Public API:
    RealtimeClient          - Multiplexes per-symbol feeds over one push transport
    Observation             - Lazy, multicast feed returned by RealtimeClient.observe
    Subscription            - Detach handle for one listener
    BroadcastChannel        - Per-topic fan-out to listeners
    PushTransport           - Abstract interface for push connections
    create_transport_factory - Factory that selects Socket.IO or the simulator
    create_realtime_client  - RealtimeClient configured from the environment
    create_stream_router    - FastAPI router factory for the SSE endpoint
"""

from .channel import BroadcastChannel
from .factory import create_realtime_client, create_transport_factory
from .interface import PushTransport
from .multiplexer import REALTIME_ENDPOINT, Observation, RealtimeClient, Subscription
from .stream import create_stream_router

__all__ = [
    "REALTIME_ENDPOINT",
    "BroadcastChannel",
    "Observation",
    "PushTransport",
    "RealtimeClient",
    "Subscription",
    "create_realtime_client",
    "create_stream_router",
    "create_transport_factory",
]
