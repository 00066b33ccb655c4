"""Fixtures for realtime tests.

FakeTransport stands in for the Socket.IO connection: it records control
messages and lets a test fire "connect" / "message" / "disconnect" by hand.
"""

from collections import defaultdict

import pytest

from iexclient.realtime.interface import PushTransport
from iexclient.realtime.multiplexer import RealtimeClient


class FakeTransport(PushTransport):
    """In-memory PushTransport driven by the test."""

    def __init__(self, endpoint: str, connect_on_register: bool = False):
        self.endpoint = endpoint
        self.connect_on_register = connect_on_register
        self.handlers = defaultdict(list)
        self.sent: list[tuple[str, str]] = []
        self.connect_calls = 0
        self.disconnect_calls = 0

    def on(self, event, handler):
        self.handlers[event].append(handler)
        # Mirrors a socket that is already up when the handler is attached
        if event == "connect" and self.connect_on_register:
            handler()

    def emit(self, event, data):
        self.sent.append((event, data))

    async def connect(self):
        self.connect_calls += 1

    async def disconnect(self):
        self.disconnect_calls += 1

    def fire(self, event, *args):
        for handler in list(self.handlers[event]):
            handler(*args)

    def count(self, event, data):
        return self.sent.count((event, data))


@pytest.fixture
def transport():
    """Transport that stays "connecting" until the test fires connect."""
    return FakeTransport("fake://tops")


@pytest.fixture
def client(transport):
    return RealtimeClient(lambda endpoint: transport)


@pytest.fixture
def ready_transport():
    """Transport that reports connect as soon as the handler is attached."""
    return FakeTransport("fake://tops", connect_on_register=True)


@pytest.fixture
def ready_client(ready_transport):
    return RealtimeClient(lambda endpoint: ready_transport)
