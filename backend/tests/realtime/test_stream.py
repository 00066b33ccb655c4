"""Tests for the SSE quote stream."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from iexclient.realtime.stream import _generate_events, create_stream_router


def _make_request(disconnects=None) -> MagicMock:
    """Create a mock Starlette request."""
    request = MagicMock()
    request.client.host = "127.0.0.1"
    request.is_disconnected = AsyncMock(side_effect=disconnects, return_value=False)
    return request


@pytest.mark.asyncio
class TestGenerateEvents:
    """Unit tests for the SSE event generator."""

    async def test_retry_directive_first(self, ready_client, ready_transport):
        """Test the stream opens with a retry directive and no subscribe yet."""
        gen = _generate_events(ready_client, ["MSFT"], _make_request())

        assert await anext(gen) == "retry: 1000\n\n"
        assert ready_transport.sent == []
        await gen.aclose()

    async def test_relays_messages(self, ready_client, ready_transport):
        """Test realtime messages are sent as SSE data events."""
        gen = _generate_events(ready_client, ["MSFT", "TWLO"], _make_request(), interval=0.01)
        await anext(gen)

        async def next_event():
            return await anext(gen)

        task = asyncio.create_task(next_event())
        await asyncio.sleep(0)
        assert ready_transport.count("subscribe", "MSFT") == 1
        assert ready_transport.count("subscribe", "TWLO") == 1

        ready_transport.fire("message", {"symbol": "TWLO", "lastSalePrice": 65.1})
        event = await task

        assert event.startswith("data: ")
        assert event.endswith("\n\n")
        assert json.loads(event[len("data: "):]) == {"symbol": "TWLO", "lastSalePrice": 65.1}
        await gen.aclose()

    async def test_close_releases_subscription(self, ready_client, ready_transport):
        """Test closing the stream unsubscribes its symbols."""
        gen = _generate_events(ready_client, ["MSFT"], _make_request(), interval=0.01)
        await anext(gen)

        async def next_event():
            return await anext(gen)

        task = asyncio.create_task(next_event())
        await asyncio.sleep(0.02)
        task.cancel()
        with pytest.raises((asyncio.CancelledError, StopAsyncIteration)):
            await task

        assert ready_transport.count("unsubscribe", "MSFT") == 1
        assert ready_client.listener_count("MSFT") == 0

    async def test_client_disconnect_ends_stream(self, ready_client, ready_transport):
        """Test the stream ends when the HTTP client goes away."""
        request = _make_request(disconnects=[False, True])
        gen = _generate_events(ready_client, ["MSFT"], request, interval=0.01)

        events = [event async for event in gen]

        assert events == ["retry: 1000\n\n"]
        assert ready_transport.count("subscribe", "MSFT") == 1
        assert ready_transport.count("unsubscribe", "MSFT") == 1

    async def test_two_streams_share_subscription(self, ready_client, ready_transport):
        """Test concurrent SSE clients on one symbol subscribe upstream once."""
        first = _generate_events(ready_client, ["MSFT"], _make_request(disconnects=[True]))
        second = _generate_events(ready_client, ["MSFT"], _make_request(), interval=0.01)
        await anext(second)

        async def next_event():
            return await anext(second)

        task = asyncio.create_task(next_event())
        await asyncio.sleep(0)

        # First stream attaches, sees its client gone, and detaches
        assert [event async for event in first] == ["retry: 1000\n\n"]
        assert ready_transport.count("subscribe", "MSFT") == 1
        assert ready_transport.count("unsubscribe", "MSFT") == 0

        task.cancel()
        with pytest.raises((asyncio.CancelledError, StopAsyncIteration)):
            await task
        assert ready_transport.count("unsubscribe", "MSFT") == 1


class TestStreamRouter:
    """Request validation on the SSE route."""

    def test_requires_symbols(self, ready_client):
        """Test the symbols query parameter is required."""
        app = FastAPI()
        app.include_router(create_stream_router(ready_client))

        with TestClient(app) as http:
            assert http.get("/api/stream/quotes").status_code == 422

    def test_rejects_blank_symbols(self, ready_client, ready_transport):
        """Test a symbols list with no usable entries is rejected."""
        app = FastAPI()
        app.include_router(create_stream_router(ready_client))

        with TestClient(app) as http:
            response = http.get("/api/stream/quotes", params={"symbols": " , "})

        assert response.status_code == 400
        assert ready_transport.sent == []
