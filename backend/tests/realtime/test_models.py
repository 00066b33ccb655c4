"""Tests for realtime message helpers."""

import pytest

from iexclient.realtime.models import ControlMessage, decode_message, topic_of


class TestDecodeMessage:
    """Unit tests for decode_message."""

    def test_dict_passes_through(self):
        """Test dict frames are returned as the same object."""
        record = {"symbol": "MSFT"}
        assert decode_message(record) is record

    def test_json_string(self):
        """Test JSON text frames are parsed."""
        assert decode_message('{"symbol": "MSFT", "lastSalePrice": 101.5}') == {
            "symbol": "MSFT",
            "lastSalePrice": 101.5,
        }

    def test_json_bytes(self):
        """Test JSON byte frames are parsed."""
        assert decode_message(b'{"symbol": "TWLO"}') == {"symbol": "TWLO"}

    @pytest.mark.parametrize("raw", ["not json", "[1, 2]", None, 3.5])
    def test_unreadable_frames(self, raw):
        """Test frames that aren't JSON objects decode to None."""
        assert decode_message(raw) is None


class TestTopicOf:
    """Unit tests for topic_of."""

    def test_symbol_field(self):
        """Test the symbol field names the topic."""
        assert topic_of({"symbol": "MSFT", "price": 1.0}) == "MSFT"

    def test_missing_or_non_string_symbol(self):
        """Test records without a string symbol have no topic."""
        assert topic_of({"price": 1.0}) is None
        assert topic_of({"symbol": 123}) is None


class TestControlMessage:
    """Unit tests for ControlMessage."""

    def test_to_dict(self):
        """Test serialization to dictionary."""
        assert ControlMessage("subscribe", "MSFT").to_dict() == {
            "action": "subscribe",
            "topic": "MSFT",
        }

    def test_immutability(self):
        """Test that ControlMessage is immutable."""
        message = ControlMessage("subscribe", "MSFT")
        with pytest.raises(AttributeError):
            message.topic = "TWLO"
