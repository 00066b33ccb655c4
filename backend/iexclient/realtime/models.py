"""Wire-level names and message helpers for the realtime feed."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

# Transport events
CONNECT = "connect"
DISCONNECT = "disconnect"
MESSAGE = "message"

# Control messages
SUBSCRIBE = "subscribe"
UNSUBSCRIBE = "unsubscribe"

# Field naming the security in every TOPS record
TOPIC_FIELD = "symbol"


@dataclass(frozen=True, slots=True)
class ControlMessage:
    """A subscribe/unsubscribe directive as sent to the transport."""

    action: str
    topic: str

    def to_dict(self) -> dict:
        return {"action": self.action, "topic": self.topic}


def decode_message(raw: Any) -> dict | None:
    """Turn an inbound frame into a record, or None if it can't be read.

    IEX sends each quote as a JSON string; in-process transports hand over
    mappings directly. The record's contents are not inspected.
    """
    if isinstance(raw, Mapping):
        return raw if isinstance(raw, dict) else dict(raw)
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except ValueError as e:
            logger.warning("Dropping undecodable frame: %s", e)
            return None
        if isinstance(decoded, dict):
            return decoded
    logger.warning("Dropping frame of unexpected type %s", type(raw).__name__)
    return None


def topic_of(record: Mapping[str, Any]) -> str | None:
    """Topic a record belongs to, or None when it carries no symbol."""
    topic = record.get(TOPIC_FIELD)
    return topic if isinstance(topic, str) else None
