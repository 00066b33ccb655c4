"""Per-topic fan-out of realtime messages."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[[dict], Any]


class BroadcastChannel:
    """Delivers each message for one topic to every attached listener.

    Not thread-safe: attach, detach and publish are expected to run on the
    event loop thread, where each call completes before the next starts.
    """

    def __init__(self, topic: str) -> None:
        self.topic = topic
        self.subscribed = False  # True while a subscribe is active on the wire
        self._listeners: dict[int, Listener] = {}
        self._tokens = itertools.count(1)

    def attach(self, listener: Listener) -> int:
        """Add a listener. Returns the token used to detach it."""
        token = next(self._tokens)
        self._listeners[token] = listener
        return token

    def detach(self, token: int) -> bool:
        """Remove a listener. Returns False if it was already gone."""
        return self._listeners.pop(token, None) is not None

    def publish(self, message: dict) -> int:
        """Hand the same message to every current listener.

        A listener that raises is logged and skipped; the rest still receive
        the message. Returns the number of listeners called.
        """
        delivered = 0
        for token, listener in list(self._listeners.items()):
            # A listener may detach others while we iterate
            if token not in self._listeners:
                continue
            try:
                listener(message)
            except Exception:
                logger.exception("Listener for %s failed", self.topic)
            delivered += 1
        return delivered

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def __len__(self) -> int:
        return len(self._listeners)

    def __repr__(self) -> str:
        return (
            f"BroadcastChannel(topic={self.topic!r}, "
            f"listeners={len(self._listeners)}, subscribed={self.subscribed})"
        )
