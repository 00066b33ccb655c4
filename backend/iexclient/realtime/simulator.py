"""In-process transport that simulates the realtime quote feed."""

from __future__ import annotations

import asyncio
import logging
import math
import random
import time
from collections import defaultdict

import numpy as np

from .interface import Handler, PushTransport
from .models import CONNECT, DISCONNECT, MESSAGE, SUBSCRIBE, UNSUBSCRIBE, ControlMessage

logger = logging.getLogger(__name__)

# Starting prices for common symbols; anything else starts at a random price
SEED_PRICES: dict[str, float] = {
    "AAPL": 190.00,
    "AMZN": 185.00,
    "GOOGL": 175.00,
    "META": 500.00,
    "MSFT": 420.00,
    "NVDA": 800.00,
    "TSLA": 250.00,
    "TWLO": 65.00,
}


class QuoteSimulator:
    """Geometric Brownian Motion price paths for a changing set of symbols.

        S(t+dt) = S(t) * exp((mu - sigma^2/2) * dt + sigma * sqrt(dt) * Z)

    Each step produces one TOPS-shaped record per symbol.
    """

    # 500ms as a fraction of a trading year (252 days * 6.5h)
    TRADING_SECONDS_PER_YEAR = 252 * 6.5 * 3600
    DEFAULT_DT = 0.5 / TRADING_SECONDS_PER_YEAR

    def __init__(
        self,
        dt: float = DEFAULT_DT,
        sigma: float = 0.25,
        mu: float = 0.05,
        spread: float = 0.0005,
        seed: int | None = None,
    ) -> None:
        self._dt = dt
        self._sigma = sigma
        self._mu = mu
        self._spread = spread
        self._rng = np.random.default_rng(seed)
        self._symbols: list[str] = []
        self._prices = np.empty(0)
        self._volumes: dict[str, int] = {}

    def add_symbol(self, symbol: str) -> None:
        if symbol in self._symbols:
            return
        self._symbols.append(symbol)
        seed_price = SEED_PRICES.get(symbol, random.uniform(50.0, 300.0))
        self._prices = np.append(self._prices, seed_price)
        self._volumes[symbol] = 0

    def remove_symbol(self, symbol: str) -> None:
        if symbol not in self._symbols:
            return
        index = self._symbols.index(symbol)
        self._symbols.pop(index)
        self._prices = np.delete(self._prices, index)
        del self._volumes[symbol]

    def symbols(self) -> list[str]:
        return list(self._symbols)

    def get_price(self, symbol: str) -> float | None:
        if symbol not in self._symbols:
            return None
        return round(float(self._prices[self._symbols.index(symbol)]), 2)

    def step(self) -> list[dict]:
        """Advance every symbol by one time step and return the new quotes."""
        n = len(self._symbols)
        if n == 0:
            return []

        z = self._rng.standard_normal(n)
        drift = (self._mu - 0.5 * self._sigma**2) * self._dt
        diffusion = self._sigma * math.sqrt(self._dt) * z
        self._prices = self._prices * np.exp(drift + diffusion)

        now_ms = int(time.time() * 1000)
        sizes = self._rng.integers(1, 500, size=n)
        quotes = []
        for i, symbol in enumerate(self._symbols):
            price = float(self._prices[i])
            size = int(sizes[i])
            self._volumes[symbol] += size
            half_spread = price * self._spread / 2
            quotes.append(
                {
                    "symbol": symbol,
                    "securityType": "commonstock",
                    "bidPrice": round(price - half_spread, 2),
                    "bidSize": 100,
                    "askPrice": round(price + half_spread, 2),
                    "askSize": 100,
                    "lastSalePrice": round(price, 2),
                    "lastSaleSize": size,
                    "lastSaleTime": now_ms,
                    "lastUpdated": now_ms,
                    "volume": self._volumes[symbol],
                }
            )
        return quotes


class SimulatorTransport(PushTransport):
    """PushTransport that serves simulated quotes without a network.

    Honors subscribe/unsubscribe control messages: only subscribed symbols
    are simulated. Every control message is kept in ``sent`` in order.
    """

    def __init__(
        self,
        endpoint: str = "simulator",
        update_interval: float = 0.5,
        simulator: QuoteSimulator | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._interval = update_interval
        self._sim = simulator or QuoteSimulator()
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._task: asyncio.Task | None = None
        self._connected = False
        self.sent: list[ControlMessage] = []

    @property
    def connected(self) -> bool:
        return self._connected

    def on(self, event: str, handler: Handler) -> None:
        self._handlers[event].append(handler)

    def emit(self, event: str, data: str) -> None:
        self.sent.append(ControlMessage(event, data))
        if event == SUBSCRIBE:
            self._sim.add_symbol(data)
        elif event == UNSUBSCRIBE:
            self._sim.remove_symbol(data)
        else:
            logger.warning("Simulator: ignoring unknown control message %s", event)

    def get_symbols(self) -> list[str]:
        return self._sim.symbols()

    async def connect(self) -> None:
        if self._connected:
            return
        self._task = asyncio.create_task(self._run_loop(), name="simulator-transport")
        self._connected = True
        logger.info("Simulator transport started (%.2fs interval)", self._interval)
        self._fire(CONNECT)

    async def disconnect(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        if self._connected:
            self._connected = False
            self._fire(DISCONNECT)
            logger.info("Simulator transport stopped")

    # --- Internal ---

    def _fire(self, event: str, *args: object) -> None:
        for handler in list(self._handlers[event]):
            handler(*args)

    async def _run_loop(self) -> None:
        """Core loop: step the simulation, push each quote, sleep."""
        while True:
            try:
                for quote in self._sim.step():
                    self._fire(MESSAGE, quote)
            except Exception:
                logger.exception("Simulator step failed")
            await asyncio.sleep(self._interval)
