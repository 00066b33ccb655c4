"""Request/response client for the IEX HTTPS API."""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx

logger = logging.getLogger(__name__)

API_ENDPOINT = "https://api.iextrading.com/1.0"


class IEXClient:
    """Thin async wrapper over the IEX REST endpoints.

    Every method is a GET on one path. The response body is returned as
    parsed JSON when the server says it is JSON, as text otherwise, and as
    None when there is no content-type at all. Status codes are not
    interpreted; network errors propagate as httpx exceptions.

    Usage:
        async with IEXClient() as iex:
            quote = await iex.stock_quote("AAPL")
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        endpoint: str | None = None,
    ) -> None:
        self._endpoint = (
            endpoint or os.environ.get("IEX_API_ENDPOINT", "").strip() or API_ENDPOINT
        ).rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient()

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> IEXClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def request(self, path: str) -> Any:
        """Straight pass-through GET to any API path.

        Examples:
            await iex.request("/stock/aapl/price")
            await iex.request("stock/aapl/quote?displayPercent=true")
        """
        url = f"{self._endpoint}/{path.lstrip('/')}"
        logger.debug("GET %s", url)
        response = await self._http.get(url)

        content_type = response.headers.get("content-type")
        if content_type is None:
            return None
        if "application/json" in content_type:
            return response.json()
        return response.text

    # --- Reference data ---

    async def symbols(self) -> Any:
        """All symbols IEX supports for trading."""
        return await self.request("/ref-data/symbols")

    # --- Stocks ---

    async def stock_quote(self, symbol: str, display_percent: bool = False) -> Any:
        """Latest quote. ``display_percent`` scales percentages by 100."""
        query = "?displayPercent=true" if display_percent else ""
        return await self.request(f"/stock/{symbol}/quote{query}")

    async def stock_chart(self, symbol: str, range: str) -> Any:
        """Chart data for a range such as "1d", "1m", "5y" or "dynamic"."""
        return await self.request(f"/stock/{symbol}/chart/{range}")

    async def stock_open_close(self, symbol: str) -> Any:
        return await self.request(f"/stock/{symbol}/open-close")

    async def stock_previous(self, symbol: str) -> Any:
        """Previous trading day's adjusted price data."""
        return await self.request(f"/stock/{symbol}/previous")

    async def stock_company(self, symbol: str) -> Any:
        return await self.request(f"/stock/{symbol}/company")

    async def stock_key_stats(self, symbol: str) -> Any:
        return await self.request(f"/stock/{symbol}/stats")

    async def stock_peers(self, symbol: str) -> Any:
        return await self.request(f"/stock/{symbol}/peers")

    async def stock_relevant(self, symbol: str) -> Any:
        """Related symbols: peers when defined, otherwise most active."""
        return await self.request(f"/stock/{symbol}/relevant")

    async def stock_news(self, symbol: str, range: int | None = None) -> Any:
        """News items, limited to the last ``range`` (1-50) when given."""
        if range:
            return await self.request(f"/stock/{symbol}/news/last/{range}")
        return await self.request(f"/stock/{symbol}/news")

    async def stock_financials(self, symbol: str) -> Any:
        return await self.request(f"/stock/{symbol}/financials")

    async def stock_earnings(self, symbol: str) -> Any:
        return await self.request(f"/stock/{symbol}/earnings")

    async def stock_dividends(self, symbol: str, range: str) -> Any:
        return await self.request(f"/stock/{symbol}/dividends/{range}")

    async def stock_splits(self, symbol: str, range: str) -> Any:
        return await self.request(f"/stock/{symbol}/splits/{range}")

    async def stock_logo(self, symbol: str) -> Any:
        return await self.request(f"/stock/{symbol}/logo")

    async def stock_price(self, symbol: str) -> Any:
        return await self.request(f"/stock/{symbol}/price")

    async def stock_delayed_quote(self, symbol: str) -> Any:
        """15 minute delayed market quote."""
        return await self.request(f"/stock/{symbol}/delayed-quote")

    async def stock_market_list_top_ten(self, list: str, display_percent: bool = False) -> Any:
        """Top ten of a market list: "mostactive", "gainers", "losers", ..."""
        query = "?displayPercent=true" if display_percent else ""
        return await self.request(f"/stock/market/list/{list}{query}")

    async def stock_effective_spread(self, symbol: str) -> Any:
        return await self.request(f"/stock/{symbol}/effective-spread")

    async def stock_volume_by_venue(self, symbol: str) -> Any:
        """15 minute delayed and 30 day average volume share, by venue."""
        return await self.request(f"/stock/{symbol}/volume-by-venue")
