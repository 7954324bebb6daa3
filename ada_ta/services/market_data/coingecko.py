"""
CoinGecko price/candle client.

Endpoints used:
- simple/price          spot price + 24h change
- coins/{id}/ohlc       [timestamp, open, high, low, close] rows
- coins/{id}/market_chart  total_volumes as [timestamp, volume] rows
"""

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from ada_ta.schemas.market import SpotPrice, coerce_rows
from ada_ta.services.base import ConfigurationError, ExternalAPIError

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-cg-demo-api-key"


class CoinGeckoClient:
    """
    Async client for the CoinGecko demo API.

    A demo API key is required; requests without one are refused locally
    with a ConfigurationError.
    """

    name = "CoinGecko"

    def __init__(
        self,
        api_key: Optional[str],
        coin_id: str = "cardano",
        vs_currency: str = "usd",
        base_url: str = "https://api.coingecko.com/api/v3",
        timeout_seconds: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.api_key = api_key
        self.coin_id = coin_id
        self.vs_currency = vs_currency
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._session = session

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        if not self.is_configured:
            raise ConfigurationError(self.name, "CoinGecko API key not configured")

        session = await self._ensure_session()
        url = f"{self.base_url}/{path}"

        try:
            async with session.get(
                url, params=params, headers={API_KEY_HEADER: self.api_key}
            ) as response:
                if response.status != 200:
                    body = await response.text()
                    raise ExternalAPIError(
                        self.name,
                        f"{path} returned status {response.status}",
                        details={"status": response.status, "body": body[:200]},
                    )
                return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"CoinGecko request to {path} failed: {e}")
            raise ExternalAPIError(self.name, f"{path} request failed: {e}") from e

    async def get_spot_price(self) -> SpotPrice:
        """Current price and 24h change in percent."""
        data = await self._get_json(
            "simple/price",
            {
                "ids": self.coin_id,
                "vs_currencies": self.vs_currency,
                "include_24hr_change": "true",
            },
        )
        quote = (data or {}).get(self.coin_id) or {}
        price = quote.get(self.vs_currency)
        if price is None:
            raise ExternalAPIError(self.name, f"No price returned for {self.coin_id}")

        return SpotPrice(
            price=price,
            change_24h=quote.get(f"{self.vs_currency}_24h_change"),
        )

    async def get_ohlc(self, days: int) -> list[list[float]]:
        """OHLC candle rows covering the last ``days`` days."""
        data = await self._get_json(
            f"coins/{self.coin_id}/ohlc",
            {"vs_currency": self.vs_currency, "days": days},
        )
        return coerce_rows(data)

    async def get_volumes(self, days: int) -> list[list[float]]:
        """[timestamp, volume] rows covering the last ``days`` days."""
        data = await self._get_json(
            f"coins/{self.coin_id}/market_chart",
            {"vs_currency": self.vs_currency, "days": days},
        )
        if not isinstance(data, dict):
            return []
        return coerce_rows(data.get("total_volumes"))
