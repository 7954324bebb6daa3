"""
Fear & Greed Index client (alternative.me).

Sentiment is context, not a requirement: any failure degrades to a
neutral reading.
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from ada_ta.schemas.market import Sentiment

logger = logging.getLogger(__name__)


class FearGreedClient:
    """Fetches the latest Fear & Greed reading."""

    def __init__(
        self,
        url: str = "https://api.alternative.me/fng/",
        timeout_seconds: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._session = session

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

    async def get_latest(self) -> Sentiment:
        """Latest reading, or Neutral (50) when the index is unavailable."""
        session = await self._ensure_session()

        try:
            async with session.get(self.url, params={"limit": 1}) as response:
                if response.status != 200:
                    logger.warning(f"Fear & Greed returned status {response.status}")
                    return Sentiment.neutral()
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning(f"Fear & Greed request failed: {e}")
            return Sentiment.neutral()

        entries = payload.get("data") if isinstance(payload, dict) else None
        if not entries:
            return Sentiment.neutral()

        latest = entries[0]
        return Sentiment(
            value=latest.get("value"),
            value_classification=latest.get("value_classification"),
        )
