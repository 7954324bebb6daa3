"""
Market Data Providers

- CoinGecko: spot price, OHLC candles, volumes
- alternative.me: Fear & Greed sentiment
"""

from typing import Optional

from ada_ta.services.market_data.coingecko import CoinGeckoClient
from ada_ta.services.market_data.sentiment import FearGreedClient

_coingecko: Optional[CoinGeckoClient] = None
_fear_greed: Optional[FearGreedClient] = None


def get_coingecko_client() -> CoinGeckoClient:
    """Get or create the CoinGecko client singleton."""
    global _coingecko
    if _coingecko is None:
        from ada_ta.core.config import settings

        _coingecko = CoinGeckoClient(
            api_key=settings.coingecko_api_key,
            coin_id=settings.coin_id,
            vs_currency=settings.vs_currency,
            base_url=settings.coingecko_base_url,
            timeout_seconds=settings.http_timeout_seconds,
        )
    return _coingecko


def get_fear_greed_client() -> FearGreedClient:
    """Get or create the Fear & Greed client singleton."""
    global _fear_greed
    if _fear_greed is None:
        from ada_ta.core.config import settings

        _fear_greed = FearGreedClient(
            url=settings.fear_greed_url,
            timeout_seconds=settings.http_timeout_seconds,
        )
    return _fear_greed


async def close_market_data_clients() -> None:
    """Close HTTP sessions on shutdown."""
    global _coingecko, _fear_greed
    if _coingecko:
        await _coingecko.close()
        _coingecko = None
    if _fear_greed:
        await _fear_greed.close()
        _fear_greed = None


__all__ = [
    "CoinGeckoClient",
    "FearGreedClient",
    "get_coingecko_client",
    "get_fear_greed_client",
    "close_market_data_clients",
]
