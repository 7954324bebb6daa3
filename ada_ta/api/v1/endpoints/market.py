"""
Market Data API Endpoints

Spot price, sentiment and the live analyst state.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ada_ta.schemas.analysis import LiveAnalysisState
from ada_ta.schemas.market import Sentiment, SpotPrice
from ada_ta.services.base import ConfigurationError, ExternalAPIError
from ada_ta.services.live import LiveAnalyst, get_live_analyst
from ada_ta.services.market_data import (
    CoinGeckoClient,
    FearGreedClient,
    get_coingecko_client,
    get_fear_greed_client,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/price", response_model=SpotPrice)
async def get_price(client: CoinGeckoClient = Depends(get_coingecko_client)):
    """Current spot price and 24h change."""
    try:
        return await client.get_spot_price()
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=e.message)
    except ExternalAPIError as e:
        logger.error(f"Price fetch failed: {e}")
        raise HTTPException(status_code=502, detail=e.message)


@router.get("/sentiment", response_model=Sentiment)
async def get_sentiment(client: FearGreedClient = Depends(get_fear_greed_client)):
    """Latest Fear & Greed reading (Neutral when unavailable)."""
    return await client.get_latest()


@router.get("/live", response_model=LiveAnalysisState)
async def get_live_state(analyst: LiveAnalyst = Depends(get_live_analyst)):
    """Latest price and narratives from the polling loop."""
    return analyst.snapshot()


@router.post("/live/refresh", response_model=LiveAnalysisState)
async def refresh_live_state(
    force: bool = False,
    analyst: LiveAnalyst = Depends(get_live_analyst),
):
    """
    Run one polling cycle now.

    The analysis step is throttled unless ``force`` is set.
    """
    return await analyst.refresh(force=force)
