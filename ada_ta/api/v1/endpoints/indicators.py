"""
Indicator API Endpoints

Endpoints for technical indicator calculations.
"""

from fastapi import APIRouter, Depends

from ada_ta.schemas.indicators import IndicatorRequest, IndicatorResponse
from ada_ta.services.indicators import IndicatorService, get_indicator_service

router = APIRouter()


@router.post("", response_model=IndicatorResponse)
async def calculate_indicators(
    request: IndicatorRequest,
    indicator_service: IndicatorService = Depends(get_indicator_service),
):
    """
    Get the indicator snapshot for each supplied candle series.

    Returns per timeframe:
        - RSI / MACD with classifications
        - SMA 20/50, EMA 9/21 and price deviation
        - Bollinger position, ATR, support/resistance
        - Divergence, confluence score and ATR-based levels

    A timeframe with fewer than 26 candles returns null.
    """
    return await indicator_service.execute(request)
