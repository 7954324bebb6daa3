"""
Indicator Engine Service

CONTRACT:
    Input:  candle rows per timeframe
    Output: IndicatorSnapshot per timeframe (None below 26 candles)

RESPONSIBILITIES:
    - Momentum (RSI 14) and trend (MACD 12/26/9) with classifications
    - Moving averages (SMA 20/50, EMA 9/21) and price deviation
    - Volatility (Bollinger 20/2, ATR 14) and band position
    - Rolling support/resistance, RSI divergence
    - Confluence tally and ATR-based entry/stop/target levels

PURE PYTHON - No LLM involvement.
Uses NumPy for calculations.
"""

from ada_ta.services.indicators.interface import IndicatorServiceInterface, MIN_CANDLES
from ada_ta.services.indicators.service import IndicatorService, get_indicator_service

__all__ = [
    "IndicatorServiceInterface",
    "IndicatorService",
    "MIN_CANDLES",
    "get_indicator_service",
]
