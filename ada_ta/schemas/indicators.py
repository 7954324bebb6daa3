"""
CONTRACT 2: Indicator Engine

Input: candle rows for one timeframe
Output: IndicatorSnapshot (or None when the lookback is insufficient)

All numeric fields are strings with fixed precision. Prompts embed them
verbatim, so the formatting is part of the contract:
- prices: 4 decimals
- MACD raw values: 6 decimals
- RSI and percentages: 2 decimals
"""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator

from ada_ta.schemas.market import check_candle_rows, coerce_rows


# =============================================================================
# ENUMS
# =============================================================================


class AnalysisTimeframe(str, Enum):
    VERY_SHORT = "very_short"
    SHORT = "short"
    LONG = "long"

    @property
    def atr_multiplier(self) -> float:
        return ATR_MULTIPLIERS[self]


ATR_MULTIPLIERS = {
    AnalysisTimeframe.VERY_SHORT: 0.5,
    AnalysisTimeframe.SHORT: 1.0,
    AnalysisTimeframe.LONG: 1.5,
}


class MomentumSignal(str, Enum):
    OVERBOUGHT = "OVERBOUGHT"
    OVERSOLD = "OVERSOLD"
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"


class TrendSignal(str, Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"


class BandPosition(str, Enum):
    ABOVE_UPPER = "ABOVE_UPPER"
    BELOW_LOWER = "BELOW_LOWER"
    UPPER_HALF = "UPPER_HALF"
    LOWER_HALF = "LOWER_HALF"
    NEUTRAL = "NEUTRAL"


class Divergence(str, Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NONE = "NONE"


# =============================================================================
# OUTPUT: IndicatorSnapshot
# =============================================================================


class IndicatorSnapshot(BaseModel):
    """
    Technical signals for one timeframe.
    Returned by: IndicatorService
    Consumed by: prompt builders, cache fingerprint
    """

    timeframe: AnalysisTimeframe

    # Momentum
    rsi: Optional[str] = None
    rsi_signal: MomentumSignal = MomentumSignal.NEUTRAL

    # Trend
    macd: Optional[str] = None
    macd_signal: Optional[str] = None
    macd_histogram: Optional[str] = None
    macd_trend: TrendSignal = TrendSignal.NEUTRAL

    # Moving averages
    sma20: Optional[str] = None
    sma50: Optional[str] = None
    ema9: Optional[str] = None
    ema21: Optional[str] = None
    price_vs_sma20: Optional[str] = None
    price_vs_sma50: Optional[str] = None

    # Volatility
    bb_upper: Optional[str] = None
    bb_middle: Optional[str] = None
    bb_lower: Optional[str] = None
    bb_position: BandPosition = BandPosition.NEUTRAL
    atr: Optional[str] = None

    # Levels
    support: Optional[str] = None
    resistance: Optional[str] = None

    # Composite
    divergence: Divergence = Divergence.NONE
    bullish_signals: int = Field(default=0, ge=0, le=5)
    bearish_signals: int = Field(default=0, ge=0, le=5)
    confluence_score: str = "NEUTRAL"

    # Trade levels
    entry_price: Optional[str] = None
    stop_loss: Optional[str] = None
    take_profit1: Optional[str] = None
    take_profit2: Optional[str] = None
    risk_reward: str = "1:2.5"

    class Config:
        json_schema_extra = {
            "example": {
                "timeframe": "short",
                "rsi": "44.18",
                "rsi_signal": "BEARISH",
                "macd": "-0.000412",
                "macd_signal": "-0.000377",
                "macd_histogram": "-0.000035",
                "macd_trend": "BEARISH",
                "sma20": "0.4539",
                "price_vs_sma20": "-0.40",
                "bb_position": "LOWER_HALF",
                "atr": "0.0031",
                "support": "0.4470",
                "resistance": "0.4612",
                "divergence": "NONE",
                "confluence_score": "4/4 BEARISH",
                "entry_price": "0.4521",
                "stop_loss": "0.4552",
                "take_profit1": "0.4475",
                "take_profit2": "0.4444",
                "risk_reward": "1:2.5",
            }
        }


# =============================================================================
# API: IndicatorRequest / IndicatorResponse
# =============================================================================


class IndicatorRequest(BaseModel):
    """Candle series per timeframe; omitted timeframes are skipped."""

    veryShortData: list[list[float]] = Field(default_factory=list)
    shortData: list[list[float]] = Field(default_factory=list)
    longData: list[list[float]] = Field(default_factory=list)

    @field_validator("veryShortData", "shortData", "longData", mode="before")
    @classmethod
    def _coerce_series(cls, value: Any) -> Any:
        return coerce_rows(value)

    @field_validator("veryShortData", "shortData", "longData")
    @classmethod
    def _check_candles(cls, rows: list[list[float]]) -> list[list[float]]:
        return check_candle_rows(rows)

    def series(self) -> dict[AnalysisTimeframe, list[list[float]]]:
        return {
            AnalysisTimeframe.VERY_SHORT: self.veryShortData,
            AnalysisTimeframe.SHORT: self.shortData,
            AnalysisTimeframe.LONG: self.longData,
        }


class IndicatorResponse(BaseModel):
    """Snapshots per timeframe; None means fewer than 26 candles were supplied."""

    very_short: Optional[IndicatorSnapshot] = None
    short: Optional[IndicatorSnapshot] = None
    long: Optional[IndicatorSnapshot] = None
