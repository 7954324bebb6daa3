"""
CONTRACT 1: Market Data

Input: AnalysisRequest (price, candle windows, volumes, sentiment)

Candles arrive exactly as the price provider returns them: ordered rows of
``[timestamp, open, high, low, close(, volume)]``. Rows are kept as plain
float lists so that column positions stay fixed all the way down to the
indicator engine.
"""

from typing import Any, Optional, Union
from pydantic import BaseModel, Field, field_validator


# Column positions inside a candle row
TIMESTAMP = 0
OPEN = 1
HIGH = 2
LOW = 3
CLOSE = 4
VOLUME = 5

CANDLE_MIN_COLUMNS = 5


def coerce_rows(value: Any) -> Any:
    """Anything that is not a list of rows (e.g. a provider error object) means no data."""
    if value is None or not isinstance(value, (list, tuple)):
        return []
    return value


def check_candle_rows(rows: list[list[float]]) -> list[list[float]]:
    for i, row in enumerate(rows):
        if len(row) < CANDLE_MIN_COLUMNS:
            raise ValueError(
                f"candle {i} has {len(row)} columns, expected at least {CANDLE_MIN_COLUMNS}"
            )
    return rows


class Sentiment(BaseModel):
    """Fear & Greed reading."""

    value: Optional[Union[int, float, str]] = None
    value_classification: Optional[str] = None

    @classmethod
    def neutral(cls) -> "Sentiment":
        return cls(value="50", value_classification="Neutral")


class SpotPrice(BaseModel):
    """Spot price with 24h change."""

    price: float
    change_24h: Optional[float] = None


# =============================================================================
# INPUT: AnalysisRequest
# =============================================================================


class AnalysisRequest(BaseModel):
    """
    Request for multi-timeframe narrative analysis.
    Sent by: Dashboard / LiveAnalyst
    Received by: AnalysisOrchestrator

    Field names follow the dashboard's JSON body.
    """

    price: float = Field(..., description="Current price (number or numeric string)")
    change24h: Optional[float] = Field(default=None, description="24h change in percent")
    veryShortData: list[list[float]] = Field(default_factory=list)
    shortData: list[list[float]] = Field(default_factory=list)
    longData: list[list[float]] = Field(default_factory=list)
    volumeData: list[list[float]] = Field(
        default_factory=list,
        description="[timestamp, volume] pairs",
    )
    sentiment: Optional[Sentiment] = None

    @field_validator("veryShortData", "shortData", "longData", "volumeData", mode="before")
    @classmethod
    def _coerce_series(cls, value: Any) -> Any:
        return coerce_rows(value)

    @field_validator("veryShortData", "shortData", "longData")
    @classmethod
    def _check_candles(cls, rows: list[list[float]]) -> list[list[float]]:
        return check_candle_rows(rows)

    @field_validator("volumeData")
    @classmethod
    def _check_volumes(cls, rows: list[list[float]]) -> list[list[float]]:
        for i, row in enumerate(rows):
            if len(row) < 2:
                raise ValueError(f"volume point {i} must be [timestamp, volume]")
        return rows

    class Config:
        json_schema_extra = {
            "example": {
                "price": "0.4521",
                "change24h": -1.84,
                "veryShortData": [[1718000000000, 0.451, 0.455, 0.449, 0.452]],
                "shortData": [[1718000000000, 0.451, 0.455, 0.449, 0.452]],
                "longData": [[1718000000000, 0.43, 0.47, 0.42, 0.452]],
                "volumeData": [[1718000000000, 312000000.0]],
                "sentiment": {"value": "38", "value_classification": "Fear"},
            }
        }
