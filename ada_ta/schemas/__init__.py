"""
ADA Analyst Schema Contracts

This module defines all JSON contracts between system components.
"""

from ada_ta.schemas.market import (
    AnalysisRequest,
    Sentiment,
    SpotPrice,
)
from ada_ta.schemas.indicators import (
    AnalysisTimeframe,
    BandPosition,
    Divergence,
    IndicatorRequest,
    IndicatorResponse,
    IndicatorSnapshot,
    MomentumSignal,
    TrendSignal,
)
from ada_ta.schemas.analysis import (
    AnalysisResponse,
    ErrorResponse,
    LiveAnalysisState,
)

__all__ = [
    # Market
    "AnalysisRequest",
    "Sentiment",
    "SpotPrice",
    # Indicators
    "AnalysisTimeframe",
    "BandPosition",
    "Divergence",
    "IndicatorRequest",
    "IndicatorResponse",
    "IndicatorSnapshot",
    "MomentumSignal",
    "TrendSignal",
    # Analysis
    "AnalysisResponse",
    "ErrorResponse",
    "LiveAnalysisState",
]
