"""
CONTRACT 3: Narrative Analysis

Output of the analysis orchestrator and the live analyst.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class AnalysisResponse(BaseModel):
    """Three narratives, one per timeframe. Keys follow the dashboard's JSON."""

    veryShortTerm: str
    shortTerm: str
    longTerm: str


class ErrorResponse(BaseModel):
    """Error body returned with 5xx statuses."""

    error: str


class LiveAnalysisState(BaseModel):
    """Latest state of the server-side polling loop."""

    coin: str
    price: Optional[float] = None
    change_24h: Optional[float] = None
    analysis: Optional[AnalysisResponse] = None
    error: Optional[str] = Field(default=None, description="Last refresh error, if any")
    price_updated_at: Optional[datetime] = None
    analysis_updated_at: Optional[datetime] = None
    next_refresh_in_seconds: Optional[float] = None
