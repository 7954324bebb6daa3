"""
Indicator Engine Service Interface

Defines the contract for the indicator calculation layer.
"""

from abc import abstractmethod
from typing import Optional, Sequence

from ada_ta.services.base import BaseService
from ada_ta.schemas.indicators import (
    AnalysisTimeframe,
    IndicatorRequest,
    IndicatorResponse,
    IndicatorSnapshot,
)

# Slowest indicator (MACD slow EMA) needs 26 candles
MIN_CANDLES = 26


class IndicatorServiceInterface(BaseService[IndicatorRequest, IndicatorResponse]):
    """
    Indicator Engine Service Contract.

    INPUT: IndicatorRequest
        - candle rows per timeframe (very_short / short / long)

    OUTPUT: IndicatorResponse
        - one IndicatorSnapshot per timeframe
        - None for a timeframe with fewer than MIN_CANDLES candles
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    @abstractmethod
    async def execute(self, input_data: IndicatorRequest) -> IndicatorResponse:
        """Calculate snapshots for every timeframe in the request."""
        pass

    @abstractmethod
    def calculate_snapshot(
        self,
        candles: Sequence[Sequence[float]],
        timeframe: AnalysisTimeframe,
    ) -> Optional[IndicatorSnapshot]:
        """
        Calculate the snapshot for a single timeframe.

        Returns None when fewer than MIN_CANDLES candles are supplied;
        that is a degraded-signal state, not an error.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        pass
