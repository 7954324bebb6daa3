"""
Indicator Engine Service Implementation

Calculates the per-timeframe technical snapshot from raw candle rows.
NO LLM INVOLVEMENT - Pure NumPy calculations.
"""

from typing import Optional, Sequence
import numpy as np

from ada_ta.schemas.market import CLOSE, HIGH, LOW
from ada_ta.schemas.indicators import (
    AnalysisTimeframe,
    IndicatorRequest,
    IndicatorResponse,
    IndicatorSnapshot,
)
from ada_ta.services.indicators.interface import IndicatorServiceInterface, MIN_CANDLES
from ada_ta.services.indicators.calculations import (
    sma,
    ema,
    rsi,
    macd,
    atr,
    bollinger_bands,
    rolling_levels,
    classify_momentum,
    classify_trend,
    classify_band_position,
    detect_divergence,
    tally_confluence,
    confluence_score,
    trade_levels,
    get_last_valid,
    get_previous_valid,
    format_value,
)

PRICE_DECIMALS = 4
MACD_DECIMALS = 6
PERCENT_DECIMALS = 2

LEVELS_LOOKBACK = 20


def _candles_to_arrays(candles: Sequence[Sequence[float]]) -> tuple:
    """Extract close/high/low columns by fixed position."""
    closes = np.array([float(c[CLOSE]) for c in candles])
    highs = np.array([float(c[HIGH]) for c in candles])
    lows = np.array([float(c[LOW]) for c in candles])
    return closes, highs, lows


def _percent_from(price: float, reference: Optional[float]) -> Optional[float]:
    if reference is None or reference == 0:
        return None
    return ((price - reference) / reference) * 100


class IndicatorService(IndicatorServiceInterface):
    """
    Indicator Engine Service.

    Computes RSI(14), MACD(12/26/9), SMA(20/50), EMA(9/21), Bollinger(20, 2),
    ATR(14), rolling support/resistance, divergence and the confluence tally.
    All calculations are deterministic and reproducible.
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    async def execute(self, input_data: IndicatorRequest) -> IndicatorResponse:
        """Calculate snapshots for every timeframe in the request."""
        snapshots = {
            timeframe.value: self.calculate_snapshot(rows, timeframe)
            for timeframe, rows in input_data.series().items()
        }
        return IndicatorResponse(**snapshots)

    def calculate_snapshot(
        self,
        candles: Sequence[Sequence[float]],
        timeframe: AnalysisTimeframe,
    ) -> Optional[IndicatorSnapshot]:
        """Calculate the snapshot for one timeframe."""
        if len(candles) < MIN_CANDLES:
            return None

        closes, highs, lows = _candles_to_arrays(candles)

        current = float(closes[-1])
        prev_close = float(closes[-2])

        # Momentum
        rsi_arr = rsi(closes, 14)
        rsi_val = get_last_valid(rsi_arr)
        prev_rsi = get_previous_valid(rsi_arr)
        momentum = classify_momentum(rsi_val)

        # Trend
        macd_line, signal_line, histogram = macd(closes, 12, 26, 9)
        macd_val = get_last_valid(macd_line)
        signal_val = get_last_valid(signal_line)
        hist_val = get_last_valid(histogram)
        trend = classify_trend(macd_val, signal_val)

        # Moving averages
        sma_20 = get_last_valid(sma(closes, 20))
        sma_50 = get_last_valid(sma(closes, 50))
        ema_9 = get_last_valid(ema(closes, 9))
        ema_21 = get_last_valid(ema(closes, 21))

        # Volatility
        upper, middle, lower = bollinger_bands(closes, 20, 2.0)
        bb_upper = get_last_valid(upper)
        bb_middle = get_last_valid(middle)
        bb_lower = get_last_valid(lower)
        band_position = classify_band_position(current, bb_upper, bb_middle, bb_lower)
        atr_val = get_last_valid(atr(highs, lows, closes, 14))

        support, resistance = rolling_levels(highs, lows, LEVELS_LOOKBACK)

        divergence = detect_divergence(current, prev_close, rsi_val, prev_rsi)

        bullish, bearish = tally_confluence(
            momentum, trend, current, sma_20, sma_50, band_position
        )

        if atr_val is not None:
            stop_loss, take_profit1, take_profit2 = trade_levels(
                current, atr_val, timeframe.atr_multiplier, bullish > bearish
            )
        else:
            stop_loss = take_profit1 = take_profit2 = None

        return IndicatorSnapshot(
            timeframe=timeframe,
            rsi=format_value(rsi_val, PERCENT_DECIMALS),
            rsi_signal=momentum,
            macd=format_value(macd_val, MACD_DECIMALS),
            macd_signal=format_value(signal_val, MACD_DECIMALS),
            macd_histogram=format_value(hist_val, MACD_DECIMALS),
            macd_trend=trend,
            sma20=format_value(sma_20, PRICE_DECIMALS),
            sma50=format_value(sma_50, PRICE_DECIMALS),
            ema9=format_value(ema_9, PRICE_DECIMALS),
            ema21=format_value(ema_21, PRICE_DECIMALS),
            price_vs_sma20=format_value(_percent_from(current, sma_20), PERCENT_DECIMALS),
            price_vs_sma50=format_value(_percent_from(current, sma_50), PERCENT_DECIMALS),
            bb_upper=format_value(bb_upper, PRICE_DECIMALS),
            bb_middle=format_value(bb_middle, PRICE_DECIMALS),
            bb_lower=format_value(bb_lower, PRICE_DECIMALS),
            bb_position=band_position,
            atr=format_value(atr_val, PRICE_DECIMALS),
            support=format_value(support, PRICE_DECIMALS),
            resistance=format_value(resistance, PRICE_DECIMALS),
            divergence=divergence,
            bullish_signals=bullish,
            bearish_signals=bearish,
            confluence_score=confluence_score(bullish, bearish),
            entry_price=format_value(current, PRICE_DECIMALS),
            stop_loss=format_value(stop_loss, PRICE_DECIMALS),
            take_profit1=format_value(take_profit1, PRICE_DECIMALS),
            take_profit2=format_value(take_profit2, PRICE_DECIMALS),
        )

    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        return True


# Singleton instance
_service_instance: Optional[IndicatorService] = None


def get_indicator_service() -> IndicatorService:
    """Get or create indicator service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = IndicatorService()
    return _service_instance
