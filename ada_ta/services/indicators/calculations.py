"""
Technical Indicator Calculations

Pure NumPy implementations of technical indicators and the rule-based
classifiers built on top of them.
NO LLM INVOLVEMENT - All math is deterministic.

Every series function returns an array aligned to its input, with NaN
wherever the lookback is not yet satisfied.
"""

import math
import numpy as np
from typing import Optional

from ada_ta.schemas.indicators import (
    BandPosition,
    Divergence,
    MomentumSignal,
    TrendSignal,
)


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def sma(data: np.ndarray, period: int) -> np.ndarray:
    """Simple Moving Average."""
    if len(data) < period:
        return np.full(len(data), np.nan)

    result = np.full(len(data), np.nan)
    for i in range(period - 1, len(data)):
        result[i] = np.mean(data[i - period + 1 : i + 1])
    return result


def ema(data: np.ndarray, period: int) -> np.ndarray:
    """
    Exponential Moving Average.

    Seeded with the SMA of the first ``period`` valid values. Leading NaNs
    are skipped so that EMA-of-an-indicator (e.g. the MACD signal line)
    starts where the indicator does.
    """
    result = np.full(len(data), np.nan)

    valid = np.flatnonzero(~np.isnan(data))
    if len(valid) == 0:
        return result

    start = valid[0]
    if len(data) - start < period:
        return result

    multiplier = 2 / (period + 1)

    # Start with SMA
    seed = start + period - 1
    result[seed] = np.mean(data[start : seed + 1])

    # Calculate EMA
    for i in range(seed + 1, len(data)):
        result[i] = (data[i] - result[i - 1]) * multiplier + result[i - 1]

    return result


def wilder_smoothing(data: np.ndarray, period: int) -> np.ndarray:
    """Wilder's moving average (RMA), seeded with the SMA of the first valid values."""
    result = np.full(len(data), np.nan)

    valid = np.flatnonzero(~np.isnan(data))
    if len(valid) == 0:
        return result

    start = valid[0]
    if len(data) - start < period:
        return result

    seed = start + period - 1
    result[seed] = np.mean(data[start : seed + 1])

    for i in range(seed + 1, len(data)):
        result[i] = (result[i - 1] * (period - 1) + data[i]) / period

    return result


# =============================================================================
# MOMENTUM INDICATORS
# =============================================================================


def rsi(closes: np.ndarray, period: int = 14) -> np.ndarray:
    """Relative Strength Index."""
    if len(closes) < period + 1:
        return np.full(len(closes), np.nan)

    # Calculate price changes
    deltas = np.diff(closes)

    # Separate gains and losses
    gains = np.where(deltas > 0, deltas, 0)
    losses = np.where(deltas < 0, -deltas, 0)

    # First average
    avg_gain = np.mean(gains[:period])
    avg_loss = np.mean(losses[:period])

    result = np.full(len(closes), np.nan)

    # First RSI
    if avg_loss == 0:
        result[period] = 100
    else:
        rs = avg_gain / avg_loss
        result[period] = 100 - (100 / (1 + rs))

    # Subsequent RSI values using smoothed averages
    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period

        if avg_loss == 0:
            result[i + 1] = 100
        else:
            rs = avg_gain / avg_loss
            result[i + 1] = 100 - (100 / (1 + rs))

    return result


def macd(
    closes: np.ndarray,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    MACD (Moving Average Convergence Divergence).

    Both the oscillator and the signal line use exponential averages.

    Returns: (macd_line, signal_line, histogram)
    """
    fast_ema = ema(closes, fast_period)
    slow_ema = ema(closes, slow_period)

    macd_line = fast_ema - slow_ema

    # Signal line is EMA of MACD line
    signal_line = ema(macd_line, signal_period)

    # Histogram
    histogram = macd_line - signal_line

    return macd_line, signal_line, histogram


# =============================================================================
# VOLATILITY INDICATORS
# =============================================================================


def true_range(highs: np.ndarray, lows: np.ndarray, closes: np.ndarray) -> np.ndarray:
    """True Range. Undefined for the first candle (no previous close)."""
    tr = np.full(len(closes), np.nan)

    for i in range(1, len(closes)):
        tr[i] = max(
            highs[i] - lows[i],
            abs(highs[i] - closes[i - 1]),
            abs(lows[i] - closes[i - 1]),
        )

    return tr


def atr(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 14
) -> np.ndarray:
    """Average True Range (Wilder smoothing of the true range)."""
    if len(closes) < 2:
        return np.full(len(closes), np.nan)

    return wilder_smoothing(true_range(highs, lows, closes), period)


def bollinger_bands(
    closes: np.ndarray, period: int = 20, std_dev: float = 2.0
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Bollinger Bands (population standard deviation).

    Returns: (upper, middle, lower)
    """
    middle = sma(closes, period)

    # Standard deviation
    std = np.full(len(closes), np.nan)
    for i in range(period - 1, len(closes)):
        std[i] = np.std(closes[i - period + 1 : i + 1])

    upper = middle + (std_dev * std)
    lower = middle - (std_dev * std)

    return upper, middle, lower


# =============================================================================
# SUPPORT/RESISTANCE
# =============================================================================


def rolling_levels(
    highs: np.ndarray, lows: np.ndarray, lookback: int = 20
) -> tuple[Optional[float], Optional[float]]:
    """
    Support/resistance as the lowest low / highest high of the trailing window.

    Returns: (support, resistance)
    """
    if len(highs) == 0 or len(lows) == 0:
        return None, None
    return float(np.min(lows[-lookback:])), float(np.max(highs[-lookback:]))


# =============================================================================
# CLASSIFIERS
# =============================================================================


def classify_momentum(value: Optional[float]) -> MomentumSignal:
    """
    Classify an RSI reading.

    Bands take precedence over the midline lean; exactly 50 leans bearish.
    """
    if value is None or math.isnan(value):
        return MomentumSignal.NEUTRAL
    if value > 70:
        return MomentumSignal.OVERBOUGHT
    if value < 30:
        return MomentumSignal.OVERSOLD
    if value > 50:
        return MomentumSignal.BULLISH
    return MomentumSignal.BEARISH


def classify_trend(
    macd_value: Optional[float], signal_value: Optional[float]
) -> TrendSignal:
    """MACD line above its signal is bullish, below is bearish."""
    if macd_value is None or signal_value is None:
        return TrendSignal.NEUTRAL
    if macd_value > signal_value:
        return TrendSignal.BULLISH
    if macd_value < signal_value:
        return TrendSignal.BEARISH
    return TrendSignal.NEUTRAL


def classify_band_position(
    price: float,
    upper: Optional[float],
    middle: Optional[float],
    lower: Optional[float],
) -> BandPosition:
    """Where the close sits relative to the Bollinger Bands."""
    if upper is None or middle is None or lower is None:
        return BandPosition.NEUTRAL
    if price > upper:
        return BandPosition.ABOVE_UPPER
    if price < lower:
        return BandPosition.BELOW_LOWER
    if price > middle:
        return BandPosition.UPPER_HALF
    return BandPosition.LOWER_HALF


def detect_divergence(
    price: float,
    prev_price: Optional[float],
    rsi_value: Optional[float],
    prev_rsi: Optional[float],
) -> Divergence:
    """
    Detect a one-step RSI/price divergence.

    Bullish: price falls while RSI rises, with RSI below 40.
    Bearish: price rises while RSI falls, with RSI above 60.
    """
    if prev_price is None or rsi_value is None or prev_rsi is None:
        return Divergence.NONE

    if price < prev_price and rsi_value > prev_rsi and rsi_value < 40:
        return Divergence.BULLISH

    if price > prev_price and rsi_value < prev_rsi and rsi_value > 60:
        return Divergence.BEARISH

    return Divergence.NONE


def tally_confluence(
    momentum: MomentumSignal,
    trend: TrendSignal,
    price: float,
    sma20_value: Optional[float],
    sma50_value: Optional[float],
    band_position: BandPosition,
) -> tuple[int, int]:
    """
    Count bullish and bearish votes among five binary checks.

    A missing SMA20 or SMA50 votes bearish. A missing RSI, MACD or
    band reading casts no vote.

    Returns: (bullish, bearish)
    """
    bullish = 0
    bearish = 0

    if momentum in (MomentumSignal.OVERSOLD, MomentumSignal.BULLISH):
        bullish += 1
    elif momentum in (MomentumSignal.OVERBOUGHT, MomentumSignal.BEARISH):
        bearish += 1

    if trend == TrendSignal.BULLISH:
        bullish += 1
    elif trend == TrendSignal.BEARISH:
        bearish += 1

    # A missing average counts against the price
    for average in (sma20_value, sma50_value):
        if average is not None and price > average:
            bullish += 1
        else:
            bearish += 1

    # Band extremes vote for mean reversion
    if band_position == BandPosition.BELOW_LOWER:
        bullish += 1
    elif band_position == BandPosition.ABOVE_UPPER:
        bearish += 1

    return bullish, bearish


def confluence_score(bullish: int, bearish: int) -> str:
    """Render the tally as "B/T BULLISH", "B/T BEARISH" or "NEUTRAL"."""
    total = bullish + bearish
    if bullish > bearish:
        return f"{bullish}/{total} BULLISH"
    if bearish > bullish:
        return f"{bearish}/{total} BEARISH"
    return "NEUTRAL"


def trade_levels(
    entry: float, atr_value: float, multiplier: float, bullish: bool
) -> tuple[float, float, float]:
    """
    Stop loss and two targets at 1.5x and 2.5x the stop distance.

    Returns: (stop_loss, take_profit1, take_profit2)
    """
    stop_distance = atr_value * multiplier

    if bullish:
        return (
            entry - stop_distance,
            entry + stop_distance * 1.5,
            entry + stop_distance * 2.5,
        )

    return (
        entry + stop_distance,
        entry - stop_distance * 1.5,
        entry - stop_distance * 2.5,
    )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_last_valid(arr: np.ndarray) -> Optional[float]:
    """Get last value from array, None if it is NaN."""
    if len(arr) == 0 or np.isnan(arr[-1]):
        return None
    return float(arr[-1])


def get_previous_valid(arr: np.ndarray) -> Optional[float]:
    """Get the value before the last one, None if it is NaN."""
    if len(arr) < 2 or np.isnan(arr[-2]):
        return None
    return float(arr[-2])


def format_value(value: Optional[float], decimals: int) -> Optional[str]:
    """Fixed-precision string, None for missing values."""
    if value is None or math.isnan(value):
        return None
    return f"{value:.{decimals}f}"
