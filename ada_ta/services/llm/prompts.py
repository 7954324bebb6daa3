"""
LLM Prompt Templates

One prompt per timeframe:
- very short (6 hours): scalping setup, with sentiment and volume context
- short (24 hours): day-trading signal from the confluence snapshot
- long (365 days): educational long-term outlook with pre-computed levels

RULES (enforced in all prompts):
- LLM does NO math - all numbers come from the indicator snapshot
- Missing indicator values render as empty strings, never fail
- Long-term output is framed as education, not financial advice
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence

from ada_ta.schemas.indicators import IndicatorSnapshot
from ada_ta.schemas.market import Sentiment


@dataclass
class PromptPair:
    """System + user message for one generation call."""

    system: Optional[str]
    user: str


def _v(value: Any) -> str:
    """Render a prompt field; missing values become empty strings."""
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _field(snapshot: Optional[IndicatorSnapshot], name: str) -> str:
    if snapshot is None:
        return ""
    return _v(getattr(snapshot, name))


# =============================================================================
# VOLUME CONTEXT
# =============================================================================

NO_VOLUME_DATA = "No volume data supplied"

VOLUME_AVERAGE_WINDOW = 20


def format_volume_analysis(volume_data: Sequence[Sequence[float]]) -> str:
    """
    Summarize [timestamp, volume] points: latest vs 20-point average.

    Above +20% reads as buying pressure, below -20% as low interest.
    """
    if not volume_data:
        return NO_VOLUME_DATA

    volumes = [float(point[1]) for point in volume_data]
    current_volume = volumes[-1]
    window = volumes[-VOLUME_AVERAGE_WINDOW:]
    avg_volume = sum(window) / len(window)

    if avg_volume > 0:
        volume_change = ((current_volume - avg_volume) / avg_volume) * 100
    else:
        volume_change = 0.0

    if volume_change > 20:
        trend = "HIGH BUYING PRESSURE"
    elif volume_change < -20:
        trend = "LOW INTEREST"
    else:
        trend = "NORMAL"

    sign = "+" if volume_change > 0 else ""

    return "\n".join(
        [
            f"Current Volume: ${current_volume / 1_000_000:.2f}M",
            f"Average Volume ({VOLUME_AVERAGE_WINDOW}p): ${avg_volume / 1_000_000:.2f}M",
            f"Volume vs Avg: {sign}{volume_change:.2f}%",
            f"Trend: {trend}",
        ]
    )


# =============================================================================
# VERY SHORT TERM (scalping, 6 hours)
# =============================================================================

VERY_SHORT_SYSTEM_PROMPT = (
    "You are a high-frequency trading analyst specializing in scalping strategies. "
    "Provide ultra-short-term technical analysis based on 6-hour price action. "
    "Be concise, direct, and focus on immediate setups."
)

VERY_SHORT_USER_PROMPT_TEMPLATE = """{coin_name} SCALPING Analysis (6 Hours)
Current Price: ${price}
24h Change: {change_24h}%

MARKET SENTIMENT:
Fear & Greed Index: {sentiment_value} ({sentiment_classification})

TECHNICAL DATA (6-Hour Window):
RSI (14): {rsi}
MACD: {macd_histogram}
MACD Trend: {macd_trend}
Support: {support}
Resistance: {resistance}

VOLUME DATA:
{volume_analysis}

Provide a SCALPING analysis in this EXACT format:

**SCALP BIAS**
[BULLISH/BEARISH/NEUTRAL] (Confidence: 1-10)
[Briefly mention how sentiment affects this bias]

**IMMEDIATE SETUP**
• Entry Zone: [Price]
• Stop Loss: [Price] (Tight)
• Take Profit: [Price] (Quick)

**KEY INDICATORS**
• Momentum: [Brief comment on RSI/MACD]
• Volume: [Analyze the volume data provided above]
• Sentiment: [Comment on Fear & Greed impact]

**WARNING**
[One sentence risk warning]"""


def format_very_short_prompt(
    coin_name: str,
    price: float,
    change_24h: Optional[float],
    sentiment: Optional[Sentiment],
    snapshot: Optional[IndicatorSnapshot],
    volume_analysis: str,
) -> PromptPair:
    """Scalping prompt for the 6-hour window."""
    user = VERY_SHORT_USER_PROMPT_TEMPLATE.format(
        coin_name=coin_name,
        price=_v(price),
        change_24h=_v(change_24h),
        sentiment_value=_v(sentiment.value if sentiment else None),
        sentiment_classification=_v(sentiment.value_classification if sentiment else None),
        rsi=_field(snapshot, "rsi"),
        macd_histogram=_field(snapshot, "macd_histogram"),
        macd_trend=_field(snapshot, "macd_trend"),
        support=_field(snapshot, "support"),
        resistance=_field(snapshot, "resistance"),
        volume_analysis=volume_analysis,
    )
    return PromptPair(system=VERY_SHORT_SYSTEM_PROMPT, user=user)


# =============================================================================
# SHORT TERM (day trading, 24 hours)
# =============================================================================

SHORT_USER_PROMPT_TEMPLATE = """{coin_name} DAY TRADING Analysis (24 Hours)

📊 **INDICATORS:**
RSI(14): {rsi} [{rsi_signal}]
MACD Trend: {macd_trend}
MACD Histogram: {macd_histogram}
Price vs SMA20: {price_vs_sma20}% | vs SMA50: {price_vs_sma50}%
Bollinger: {bb_position}
Divergence: {divergence}
Confluence: {confluence_score}

Provide analysis in this EXACT format using markdown:

**SIGNAL:** BULLISH/BEARISH/NEUTRAL
**CONFIDENCE:** Very High/High/Medium/Low

📊 **KEY FACTORS:**
• [Indicator 1]
• [Indicator 2]
• [Indicator 3]

⚠️ **WATCH:** [Key level or risk]"""


def format_short_prompt(
    coin_name: str,
    snapshot: Optional[IndicatorSnapshot],
) -> PromptPair:
    """Day-trading prompt for the 24-hour window."""
    user = SHORT_USER_PROMPT_TEMPLATE.format(
        coin_name=coin_name,
        rsi=_field(snapshot, "rsi"),
        rsi_signal=_field(snapshot, "rsi_signal"),
        macd_trend=_field(snapshot, "macd_trend"),
        macd_histogram=_field(snapshot, "macd_histogram"),
        price_vs_sma20=_field(snapshot, "price_vs_sma20"),
        price_vs_sma50=_field(snapshot, "price_vs_sma50"),
        bb_position=_field(snapshot, "bb_position"),
        divergence=_field(snapshot, "divergence"),
        confluence_score=_field(snapshot, "confluence_score"),
    )
    return PromptPair(system=None, user=user.strip())


# =============================================================================
# LONG TERM (educational outlook, 365 days)
# =============================================================================

LONG_USER_PROMPT_TEMPLATE = """You are a technical analysis bot providing educational market analysis based on technical indicators. This is NOT financial advice.

{coin_name} ({coin_symbol}) Long-Term Technical Outlook (365-Day Timeframe)

Current Technical Indicators:
- RSI(14): {rsi} [{rsi_signal}]
- MACD Trend: {macd_trend}
- MACD Histogram: {macd_histogram}
- Price vs SMA20: {price_vs_sma20}%
- Price vs SMA50: {price_vs_sma50}%
- RSI/Price Divergence: {divergence}
- Technical Confluence: {confluence_score}
- Support Level: ${support}
- Resistance Level: ${resistance}

Provide a technical analysis summary in this EXACT format:

**TECHNICAL BIAS:** BULLISH/BEARISH/NEUTRAL
**CONFIDENCE:** 1-10

📊 **TECHNICAL FACTORS:**
• [Key technical indicator observation 1]
• [Key technical indicator observation 2]
• [Key technical indicator observation 3]

🎯 **TECHNICAL LEVELS (Educational):**
Current Price: ${entry_price}
Risk Level: ${stop_loss} ([X]%)
Target Zone 1: ${take_profit1} ([X]%)
Target Zone 2: ${take_profit2} ([X]%)
Risk/Reward: {risk_reward}

⚠️ **KEY LEVEL TO MONITOR:** [Important support/resistance or trend level]

Remember: This is educational technical analysis only, not investment advice."""


def format_long_prompt(
    coin_name: str,
    coin_symbol: str,
    snapshot: Optional[IndicatorSnapshot],
) -> PromptPair:
    """Educational long-term prompt for the 365-day window."""
    fields = {
        name: _field(snapshot, name)
        for name in (
            "rsi",
            "rsi_signal",
            "macd_trend",
            "macd_histogram",
            "price_vs_sma20",
            "price_vs_sma50",
            "divergence",
            "confluence_score",
            "support",
            "resistance",
            "entry_price",
            "stop_loss",
            "take_profit1",
            "take_profit2",
            "risk_reward",
        )
    }
    user = LONG_USER_PROMPT_TEMPLATE.format(
        coin_name=coin_name,
        coin_symbol=coin_symbol,
        **fields,
    )
    return PromptPair(system=None, user=user.strip())
