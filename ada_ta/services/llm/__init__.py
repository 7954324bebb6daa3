"""
LLM Narrative Layer

CONTRACT:
    Input:  IndicatorSnapshot per timeframe + price/sentiment/volume context
    Output: one markdown narrative per timeframe

LLM USAGE:
    - Groq (llama-3.1-8b-instant) by default, OpenAI / Anthropic as fallback
    - Low temperature, short completions (200 tokens)

CRITICAL RULES:
    - LLM does NO math - all numbers come from the Indicator Engine
    - Prompts are rendered null-safe when a timeframe lacks data
"""

from ada_ta.services.llm.client import (
    LLMClient,
    LLMConfig,
    LLMProvider,
    LLMResponse,
    get_llm_client,
)
from ada_ta.services.llm.prompts import (
    PromptPair,
    format_long_prompt,
    format_short_prompt,
    format_very_short_prompt,
    format_volume_analysis,
)

__all__ = [
    # Client
    "LLMClient",
    "LLMConfig",
    "LLMProvider",
    "LLMResponse",
    "get_llm_client",
    # Prompts
    "PromptPair",
    "format_long_prompt",
    "format_short_prompt",
    "format_very_short_prompt",
    "format_volume_analysis",
]
