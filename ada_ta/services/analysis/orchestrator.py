"""
Analysis Orchestrator

CONTRACT:
    Input:  AnalysisRequest (price, 24h change, three candle windows,
            volumes, sentiment)
    Output: AnalysisResponse (one narrative per timeframe)

FLOW:
    1. Indicator snapshot per timeframe (None below 26 candles)
    2. Fingerprint from rounded price + selected indicator fields
    3. Fresh cache hit -> return without any generation call
    4. Miss -> sweep expired entries, then generate the three narratives
       concurrently under one shared timeout
    5. Success -> store under the fingerprint
       Timeout -> stale entry for the fingerprint if any, else 504
       Other failure -> per-timeframe GenerationError (500)

Concurrent requests with the same fingerprint share one in-flight
generation instead of each calling the LLM.
"""

import asyncio
import logging
from typing import Optional

from ada_ta.schemas.analysis import AnalysisResponse
from ada_ta.schemas.indicators import AnalysisTimeframe, IndicatorSnapshot
from ada_ta.schemas.market import AnalysisRequest
from ada_ta.services.base import (
    AnalysisTimeoutError,
    BaseService,
    ConfigurationError,
    GenerationError,
)
from ada_ta.services.cache.analysis_cache import AnalysisCache, build_fingerprint
from ada_ta.services.indicators import IndicatorService, get_indicator_service
from ada_ta.services.llm.client import LLMClient, get_llm_client
from ada_ta.services.llm.prompts import (
    PromptPair,
    format_long_prompt,
    format_short_prompt,
    format_very_short_prompt,
    format_volume_analysis,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
EMPTY_NARRATIVE = "No analysis"

Snapshots = dict[AnalysisTimeframe, Optional[IndicatorSnapshot]]


class AnalysisOrchestrator(BaseService[AnalysisRequest, AnalysisResponse]):
    """
    Cache-fronted, timeout-bounded narrative generation.

    The cache is owned by the orchestrator and injected at construction.
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        cache: Optional[AnalysisCache] = None,
        indicator_service: Optional[IndicatorService] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        coin_name: str = "Cardano",
        coin_symbol: str = "ADA",
    ):
        self._llm_client = llm_client
        self.cache = cache if cache is not None else AnalysisCache()
        self.indicator_service = indicator_service or get_indicator_service()
        self.timeout_seconds = timeout_seconds
        self.coin_name = coin_name
        self.coin_symbol = coin_symbol
        self._in_flight: dict[str, asyncio.Future] = {}

    @property
    def name(self) -> str:
        return "AnalysisOrchestrator"

    @property
    def llm_client(self) -> LLMClient:
        """Lazy initialization of LLM client."""
        if self._llm_client is None:
            self._llm_client = get_llm_client()
        return self._llm_client

    @property
    def in_flight(self) -> int:
        """Number of generations currently running."""
        return len(self._in_flight)

    async def execute(self, input_data: AnalysisRequest) -> AnalysisResponse:
        """Return narratives for the request, from cache when possible."""
        snapshots = self.calculate_snapshots(input_data)
        key = build_fingerprint(
            input_data.price,
            snapshots[AnalysisTimeframe.VERY_SHORT],
            snapshots[AnalysisTimeframe.SHORT],
            snapshots[AnalysisTimeframe.LONG],
        )

        cached = self.cache.get_fresh(key)
        if cached is not None:
            return cached.data

        pending = self._in_flight.get(key)
        if pending is None:
            if not self.llm_client.is_configured:
                raise ConfigurationError(
                    self.name,
                    "LLM API key not configured",
                )

            # The entry being regenerated survives the sweep as stale fallback
            self.cache.sweep(keep=key)

            pending = asyncio.ensure_future(self._generate(key, input_data, snapshots))
            self._in_flight[key] = pending
            pending.add_done_callback(lambda task: self._release(key, task))
        else:
            logger.info("Joining in-flight analysis for identical fingerprint")

        try:
            return await asyncio.shield(pending)
        except asyncio.TimeoutError:
            stale = self.cache.get_stale(key)
            if stale is not None:
                logger.info("[FALLBACK] Returning stale cached data due to timeout")
                return stale.data
            raise AnalysisTimeoutError(self.name, self.timeout_seconds)

    def calculate_snapshots(self, request: AnalysisRequest) -> Snapshots:
        return {
            AnalysisTimeframe.VERY_SHORT: self.indicator_service.calculate_snapshot(
                request.veryShortData, AnalysisTimeframe.VERY_SHORT
            ),
            AnalysisTimeframe.SHORT: self.indicator_service.calculate_snapshot(
                request.shortData, AnalysisTimeframe.SHORT
            ),
            AnalysisTimeframe.LONG: self.indicator_service.calculate_snapshot(
                request.longData, AnalysisTimeframe.LONG
            ),
        }

    def build_prompts(
        self, request: AnalysisRequest, snapshots: Snapshots
    ) -> dict[AnalysisTimeframe, PromptPair]:
        volume_analysis = format_volume_analysis(request.volumeData)
        return {
            AnalysisTimeframe.VERY_SHORT: format_very_short_prompt(
                coin_name=self.coin_name,
                price=request.price,
                change_24h=request.change24h,
                sentiment=request.sentiment,
                snapshot=snapshots[AnalysisTimeframe.VERY_SHORT],
                volume_analysis=volume_analysis,
            ),
            AnalysisTimeframe.SHORT: format_short_prompt(
                coin_name=self.coin_name,
                snapshot=snapshots[AnalysisTimeframe.SHORT],
            ),
            AnalysisTimeframe.LONG: format_long_prompt(
                coin_name=self.coin_name,
                coin_symbol=self.coin_symbol,
                snapshot=snapshots[AnalysisTimeframe.LONG],
            ),
        }

    async def _generate(
        self, key: str, request: AnalysisRequest, snapshots: Snapshots
    ) -> AnalysisResponse:
        """Fan out one generation per timeframe and join under the shared timeout."""
        prompts = self.build_prompts(request, snapshots)
        timeframes = list(prompts)

        logger.info("[CACHE MISS] Fetching fresh analysis from LLM...")

        try:
            results = await asyncio.wait_for(
                asyncio.gather(
                    *(self._generate_one(prompts[tf]) for tf in timeframes),
                    return_exceptions=True,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(f"LLM timeout - request took longer than {self.timeout_seconds:g}s")
            raise

        failures = {
            tf.value: str(result) or type(result).__name__
            for tf, result in zip(timeframes, results)
            if isinstance(result, BaseException)
        }
        if failures:
            logger.error(f"LLM generation failed for {sorted(failures)}: {failures}")
            raise GenerationError(self.name, self._failure_message(failures), failures)

        narratives = dict(zip(timeframes, results))
        response = AnalysisResponse(
            veryShortTerm=narratives[AnalysisTimeframe.VERY_SHORT],
            shortTerm=narratives[AnalysisTimeframe.SHORT],
            longTerm=narratives[AnalysisTimeframe.LONG],
        )

        self.cache.set(key, response)
        return response

    async def _generate_one(self, prompt: PromptPair) -> str:
        response = await self.llm_client.generate(
            system_prompt=prompt.system,
            user_prompt=prompt.user,
        )
        return (response.content or "").strip() or EMPTY_NARRATIVE

    @staticmethod
    def _failure_message(failures: dict[str, str]) -> str:
        messages = set(failures.values())
        if len(messages) == 1:
            return messages.pop()
        return "; ".join(f"{tf}: {message}" for tf, message in failures.items())

    def _release(self, key: str, task: asyncio.Future) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        # Mark the outcome as retrieved even if every waiter went away
        if not task.cancelled():
            task.exception()

    async def health_check(self) -> bool:
        """Healthy when at least one LLM provider is configured."""
        return self.llm_client.is_configured


# Singleton instance
_orchestrator: Optional[AnalysisOrchestrator] = None


def get_analysis_orchestrator() -> AnalysisOrchestrator:
    """Get or create the orchestrator singleton (owns the process-wide cache)."""
    global _orchestrator
    if _orchestrator is None:
        from ada_ta.core.config import settings

        _orchestrator = AnalysisOrchestrator(
            cache=AnalysisCache(ttl_seconds=settings.analysis_cache_ttl_seconds),
            timeout_seconds=settings.analysis_timeout_seconds,
            coin_name=settings.coin_name,
            coin_symbol=settings.coin_symbol,
        )
    return _orchestrator
