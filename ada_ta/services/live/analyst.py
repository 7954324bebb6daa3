"""
Live Analyst

Server-side rendition of the dashboard refresh loop:
- every cycle: refresh the spot price
- at most once per ``min_analysis_interval``: fetch candles, volumes and
  sentiment, then run the analysis orchestrator
- cycles repeat every ``refresh_interval`` while the loop is running
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from ada_ta.schemas.analysis import LiveAnalysisState
from ada_ta.schemas.market import AnalysisRequest
from ada_ta.services.analysis.orchestrator import AnalysisOrchestrator
from ada_ta.services.base import ServiceError
from ada_ta.services.market_data.coingecko import CoinGeckoClient
from ada_ta.services.market_data.sentiment import FearGreedClient

logger = logging.getLogger(__name__)


class LiveAnalyst:
    """Polls the market data providers and keeps the latest analysis."""

    def __init__(
        self,
        orchestrator: AnalysisOrchestrator,
        market_data: CoinGeckoClient,
        sentiment: FearGreedClient,
        coin: str = "cardano",
        refresh_interval: float = 600.0,
        min_analysis_interval: float = 119.0,
        short_days: int = 1,
        long_days: int = 365,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.orchestrator = orchestrator
        self.market_data = market_data
        self.sentiment = sentiment
        self.refresh_interval = refresh_interval
        self.min_analysis_interval = min_analysis_interval
        self.short_days = short_days
        self.long_days = long_days
        self._clock = clock

        self.state = LiveAnalysisState(coin=coin)
        self._last_analysis_at: Optional[float] = None
        self._last_refresh_at: Optional[float] = None
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def analysis_due(self) -> bool:
        if self._last_analysis_at is None:
            return True
        return self._clock() - self._last_analysis_at > self.min_analysis_interval

    def snapshot(self) -> LiveAnalysisState:
        """Current state with the countdown to the next cycle."""
        state = self.state.model_copy()
        if self.is_running and self._last_refresh_at is not None:
            elapsed = self._clock() - self._last_refresh_at
            state.next_refresh_in_seconds = max(0.0, self.refresh_interval - elapsed)
        return state

    async def refresh(self, force: bool = False) -> LiveAnalysisState:
        """
        Run one cycle.

        Provider and generation failures are recorded on the state and
        logged, never raised: the loop must survive them.
        """
        async with self._lock:
            self._last_refresh_at = self._clock()
            try:
                spot = await self.market_data.get_spot_price()
                self.state.price = spot.price
                self.state.change_24h = spot.change_24h
                self.state.price_updated_at = datetime.now(timezone.utc)

                if force or self.analysis_due():
                    self._last_analysis_at = self._clock()
                    await self._analyze(spot.price, spot.change_24h)

                self.state.error = None
            except ServiceError as e:
                logger.warning(f"Live refresh failed: {e}")
                self.state.error = e.message
            except ValueError as e:
                # Malformed provider payload rejected by the request schema
                logger.warning(f"Live refresh got unusable market data: {e}")
                self.state.error = "Invalid market data received"
            except Exception as e:
                logger.exception(f"Live refresh failed unexpectedly: {e}")
                self.state.error = "Live refresh failed"

            return self.snapshot()

    async def _analyze(self, price: float, change_24h: Optional[float]) -> None:
        short_candles = await self.market_data.get_ohlc(self.short_days)
        long_candles = await self.market_data.get_ohlc(self.long_days)
        volumes = await self.market_data.get_volumes(self.short_days)
        sentiment = await self.sentiment.get_latest()

        request = AnalysisRequest(
            price=round(price, 4),
            change24h=change_24h,
            veryShortData=short_candles,
            shortData=short_candles,
            longData=long_candles,
            volumeData=volumes,
            sentiment=sentiment,
        )

        self.state.analysis = await self.orchestrator.execute(request)
        self.state.analysis_updated_at = datetime.now(timezone.utc)
        logger.info("Live analysis updated")

    async def _run(self) -> None:
        while True:
            await self.refresh()
            await asyncio.sleep(self.refresh_interval)

    async def start(self) -> None:
        """Start the polling loop."""
        if self.is_running:
            return
        if not self.market_data.is_configured:
            logger.warning("CoinGecko API key not configured - live polling disabled")
            return
        self._task = asyncio.create_task(self._run())
        logger.info(f"Live analyst started (every {self.refresh_interval:g}s)")

    async def stop(self) -> None:
        """Stop the polling loop."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            # The loop already died; nothing left to cancel
            logger.error(f"Live analyst loop had exited with an error: {e}")
        self._task = None
        logger.info("Live analyst stopped")


# Singleton instance
_live_analyst: Optional[LiveAnalyst] = None


def get_live_analyst() -> LiveAnalyst:
    """Get or create the live analyst singleton."""
    global _live_analyst
    if _live_analyst is None:
        from ada_ta.core.config import settings
        from ada_ta.services.analysis import get_analysis_orchestrator
        from ada_ta.services.market_data import get_coingecko_client, get_fear_greed_client

        _live_analyst = LiveAnalyst(
            orchestrator=get_analysis_orchestrator(),
            market_data=get_coingecko_client(),
            sentiment=get_fear_greed_client(),
            coin=settings.coin_id,
            refresh_interval=settings.live_refresh_interval_seconds,
            min_analysis_interval=settings.live_min_analysis_interval_seconds,
            short_days=settings.live_short_days,
            long_days=settings.live_long_days,
        )
    return _live_analyst


async def start_live_analyst() -> LiveAnalyst:
    """Start the live analyst loop."""
    analyst = get_live_analyst()
    await analyst.start()
    return analyst


async def stop_live_analyst() -> None:
    """Stop the live analyst loop."""
    global _live_analyst
    if _live_analyst:
        await _live_analyst.stop()
        _live_analyst = None
