"""Shared test fixtures and fakes."""

import asyncio
import math
from typing import Optional

import pytest

from ada_ta.schemas.analysis import AnalysisResponse
from ada_ta.schemas.market import AnalysisRequest, Sentiment, SpotPrice
from ada_ta.services.analysis.orchestrator import AnalysisOrchestrator
from ada_ta.services.cache.analysis_cache import AnalysisCache
from ada_ta.services.indicators import IndicatorService
from ada_ta.services.llm.client import LLMProvider, LLMResponse

START_TS = 1_718_000_000_000
STEP_MS = 30 * 60 * 1000


def make_candles(n: int, base: float = 0.45, step: float = 0.001, wave: float = 0.005) -> list:
    """Deterministic [ts, open, high, low, close] rows: drift plus a sine wave."""
    rows = []
    for i in range(n):
        close = base + step * i + wave * math.sin(i / 3)
        spread = max(abs(close) * 0.004, 0.0001)
        rows.append(
            [START_TS + i * STEP_MS, close - spread / 2, close + spread, close - spread, close]
        )
    return rows


def make_volumes(values: list) -> list:
    return [[START_TS + i * STEP_MS, v] for i, v in enumerate(values)]


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeLLMClient:
    """Records calls; optionally delays, fails, or fails only for matching prompts."""

    def __init__(self, content: str = "narrative", delay: float = 0.0):
        self.content = content
        self.delay = delay
        self.error: Optional[Exception] = None
        self.fail_when: Optional[str] = None
        self.configured = True
        self.calls = 0
        self.system_prompts: list = []
        self.user_prompts: list = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def generate(self, system_prompt, user_prompt, temperature=None, max_tokens=None):
        self.calls += 1
        self.system_prompts.append(system_prompt)
        self.user_prompts.append(user_prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None and (self.fail_when is None or self.fail_when in user_prompt):
            raise self.error
        text = f"{self.content} #{self.calls}" if self.content.strip() else self.content
        return LLMResponse(
            content=text,
            model="fake-model",
            provider=LLMProvider.GROQ,
        )


class FakeResponse:
    """Minimal aiohttp response stand-in usable as an async context manager."""

    def __init__(self, status: int = 200, payload=None, body: str = ""):
        self.status = status
        self._payload = payload
        self._body = body

    async def json(self, content_type="application/json"):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    async def text(self):
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Minimal aiohttp.ClientSession stand-in."""

    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None):
        self.response = response or FakeResponse()
        self.error = error
        self.closed = False
        self.requests: list = []

    def get(self, url, params=None, headers=None):
        self.requests.append({"url": url, "params": params, "headers": headers})
        if self.error is not None:
            raise self.error
        return self.response

    async def close(self):
        self.closed = True


class FakeMarketData:
    """CoinGecko stand-in for the live analyst."""

    def __init__(self, price: float = 0.45216, change_24h: float = -1.5):
        self.price = price
        self.change_24h = change_24h
        self.error: Optional[Exception] = None
        self.is_configured = True
        self.ohlc_days: list = []

    async def get_spot_price(self) -> SpotPrice:
        if self.error is not None:
            raise self.error
        return SpotPrice(price=self.price, change_24h=self.change_24h)

    async def get_ohlc(self, days: int) -> list:
        self.ohlc_days.append(days)
        return make_candles(48 if days == 1 else 365)

    async def get_volumes(self, days: int) -> list:
        return make_volumes([100e6] * 24)


class FakeSentiment:
    async def get_latest(self) -> Sentiment:
        return Sentiment(value="38", value_classification="Fear")


class FakeOrchestrator:
    """Records requests and returns a fixed response (or raises)."""

    def __init__(self):
        self.requests: list = []
        self.error: Optional[Exception] = None

    async def execute(self, request: AnalysisRequest) -> AnalysisResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return AnalysisResponse(veryShortTerm="scalp", shortTerm="day", longTerm="outlook")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def cache(clock):
    return AnalysisCache(ttl_seconds=300, clock=clock)


@pytest.fixture
def orchestrator(fake_llm, cache):
    return AnalysisOrchestrator(
        llm_client=fake_llm,
        cache=cache,
        indicator_service=IndicatorService(),
        timeout_seconds=1.0,
    )


@pytest.fixture
def analysis_request():
    return AnalysisRequest(
        price=0.45216,
        change24h=-1.84,
        veryShortData=make_candles(40),
        shortData=make_candles(48),
        longData=make_candles(120, base=0.3, step=0.002),
        volumeData=make_volumes([100e6] * 19 + [200e6]),
        sentiment=Sentiment(value="38", value_classification="Fear"),
    )
