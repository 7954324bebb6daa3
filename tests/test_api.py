"""HTTP tests through the ASGI app with service dependencies overridden."""

import httpx
import pytest

from ada_ta.main import app
from ada_ta.schemas.analysis import LiveAnalysisState
from ada_ta.schemas.market import Sentiment
from ada_ta.services.analysis import get_analysis_orchestrator
from ada_ta.services.base import (
    AnalysisTimeoutError,
    ConfigurationError,
    ExternalAPIError,
    GenerationError,
)
from ada_ta.services.live import get_live_analyst
from ada_ta.services.market_data import get_coingecko_client, get_fear_greed_client

from tests.conftest import FakeOrchestrator, make_candles, make_volumes


@pytest.fixture
def payload():
    return {
        "price": "0.4521",
        "change24h": -1.84,
        "veryShortData": make_candles(40),
        "shortData": make_candles(48),
        "longData": make_candles(120),
        "volumeData": make_volumes([100e6] * 20),
        "sentiment": {"value": "38", "value_classification": "Fear"},
    }


@pytest.fixture
def overrides():
    yield app.dependency_overrides
    app.dependency_overrides.clear()


def _client():
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


class TestAnalysisEndpoint:
    @pytest.mark.asyncio
    async def test_success(self, overrides, orchestrator, payload):
        overrides[get_analysis_orchestrator] = lambda: orchestrator
        async with _client() as client:
            r = await client.post("/api/v1/analysis", json=payload)
        assert r.status_code == 200
        body = r.json()
        assert set(body) == {"veryShortTerm", "shortTerm", "longTerm"}

    @pytest.mark.asyncio
    async def test_repeat_request_is_cached(self, overrides, orchestrator, fake_llm, payload):
        overrides[get_analysis_orchestrator] = lambda: orchestrator
        async with _client() as client:
            first = await client.post("/api/v1/analysis", json=payload)
            second = await client.post("/api/v1/analysis", json=payload)
        assert first.json() == second.json()
        assert fake_llm.calls == 3

    @pytest.mark.asyncio
    async def test_timeout_is_504(self, overrides, payload):
        stub = FakeOrchestrator()
        stub.error = AnalysisTimeoutError("AnalysisOrchestrator", 30)
        overrides[get_analysis_orchestrator] = lambda: stub
        async with _client() as client:
            r = await client.post("/api/v1/analysis", json=payload)
        assert r.status_code == 504
        assert r.json() == {"error": "Analysis request timed out. Please try again."}

    @pytest.mark.asyncio
    async def test_generation_failure_is_500(self, overrides, orchestrator, fake_llm, payload):
        fake_llm.error = RuntimeError("rate limit exceeded")
        overrides[get_analysis_orchestrator] = lambda: orchestrator
        async with _client() as client:
            r = await client.post("/api/v1/analysis", json=payload)
        assert r.status_code == 500
        assert r.json() == {"error": "rate limit exceeded"}

    @pytest.mark.asyncio
    async def test_partial_generation_failure_is_500(self, overrides, payload):
        stub = FakeOrchestrator()
        stub.error = GenerationError("AnalysisOrchestrator", "short: boom", {"short": "boom"})
        overrides[get_analysis_orchestrator] = lambda: stub
        async with _client() as client:
            r = await client.post("/api/v1/analysis", json=payload)
        assert r.status_code == 500
        assert r.json()["error"] == "short: boom"

    @pytest.mark.asyncio
    async def test_unexpected_failure_is_500(self, overrides, payload):
        stub = FakeOrchestrator()
        stub.error = RuntimeError("connection reset")
        overrides[get_analysis_orchestrator] = lambda: stub
        async with _client() as client:
            r = await client.post("/api/v1/analysis", json=payload)
        assert r.status_code == 500
        assert r.json() == {"error": "connection reset"}

    @pytest.mark.asyncio
    async def test_missing_llm_key_is_503(self, overrides, orchestrator, fake_llm, payload):
        fake_llm.configured = False
        overrides[get_analysis_orchestrator] = lambda: orchestrator
        async with _client() as client:
            r = await client.post("/api/v1/analysis", json=payload)
        assert r.status_code == 503
        assert r.json() == {"error": "LLM API key not configured"}

    @pytest.mark.asyncio
    async def test_missing_price_is_422(self, overrides, orchestrator, payload):
        overrides[get_analysis_orchestrator] = lambda: orchestrator
        del payload["price"]
        async with _client() as client:
            r = await client.post("/api/v1/analysis", json=payload)
        assert r.status_code == 422

    @pytest.mark.asyncio
    async def test_short_candle_row_is_422(self, overrides, orchestrator, payload):
        overrides[get_analysis_orchestrator] = lambda: orchestrator
        payload["shortData"] = [[1718000000000, 0.45, 0.46]]
        async with _client() as client:
            r = await client.post("/api/v1/analysis", json=payload)
        assert r.status_code == 422

    @pytest.mark.asyncio
    async def test_error_object_instead_of_candles_is_accepted(
        self, overrides, orchestrator, payload
    ):
        overrides[get_analysis_orchestrator] = lambda: orchestrator
        payload["longData"] = {"error": "rate limited"}
        async with _client() as client:
            r = await client.post("/api/v1/analysis", json=payload)
        assert r.status_code == 200


class TestIndicatorsEndpoint:
    @pytest.mark.asyncio
    async def test_snapshots_per_timeframe(self):
        body = {"veryShortData": make_candles(10), "shortData": make_candles(30)}
        async with _client() as client:
            r = await client.post("/api/v1/indicators", json=body)
        assert r.status_code == 200
        data = r.json()
        assert data["very_short"] is None
        assert data["long"] is None
        assert data["short"]["timeframe"] == "short"
        assert data["short"]["risk_reward"] == "1:2.5"


class StubPriceClient:
    def __init__(self, error=None):
        self.error = error

    async def get_spot_price(self):
        raise self.error


class StubSentimentClient:
    async def get_latest(self):
        return Sentiment(value="72", value_classification="Greed")


class StubLiveAnalyst:
    def __init__(self):
        self.forced = None

    def snapshot(self):
        return LiveAnalysisState(coin="cardano", price=0.45)

    async def refresh(self, force=False):
        self.forced = force
        return self.snapshot()


class TestMarketEndpoints:
    @pytest.mark.asyncio
    async def test_price_without_key_is_503(self, overrides):
        overrides[get_coingecko_client] = lambda: StubPriceClient(
            ConfigurationError("CoinGecko", "CoinGecko API key not configured")
        )
        async with _client() as client:
            r = await client.get("/api/v1/market/price")
        assert r.status_code == 503

    @pytest.mark.asyncio
    async def test_price_upstream_failure_is_502(self, overrides):
        overrides[get_coingecko_client] = lambda: StubPriceClient(
            ExternalAPIError("CoinGecko", "simple/price returned status 500")
        )
        async with _client() as client:
            r = await client.get("/api/v1/market/price")
        assert r.status_code == 502

    @pytest.mark.asyncio
    async def test_sentiment(self, overrides):
        overrides[get_fear_greed_client] = lambda: StubSentimentClient()
        async with _client() as client:
            r = await client.get("/api/v1/market/sentiment")
        assert r.status_code == 200
        assert r.json() == {"value": "72", "value_classification": "Greed"}

    @pytest.mark.asyncio
    async def test_live_state_and_refresh(self, overrides):
        live = StubLiveAnalyst()
        overrides[get_live_analyst] = lambda: live
        async with _client() as client:
            r = await client.get("/api/v1/market/live")
            assert r.status_code == 200
            assert r.json()["coin"] == "cardano"

            r = await client.post("/api/v1/market/live/refresh", params={"force": "true"})
            assert r.status_code == 200
        assert live.forced is True


class TestMeta:
    @pytest.mark.asyncio
    async def test_root_and_health(self):
        async with _client() as client:
            r = await client.get("/")
            assert r.status_code == 200
            r = await client.get("/health")
            assert r.status_code == 200
            assert r.json()["status"] == "healthy"
