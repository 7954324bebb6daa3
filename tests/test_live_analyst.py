"""Tests for the server-side polling loop."""

import asyncio

import pytest

from ada_ta.services.base import AnalysisTimeoutError, ExternalAPIError
from ada_ta.services.live import LiveAnalyst

from tests.conftest import FakeMarketData, FakeOrchestrator, FakeSentiment


@pytest.fixture
def market_data():
    return FakeMarketData()


@pytest.fixture
def fake_orchestrator():
    return FakeOrchestrator()


@pytest.fixture
def analyst(fake_orchestrator, market_data, clock):
    return LiveAnalyst(
        orchestrator=fake_orchestrator,
        market_data=market_data,
        sentiment=FakeSentiment(),
        refresh_interval=600,
        min_analysis_interval=119,
        clock=clock,
    )


class TestRefresh:
    @pytest.mark.asyncio
    async def test_first_refresh_runs_analysis(self, analyst, fake_orchestrator):
        state = await analyst.refresh()
        assert state.price == 0.45216
        assert state.change_24h == -1.5
        assert state.analysis.veryShortTerm == "scalp"
        assert state.error is None
        assert state.price_updated_at is not None
        assert state.analysis_updated_at is not None
        assert len(fake_orchestrator.requests) == 1

    @pytest.mark.asyncio
    async def test_request_built_from_market_data(self, analyst, fake_orchestrator, market_data):
        await analyst.refresh()
        request = fake_orchestrator.requests[0]
        assert request.price == 0.4522
        assert request.veryShortData == request.shortData
        assert len(request.shortData) == 48
        assert len(request.longData) == 365
        assert request.sentiment.value_classification == "Fear"
        assert market_data.ohlc_days == [1, 365]

    @pytest.mark.asyncio
    async def test_analysis_is_throttled(self, analyst, fake_orchestrator, market_data, clock):
        await analyst.refresh()
        market_data.price = 0.47
        clock.advance(60)
        state = await analyst.refresh()
        assert state.price == 0.47
        assert len(fake_orchestrator.requests) == 1

        clock.advance(60)
        await analyst.refresh()
        assert len(fake_orchestrator.requests) == 2

    @pytest.mark.asyncio
    async def test_force_bypasses_throttle(self, analyst, fake_orchestrator):
        await analyst.refresh()
        await analyst.refresh(force=True)
        assert len(fake_orchestrator.requests) == 2

    @pytest.mark.asyncio
    async def test_price_failure_is_recorded(self, analyst, market_data, fake_orchestrator):
        market_data.error = ExternalAPIError("CoinGecko", "simple/price returned status 429")
        state = await analyst.refresh()
        assert state.error == "simple/price returned status 429"
        assert state.price is None
        assert fake_orchestrator.requests == []

    @pytest.mark.asyncio
    async def test_analysis_failure_keeps_price(self, analyst, fake_orchestrator):
        fake_orchestrator.error = AnalysisTimeoutError("AnalysisOrchestrator", 30)
        state = await analyst.refresh()
        assert state.price == 0.45216
        assert state.analysis is None
        assert state.error == "Analysis request timed out. Please try again."

    @pytest.mark.asyncio
    async def test_error_cleared_on_success(self, analyst, market_data):
        market_data.error = ExternalAPIError("CoinGecko", "down")
        await analyst.refresh()
        market_data.error = None
        state = await analyst.refresh()
        assert state.error is None

    @pytest.mark.asyncio
    async def test_unexpected_error_is_recorded(self, analyst, market_data, fake_orchestrator):
        market_data.error = KeyError("usd")
        state = await analyst.refresh()
        assert state.error == "Live refresh failed"
        assert state.price is None
        assert fake_orchestrator.requests == []


class TestLoop:
    @pytest.mark.asyncio
    async def test_start_and_stop(self, analyst, fake_orchestrator):
        await analyst.start()
        assert analyst.is_running
        await asyncio.sleep(0.01)
        assert len(fake_orchestrator.requests) == 1

        snapshot = analyst.snapshot()
        assert 0 < snapshot.next_refresh_in_seconds <= 600

        await analyst.stop()
        assert not analyst.is_running

    @pytest.mark.asyncio
    async def test_not_started_without_market_data_key(self, analyst, market_data):
        market_data.is_configured = False
        await analyst.start()
        assert not analyst.is_running

    @pytest.mark.asyncio
    async def test_snapshot_without_loop_has_no_countdown(self, analyst):
        await analyst.refresh()
        assert analyst.snapshot().next_refresh_in_seconds is None

    @pytest.mark.asyncio
    async def test_loop_survives_unexpected_error(self, analyst, market_data):
        market_data.error = KeyError("usd")
        await analyst.start()
        await asyncio.sleep(0.05)
        assert analyst.is_running
        assert analyst.snapshot().error == "Live refresh failed"

        await analyst.stop()
        assert not analyst.is_running

    @pytest.mark.asyncio
    async def test_stop_after_loop_died(self, analyst, monkeypatch):
        async def broken_refresh(force=False):
            raise RuntimeError("boom")

        monkeypatch.setattr(analyst, "refresh", broken_refresh)
        await analyst.start()
        await asyncio.sleep(0.01)
        assert not analyst.is_running

        await analyst.stop()
        assert analyst._task is None
