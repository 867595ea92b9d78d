"""Tests for the asyncio ticker."""

import asyncio

import pytest

from conftest import make_tokens

from speedreader.services.engine import PlaybackEngine
from speedreader.services.scheduler import AsyncioTicker


class TestAsyncioTicker:
    """Tests for starting, stopping and error isolation."""

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            AsyncioTicker(0)

    def test_start_requires_running_loop(self):
        with pytest.raises(RuntimeError):
            AsyncioTicker(5).start(lambda: None)

    @pytest.mark.asyncio
    async def test_ticks_until_stopped(self):
        ticker = AsyncioTicker(interval_ms=5)
        calls = []

        ticker.start(lambda: calls.append(1))
        assert ticker.running
        await asyncio.sleep(0.06)
        ticker.stop()
        count = len(calls)
        await asyncio.sleep(0.03)

        assert count > 0
        assert len(calls) == count
        assert not ticker.running

    @pytest.mark.asyncio
    async def test_start_twice_keeps_one_loop(self):
        ticker = AsyncioTicker(interval_ms=5)
        first, second = [], []

        ticker.start(lambda: first.append(1))
        ticker.start(lambda: second.append(1))
        await asyncio.sleep(0.03)
        ticker.stop()

        assert first
        assert not second

    @pytest.mark.asyncio
    async def test_callback_errors_do_not_stop_loop(self, caplog):
        ticker = AsyncioTicker(interval_ms=5)
        calls = []

        def flaky():
            calls.append(1)
            raise RuntimeError("tick failed")

        ticker.start(flaky)
        await asyncio.sleep(0.05)
        ticker.stop()

        assert len(calls) > 1
        assert "Tick callback failed" in caplog.text

    @pytest.mark.asyncio
    async def test_drives_engine_to_end(self, settings):
        settings = settings.model_copy(update={"ramp_enabled": False, "natural_pacing_enabled": False})
        ticker = AsyncioTicker(interval_ms=2)
        engine = PlaybackEngine(settings, scheduler=ticker)
        engine.set_target_wpm(1000)
        engine.load("doc-1", make_tokens(3))

        engine.start()
        for _ in range(100):
            if engine.finished:
                break
            await asyncio.sleep(0.01)

        assert engine.finished
        assert engine.current_token_index == 2
        assert not ticker.running
