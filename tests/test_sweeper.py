import asyncio
import threading

from matchqueue.core.queue_config import MatchmakingConfig
from matchqueue.services.expiration_sweeper import ExpirationSweeper


class FlakyEngine:
    """Engine stand-in whose first cleanup pass fails."""

    config = MatchmakingConfig()

    def __init__(self):
        self.calls = 0

    def cleanup(self):
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("boom")
        return 0


class ThreadRecordingEngine:
    """Engine stand-in that notes which thread each cleanup pass ran on."""

    config = MatchmakingConfig()

    def __init__(self):
        self.threads = []

    def cleanup(self):
        self.threads.append(threading.get_ident())
        return 0


class TestExpirationSweeper:

    def test_sweep_once_evicts_expired(self, engine, join, clock):
        join("x")
        clock.advance(301000)
        assert ExpirationSweeper(engine).sweep_once() == 1
        assert engine.get_queue_status("x", "classic", "quick") is None

    def test_interval_defaults_to_config(self, engine):
        assert ExpirationSweeper(engine).interval_ms == 30000
        assert ExpirationSweeper(engine, interval_ms=50).interval_ms == 50

    def test_background_loop_runs_until_stopped(self, engine, join, clock):
        join("x")
        join("y")
        clock.advance(301000)

        async def run():
            sweeper = ExpirationSweeper(engine, interval_ms=10)
            sweeper.start()
            assert sweeper.running
            await asyncio.sleep(0.05)
            await sweeper.stop()
            assert not sweeper.running

        asyncio.run(run())
        assert engine.get_statistics().total_searching == 0
        assert engine.get_statistics().evicted_entries == 2

    def test_loop_survives_failed_pass(self):
        flaky = FlakyEngine()

        async def run():
            sweeper = ExpirationSweeper(flaky, interval_ms=5)
            sweeper.start()
            await asyncio.sleep(0.05)
            await sweeper.stop()

        asyncio.run(run())
        assert flaky.calls >= 2

    def test_passes_run_off_the_event_loop_thread(self):
        recorder = ThreadRecordingEngine()

        async def run():
            sweeper = ExpirationSweeper(recorder, interval_ms=5)
            sweeper.start()
            await asyncio.sleep(0.05)
            await sweeper.stop()
            return threading.get_ident()

        loop_thread = asyncio.run(run())
        assert recorder.threads
        assert loop_thread not in recorder.threads
