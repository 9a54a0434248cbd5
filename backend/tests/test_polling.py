import asyncio

import pytest

from rover_console.services.polling import PeriodicRefresh


def test_refreshes_immediately_and_cancels_on_exit():
    calls = []

    async def go():
        done = asyncio.Event()

        async def refresh():
            calls.append("tick")
            done.set()

        poller = PeriodicRefresh("local", refresh, interval=60)
        async with poller:
            assert poller.running
            await asyncio.wait_for(done.wait(), timeout=1)
        return poller

    poller = asyncio.run(go())
    assert calls == ["tick"]
    assert not poller.running


def test_failed_refresh_does_not_stop_the_loop():
    async def go():
        attempts = []

        async def refresh():
            attempts.append(1)
            raise RuntimeError("upstream down")

        async with PeriodicRefresh("remote", refresh, interval=0.01):
            for _ in range(200):
                if len(attempts) >= 3:
                    break
                await asyncio.sleep(0.01)
        return len(attempts)

    assert asyncio.run(go()) >= 3


def test_trigger_runs_out_of_band_without_starting_timer():
    async def go():
        calls = []

        async def refresh():
            calls.append(1)

        poller = PeriodicRefresh("manual", refresh, interval=60)
        await poller.trigger()
        return calls, poller.running, poller.ticks

    calls, running, ticks = asyncio.run(go())
    assert calls == [1]
    assert running is False
    assert ticks == 1


def test_cancel_is_idempotent():
    async def go():
        async def refresh():
            return None

        poller = PeriodicRefresh("idle", refresh, interval=60)
        await poller.cancel()
        poller.start()
        await poller.cancel()
        await poller.cancel()
        return poller.running

    assert asyncio.run(go()) is False


def test_interval_must_be_positive():
    async def refresh():
        return None

    with pytest.raises(ValueError):
        PeriodicRefresh("bad", refresh, interval=0)
