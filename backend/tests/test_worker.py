import asyncio

import pytest

from app.services.response_cache import ResponseCache
from app.worker import run_cache_sweeper, sweep_caches


def test_sweep_caches(clock):
    first = ResponseCache(ttl_seconds=10, clock=clock)
    second = ResponseCache(ttl_seconds=100, clock=clock)
    first.store("/a", b"1")
    second.store("/b", b"2")

    clock.advance(50)

    assert sweep_caches(first, second) == 1
    assert len(first) == 0
    assert len(second) == 1


@pytest.mark.asyncio
async def test_sweeper_runs_until_cancelled(clock):
    cache = ResponseCache(ttl_seconds=1, clock=clock)
    cache.store("/a", b"1")
    clock.advance(5)

    task = asyncio.create_task(run_cache_sweeper(0.01, cache))
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert len(cache) == 0
