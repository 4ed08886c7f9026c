"""
Background maintenance for the in-process caches.
Runs inside the API's event loop; started and cancelled by the app lifespan.
"""
import asyncio
import logging

from app.services.response_cache import ResponseCache

logger = logging.getLogger(__name__)


def sweep_caches(*caches: ResponseCache) -> int:
    removed = 0
    for cache in caches:
        removed += cache.sweep()
    if removed:
        logger.info(f"Swept {removed} expired cache entries")
    return removed


async def run_cache_sweeper(interval: float, *caches: ResponseCache) -> None:
    """Sweep expired entries every ``interval`` seconds until cancelled."""
    logger.info(f"Cache sweeper started (every {interval:g}s)")
    try:
        while True:
            await asyncio.sleep(interval)
            sweep_caches(*caches)
    except asyncio.CancelledError:
        logger.info("Cache sweeper stopped")
        raise
