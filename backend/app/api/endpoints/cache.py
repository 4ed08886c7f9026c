from typing import Optional

from fastapi import APIRouter, Depends

from app.api.deps import get_nasa_client, get_response_cache
from app.core.errors import utc_now_iso
from app.services.nasa import NasaClient
from app.services.response_cache import ResponseCache

router = APIRouter()


@router.get("/stats")
def read_cache_stats(
    cache: ResponseCache = Depends(get_response_cache),
    client: NasaClient = Depends(get_nasa_client),
):
    return {
        "cache": cache.stats(),
        "upstream_cache": client.cache.stats(),
        "timestamp": utc_now_iso(),
    }


@router.delete("")
def clear_cache(
    pattern: Optional[str] = None,
    cache: ResponseCache = Depends(get_response_cache),
    client: NasaClient = Depends(get_nasa_client),
):
    """Drop cached responses whose key contains ``pattern`` (everything if omitted)."""
    cleared = cache.clear(pattern)
    upstream_cleared = client.cache.clear(pattern)
    if pattern:
        message = f"Cleared {cleared} cache entries matching: {pattern}"
    else:
        message = f"Cleared all {cleared} cache entries"
    return {
        "message": message,
        "cleared": cleared,
        "upstream_cleared": upstream_cleared,
        "timestamp": utc_now_iso(),
    }
