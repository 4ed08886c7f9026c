"""
Rate limiting and response caching for everything under /api.

Both middlewares look their state up on ``request.app.state`` so each app
instance (and each test) gets its own limiter table and cache.
"""

import logging
from datetime import datetime, timezone

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.api.deps import get_rate_limiter, get_response_cache
from app.core.config import settings
from app.core.errors import utc_now_iso

logger = logging.getLogger(__name__)

API_PREFIX = "/api"
CACHE_ADMIN_PREFIX = f"{settings.API_V1_STR}/cache"


def client_key(request: Request):
    return request.client.host if request.client and request.client.host else None


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(API_PREFIX):
            return await call_next(request)

        decision = get_rate_limiter(request).check(client_key(request))
        headers = decision.headers()

        if not decision.allowed:
            headers["Retry-After"] = str(decision.retry_after)
            return JSONResponse(
                status_code=429,
                headers=headers,
                content={
                    "error": "Too Many Requests",
                    "message": "Rate limit exceeded. Please try again later.",
                    "retryAfter": decision.retry_after,
                    "timestamp": utc_now_iso(),
                },
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response


class ResponseCacheMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not path.startswith(API_PREFIX) or path.startswith(CACHE_ADMIN_PREFIX):
            return await call_next(request)

        cache = get_response_cache(request)
        query = request.query_params.multi_items()

        entry = cache.get(request.method, path, query)
        if entry is not None:
            logger.debug(f"Cache HIT: {path}")
            stored_at = datetime.fromtimestamp(entry.stored_at, tz=timezone.utc)
            return Response(
                content=entry.payload,
                status_code=200,
                media_type="application/json",
                headers={
                    "X-Cache": "HIT",
                    "X-Cache-Timestamp": stored_at.isoformat().replace("+00:00", "Z"),
                },
            )

        response = await call_next(request)
        if request.method != "GET" or response.status_code != 200:
            return response
        if "no-store" in response.headers.get("cache-control", ""):
            return response

        body = b"".join([chunk async for chunk in response.body_iterator])
        cache.put(path, query, response.status_code, body)
        logger.debug(f"Cache MISS: {path} - cached for {cache.ttl_seconds:g}s")

        cached = Response(content=body, status_code=response.status_code, headers=dict(response.headers))
        cached.headers["X-Cache"] = "MISS"
        cached.headers["X-Cache-TTL"] = f"{cache.ttl_seconds:g}"
        return cached
