from contextlib import asynccontextmanager
from typing import Optional
import asyncio
import logging
import os
import time

import psutil
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from app.api.api import api_router
from app.api.middleware import RateLimitMiddleware, ResponseCacheMiddleware
from app.core.config import settings
from app.core.errors import register_exception_handlers, utc_now_iso
from app.core.logging import RequestLoggingMiddleware, setup_logging
from app.services.nasa import NasaClient
from app.services.rate_limiter import FixedWindowRateLimiter
from app.services.response_cache import ResponseCache
from app.worker import run_cache_sweeper

logger = logging.getLogger(__name__)

START_TIME = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{settings.PROJECT_NAME} v{settings.VERSION} starting ({settings.NODE_ENV})")
    sweeper = None
    if app.state.sweep_interval > 0:
        sweeper = asyncio.create_task(
            run_cache_sweeper(app.state.sweep_interval, app.state.response_cache, app.state.nasa_client.cache)
        )
    try:
        yield
    finally:
        if sweeper is not None:
            sweeper.cancel()
            try:
                await sweeper
            except asyncio.CancelledError:
                pass
        await app.state.nasa_client.aclose()
        logger.info("Server closed")


def create_app(
    nasa_client: Optional[NasaClient] = None,
    response_cache: Optional[ResponseCache] = None,
    rate_limiter: Optional[FixedWindowRateLimiter] = None,
    sweep_interval: Optional[float] = None,
) -> FastAPI:
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Proxy for NASA's open APIs: APOD, Mars rover photos, Near Earth Objects and EPIC imagery.",
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    if response_cache is None:
        response_cache = ResponseCache(
            ttl_seconds=settings.CACHE_TTL,
            max_entries=settings.CACHE_MAX_ENTRIES,
        )
    if rate_limiter is None:
        rate_limiter = FixedWindowRateLimiter(
            max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
            window_seconds=settings.RATE_LIMIT_WINDOW_MS / 1000,
            storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        )

    app.state.nasa_client = nasa_client if nasa_client is not None else NasaClient()
    app.state.response_cache = response_cache
    app.state.rate_limiter = rate_limiter
    app.state.sweep_interval = settings.CACHE_SWEEP_INTERVAL if sweep_interval is None else sweep_interval

    register_exception_handlers(app)

    # Last added runs first: CORS -> gzip -> logging -> rate limit -> cache -> routes
    app.add_middleware(ResponseCacheMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_origin_regex=r"https://.*\.vercel\.app",
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.get("/")
    def read_root():
        return {
            "name": "NASA Space Explorer Backend",
            "version": f"v{settings.VERSION}",
            "status": "Running",
            "timestamp": utc_now_iso(),
            "endpoints": {
                "health": "/health",
                "api": settings.API_V1_STR,
                "apod": f"{settings.API_V1_STR}/apod",
                "marsRovers": f"{settings.API_V1_STR}/mars-rovers",
                "neo": f"{settings.API_V1_STR}/neo",
                "epic": f"{settings.API_V1_STR}/epic",
            },
        }

    @app.get("/health")
    def health_check():
        memory = psutil.Process(os.getpid()).memory_info()
        return {
            "status": "OK",
            "version": f"v{settings.VERSION}",
            "timestamp": utc_now_iso(),
            "uptime": round(time.monotonic() - START_TIME, 3),
            "environment": settings.NODE_ENV,
            "memory": {"rss": memory.rss, "vms": memory.vms},
        }

    @app.get(settings.API_V1_STR)
    def read_api_info():
        return {
            "name": "NASA Space Explorer API",
            "version": f"v{settings.VERSION}",
            "description": "Backend API for NASA Space Explorer application",
            "timestamp": utc_now_iso(),
            "endpoints": {
                "apod": "/apod - Astronomy Picture of the Day",
                "marsRovers": "/mars-rovers - Mars Rover photos and data",
                "neo": "/neo - Near Earth Objects tracking",
                "epic": "/epic - Earth imagery from space",
                "cache": "/cache - Cache management",
            },
            "documentation": "https://api.nasa.gov/",
        }

    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
