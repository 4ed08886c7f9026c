from fastapi import Request

from app.services.nasa import NasaClient
from app.services.rate_limiter import FixedWindowRateLimiter
from app.services.response_cache import ResponseCache


def get_nasa_client(request: Request) -> NasaClient:
    return request.app.state.nasa_client


def get_response_cache(request: Request) -> ResponseCache:
    return request.app.state.response_cache


def get_rate_limiter(request: Request) -> FixedWindowRateLimiter:
    return request.app.state.rate_limiter
