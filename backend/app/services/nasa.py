"""
NASA Open APIs client

Wraps the api.nasa.gov endpoints the explorer exposes:
- APOD (Astronomy Picture of the Day)
- Mars Rover Photos
- NeoWs (Near Earth Object Web Service)
- EPIC (Earth Polychromatic Imaging Camera)

Every call is a single attempt. HTTP failures are mapped onto the AppError
taxonomy; responses are validated against app.models.nasa before they are
returned. Successful responses are cached per client for UPSTREAM_CACHE_TTL.
"""

import logging
from datetime import date as date_type, datetime, timezone
from typing import Any, Optional, Union

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as SchemaError

from app.core.config import settings
from app.core.errors import (
    AppError,
    BadGatewayError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
    UpstreamTimeoutError,
)
from app.models.nasa import (
    ApodEntry,
    ApodList,
    EpicArchive,
    EpicImageList,
    MarsPhotosResponse,
    NearEarthObject,
    NeoFeedResponse,
    RoverInfoResponse,
)
from app.services.response_cache import ResponseCache, make_key

logger = logging.getLogger(__name__)

DEMO_KEY = "DEMO_KEY"
DEFAULT_SOL = 1000

# Timeouts, DNS failures and refused connections
CONNECTION_ERRORS = (httpx.TimeoutException, httpx.NetworkError)

FALLBACK_APOD = {
    "title": "The Blue Marble",
    "explanation": (
        "NASA's Astronomy Picture of the Day service could not be reached, so here is "
        "a classic view of our home planet instead. This composite image of Earth was "
        "assembled from observations made by the Terra satellite's MODIS instrument."
    ),
    "url": "https://eoimages.gsfc.nasa.gov/images/imagerecords/57000/57723/globe_east_540.jpg",
    "media_type": "image",
    "copyright": "NASA Goddard Space Flight Center",
    "service_version": "fallback",
}

Schema = Union[type[BaseModel], TypeAdapter]


def fallback_apod(day: Optional[str] = None) -> ApodEntry:
    payload = dict(FALLBACK_APOD)
    payload["date"] = day or datetime.now(timezone.utc).date().isoformat()
    return ApodEntry.model_validate(payload)


def is_fallback(entry: Union[ApodEntry, dict]) -> bool:
    data = entry if isinstance(entry, dict) else entry.to_dict()
    return data.get("service_version") == FALLBACK_APOD["service_version"]


class NasaClient:
    """
    Async client for api.nasa.gov.

    Usage:
        client = NasaClient(api_key="...")
        apod = await client.get_apod("2025-08-14")
        await client.aclose()
    """

    def __init__(
        self,
        api_key: str = settings.NASA_API_KEY,
        base_url: str = settings.NASA_API_BASE_URL,
        timeout: float = settings.UPSTREAM_TIMEOUT,
        cache_ttl: float = settings.UPSTREAM_CACHE_TTL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        cache: Optional[ResponseCache] = None,
    ):
        self.api_key = api_key or DEMO_KEY
        if self.api_key == DEMO_KEY:
            logger.warning("Using NASA DEMO_KEY - limited to 30 requests per hour")

        self.base_url = base_url.rstrip("/")
        self.cache = cache if cache is not None else ResponseCache(ttl_seconds=cache_ttl, max_entries=500)
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            params={"api_key": self.api_key},
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": f"NASASpaceExplorer/{settings.VERSION}"},
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    # ── transport ──

    async def _get(self, path: str, schema: Schema, params: Optional[dict] = None,
                   fallback: Optional[Any] = None) -> Any:
        query = {k: v for k, v in (params or {}).items() if v is not None}
        key = make_key(path, query)

        cached = self.cache.lookup(key)
        if cached is not None:
            logger.debug(f"NASA API cache hit: {key}")
            return cached.payload

        logger.debug(f"NASA API Request: GET {path} {query}")
        try:
            response = await self.client.get(path, params=query)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"NASA API Error: {e.response.status_code} {path}")
            raise self._classify(e.response) from e
        except CONNECTION_ERRORS as e:
            if fallback is not None:
                logger.warning(f"NASA API unreachable for {path} ({type(e).__name__}), serving fallback data")
                return fallback
            logger.error(f"NASA API connection error for {path}: {type(e).__name__}: {e}")
            if isinstance(e, httpx.TimeoutException):
                raise UpstreamTimeoutError("NASA API request timeout. Please try again.") from e
            raise AppError(f"NASA API request failed: {str(e) or type(e).__name__}", 500) from e
        except httpx.RequestError as e:
            logger.error(f"NASA API request error for {path}: {e}")
            raise AppError(f"NASA API request failed: {e}", 500) from e

        logger.debug(f"NASA API Response: {response.status_code} {path}")
        result = self._parse(path, response, schema)
        self.cache.store(key, result)
        return result

    @staticmethod
    def _parse(path: str, response: httpx.Response, schema: Schema) -> Any:
        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"NASA API returned non-JSON body for {path}")
            raise BadGatewayError("NASA API returned an invalid response.") from e
        try:
            if isinstance(schema, TypeAdapter):
                return schema.validate_python(data)
            return schema.model_validate(data)
        except SchemaError as e:
            logger.error(f"NASA API response for {path} failed validation: {e.error_count()} errors")
            raise BadGatewayError("NASA API returned an unexpected response shape.") from e

    @staticmethod
    def _classify(response: httpx.Response) -> AppError:
        status = response.status_code
        if status == 429:
            return RateLimitedError("NASA API rate limit exceeded. Please try again later.")
        if status == 403:
            return UnauthorizedError("Invalid NASA API key or unauthorized access.")
        if status == 404:
            return NotFoundError("NASA API endpoint not found.")
        if status >= 500:
            return BadGatewayError("NASA API server error. Please try again later.")
        return AppError(_upstream_message(response) or "NASA API request failed", status)

    # ── APOD ──

    async def get_apod(self, date: Optional[str] = None) -> ApodEntry:
        """Single picture; falls back to a static entry if NASA is unreachable."""
        return await self._get(
            "/planetary/apod", ApodEntry, {"date": date},
            fallback=fallback_apod(date),
        )

    async def get_apod_range(self, start_date: str, end_date: str) -> list[ApodEntry]:
        return await self._get("/planetary/apod", ApodList, {"start_date": start_date, "end_date": end_date})

    # ── Mars rovers ──

    async def get_mars_rover_photos(
        self,
        rover: str,
        sol: Optional[int] = None,
        earth_date: Optional[str] = None,
        camera: Optional[str] = None,
        page: int = 1,
    ) -> MarsPhotosResponse:
        params: dict = {"page": page, "camera": camera}
        if sol is not None:
            params["sol"] = sol
        elif earth_date:
            params["earth_date"] = earth_date
        else:
            params["sol"] = DEFAULT_SOL
        return await self._get(f"/mars-photos/api/v1/rovers/{rover}/photos", MarsPhotosResponse, params)

    async def get_rover_info(self, rover: str) -> RoverInfoResponse:
        return await self._get(f"/mars-photos/api/v1/rovers/{rover}", RoverInfoResponse)

    # ── NeoWs ──

    async def get_neo_feed(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> NeoFeedResponse:
        if not (start_date and end_date):
            today = date_type.today().isoformat()
            start_date = end_date = today
        return await self._get("/neo/rest/v1/feed", NeoFeedResponse, {"start_date": start_date, "end_date": end_date})

    async def get_neo_by_id(self, neo_id: str) -> NearEarthObject:
        return await self._get(f"/neo/rest/v1/neo/{neo_id}", NearEarthObject)

    # ── EPIC ──

    async def get_epic_images(self, date: Optional[str] = None) -> list:
        path = "/EPIC/api/natural"
        if date:
            path += f"/date/{date}"
        return await self._get(path, EpicImageList)

    async def get_epic_archive(self) -> list:
        return await self._get("/EPIC/api/natural/available", EpicArchive)

    # ── misc ──

    async def validate_api_key(self) -> bool:
        """False only when NASA explicitly rejects the key."""
        try:
            response = await self.client.get("/planetary/apod")
        except httpx.RequestError as e:
            logger.warning(f"Could not validate NASA API key: {e}")
            return True
        return response.status_code != 403


def _upstream_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return body.get("error_message") or body.get("msg")
