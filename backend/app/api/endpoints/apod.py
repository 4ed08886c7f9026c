import random
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Response

from app.api.deps import get_nasa_client
from app.api.responses import envelope
from app.api.validation import ensure_not_future, parse_date, parse_optional_date, utc_today, validate_range
from app.core.errors import ValidationError
from app.services.nasa import NasaClient, is_fallback

router = APIRouter()

MAX_RANGE_DAYS = 30


@router.get("")
async def read_apod(
    response: Response,
    date: Optional[str] = None,
    client: NasaClient = Depends(get_nasa_client),
):
    """
    Astronomy Picture of the Day for today or a given date.
    Serves a static picture if NASA is unreachable; that body is never cached.
    """
    day = parse_optional_date(date)
    if day:
        ensure_not_future(day)

    entry = await client.get_apod(date or None)
    if is_fallback(entry):
        response.headers["Cache-Control"] = "no-store"
    return envelope(entry.to_dict())


@router.get("/range")
async def read_apod_range(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    client: NasaClient = Depends(get_nasa_client),
):
    if not start_date or not end_date:
        raise ValidationError("Both start_date and end_date are required.")

    start = parse_date(start_date)
    end = parse_date(end_date)
    days = validate_range(start, end, MAX_RANGE_DAYS)

    entries = await client.get_apod_range(start_date, end_date)
    return envelope(
        [entry.to_dict() for entry in entries],
        count=len(entries),
        range={"start_date": start_date, "end_date": end_date, "days": days + 1},
    )


@router.get("/random")
async def read_random_apod(response: Response, client: NasaClient = Depends(get_nasa_client)):
    """Random picture from the past year."""
    random_date = (utc_today() - timedelta(days=random.randint(0, 365))).isoformat()
    entry = await client.get_apod(random_date)
    if is_fallback(entry):
        response.headers["Cache-Control"] = "no-store"
    return envelope(entry.to_dict(), randomDate=random_date)
