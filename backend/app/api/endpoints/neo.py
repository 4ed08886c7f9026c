from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends

from app.api.deps import get_nasa_client
from app.api.responses import envelope
from app.api.validation import NEO_ID_RE, ensure_between, parse_optional_date, utc_today, validate_range
from app.core.errors import ValidationError
from app.services import neo_analysis
from app.services.nasa import NasaClient

router = APIRouter()

# NeoWs rejects feed windows longer than a week
MAX_FEED_DAYS = 7


@router.get("/feed")
async def read_neo_feed(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    client: NasaClient = Depends(get_nasa_client),
):
    """
    Near Earth Objects approaching between start_date and end_date (today if omitted).
    Each object gains risk_level, relative_speed_mach and lunar_distance.
    """
    start = parse_optional_date(start_date, "start_date")
    end = parse_optional_date(end_date, "end_date")
    if start and end:
        validate_range(
            start, end, MAX_FEED_DAYS, "NEO feed",
            future_message=f"end_date cannot be in the future. Maximum allowed date: {utc_today().isoformat()}",
        )

    feed = await client.get_neo_feed(start_date, end_date)
    processed = neo_analysis.process_feed(feed.to_dict())
    return envelope(processed, summary=neo_analysis.summarize_feed(processed))


@router.get("/hazardous/today")
async def read_hazardous_today(client: NasaClient = Depends(get_nasa_client)):
    today = utc_today().isoformat()
    feed = await client.get_neo_feed(today, today)
    processed = neo_analysis.process_feed(feed.to_dict())
    asteroids = neo_analysis.hazardous_asteroids(processed)
    return envelope({
        "date": today,
        "hazardous_count": len(asteroids),
        "asteroids": asteroids,
    })


@router.get("/stats/overview")
async def read_neo_statistics(days: int = 7, client: NasaClient = Depends(get_nasa_client)):
    ensure_between(days, 1, MAX_FEED_DAYS, f"Days must be between 1 and {MAX_FEED_DAYS}.")

    end = utc_today()
    start = end - timedelta(days=days - 1)
    feed = await client.get_neo_feed(start.isoformat(), end.isoformat())
    processed = neo_analysis.process_feed(feed.to_dict())

    return envelope({
        "period": {
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "days": days,
        },
        "statistics": neo_analysis.calculate_statistics(processed),
    })


@router.get("/{neo_id}")
async def read_neo(neo_id: str, client: NasaClient = Depends(get_nasa_client)):
    if not NEO_ID_RE.match(neo_id):
        raise ValidationError("Invalid NEO ID format. Must be numeric.")
    asteroid = await client.get_neo_by_id(neo_id)
    return envelope(neo_analysis.enhance_neo(asteroid.to_dict()))
