from typing import Optional

from fastapi import APIRouter, Depends

from app.api.deps import get_nasa_client
from app.api.responses import envelope
from app.api.validation import EPIC_IMAGE_RE, ensure_not_future, parse_date, parse_optional_date
from app.core.errors import NotFoundError, ValidationError
from app.services import epic_imagery
from app.services.nasa import NasaClient

router = APIRouter()


@router.get("")
async def read_epic_images(date: Optional[str] = None, client: NasaClient = Depends(get_nasa_client)):
    """Natural-colour EPIC images for a date, or the most recent set."""
    day = parse_optional_date(date)
    if day:
        ensure_not_future(day)

    images = [image.to_dict() for image in await client.get_epic_images(date or None)]
    return envelope(
        epic_imagery.enhance_images(images, date or None),
        count=len(images),
        date=date or "latest",
    )


@router.get("/archive")
async def read_epic_archive(client: NasaClient = Depends(get_nasa_client)):
    dates = await client.get_epic_archive()
    return envelope(epic_imagery.process_archive(dates))


@router.get("/latest")
async def read_latest_epic_image(client: NasaClient = Depends(get_nasa_client)):
    images = [image.to_dict() for image in await client.get_epic_images()]
    if not images:
        raise NotFoundError("No recent images available.")

    latest = images[-1]
    return envelope(
        epic_imagery.enhance_image(latest, epic_imagery.image_day(latest)),
        total_images_today=len(images),
    )


@router.get("/enhanced/{date}/{image}")
async def read_epic_image(date: str, image: str, client: NasaClient = Depends(get_nasa_client)):
    parse_date(date)
    if not EPIC_IMAGE_RE.match(image):
        raise ValidationError("Invalid image name format.")

    images = await client.get_epic_images(date)
    target = next((img for img in images if img.image == image), None)
    if target is None:
        raise NotFoundError("Image not found for the specified date.")

    return envelope(epic_imagery.enhance_image(target.to_dict(), date))


@router.get("/position/{date}")
async def read_epic_positions(date: str, client: NasaClient = Depends(get_nasa_client)):
    parse_date(date)

    images = [image.to_dict() for image in await client.get_epic_images(date)]
    if not images:
        raise NotFoundError("No images available for the specified date.")

    positions = epic_imagery.positions_for(images)
    return envelope({
        "date": date,
        "positions": positions,
        "summary": epic_imagery.position_summary(positions),
    })
