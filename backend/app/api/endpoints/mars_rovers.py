from typing import Optional

from fastapi import APIRouter, Depends

from app.api.deps import get_nasa_client
from app.api.responses import envelope
from app.api.validation import ensure_between, parse_optional_date
from app.core.errors import ValidationError
from app.services.mars_rovers import (
    VALID_CAMERAS,
    VALID_ROVERS,
    camera_full_name,
    normalize_camera,
    normalize_rover,
)
from app.services.nasa import NasaClient

router = APIRouter()


def _require_rover(rover: Optional[str]) -> str:
    name = normalize_rover(rover)
    if name is None:
        raise ValidationError(f"Invalid rover name. Valid rovers: {', '.join(VALID_ROVERS)}")
    return name


def _check_camera(rover: str, camera: Optional[str]) -> Optional[str]:
    if not camera:
        return None
    name = normalize_camera(rover, camera)
    if name is None:
        raise ValidationError(f"Invalid camera for {rover}. Valid cameras: {', '.join(VALID_CAMERAS[rover])}")
    return name


@router.get("")
def list_rovers():
    return envelope({
        "available_rovers": VALID_ROVERS,
        "cameras": VALID_CAMERAS,
        "endpoints": {
            "rover_info": "/{rover} - Get specific rover information",
            "photos": "/photos - Get rover photos with filters",
            "latest": "/{rover}/latest - Get latest photos from rover",
            "cameras": "/{rover}/cameras - List a rover's cameras",
        },
    })


@router.get("/photos")
async def read_rover_photos(
    rover: Optional[str] = None,
    sol: Optional[int] = None,
    earth_date: Optional[str] = None,
    camera: Optional[str] = None,
    page: int = 1,
    client: NasaClient = Depends(get_nasa_client),
):
    if not rover:
        raise ValidationError("Rover parameter is required.")
    rover_name = _require_rover(rover)
    camera_name = _check_camera(rover_name, camera)

    if sol is not None and sol < 0:
        raise ValidationError("Sol must be a non-negative number.")
    parse_optional_date(earth_date, "earth_date")
    ensure_between(page, 1, None, "Page must be a positive number.")
    if sol is not None and earth_date:
        raise ValidationError("Cannot provide both sol and earth_date. Choose one.")

    data = await client.get_mars_rover_photos(rover_name, sol=sol, earth_date=earth_date,
                                              camera=camera_name, page=page)
    return envelope(
        data.to_dict(),
        filters={
            "rover": rover_name,
            "sol": sol,
            "earth_date": earth_date,
            "camera": camera_name,
            "page": page,
        },
        pagination={"current_page": page, "total_photos": len(data.photos)},
    )


@router.get("/{rover}")
async def read_rover(rover: str, client: NasaClient = Depends(get_nasa_client)):
    rover_name = _require_rover(rover)
    data = await client.get_rover_info(rover_name)
    return envelope(data.to_dict())


@router.get("/{rover}/latest")
async def read_latest_photos(
    rover: str,
    camera: Optional[str] = None,
    limit: int = 25,
    client: NasaClient = Depends(get_nasa_client),
):
    rover_name = _require_rover(rover)
    camera_name = _check_camera(rover_name, camera)
    ensure_between(limit, 1, 100, "Limit must be between 1 and 100.")

    info = await client.get_rover_info(rover_name)
    manifest = info.rover
    latest_sol = manifest.max_sol if manifest and manifest.max_sol is not None else 1000

    data = (await client.get_mars_rover_photos(rover_name, sol=latest_sol, camera=camera_name)).to_dict()
    data["photos"] = data.get("photos", [])[:limit]

    return envelope(
        data,
        rover_info={
            "name": rover_name,
            "latest_sol": latest_sol,
            "status": manifest.status if manifest else None,
        },
        filters={"camera": camera_name, "limit": limit},
    )


@router.get("/{rover}/cameras")
def read_rover_cameras(rover: str):
    rover_name = _require_rover(rover)
    return envelope({
        "rover": rover_name,
        "cameras": [
            {"name": camera, "full_name": camera_full_name(camera)}
            for camera in VALID_CAMERAS[rover_name]
        ],
    })
