"""
Response schemas for the NASA endpoints we proxy.

Only the fields our reshaping code reads are declared; everything else NASA
sends is kept as-is (``extra="allow"``) and dumped back with
``exclude_unset=True`` so clients see the upstream payload unchanged.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, TypeAdapter


class NasaModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)


# ── APOD ──

class ApodEntry(NasaModel):
    date: Optional[str] = None
    title: Optional[str] = None
    explanation: Optional[str] = None
    url: Optional[str] = None
    hdurl: Optional[str] = None
    media_type: Optional[str] = None
    copyright: Optional[str] = None
    service_version: Optional[str] = None


ApodList = TypeAdapter(List[ApodEntry])


# ── Mars rovers ──

class Camera(NasaModel):
    id: Optional[int] = None
    name: Optional[str] = None
    full_name: Optional[str] = None


class Rover(NasaModel):
    id: Optional[int] = None
    name: Optional[str] = None
    status: Optional[str] = None
    max_sol: Optional[int] = None
    max_date: Optional[str] = None
    landing_date: Optional[str] = None
    launch_date: Optional[str] = None
    total_photos: Optional[int] = None


class MarsPhoto(NasaModel):
    id: Optional[int] = None
    sol: Optional[int] = None
    img_src: Optional[str] = None
    earth_date: Optional[str] = None
    camera: Optional[Camera] = None
    rover: Optional[Rover] = None


class MarsPhotosResponse(NasaModel):
    photos: List[MarsPhoto] = []


class RoverInfoResponse(NasaModel):
    rover: Optional[Rover] = None


# ── Near Earth Objects ──

class CloseApproach(NasaModel):
    close_approach_date: Optional[str] = None
    relative_velocity: Dict[str, Any] = {}
    miss_distance: Dict[str, Any] = {}
    orbiting_body: Optional[str] = None


class NearEarthObject(NasaModel):
    id: Optional[str] = None
    name: Optional[str] = None
    is_potentially_hazardous_asteroid: bool = False
    estimated_diameter: Dict[str, Dict[str, Any]] = {}
    close_approach_data: List[CloseApproach] = []


class NeoFeedResponse(NasaModel):
    element_count: Optional[int] = None
    near_earth_objects: Dict[str, List[NearEarthObject]] = {}


# ── EPIC ──

class Vector3(NasaModel):
    x: float
    y: float
    z: float


class Centroid(NasaModel):
    lat: float
    lon: float


class EpicImage(NasaModel):
    identifier: Optional[str] = None
    image: Optional[str] = None
    caption: Optional[str] = None
    date: Optional[str] = None
    centroid_coordinates: Optional[Centroid] = None
    dscovr_j2000_position: Optional[Vector3] = None
    lunar_j2000_position: Optional[Vector3] = None
    sun_j2000_position: Optional[Vector3] = None
    attitude_quaternions: Optional[Dict[str, Any]] = None


EpicImageList = TypeAdapter(List[EpicImage])

# /EPIC/api/natural/available returns a bare list of date strings
EpicArchive = TypeAdapter(List[Any])
