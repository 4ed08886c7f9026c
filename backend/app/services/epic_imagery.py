"""
Helpers that turn raw EPIC metadata into something a viewer can use:
archive image URLs, the sub-satellite point and spacecraft distances.
"""

import math
import re
from typing import Any, Dict, List, Optional

EPIC_ARCHIVE_URL = "https://epic.gsfc.nasa.gov/archive"
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def vector_length(position: Dict[str, float]) -> float:
    return math.sqrt(position["x"] ** 2 + position["y"] ** 2 + position["z"] ** 2)


def region_for(lat: float, lon: float) -> str:
    if lat > 60:
        return "Arctic"
    if lat < -60:
        return "Antarctic"
    if lat > 23.5:
        return "Northern Temperate"
    if lat < -23.5:
        return "Southern Temperate"
    return "Tropical"


def image_day(image: Dict[str, Any]) -> Optional[str]:
    # EPIC timestamps look like "2025-08-14 00:31:45"
    stamp = image.get("date")
    return stamp.split(" ")[0] if stamp else None


def enhance_image(image: Dict[str, Any], day: Optional[str] = None) -> Dict[str, Any]:
    enhanced = dict(image)
    day = day or image_day(image)
    name = image.get("image")

    if day and name:
        path = day.replace("-", "/")
        enhanced["image_urls"] = {
            "natural": f"{EPIC_ARCHIVE_URL}/natural/{path}/png/{name}.png",
            "enhanced": f"{EPIC_ARCHIVE_URL}/enhanced/{path}/png/{name}.png",
            "thumbnail": f"{EPIC_ARCHIVE_URL}/natural/{path}/thumbs/{name}.jpg",
        }

    centroid = image.get("centroid_coordinates")
    if centroid:
        lat, lon = centroid["lat"], centroid["lon"]
        enhanced["earth_view"] = {
            "latitude": lat,
            "longitude": lon,
            "hemisphere": "Northern" if lat >= 0 else "Southern",
            "region": region_for(lat, lon),
        }

    if image.get("dscovr_j2000_position"):
        enhanced["dscovr_distance_km"] = round(vector_length(image["dscovr_j2000_position"]))
    if image.get("lunar_j2000_position"):
        enhanced["lunar_distance_km"] = round(vector_length(image["lunar_j2000_position"]))

    return enhanced


def enhance_images(images: List[Dict[str, Any]], day: Optional[str] = None) -> List[Dict[str, Any]]:
    return [enhance_image(image, day) for image in images]


def process_archive(dates: List[Any]) -> Dict[str, Any]:
    """Group the available-dates listing by year and month."""
    clean = []
    for item in dates:
        if isinstance(item, dict):
            item = item.get("date") or item.get("identifier")
        if isinstance(item, str) and DATE_RE.match(item):
            clean.append(item)
    clean.sort()

    years = sorted({d[:4] for d in clean})
    months = sorted({d[:7] for d in clean})
    return {
        "available_dates": clean,
        "total_dates": len(clean),
        "date_range": {
            "first": clean[0] if clean else None,
            "last": clean[-1] if clean else None,
        },
        "years_available": years,
        "months_available": months,
    }


def positions_for(images: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "time": image.get("date"),
            "centroid": image.get("centroid_coordinates"),
            "dscovr_position": image.get("dscovr_j2000_position"),
            "lunar_position": image.get("lunar_j2000_position"),
            "sun_position": image.get("sun_j2000_position"),
            "attitude": image.get("attitude_quaternions"),
        }
        for image in images
    ]


def position_summary(positions: List[Dict[str, Any]]) -> Dict[str, Any]:
    if not positions:
        return {}
    centroids = [p["centroid"] for p in positions if p.get("centroid")]
    latitudes = [c["lat"] for c in centroids]
    longitudes = [c["lon"] for c in centroids]
    summary: Dict[str, Any] = {
        "observation_count": len(positions),
        "time_span": {"first": positions[0]["time"], "last": positions[-1]["time"]},
    }
    if centroids:
        summary["coverage"] = {
            "latitude_range": {"min": min(latitudes), "max": max(latitudes)},
            "longitude_range": {"min": min(longitudes), "max": max(longitudes)},
        }
    return summary
